import random
from types import MappingProxyType

import pytest

from miniapp_builder.components import (
    build_config_json,
    components_from_config,
    parse_component,
    sanitize_components_for_plan,
    sanitize_with_report,
)
from miniapp_builder.models.components import ButtonComponent, TextComponent, WalletConnectComponent
from miniapp_builder.models.plan import component_limit

HAPPY_PATH = [
    {"type": "text", "content": "Hello"},
    {"type": "button", "label": "Go", "url": "https://example.com"},
    {"type": "wallet_connect"},
]


def texts(count: int) -> list[dict]:
    return [{"type": "text", "content": f"item {i}"} for i in range(count)]


class ExplodingRecord(dict):
    """A record that fails the test if the sanitizer ever looks at it."""

    def get(self, *args, **kwargs):
        raise AssertionError("element past the plan limit was inspected")


def test_happy_path_returns_components_unchanged_in_order():
    result = sanitize_components_for_plan(HAPPY_PATH, "pro")

    assert [type(c) for c in result] == [TextComponent, ButtonComponent, WalletConnectComponent]
    assert build_config_json(result) == {"components": HAPPY_PATH}


@pytest.mark.parametrize("raw", [None, {}, "x", 42, 1.5, True, {"components": HAPPY_PATH}])
def test_non_sequence_input_yields_no_components(raw):
    assert sanitize_components_for_plan(raw, "basic") == []


@pytest.mark.parametrize(
    "url",
    [
        "http://evil.com",
        "javascript:alert(1)",
        "data:text/html,<script>alert(1)</script>",
        "not a url",
        "ftp://example.com/file",
        "/relative/path",
        "//example.com",
        "https://",
    ],
)
def test_button_with_unsafe_url_is_dropped(url):
    assert sanitize_components_for_plan([{"type": "button", "label": "x", "url": url}], "pro") == []


@pytest.mark.parametrize(
    "element",
    [
        None,
        "text",
        ["text"],
        {},
        {"type": None},
        {"type": 1},
        {"type": ["text"]},
        {"type": "image", "src": "https://example.com/a.png"},
        {"type": "TEXT", "content": "upper-case tag"},
        {"type": "text"},
        {"type": "text", "content": ""},
        {"type": "text", "content": "   \n\t"},
        {"type": "text", "content": 5},
        {"type": "text", "content": b"bytes"},
        {"type": "text", "content": True},
        {"type": "button", "url": "https://example.com"},
        {"type": "button", "label": "  ", "url": "https://example.com"},
        {"type": "button", "label": "Go"},
        {"type": "button", "label": 7, "url": "https://example.com"},
        {"type": "button", "label": "Go", "url": b"https://example.com"},
        {"type": "text", "content": "a\ud800b"},
        {"type": "button", "label": "a\ud800b", "url": "https://example.com"},
        {"type": "button", "label": "Go", "url": "https://ex\ud800.com"},
    ],
)
def test_malformed_elements_are_discarded(element):
    assert parse_component(element) is None
    assert sanitize_components_for_plan([element], "pro") == []


def test_original_strings_are_preserved_and_extra_fields_dropped():
    raw = [
        {"type": "text", "content": "  padded  ", "style": "bold"},
        {"type": "button", "label": " Go ", "url": "https://example.com/a?b=c", "onclick": "x()"},
        {"type": "wallet_connect", "chain": "base"},
    ]

    config = build_config_json(sanitize_components_for_plan(raw, "pro"))

    assert config == {
        "components": [
            {"type": "text", "content": "  padded  "},
            {"type": "button", "label": " Go ", "url": "https://example.com/a?b=c"},
            {"type": "wallet_connect"},
        ]
    }


def test_any_mapping_is_accepted_as_a_record():
    record = MappingProxyType({"type": "text", "content": "from a mapping"})
    result = sanitize_components_for_plan([record], "basic")
    assert build_config_json(result) == {"components": [{"type": "text", "content": "from a mapping"}]}


def test_tuple_input_is_treated_as_a_sequence():
    assert len(sanitize_components_for_plan(tuple(HAPPY_PATH), "pro")) == 3


@pytest.mark.parametrize("plan, limit", [("basic", 5), ("pro", 25)])
def test_truncation_keeps_first_valid_elements(plan, limit):
    raw = texts(limit + 10)
    result = sanitize_components_for_plan(raw, plan)

    assert len(result) == limit
    assert build_config_json(result)["components"] == raw[:limit]


def test_elements_past_the_limit_are_never_inspected():
    raw = texts(5) + [ExplodingRecord(type="text", content="never read")] + texts(3)

    report = sanitize_with_report(raw, "basic")

    assert build_config_json(report.components)["components"] == texts(5)
    assert report.truncated is True
    assert report.discarded == 0


def test_invalid_elements_do_not_count_toward_the_limit():
    raw = ["junk", {"type": "button", "label": "x", "url": "http://evil.com"}] + texts(6)

    report = sanitize_with_report(raw, "basic")

    assert build_config_json(report.components)["components"] == texts(5)
    assert report.discarded == 2
    assert report.truncated is True


def test_report_is_not_truncated_when_input_fits():
    report = sanitize_with_report(texts(5), "basic")

    assert len(report.components) == 5
    assert report.truncated is False
    assert report.discarded == 0


@pytest.mark.parametrize("plan", ["enterprise", "", None, 3])
def test_unknown_plan_uses_basic_limit(plan):
    assert len(sanitize_components_for_plan(texts(7), plan)) == 5


def test_components_from_config_reads_components_field():
    assert components_from_config({"components": HAPPY_PATH}, "basic") == sanitize_components_for_plan(
        HAPPY_PATH, "basic"
    )
    assert components_from_config({}, "pro") == []
    assert components_from_config(["not", "an", "object"], "pro") == []


def test_build_config_json_of_empty_list():
    assert build_config_json([]) == {"components": []}


# Seeded corpus for the sanitizer's algebraic properties.
CANDIDATES = [
    {"type": "text", "content": "hello"},
    {"type": "text", "content": "  spaced  "},
    {"type": "text", "content": ""},
    {"type": "text", "content": 12},
    {"type": "button", "label": "Docs", "url": "https://example.com/docs"},
    {"type": "button", "label": "Bad", "url": "http://example.com"},
    {"type": "button", "label": "Xss", "url": "javascript:alert(1)"},
    {"type": "button", "label": "", "url": "https://example.com"},
    {"type": "wallet_connect"},
    {"type": "wallet_connect", "extra": {"nested": True}},
    {"type": "video", "src": "https://example.com/v.mp4"},
    {"content": "missing type"},
    "string element",
    17,
    None,
    [],
]


def generated_inputs(seed: int = 1234, count: int = 200):
    rng = random.Random(seed)
    for _ in range(count):
        size = rng.randint(0, 40)
        yield [rng.choice(CANDIDATES) for _ in range(size)]


@pytest.mark.parametrize("plan", ["basic", "pro", "enterprise"])
def test_sanitize_properties_over_generated_inputs(plan):
    limit = component_limit(plan)

    for raw in generated_inputs():
        result = sanitize_components_for_plan(raw, plan)

        assert len(result) <= limit

        every_valid = [c for c in (parse_component(element) for element in raw) if c is not None]
        assert result == every_valid[:limit]

        rebuilt = build_config_json(result)["components"]
        assert sanitize_components_for_plan(rebuilt, plan) == result
