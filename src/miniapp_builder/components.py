from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import TypeAdapter, ValidationError

from .models.components import COMPONENT_TYPES, RuntimeComponent, RuntimeConfiguration
from .models.plan import PlanId, component_limit

logger = logging.getLogger(__name__)

_COMPONENT_ADAPTER: TypeAdapter[RuntimeComponent] = TypeAdapter(RuntimeComponent)


@dataclass
class SanitizeReport:
    components: list[RuntimeComponent] = field(default_factory=list)
    discarded: int = 0
    truncated: bool = False


def parse_component(value: Any) -> RuntimeComponent | None:
    """Parse one untrusted element into a component, or None when it is invalid."""
    if not isinstance(value, Mapping):
        return None

    component_type = value.get("type")
    if not isinstance(component_type, str) or component_type not in COMPONENT_TYPES:
        return None

    try:
        return _COMPONENT_ADAPTER.validate_python(dict(value))
    except ValidationError:
        return None


def sanitize_with_report(raw_components: Any, plan: PlanId | str | None) -> SanitizeReport:
    """Sanitize untrusted components and report what was left out.

    Elements are parsed in order until the plan's limit is reached; anything
    after that point is never inspected. Invalid elements are dropped, not
    raised.
    """
    report = SanitizeReport()
    if not isinstance(raw_components, (list, tuple)):
        return report

    limit = component_limit(plan)
    for index, raw_component in enumerate(raw_components):
        if len(report.components) >= limit:
            report.truncated = True
            break

        parsed = parse_component(raw_component)
        if parsed is None:
            report.discarded += 1
            logger.debug("Discarded invalid component", extra={"index": index, "plan_id": str(plan)})
            continue
        report.components.append(parsed)

    if report.truncated:
        logger.debug(
            "Truncated components at plan limit",
            extra={"limit": limit, "received": len(raw_components), "plan_id": str(plan)},
        )
    return report


def sanitize_components_for_plan(raw_components: Any, plan: PlanId | str | None) -> list[RuntimeComponent]:
    return sanitize_with_report(raw_components, plan).components


def build_config_json(components: Iterable[RuntimeComponent]) -> dict[str, Any]:
    """Serialize trusted components into the persisted configuration shape."""
    configuration = RuntimeConfiguration.model_construct(components=list(components))
    return configuration.model_dump(mode="json")


def components_from_config(config_json: Any, plan: PlanId | str | None) -> list[RuntimeComponent]:
    """Read the components of a stored configuration blob, sanitized for the plan."""
    if not isinstance(config_json, Mapping):
        return []
    return sanitize_components_for_plan(config_json.get("components"), plan)


__all__ = [
    "SanitizeReport",
    "build_config_json",
    "components_from_config",
    "parse_component",
    "sanitize_components_for_plan",
    "sanitize_with_report",
]
