from __future__ import annotations

import re
from urllib.parse import urlsplit

_UNSAFE_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


def encodes_as_utf8(value: str) -> bool:
    """False for strings holding lone surrogates, which JSON decoding can produce."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def is_https_url(value: object) -> bool:
    """Return True when value is an absolute URL using the https scheme.

    Relative references, other schemes (http, javascript, data, ftp, ...),
    strings with whitespace or control characters, a missing host and an
    invalid port are all rejected.
    """
    if not isinstance(value, str) or not value:
        return False
    if _UNSAFE_CHARS.search(value) or not encodes_as_utf8(value):
        return False

    try:
        parsed = urlsplit(value)
        # Accessing .port validates it and raises ValueError when out of range.
        parsed.port
    except ValueError:
        return False

    # The authority form is required: "https:example.com" has no host component.
    if parsed.scheme != "https" or not value.lower().startswith("https://"):
        return False
    return bool(parsed.hostname)


__all__ = ["encodes_as_utf8", "is_https_url"]
