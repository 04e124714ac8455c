"""Shared parsing helpers for configuration and descriptor value normalization."""

from __future__ import annotations

from .models.datatypes import ResolutionDepth


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})
_NO_DEPTH_TOKENS = frozenset({"none", "0"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_resolution_depth(value: object, field_name: str) -> ResolutionDepth | None:
    """Parse a dependency resolution depth token.

    Accepts `direct`, `transitive`, or `none`/blank for no transitive fetch.

    Raises:
        ValueError: If the token names no known depth.
    """

    if isinstance(value, ResolutionDepth):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None or normalized.lower() in _NO_DEPTH_TOKENS:
        return None

    try:
        return ResolutionDepth(normalized.lower())
    except ValueError as exc:
        supported = ", ".join(depth.value for depth in ResolutionDepth)
        raise ValueError(
            f"`{field_name}` must be one of: {supported}, none."
        ) from exc


def split_comma_list(value: object) -> tuple[str, ...]:
    """Split a comma-separated value into stripped non-empty tokens."""

    normalized = normalize_optional_string(value)
    if normalized is None:
        return ()
    return tuple(token.strip() for token in normalized.split(",") if token.strip())
