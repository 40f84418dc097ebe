"""``@{key}`` placeholder substitution for commit, merge and tag messages."""

from __future__ import annotations

from collections.abc import Mapping

__all__ = ["apply_prefix", "replace_properties"]


def replace_properties(message: str, properties: Mapping[str, str] | None) -> str:
    """Replace every ``@{key}`` in ``message`` with ``properties[key]``.

    Placeholders without a matching key are left as-is.

    >>> replace_properties("release @{version}", {"version": "1.2.3"})
    'release 1.2.3'
    """
    if not properties:
        return message
    for key, value in properties.items():
        message = message.replace("@{" + key + "}", value)
    return message


def apply_prefix(message: str, prefix: str | None) -> str:
    """Prepend the configured commit message prefix, if any."""
    if prefix and prefix.strip():
        return prefix + message
    return message
