"""Guard against shell metacharacters in user-supplied values.

Branch names, the argument line and property values all end up on a git or
Maven command line. Command separators and chaining operators are rejected
before any of them reach the process layer.
"""

from __future__ import annotations

import re

from .errors import FlowError
from .result import Err, Ok, Result

__all__ = ["DISALLOWED_PATTERN", "validate_configuration", "validate_values"]

DISALLOWED_PATTERN = re.compile(r"[&|;]")


def _is_disallowed(value: str | None) -> bool:
    return bool(value and value.strip()) and DISALLOWED_PATTERN.search(value or "") is not None


def validate_values(*values: str | None) -> Result[None, FlowError]:
    """Reject any non-blank value containing ``&``, ``|`` or ``;``."""
    for value in values:
        if _is_disallowed(value):
            return Err(
                FlowError(
                    kind="configuration",
                    message=f"The '{value}' value doesn't match allowed pattern.",
                )
            )
    return Ok(None)


def validate_configuration(arg_line: str | None, *values: str | None) -> Result[None, FlowError]:
    """Validate the argument line, then every extra value."""
    if _is_disallowed(arg_line):
        return Err(
            FlowError(
                kind="configuration",
                message="The argLine doesn't match allowed pattern.",
                hint="Remove '&', '|' and ';' from the argument line.",
            )
        )
    return validate_values(*values)
