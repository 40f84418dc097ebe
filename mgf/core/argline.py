"""Editing ``-Dkey=value`` tokens inside a Maven argument line.

An argument line is a single space-delimited string passed to every Maven
invocation. Apart from the one property being edited, all tokens (including
non-property passthrough tokens) are kept verbatim and in order.
"""

from __future__ import annotations

import re

__all__ = ["set_or_replace_property"]


def set_or_replace_property(key: str, value: str | None, arg_line: str | None) -> str | None:
    """Set, replace or remove ``-D<key>=`` in ``arg_line``.

    Args:
        key: Property name.
        value: New value, or None to remove the property.
        arg_line: Current argument line (may be None or blank).

    Returns:
        The new argument line. The input is never modified.

    Example:
        >>> set_or_replace_property("changelist", "-SNAPSHOT", "-X")
        '-X -Dchangelist=-SNAPSHOT'
        >>> set_or_replace_property("changelist", "", "-X -Dchangelist=-SNAPSHOT")
        '-X -Dchangelist='
    """
    prefix = f"-D{key}="
    replacement = "" if value is None else prefix + value

    if not arg_line or not arg_line.strip() or prefix not in arg_line:
        if not replacement:
            return arg_line
        head = "" if not arg_line or not arg_line.strip() else arg_line + " "
        return head + replacement

    # Removal leaves the surrounding spaces in place.
    return re.sub(re.escape(prefix) + r"\S*", lambda _: replacement, arg_line)
