"""Mutable build state owned by one workflow run.

Maven is invoked many times during a single workflow. ``BuildState`` holds
what those invocations share: the argument line appended to every command,
the pristine argument line it is recomputed from, and the user-property bag
the project loader resolves ``${...}`` expressions against.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mgf.core.argline import set_or_replace_property

__all__ = ["ARG_LINE_PROPERTY", "BuildState"]

# User property that mirrors the argument line inside the property bag.
ARG_LINE_PROPERTY = "argLine"


def _empty_properties() -> dict[str, str]:
    return {}


@dataclass(slots=True)
class BuildState:
    """Argument line and user properties for one run.

    Attributes:
        original_arg_line: Baseline given at start-up; never modified.
        arg_line: Line appended to every Maven invocation.
        user_properties: Session user properties (``-D`` equivalents).
        system_properties: Properties describing how the build was launched.
    """

    original_arg_line: str | None = None
    arg_line: str | None = None
    user_properties: dict[str, str] = field(default_factory=_empty_properties)
    system_properties: dict[str, str] = field(default_factory=_empty_properties)

    @classmethod
    def start(
        cls,
        arg_line: str | None,
        *,
        user_properties: dict[str, str] | None = None,
        system_properties: dict[str, str] | None = None,
    ) -> BuildState:
        return cls(
            original_arg_line=arg_line,
            arg_line=arg_line,
            user_properties=dict(user_properties or {}),
            system_properties=dict(system_properties or {}),
        )

    def set_property(self, key: str, value: str | None) -> None:
        """Set (or remove, when ``value`` is None) a property for later Maven runs.

        The new argument line is always derived from ``original_arg_line`` so
        a value set for one branch never leaks into the next.
        """
        if not key or not key.strip():
            return

        replaced = set_or_replace_property(
            key, value, self.user_properties.get(ARG_LINE_PROPERTY)
        )
        if not replaced or not replaced.strip():
            self.user_properties.pop(ARG_LINE_PROPERTY, None)
        else:
            self.user_properties[ARG_LINE_PROPERTY] = replaced

        if value is None:
            self.user_properties.pop(key, None)
        else:
            self.user_properties[key] = value

        self.arg_line = set_or_replace_property(key, value, self.original_arg_line)
