"""Workflow role of a branch."""

from __future__ import annotations

from enum import Enum, auto

__all__ = ["BranchType"]


class BranchType(Enum):
    """Branch type governing which changelist value applies while checked out."""

    PRODUCTION = auto()
    HOTFIX = auto()
    RELEASE = auto()
    DEVELOPMENT = auto()
    FEATURE = auto()
    SUPPORT = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, name: str) -> BranchType | None:
        """Look up a branch type by case-insensitive name."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return None
