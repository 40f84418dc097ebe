"""Per-branch-type ``changelist`` propagation (Maven CI-friendly versions).

After every checkout the value configured for the new branch type is pushed
into the build state, so every following Maven invocation resolves
``${changelist}`` for the branch that is actually checked out.
"""

from __future__ import annotations

from mgf.core.branch import BranchType
from mgf.core.config import ChangelistConfig
from mgf.maven.state import BuildState

__all__ = ["apply_branch_config"]


def apply_branch_config(
    state: BuildState, changelist: ChangelistConfig, branch_type: BranchType
) -> bool:
    """Write the changelist value for ``branch_type`` into ``state``.

    Nothing happens when no property name is configured or none of the six
    branch types has a value. Otherwise a branch type without a value
    removes the property.

    Returns:
        True if the state was updated.
    """
    if changelist.is_unused or changelist.property_name is None:
        return False

    state.set_property(changelist.property_name, changelist.value_for(branch_type))
    return True
