"""Services composing git and Maven operations into workflow steps."""

from mgf.services.changelist import apply_branch_config
from mgf.services.workflow import Workflow

__all__ = ["Workflow", "apply_branch_config"]
