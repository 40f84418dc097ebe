"""Core domain types and logic."""

from .branch import BranchType
from .config import (
    ChangelistConfig,
    Config,
    ConfigError,
    FlowSettings,
    GitFlowConfig,
    load_config,
)
from .errors import ErrorCode, FlowError
from .result import Err, Ok, Result

__all__ = [
    # branch
    "BranchType",
    # config
    "ChangelistConfig",
    "Config",
    "ConfigError",
    "FlowSettings",
    "GitFlowConfig",
    "load_config",
    # errors
    "ErrorCode",
    "FlowError",
    # result
    "Err",
    "Ok",
    "Result",
]
