"""Output: console abstraction and error presentation."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .errors import flow_error_exit_code, print_flow_error

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "flow_error_exit_code",
    "print_flow_error",
]
