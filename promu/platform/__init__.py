"""Platform abstraction layer."""

from .process import (
    ProcessError,
    format_command,
    run,
    run_live,
)

__all__ = [
    "ProcessError",
    "format_command",
    "run",
    "run_live",
]
