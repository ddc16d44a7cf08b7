"""Core types: config, exit codes, results."""

from .config import Config, ConfigError, load_config, require_repository_path
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    "require_repository_path",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
