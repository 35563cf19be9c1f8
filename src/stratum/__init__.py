"""
Stratum - layered configuration with placeholder substitution.

Merge nested configuration from files, environment and arguments, then
resolve ``${namespace:path, default}`` and ``@{function:path, args}``
placeholders into a fully materialized tree.
"""

__version__ = "0.1.0"

from stratum.config import (
    UNDEFINED,
    ConfigStore,
    SourceFormat,
    flatten,
    load_config,
    parse_args,
    parse_env,
    parse_file,
    unflatten,
)
from stratum.exceptions import (
    ConfigurationError,
    ReservedNamespaceError,
    ResolutionDepthError,
    StratumError,
    UnsupportedFormatError,
)
from stratum.utils.logging import get_logger, setup_logging

__all__ = [
    # Store
    "ConfigStore",
    "UNDEFINED",
    "load_config",
    # Path codec
    "flatten",
    "unflatten",
    # Sources
    "SourceFormat",
    "parse_args",
    "parse_env",
    "parse_file",
    # Exceptions
    "StratumError",
    "ConfigurationError",
    "ReservedNamespaceError",
    "ResolutionDepthError",
    "UnsupportedFormatError",
    # Logging
    "get_logger",
    "setup_logging",
]
