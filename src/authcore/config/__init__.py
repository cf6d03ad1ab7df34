"""Configuration module for authcore."""

from .constants import (
    KeyNamespace,
    TokenAlgorithm,
)

from .settings import (
    AuthCoreSettings,
    get_settings,
)

from .logging_config import (
    setup_logging,
    get_logger,
    LogVerbosity,
    LogFormat,
    LoggingConfig,
)

__all__ = [
    # Constants
    "KeyNamespace",
    "TokenAlgorithm",

    # Settings
    "AuthCoreSettings",
    "get_settings",

    # Logging
    "setup_logging",
    "get_logger",
    "LogVerbosity",
    "LogFormat",
    "LoggingConfig",
]
