"""Configuration-related exceptions for the context store."""

from .base import ContextStoreError


class ConfigurationError(ContextStoreError):
    """Configuration or environment variable errors.

    Raised when required configuration is missing or invalid.
    """

    error_code = "CTX_CFG_001"


class InvalidConfigurationError(ConfigurationError):
    """Configuration value is invalid."""

    error_code = "CTX_CFG_002"
