"""
secure-options Core module.

Exports the fundamental package components.
"""

# Configuration
from secure_options.core.secure_config import Settings, ConfigValidator

# Exceptions and errors
from secure_options.core.exceptions import (
    SecureOptionsError,
    ArgumentInvalidError,
    ConfigurationError,
    MissingConfigurationError,
    BindingError,
    ProtectionError,
    ValidationError,
    ErrorDetail,
)

# Logging
from secure_options.core.logging import (
    AsyncLogger,
    SensitiveDataMasker,
    PerformanceLogger,
    logger,  # Pre-configured global logger
    perf_logger,
)

# Argument guards
from secure_options.core.guard import throw_if_none, throw_if_invalid

# Identifiers
from secure_options.core.id_generator import IDGenerator, generate_id, is_valid_id

__all__ = [
    # Configuration
    "Settings",
    "ConfigValidator",
    # Exceptions
    "SecureOptionsError",
    "ArgumentInvalidError",
    "ConfigurationError",
    "MissingConfigurationError",
    "BindingError",
    "ProtectionError",
    "ValidationError",
    "ErrorDetail",
    # Logging
    "AsyncLogger",
    "SensitiveDataMasker",
    "PerformanceLogger",
    "logger",
    "perf_logger",
    # Guards
    "throw_if_none",
    "throw_if_invalid",
    # Identifiers
    "IDGenerator",
    "generate_id",
    "is_valid_id",
]
