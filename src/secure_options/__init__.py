"""
secure-options - Encrypted fields for typed application settings.

Declare which string fields of a settings object are protected, bind the
object from configuration, decrypt, validate and register it in one step.
"""

from secure_options._version import __version__, __version_info__

__author__ = "Bextia"
__license__ = "BSL"

# Core components
from secure_options.core import (
    logger,
    Settings,
    generate_id,
    SecureOptionsError,
    ArgumentInvalidError,
    ConfigurationError,
    MissingConfigurationError,
    BindingError,
    ProtectionError,
    ValidationError,
)

# Models
from secure_options.models import (
    DEFAULT_ENTROPY,
    DEFAULT_PARAMETERS,
    FieldDescriptor,
    FieldKind,
    OptionsBase,
    Plain,
    Protected,
    ProtectedStr,
    ProtectionParameters,
    ProtectionScope,
    Validatable,
    ValidationResult,
    Validator,
)

# Protection
from secure_options.protection import (
    AesGcmProtector,
    FernetProtector,
    GraphWalker,
    Protector,
    WalkDirection,
    WalkResult,
    classify,
    create_protector,
    decrypt_properties,
    encrypt_properties,
    register_fields,
)

# Configuration
from secure_options.configuration import (
    ConfigurationBuilder,
    ConfigurationSource,
    MappingConfigurationSource,
)

# Services
from secure_options.services import (
    BindResult,
    OptionsRegistry,
    OptionsService,
    PipelineStage,
)

__all__ = [
    "__version__",
    "__version_info__",
    # Core
    "logger",
    "Settings",
    "generate_id",
    "SecureOptionsError",
    "ArgumentInvalidError",
    "ConfigurationError",
    "MissingConfigurationError",
    "BindingError",
    "ProtectionError",
    "ValidationError",
    # Models
    "DEFAULT_ENTROPY",
    "DEFAULT_PARAMETERS",
    "FieldDescriptor",
    "FieldKind",
    "OptionsBase",
    "Plain",
    "Protected",
    "ProtectedStr",
    "ProtectionParameters",
    "ProtectionScope",
    "Validatable",
    "ValidationResult",
    "Validator",
    # Protection
    "AesGcmProtector",
    "FernetProtector",
    "GraphWalker",
    "Protector",
    "WalkDirection",
    "WalkResult",
    "classify",
    "create_protector",
    "decrypt_properties",
    "encrypt_properties",
    "register_fields",
    # Configuration
    "ConfigurationBuilder",
    "ConfigurationSource",
    "MappingConfigurationSource",
    # Services
    "BindResult",
    "OptionsRegistry",
    "OptionsService",
    "PipelineStage",
]
