"""
secure-options models.

Declarations, descriptors and validation types shared by every layer.
"""

from secure_options.models.protection import (
    DEFAULT_ENTROPY,
    DEFAULT_PARAMETERS,
    FieldProtection,
    Plain,
    Protected,
    ProtectedStr,
    ProtectionParameters,
    ProtectionScope,
)
from secure_options.models.descriptors import FieldDescriptor, FieldKind
from secure_options.models.base import (
    CapabilityValidator,
    OptionsBase,
    Validatable,
    ValidationResult,
    Validator,
)

__all__ = [
    # Protection
    "DEFAULT_ENTROPY",
    "DEFAULT_PARAMETERS",
    "FieldProtection",
    "Plain",
    "Protected",
    "ProtectedStr",
    "ProtectionParameters",
    "ProtectionScope",
    # Descriptors
    "FieldDescriptor",
    "FieldKind",
    # Validation
    "CapabilityValidator",
    "OptionsBase",
    "Validatable",
    "ValidationResult",
    "Validator",
]
