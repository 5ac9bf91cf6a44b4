"""
Unified exception hierarchy for secure-options.
SINGLE SOURCE of exceptions for the whole package.
"""

from typing import TYPE_CHECKING, Dict, Any, Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from secure_options.core.id_generator import generate_id
from secure_options.core.utils.datetime_utils import utc_now, format_iso

if TYPE_CHECKING:
    from secure_options.models.base import ValidationResult


# ============================================================================
# PART 1: PYTHON EXCEPTIONS (for raise/catch)
# ============================================================================


class SecureOptionsError(Exception):
    """
    Base error of secure-options.

    Features:
    1. Structured serialization
    2. Rich context
    3. Resolution suggestions
    4. Unique ID for tracking
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.id: str = generate_id()
        self.timestamp: datetime = utc_now()
        self.message: str = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[BaseException] = cause
        self.suggestions: List[str] = []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a dictionary (CLI JSON output, structured logs).

        Returns:
            {
                "error_id": "hex32chars",
                "code": "ProtectionError",
                "message": "Failed to decrypt field 'password' on 'MailOptions'",
                "timestamp": "2024-01-20T10:30:00Z",
                "context": {...}
            }
        """
        result: Dict[str, Any] = {
            "error_id": self.id,
            "code": self.code,
            "message": self.message,
            "timestamp": format_iso(self.timestamp),
            "context": self.context,
        }

        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result

    def add_suggestion(self, suggestion: str) -> None:
        """
        Add a resolution suggestion to the error.

        Duplicates and empty values are ignored.
        """
        if not suggestion or not isinstance(suggestion, str):
            return

        if suggestion not in self.suggestions:
            self.suggestions.append(suggestion)


class ArgumentInvalidError(SecureOptionsError):
    """A required argument is missing or invalid."""

    def __init__(self, argument: str, message: Optional[str] = None) -> None:
        self.argument = argument
        super().__init__(
            message or f"Argument '{argument}' is missing or invalid",
            context={"argument": argument},
        )


class ConfigurationError(SecureOptionsError):
    """Configuration error (unreadable file, invalid setting, wiring problem)."""

    pass


class MissingConfigurationError(ConfigurationError):
    """
    The configuration source has no entries.

    Kept apart from validation failures: an empty source usually means a
    wrong section path, not bad data.
    """

    def __init__(self, options_type: str, section: Optional[str] = None) -> None:
        self.options_type = options_type
        self.section = section
        where = f" (section '{section}')" if section else ""
        super().__init__(
            f"No configuration entries found for '{options_type}'{where}",
            context={"options_type": options_type, "section": section},
        )
        self.add_suggestion("Check the section path used to bind the options")
        self.add_suggestion("Verify the configuration file was loaded")


class BindingError(ConfigurationError):
    """A configuration value could not be converted to the declared field type."""

    def __init__(self, path: str, options_type: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.options_type = options_type
        super().__init__(
            f"Cannot bind configuration value to '{path}' on '{options_type}'",
            context={"path": path, "options_type": options_type},
            cause=cause,
        )


class ProtectionError(SecureOptionsError):
    """
    A cryptographic transform failed.

    When raised by the walker it names the field and the owning type; when
    raised by a protector directly both are None.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        owner_type: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.field_name = field_name
        self.owner_type = owner_type
        super().__init__(
            message,
            context={"field": field_name, "owner_type": owner_type},
            cause=cause,
        )

    def is_parameter_mismatch(self) -> bool:
        """True if the cause looks like a wrong key, scope or entropy."""
        cause = self.cause
        # Walker errors wrap the protector's own ProtectionError
        while isinstance(cause, ProtectionError):
            cause = cause.cause
        return type(cause).__name__ in ("InvalidTag", "InvalidToken")


class ValidationError(SecureOptionsError):
    """
    Validation error with every failing field.

    Structure of ``to_dict()["errors"]``:
    [
        {
            "field": "database.host",
            "message": "Field required"
        }
    ]
    """

    def __init__(self, options_type: str, errors: "ValidationResult") -> None:
        self.options_type = options_type
        self.errors = errors
        lines = [f"{path}: {message}" for path, messages in errors.items() for message in messages]
        super().__init__(
            f"Options '{options_type}' are invalid: " + "; ".join(lines),
            context={"options_type": options_type, "fields": list(errors.paths())},
        )

    def details(self) -> List["ErrorDetail"]:
        """One ErrorDetail per failing message."""
        return [
            ErrorDetail(field=path, message=message)
            for path, messages in self.errors.items()
            for message in messages
        ]

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["errors"] = [detail.model_dump() for detail in self.details()]
        return result


# ============================================================================
# PART 2: SERIALIZABLE DETAIL MODELS
# ============================================================================


class ErrorDetail(BaseModel):
    """Specific detail of a validation failure."""

    field: str = Field(..., description="Dotted path of the failing field")
    message: str = Field(..., description="Explanatory message")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SecureOptionsError",
    "ArgumentInvalidError",
    "ConfigurationError",
    "MissingConfigurationError",
    "BindingError",
    "ProtectionError",
    "ValidationError",
    "ErrorDetail",
]
