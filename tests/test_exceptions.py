"""
Tests for the exception hierarchy.
"""

from secure_options.core.exceptions import (
    ArgumentInvalidError,
    BindingError,
    ConfigurationError,
    MissingConfigurationError,
    ProtectionError,
    SecureOptionsError,
    ValidationError,
)
from secure_options.core.id_generator import is_valid_id
from secure_options.models.base import ValidationResult


class TestSecureOptionsError:
    def test_defaults(self):
        error = SecureOptionsError("boom")

        assert str(error) == "boom"
        assert error.code == "SecureOptionsError"
        assert is_valid_id(error.id)
        assert error.context == {}
        assert error.suggestions == []

    def test_to_dict(self):
        cause = ValueError("bad value")
        error = SecureOptionsError("boom", code="Custom", context={"a": 1}, cause=cause)
        error.add_suggestion("Try again")
        error.add_suggestion("Try again")
        error.add_suggestion("")

        data = error.to_dict()
        assert data["code"] == "Custom"
        assert data["message"] == "boom"
        assert data["context"] == {"a": 1}
        assert data["cause"] == {"type": "ValueError", "message": "bad value"}
        assert data["suggestions"] == ["Try again"]
        assert data["timestamp"].endswith("Z")

    def test_hierarchy(self):
        assert issubclass(MissingConfigurationError, ConfigurationError)
        assert issubclass(BindingError, ConfigurationError)
        for error_type in (ArgumentInvalidError, ConfigurationError, ProtectionError, ValidationError):
            assert issubclass(error_type, SecureOptionsError)


class TestSpecificErrors:
    def test_argument_invalid(self):
        error = ArgumentInvalidError("protector")
        assert error.argument == "protector"
        assert "protector" in str(error)

    def test_missing_configuration_has_suggestions(self):
        error = MissingConfigurationError("MailOptions", "Services:Mail")
        assert "Services:Mail" in str(error)
        assert error.suggestions

    def test_protection_error_mismatch_detection(self):
        class InvalidTag(Exception):
            pass

        assert ProtectionError("x", cause=InvalidTag()).is_parameter_mismatch()
        wrapped = ProtectionError("outer", cause=ProtectionError("inner", cause=InvalidTag()))
        assert wrapped.is_parameter_mismatch()
        assert not ProtectionError("x", cause=ValueError()).is_parameter_mismatch()

    def test_validation_error_lists_every_field(self):
        errors = ValidationResult()
        errors.add("host", "Field required")
        errors.add("port", "Input should be a valid integer")

        error = ValidationError("SmtpOptions", errors)

        assert str(error) == (
            "Options 'SmtpOptions' are invalid: host: Field required; "
            "port: Input should be a valid integer"
        )
        assert error.to_dict()["errors"] == [
            {"field": "host", "message": "Field required"},
            {"field": "port", "message": "Input should be a valid integer"},
        ]
        assert error.context["fields"] == ["host", "port"]
