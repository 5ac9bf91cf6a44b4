"""
Argument guards shared by the public entry points.
"""

from typing import Any, TypeVar

from secure_options.core.exceptions import ArgumentInvalidError, ValidationError

T = TypeVar("T")


def throw_if_none(value: T, name: str) -> T:
    """Raise ArgumentInvalidError if ``value`` is None, else return it."""
    if value is None:
        raise ArgumentInvalidError(name)
    return value


def throw_if_invalid(value: Any, name: str) -> Any:
    """
    Raise ValidationError if ``value`` is a Validatable with errors.

    Objects without the capability are returned untouched.
    """
    # Imported lazily: models.base depends on core
    from secure_options.models.base import Validatable

    throw_if_none(value, name)
    if isinstance(value, Validatable):
        errors = value.validation_errors()
        if not errors.is_valid:
            raise ValidationError(type(value).__name__, errors)
    return value
