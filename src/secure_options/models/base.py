"""
Base models, validation result and the validation protocols.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Protocol, Tuple, runtime_checkable
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

_MISSING = object()


@dataclass
class ValidationResult:
    """
    Options validation result.

    Maps dotted field paths to one or more messages. Empty means valid.
    """

    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, path: str, message: str) -> None:
        """Record a failure; duplicate messages for the same path are ignored."""
        messages = self.errors.setdefault(path or "<root>", [])
        if message not in messages:
            messages.append(message)

    def merge(self, other: "ValidationResult", prefix: str = "") -> None:
        for path, messages in other.items():
            for message in messages:
                self.add(f"{prefix}.{path}" if prefix else path, message)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        return iter(self.errors.items())

    def paths(self) -> List[str]:
        return list(self.errors)

    def __len__(self) -> int:
        return sum(len(messages) for messages in self.errors.values())

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationResult":
        """Convert a pydantic ValidationError, one entry per failing location."""
        result = cls()
        for error in exc.errors():
            path = ".".join(str(part) for part in error["loc"])
            result.add(path, error["msg"])
        return result


@runtime_checkable
class Validatable(Protocol):
    """
    Capability of settings objects that can validate themselves.

    Checked by protocol, so any class providing ``validation_errors``
    opts in without inheriting from OptionsBase.
    """

    def validation_errors(self) -> ValidationResult:
        ...  # pragma: no cover


@runtime_checkable
class Validator(Protocol):
    """Validates a settings object and returns every failure."""

    def validate(self, options: Any) -> ValidationResult:
        ...  # pragma: no cover


class CapabilityValidator:
    """Default validator: delegates to the object's own validation_errors()."""

    def validate(self, options: Any) -> ValidationResult:
        if isinstance(options, Validatable):
            return options.validation_errors()
        return ValidationResult()


def _snapshot(model: BaseModel) -> Dict[str, Any]:
    """
    Field values of ``model`` as validation input.

    Unset fields are left out so pydantic reports them as missing; nested
    models are expanded so their fields are validated too.
    """
    data: Dict[str, Any] = {}
    for name, info in type(model).model_fields.items():
        value = getattr(model, name, _MISSING)
        if value is _MISSING:
            continue
        if isinstance(value, BaseModel):
            value = _snapshot(value)
        data[info.alias or name] = value
    return data


class OptionsBase(BaseModel):
    """
    Base class for validatable settings.

    Instances are built empty (``model_construct``), filled by binding and
    decryption, and only then validated against the declared field types
    and validators.
    """

    model_config = ConfigDict(
        # Unknown configuration keys are not an error
        extra="ignore",
    )

    def validation_errors(self) -> ValidationResult:
        """Re-validate current field values, returning every failure."""
        try:
            type(self).model_validate(_snapshot(self))
        except PydanticValidationError as exc:
            return ValidationResult.from_pydantic(exc)
        return ValidationResult()

    def is_valid(self) -> bool:
        return self.validation_errors().is_valid

    def throw_if_invalid(self) -> "OptionsBase":
        """Raise secure_options ValidationError listing every failing field."""
        from secure_options.core.guard import throw_if_invalid

        return throw_if_invalid(self, "options")
