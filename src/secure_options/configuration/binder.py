"""
Object binder.

Copies configuration values onto the fields of a settings object, matching
keys to field names case-insensitively and recursing into nested mappings.
"""

import dataclasses
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from secure_options.core.exceptions import ArgumentInvalidError, BindingError
from secure_options.core.logging import logger
from secure_options.core.utils.dict_utils import find_key
from secure_options.protection.classifier import declared_fields, unwrap_annotation

# YAML and JSON scalars such as `pin: 5678` still bind to string fields
SCALAR_CONFIG = ConfigDict(coerce_numbers_to_str=True)


def is_bindable_type(candidate: Any) -> bool:
    """Settings shapes the binder can instantiate and fill."""
    if not isinstance(candidate, type):
        return False
    return issubclass(candidate, BaseModel) or dataclasses.is_dataclass(candidate)


def new_instance(settings_type: type) -> Any:
    """
    Create an empty settings object.

    Pydantic models are built with ``model_construct`` so required fields
    can stay unset until validation reports them.
    """
    if not isinstance(settings_type, type):
        raise ArgumentInvalidError("options_type", f"{settings_type!r} is not a class")
    try:
        if issubclass(settings_type, BaseModel):
            return settings_type.model_construct()
        return settings_type()
    except TypeError as e:
        raise ArgumentInvalidError(
            "options_type", f"Cannot create an empty '{settings_type.__name__}': {e}"
        ) from e


class ObjectBinder:
    """
    Binds a configuration mapping onto a settings object.

    Rules:
    - Keys match field names (or aliases) ignoring case, '_' and '-'
    - Mapping values on object-typed fields bind recursively; a missing
      nested object is created empty first
    - Other values are converted to the declared type with pydantic
    - Keys without a matching field are ignored
    """

    def bind(self, data: Mapping[str, Any], target: Any, prefix: str = "") -> None:
        owner = type(target).__name__
        bound = 0

        for declared in declared_fields(type(target)):
            key = find_key(data, (declared.name,) + declared.aliases)
            if key is None:
                continue

            value = data[key]
            path = f"{prefix}.{declared.name}" if prefix else declared.name
            field_type = declared.field_type

            if isinstance(value, Mapping) and is_bindable_type(field_type):
                current = getattr(target, declared.name, None)
                if current is None:
                    current = new_instance(field_type)
                    self._assign(target, declared.name, current, path, owner)
                self.bind(value, current, path)
                bound += 1
                continue

            if value is not None:
                value = self._convert(declared.annotation, value, path, owner)
            self._assign(target, declared.name, value, path, owner)
            bound += 1

        logger.debug("Bound configuration", options_type=owner, path=prefix or "<root>", fields=bound)

    @staticmethod
    def _convert(annotation: Any, value: Any, path: str, owner: str) -> Any:
        try:
            # Models and dataclasses carry their own config
            config = None if is_bindable_type(unwrap_annotation(annotation)[0]) else SCALAR_CONFIG
            return TypeAdapter(annotation, config=config).validate_python(value)
        except PydanticValidationError as e:
            raise BindingError(path, owner, cause=e) from e

    @staticmethod
    def _assign(target: Any, name: str, value: Any, path: str, owner: str) -> None:
        try:
            setattr(target, name, value)
        except (PydanticValidationError, AttributeError, TypeError, ValueError) as e:
            # Frozen instances and validate_assignment models end up here
            raise BindingError(path, owner, cause=e) from e
