"""
Field classifier.

Builds the field plan of a settings type from the field table the type
already declares (pydantic ``model_fields``, ``dataclasses.fields``) or
from an explicitly registered descriptor table.
"""

import dataclasses
import types
import typing
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel

from secure_options.core.logging import logger
from secure_options.models.descriptors import FieldDescriptor, FieldKind
from secure_options.models.protection import Plain, Protected


@dataclass(frozen=True)
class DeclaredField:
    """A field as declared on a settings type, before classification."""

    name: str
    annotation: Any
    markers: Tuple[Any, ...] = ()
    writable: bool = True
    aliases: Tuple[str, ...] = ()

    @property
    def field_type(self) -> Any:
        """Declared type with Optional/Annotated wrappers removed."""
        return unwrap_annotation(self.annotation)[0]

    @property
    def protection(self) -> Optional[Protected]:
        for marker in self.markers + unwrap_annotation(self.annotation)[1]:
            if isinstance(marker, Plain):
                return None
            if isinstance(marker, Protected):
                return marker
        return None


def unwrap_annotation(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """
    Strip ``Optional[...]`` and ``Annotated[...]`` from an annotation.

    Returns the inner type and the Annotated metadata found on the way.
    Unions of more than one non-None type are returned unchanged.
    """
    markers: Tuple[Any, ...] = ()
    while True:
        origin = typing.get_origin(annotation)
        if origin is typing.Annotated:
            markers += tuple(annotation.__metadata__)
            annotation = annotation.__origin__
            continue
        if origin is Union or origin is types.UnionType:
            args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation, markers


def declared_fields(settings_type: Any) -> List[DeclaredField]:
    """Declared fields of a pydantic model or dataclass, in declaration order."""
    if isinstance(settings_type, type) and issubclass(settings_type, BaseModel):
        frozen_model = bool(settings_type.model_config.get("frozen", False))
        return [
            DeclaredField(
                name=name,
                annotation=info.annotation,
                markers=tuple(info.metadata),
                writable=not (frozen_model or info.frozen),
                aliases=(info.alias,) if info.alias else (),
            )
            for name, info in settings_type.model_fields.items()
        ]

    if isinstance(settings_type, type) and dataclasses.is_dataclass(settings_type):
        try:
            hints = typing.get_type_hints(settings_type, include_extras=True)
        except (NameError, TypeError):
            # Unresolvable forward references: fall back to the raw declarations
            hints = {}
        frozen = settings_type.__dataclass_params__.frozen  # type: ignore[attr-defined]
        return [
            DeclaredField(
                name=f.name,
                annotation=hints.get(f.name, f.type),
                writable=not frozen,
            )
            for f in dataclasses.fields(settings_type)
        ]

    return []


class FieldClassifier:
    """
    Produces the ordered field plan of a settings type.

    Rules:
    1. Fields whose type is a walkable class (pydantic model, dataclass or
       registered type) are NESTED_OBJECT, tagged or not
    2. Writable ``str`` fields with a Protected marker are PROTECTED_STRING
    3. Everything else is ignored

    Nested fields come first, then protected strings, each in declaration
    order. Plans are cached per type.
    """

    def __init__(self) -> None:
        self._plans: Dict[type, Tuple[FieldDescriptor, ...]] = {}
        self._registered: Dict[type, Tuple[FieldDescriptor, ...]] = {}

    def register(self, settings_type: type, descriptors: Iterable[FieldDescriptor]) -> None:
        """
        Install an explicit descriptor table for ``settings_type``.

        The table is used verbatim (SCALAR entries are kept and ignored by
        the walker) and makes the type walkable when nested in others.
        """
        self._registered[settings_type] = tuple(descriptors)
        # Walkability of other types may have changed
        self._plans.clear()
        logger.debug(
            "Registered field table",
            settings_type=settings_type.__name__,
            fields=len(self._registered[settings_type]),
        )

    def is_walkable(self, candidate: Any) -> bool:
        if not isinstance(candidate, type):
            return False
        if candidate in self._registered:
            return True
        if issubclass(candidate, BaseModel):
            return True
        return dataclasses.is_dataclass(candidate)

    def classify(self, settings_type: type) -> List[FieldDescriptor]:
        """Ordered field plan; never fails, unknown shapes give []."""
        plan = self._plans.get(settings_type)
        if plan is None:
            plan = self._build_plan(settings_type)
            self._plans[settings_type] = plan
        return list(plan)

    def _build_plan(self, settings_type: type) -> Tuple[FieldDescriptor, ...]:
        if settings_type in self._registered:
            return self._registered[settings_type]

        nested: List[FieldDescriptor] = []
        protected: List[FieldDescriptor] = []

        for declared in declared_fields(settings_type):
            field_type = declared.field_type
            if field_type is not str and self.is_walkable(field_type):
                nested.append(FieldDescriptor.nested(declared.name, field_type))
                continue

            protection = declared.protection
            if field_type is str and declared.writable and protection is not None:
                protected.append(FieldDescriptor.protected(declared.name, protection))

        return tuple(nested + protected)


default_classifier = FieldClassifier()


def classify(settings_type: type) -> List[FieldDescriptor]:
    """Field plan of ``settings_type`` from the shared classifier."""
    return default_classifier.classify(settings_type)


def register_fields(settings_type: type, descriptors: Iterable[FieldDescriptor]) -> None:
    """Register an explicit descriptor table on the shared classifier."""
    default_classifier.register(settings_type, descriptors)


def nested_descriptors(plan: Iterable[FieldDescriptor]) -> List[FieldDescriptor]:
    return [d for d in plan if d.kind is FieldKind.NESTED_OBJECT]


def protected_descriptors(plan: Iterable[FieldDescriptor]) -> List[FieldDescriptor]:
    return [d for d in plan if d.kind is FieldKind.PROTECTED_STRING]
