"""
Field descriptors produced by the classifier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from secure_options.models.protection import Protected


class FieldKind(Enum):
    """
    How the walker treats a field.

    SCALAR: left untouched
    PROTECTED_STRING: encrypted/decrypted in place
    NESTED_OBJECT: recursed into when not None
    """

    SCALAR = "scalar"
    PROTECTED_STRING = "protected_string"
    NESTED_OBJECT = "nested_object"


@dataclass(frozen=True)
class FieldDescriptor:
    """One entry of a settings type's field plan."""

    name: str
    kind: FieldKind
    field_type: Any = None
    protection: Optional[Protected] = None

    @classmethod
    def scalar(cls, name: str, field_type: Any = None) -> "FieldDescriptor":
        return cls(name=name, kind=FieldKind.SCALAR, field_type=field_type)

    @classmethod
    def protected(cls, name: str, protection: Optional[Protected] = None) -> "FieldDescriptor":
        return cls(
            name=name,
            kind=FieldKind.PROTECTED_STRING,
            field_type=str,
            protection=protection or Protected(),
        )

    @classmethod
    def nested(cls, name: str, field_type: Any = None) -> "FieldDescriptor":
        return cls(name=name, kind=FieldKind.NESTED_OBJECT, field_type=field_type)
