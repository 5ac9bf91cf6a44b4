"""
Protection declarations and parameters.

A settings field opts into protection by carrying a ``Protected`` marker in
its annotation:

    class MailOptions(OptionsBase):
        host: str
        password: Annotated[Optional[str], Protected(entropy=b"mail")] = None
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Optional, Union


class ProtectionScope(str, Enum):
    """
    Breadth of applicability of the protection key.

    LOCAL_MACHINE: any process on this machine can unprotect
    CURRENT_USER: only the same user on this machine can unprotect
    """

    LOCAL_MACHINE = "local_machine"
    CURRENT_USER = "current_user"


# Must stay byte-for-byte identical: previously protected data depends on it
DEFAULT_ENTROPY = bytes([12, 48, 8, 20])


@dataclass(frozen=True)
class Protected:
    """Marks a string field as protected, with optional field-level parameters."""

    entropy: Optional[bytes] = None
    scope: Optional[ProtectionScope] = None


@dataclass(frozen=True)
class Plain:
    """Explicit marker for a field the walker must never touch."""


FieldProtection = Union[Plain, Protected]

ProtectedStr = Annotated[Optional[str], Protected()]


@dataclass(frozen=True)
class ProtectionParameters:
    """
    Parameters of a single protect/unprotect call.

    Either value may be None, meaning "not supplied at this level".
    """

    entropy: Optional[bytes] = None
    scope: Optional[ProtectionScope] = None

    @classmethod
    def resolve(
        cls,
        call_site: Optional["ProtectionParameters"],
        field: Optional[Protected],
        default: "ProtectionParameters",
    ) -> "ProtectionParameters":
        """
        Effective parameters for one field.

        Entropy and scope resolve independently: call site, then field
        marker, then default. Empty entropy counts as absent.
        """
        entropy = None
        scope = None
        for level in (call_site, field, default):
            if level is None:
                continue
            if not entropy and level.entropy:
                entropy = level.entropy
            if scope is None and level.scope is not None:
                scope = ProtectionScope(level.scope)
        return cls(
            entropy=entropy or DEFAULT_ENTROPY,
            scope=scope or ProtectionScope.LOCAL_MACHINE,
        )

    def uses_default_entropy(self) -> bool:
        return not self.entropy or self.entropy == DEFAULT_ENTROPY


DEFAULT_PARAMETERS = ProtectionParameters(
    entropy=DEFAULT_ENTROPY, scope=ProtectionScope.LOCAL_MACHINE
)
