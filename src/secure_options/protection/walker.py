"""
Graph walker.

Depth-first traversal of a settings object that encrypts or decrypts every
protected string field in place, recursing into nested settings objects.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from secure_options.core.exceptions import ProtectionError
from secure_options.core.guard import throw_if_none
from secure_options.core.logging import logger
from secure_options.models.protection import DEFAULT_PARAMETERS, ProtectionParameters
from secure_options.protection.classifier import (
    FieldClassifier,
    default_classifier,
    nested_descriptors,
    protected_descriptors,
)
from secure_options.protection.protectors import Protector


class WalkDirection(str, Enum):
    """Direction of a walk."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


@dataclass
class WalkResult:
    """
    Outcome of a walk.

    transformed: dotted paths rewritten, in processing order
    skipped: protected paths left alone because empty or unset
    """

    direction: WalkDirection
    transformed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


class GraphWalker:
    """
    Applies a protector to every protected string in an object graph.

    IMPORTANT:
    - Nested objects are walked before the owner's own protected strings
    - Fail-fast: the first failing field stops the walk, fields already
      transformed keep their new values
    - No cycle detection: object graphs must be trees
    """

    def __init__(self, classifier: Optional[FieldClassifier] = None) -> None:
        self.classifier = classifier or default_classifier

    def walk(
        self,
        options: Any,
        direction: WalkDirection,
        protector: Protector,
        parameters: Optional[ProtectionParameters] = None,
        default_parameters: ProtectionParameters = DEFAULT_PARAMETERS,
    ) -> WalkResult:
        """
        Walk ``options`` in ``direction``.

        Args:
            options: Settings object, mutated in place
            direction: ENCRYPT or DECRYPT
            protector: Byte-level protector
            parameters: Call-site parameters, override field markers
            default_parameters: Fallback when neither call site nor field supplies a value

        Returns:
            WalkResult with transformed and skipped paths

        Raises:
            ArgumentInvalidError: If options or protector is None
            ProtectionError: If any field fails to transform
        """
        throw_if_none(options, "options")
        throw_if_none(protector, "protector")
        direction = WalkDirection(direction)

        result = WalkResult(direction=direction)
        self._walk(options, direction, protector, parameters, default_parameters, "", result)

        logger.debug(
            "Walk completed",
            direction=direction.value,
            options_type=type(options).__name__,
            transformed=len(result.transformed),
            skipped=len(result.skipped),
        )
        return result

    def _walk(
        self,
        options: Any,
        direction: WalkDirection,
        protector: Protector,
        parameters: Optional[ProtectionParameters],
        default_parameters: ProtectionParameters,
        prefix: str,
        result: WalkResult,
    ) -> None:
        owner = type(options).__name__
        plan = self.classifier.classify(type(options))

        for descriptor in nested_descriptors(plan):
            path = _join(prefix, descriptor.name)
            try:
                child = getattr(options, descriptor.name, None)
            except Exception as e:
                raise self._failure(direction, descriptor.name, owner, path, e) from e

            if child is not None:
                self._walk(child, direction, protector, parameters, default_parameters, path, result)

        for descriptor in protected_descriptors(plan):
            path = _join(prefix, descriptor.name)
            try:
                value = getattr(options, descriptor.name, None)
                if not value:
                    result.skipped.append(path)
                    continue

                effective = ProtectionParameters.resolve(
                    parameters, descriptor.protection, default_parameters
                )
                if direction is WalkDirection.ENCRYPT:
                    new_value = self._encrypt(value, protector, effective)
                else:
                    new_value = self._decrypt(value, protector, effective)

                setattr(options, descriptor.name, new_value)
            except Exception as e:
                raise self._failure(direction, descriptor.name, owner, path, e) from e

            result.transformed.append(path)

    @staticmethod
    def _encrypt(value: str, protector: Protector, parameters: ProtectionParameters) -> str:
        protected = protector.protect(value.encode("utf-8"), parameters)
        return base64.b64encode(protected).decode("ascii")

    @staticmethod
    def _decrypt(value: str, protector: Protector, parameters: ProtectionParameters) -> str:
        protected = base64.b64decode(value, validate=True)
        return protector.unprotect(protected, parameters).decode("utf-8")

    @staticmethod
    def _failure(
        direction: WalkDirection, name: str, owner: str, path: str, cause: Exception
    ) -> ProtectionError:
        error = ProtectionError(
            f"Failed to {direction.value} field '{name}' on '{owner}': {cause}",
            field_name=name,
            owner_type=owner,
            cause=cause,
        )
        error.context["path"] = path
        return error


default_walker = GraphWalker()


def encrypt_properties(
    options: Any,
    protector: Protector,
    parameters: Optional[ProtectionParameters] = None,
    default_parameters: ProtectionParameters = DEFAULT_PARAMETERS,
) -> WalkResult:
    """Encrypt every protected string field of ``options`` in place."""
    return default_walker.walk(
        options, WalkDirection.ENCRYPT, protector, parameters, default_parameters
    )


def decrypt_properties(
    options: Any,
    protector: Protector,
    parameters: Optional[ProtectionParameters] = None,
    default_parameters: ProtectionParameters = DEFAULT_PARAMETERS,
) -> WalkResult:
    """Decrypt every protected string field of ``options`` in place."""
    return default_walker.walk(
        options, WalkDirection.DECRYPT, protector, parameters, default_parameters
    )
