"""
Options registry.

Minimal registration target: one read-only singleton per service type.
"""

from typing import Any, Dict, Generic, Iterator, TypeVar

from secure_options.core.exceptions import SecureOptionsError
from secure_options.core.guard import throw_if_none
from secure_options.core.logging import logger

T = TypeVar("T")


class OptionsWrapper(Generic[T]):
    """Read-only holder of a registered options object."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"OptionsWrapper({type(self._value).__name__})"


class OptionsRegistry:
    """
    Singleton registry keyed by service type.

    The first registration for a type wins, later ones are ignored.
    ``register`` has the signature the options pipeline expects from its
    registration callback.
    """

    def __init__(self) -> None:
        self._services: Dict[type, OptionsWrapper[Any]] = {}

    def try_add_singleton(self, service_type: type, value: Any) -> bool:
        """Register ``value`` for ``service_type`` unless one is already registered."""
        throw_if_none(service_type, "service_type")
        throw_if_none(value, "value")
        if service_type in self._services:
            logger.debug("Singleton already registered", service_type=service_type.__name__)
            return False
        self._services[service_type] = OptionsWrapper(value)
        logger.debug("Singleton registered", service_type=service_type.__name__)
        return True

    def register(self, service_type: type, value: Any) -> None:
        self.try_add_singleton(service_type, value)

    def get(self, service_type: type) -> OptionsWrapper[Any]:
        try:
            return self._services[service_type]
        except KeyError:
            raise SecureOptionsError(
                f"No options registered for '{service_type.__name__}'",
                code="NotRegistered",
                context={"service_type": service_type.__name__},
            ) from None

    def __contains__(self, service_type: object) -> bool:
        return service_type in self._services

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[type]:
        return iter(self._services)
