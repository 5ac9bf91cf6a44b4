"""
Options Service - Binder+Validator pipeline.

Empty -> Bound -> Decrypted -> Validated -> Registered. Linear, no
retries: a failing step halts the pipeline, and the object is registered
only when every step succeeded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Optional, Type, TypeVar

from secure_options.configuration.binder import new_instance
from secure_options.configuration.sources import ConfigurationSource
from secure_options.core.exceptions import MissingConfigurationError, ValidationError
from secure_options.core.guard import throw_if_none
from secure_options.core.logging import logger, perf_logger
from secure_options.models.base import CapabilityValidator, Validatable, ValidationResult, Validator
from secure_options.models.protection import DEFAULT_PARAMETERS, ProtectionParameters
from secure_options.protection.protectors import Protector
from secure_options.protection.walker import GraphWalker, WalkDirection

T = TypeVar("T")

RegisterCallback = Callable[[type, Any], None]


class PipelineStage(Enum):
    """Last stage a pipeline run reached."""

    EMPTY = "empty"
    BOUND = "bound"
    DECRYPTED = "decrypted"
    VALIDATED = "validated"
    REGISTERED = "registered"


@dataclass
class BindResult(Generic[T]):
    """
    Outcome of a pipeline run.

    ``options`` is None when the source was empty; on validation failure it
    holds the rejected object so callers can inspect it.
    """

    succeeded: bool
    stage: PipelineStage
    options: Optional[T] = None
    errors: ValidationResult = field(default_factory=ValidationResult)


class OptionsService:
    """
    Binds, decrypts, validates and registers settings objects.

    Call modes:
    - try_configure / try_bind: missing configuration and validation
      failures become a negative result
    - configure: both raise
    ProtectionError, BindingError and ArgumentInvalidError propagate from
    every mode.
    """

    def __init__(
        self,
        protector: Optional[Protector] = None,
        validator: Optional[Validator] = None,
        register: Optional[RegisterCallback] = None,
        parameters: Optional[ProtectionParameters] = None,
        default_parameters: ProtectionParameters = DEFAULT_PARAMETERS,
        walker: Optional[GraphWalker] = None,
    ) -> None:
        self.protector = protector
        self.validator = validator or CapabilityValidator()
        self.register = register
        self.parameters = parameters
        self.default_parameters = default_parameters
        self.walker = walker or GraphWalker()

    def try_bind(
        self,
        options_type: Type[T],
        source: ConfigurationSource,
        service_type: Optional[type] = None,
    ) -> BindResult[T]:
        """
        Run the pipeline, reporting the outcome instead of raising.

        Args:
            options_type: Settings class to instantiate
            source: Configuration source (usually a section)
            service_type: Type to register under (defaults to options_type)

        Returns:
            BindResult with the stage reached, the object and any validation errors
        """
        throw_if_none(options_type, "options_type")
        throw_if_none(source, "source")
        type_name = getattr(options_type, "__name__", repr(options_type))

        with perf_logger.measure("configure", options_type=type_name):
            if not source.has_entries():
                logger.debug("Configuration source is empty", options_type=type_name, section=source.path)
                return BindResult(succeeded=False, stage=PipelineStage.EMPTY)

            options = new_instance(options_type)
            source.bind(options)
            stage = PipelineStage.BOUND

            if self.protector is not None:
                self.walker.walk(
                    options,
                    WalkDirection.DECRYPT,
                    self.protector,
                    self.parameters,
                    self.default_parameters,
                )
                stage = PipelineStage.DECRYPTED

            return self._validate_and_register(options, service_type or options_type, stage)

    def try_configure(
        self,
        options_type: Type[T],
        source: ConfigurationSource,
        service_type: Optional[type] = None,
    ) -> bool:
        """True if the options were bound, decrypted, validated and registered."""
        return self.try_bind(options_type, source, service_type).succeeded

    def configure(
        self,
        options_type: Type[T],
        source: ConfigurationSource,
        service_type: Optional[type] = None,
    ) -> T:
        """
        Run the pipeline and return the registered options.

        Raises:
            MissingConfigurationError: If the source has no entries
            ValidationError: Listing every failing field
        """
        result = self.try_bind(options_type, source, service_type)
        if result.stage is PipelineStage.EMPTY:
            raise MissingConfigurationError(
                getattr(options_type, "__name__", repr(options_type)), source.path or None
            )
        if not result.succeeded:
            raise ValidationError(type(result.options).__name__, result.errors)
        return result.options  # type: ignore[return-value]

    def try_configure_instance(self, options: Any, service_type: Optional[type] = None) -> bool:
        """Validate and register an already built object (no binding, no decryption)."""
        throw_if_none(options, "options")
        result = self._validate_and_register(
            options, service_type or type(options), PipelineStage.BOUND
        )
        return result.succeeded

    def configure_instance(self, options: T, service_type: Optional[type] = None) -> T:
        """Like try_configure_instance, raising ValidationError on failure."""
        throw_if_none(options, "options")
        result = self._validate_and_register(
            options, service_type or type(options), PipelineStage.BOUND
        )
        if not result.succeeded:
            raise ValidationError(type(options).__name__, result.errors)
        return options

    def _validate_and_register(
        self, options: Any, service_type: type, stage: PipelineStage
    ) -> BindResult[Any]:
        type_name = type(options).__name__

        if isinstance(options, Validatable):
            errors = self.validator.validate(options)
            if not errors.is_valid:
                logger.debug("Options failed validation", options_type=type_name, fields=errors.paths())
                return BindResult(succeeded=False, stage=stage, options=options, errors=errors)
            stage = PipelineStage.VALIDATED

        if self.register is not None:
            self.register(service_type, options)
            stage = PipelineStage.REGISTERED

        logger.info("Options configured", options_type=type_name, stage=stage.value)
        return BindResult(succeeded=True, stage=stage, options=options)
