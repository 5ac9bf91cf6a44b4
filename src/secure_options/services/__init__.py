"""
secure-options Services module.

Coordinates binding, decryption, validation and registration.
"""

from secure_options.services.options_service import (
    BindResult,
    OptionsService,
    PipelineStage,
)
from secure_options.services.registry import OptionsRegistry, OptionsWrapper

__all__ = [
    "BindResult",
    "OptionsService",
    "PipelineStage",
    "OptionsRegistry",
    "OptionsWrapper",
]
