"""
secure-options configuration module.

Configuration sources and the binder that fills settings objects from them.
"""

from secure_options.configuration.binder import ObjectBinder, is_bindable_type, new_instance
from secure_options.configuration.sources import (
    ConfigurationBuilder,
    ConfigurationSource,
    MappingConfigurationSource,
    environment_mapping,
    load_document,
    merge_configuration,
    save_document,
)

__all__ = [
    "ObjectBinder",
    "is_bindable_type",
    "new_instance",
    "ConfigurationBuilder",
    "ConfigurationSource",
    "MappingConfigurationSource",
    "environment_mapping",
    "load_document",
    "merge_configuration",
    "save_document",
]
