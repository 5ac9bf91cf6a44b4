"""
Configuration sources.

A source exposes "has any entries", "bind into target" and section
navigation. ``ConfigurationBuilder`` layers mappings, YAML/JSON files and
environment variables into a single in-memory source.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import yaml

from secure_options.configuration.binder import ObjectBinder
from secure_options.core.exceptions import ConfigurationError
from secure_options.core.guard import throw_if_none
from secure_options.core.logging import logger
from secure_options.core.utils.dict_utils import find_key, set_nested

SECTION_SEPARATOR = ":"


@runtime_checkable
class ConfigurationSource(Protocol):
    """What the options pipeline needs from a configuration source."""

    @property
    def path(self) -> str:
        ...  # pragma: no cover

    def has_entries(self) -> bool:
        ...  # pragma: no cover

    def bind(self, target: Any) -> None:
        ...  # pragma: no cover

    def section(self, path: str) -> "ConfigurationSource":
        ...  # pragma: no cover


class MappingConfigurationSource:
    """
    In-memory configuration source.

    Section paths use ':' (``"Services:Mail"``) and match keys the same way
    binding does, ignoring case, '_' and '-'.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        path: str = "",
        binder: Optional[ObjectBinder] = None,
    ) -> None:
        self._data: Dict[str, Any] = dict(data or {})
        self._path = path
        self._binder = binder or ObjectBinder()

    @property
    def path(self) -> str:
        return self._path

    def has_entries(self) -> bool:
        return bool(self._data)

    def bind(self, target: Any) -> None:
        throw_if_none(target, "target")
        self._binder.bind(self._data, target)

    def section(self, path: str) -> "MappingConfigurationSource":
        """Sub-source at ``path``; missing or scalar sections are empty."""
        current: Any = self._data
        for part in [p for p in path.split(SECTION_SEPARATOR) if p]:
            key = find_key(current, (part,)) if isinstance(current, Mapping) else None
            if key is None:
                current = {}
                break
            current = current[key]

        full_path = SECTION_SEPARATOR.join(p for p in (self._path, path) if p)
        data = current if isinstance(current, Mapping) else {}
        return MappingConfigurationSource(data, full_path, self._binder)

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a ':' separated key."""
        parent, _, leaf = key.rpartition(SECTION_SEPARATOR)
        data = self.section(parent).to_dict() if parent else self._data
        found = find_key(data, (leaf,))
        return data[found] if found is not None else default

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


def load_document(path: Path | str, format: Optional[str] = None) -> Dict[str, Any]:
    """
    Read a YAML or JSON configuration document.

    Without an explicit ``format``, ``.json`` files are parsed as JSON and
    everything else as YAML. An empty document is an empty mapping.
    """
    file_path = Path(path)
    format = format or ("json" if file_path.suffix.lower() == ".json" else "yaml")
    try:
        text = file_path.read_text(encoding="utf-8")
        if format == "json":
            document = json.loads(text) if text.strip() else {}
        else:
            document = yaml.safe_load(text) or {}
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Error reading configuration file: {e}",
            context={"file": str(file_path)},
            cause=e,
        ) from e

    if not isinstance(document, dict):
        raise ConfigurationError(
            "Configuration document must contain a mapping",
            context={"file": str(file_path)},
        )
    return document


def save_document(path: Path | str, document: Mapping[str, Any]) -> None:
    """Write ``document`` back as YAML or JSON, chosen by file suffix."""
    file_path = Path(path)
    if file_path.suffix.lower() == ".json":
        text = json.dumps(document, indent=2) + "\n"
    else:
        text = yaml.safe_dump(dict(document), sort_keys=False, allow_unicode=True)
    try:
        file_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Error writing configuration file: {e}",
            context={"file": str(file_path)},
            cause=e,
        ) from e


def merge_configuration(base: Dict[str, Any], update: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Deep merge ``update`` into ``base``.

    Keys are matched the way binding matches them, so ``DATABASE`` from the
    environment overrides ``Database`` from a file.
    """
    for key, value in update.items():
        existing = find_key(base, (str(key),))
        target_key = existing if existing is not None else key
        if isinstance(value, Mapping):
            current = base.get(target_key)
            if not isinstance(current, dict):
                current = {}
                base[target_key] = current
            merge_configuration(current, value)
        else:
            base[target_key] = value
    return base


def environment_mapping(
    prefix: str, separator: str = "__", environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Nested mapping from environment variables.

    ``APP__DATABASE__PASSWORD=x`` with prefix ``APP__`` gives
    ``{"DATABASE": {"PASSWORD": "x"}}``.
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    for name, value in environ.items():
        if not name.upper().startswith(prefix.upper()):
            continue
        parts = tuple(p for p in name[len(prefix) :].split(separator) if p)
        if parts:
            set_nested(data, parts, value)
    return data


class ConfigurationBuilder:
    """
    Layered configuration.

    Later layers override earlier ones:
    1. add_mapping / add_yaml_file / add_json_file, in call order
    2. add_environment, typically last
    """

    def __init__(self) -> None:
        self._layers: List[Callable[[], Mapping[str, Any]]] = []

    def add_mapping(self, data: Mapping[str, Any]) -> "ConfigurationBuilder":
        snapshot = copy.deepcopy(dict(data))
        self._layers.append(lambda: snapshot)
        return self

    def add_yaml_file(self, path: Path | str, optional: bool = False) -> "ConfigurationBuilder":
        self._layers.append(lambda: self._load_file(Path(path), optional, "yaml"))
        return self

    def add_json_file(self, path: Path | str, optional: bool = False) -> "ConfigurationBuilder":
        self._layers.append(lambda: self._load_file(Path(path), optional, "json"))
        return self

    def add_environment(self, prefix: str, separator: str = "__") -> "ConfigurationBuilder":
        self._layers.append(lambda: environment_mapping(prefix, separator))
        return self

    @staticmethod
    def _load_file(path: Path, optional: bool, format: str) -> Mapping[str, Any]:
        if not path.exists():
            if optional:
                return {}
            raise ConfigurationError(
                f"Configuration file not found: {path}", context={"file": str(path)}
            )
        return load_document(path, format)

    def build(self) -> MappingConfigurationSource:
        data: Dict[str, Any] = {}
        for layer in self._layers:
            merge_configuration(data, layer())
        logger.debug("Configuration built", layers=len(self._layers), keys=list(data))
        return MappingConfigurationSource(data)
