"""
Service Configuration

Loads encoder declarations and the resource catalog from a YAML file,
with environment variable overrides. Everything here runs once during
startup; the objects it builds are read-only afterwards.

Example:

    default_format: GML2
    encoders:
      - aliases: [GML2, "text/xml; subtype=gml/2.1.2"]
        type: org.geoserver.wfs.xml.GML2OutputFormat
      - aliases: [csv]
        type: org.geoserver.wfs.response.CSVOutputFormat
        mime_type: text/csv
        predicate: {name: max_features_at_most, args: [10000]}
    namespaces:
      topp:
        layers: [states, roads]
        tables: [census]
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .descriptor import COMBINATORS, PREDICATES, CapabilityPredicate, EncoderDescriptor, accept_all
from .directory import InMemoryCatalog, ResourceDirectory
from .errors import ConfigError
from .negotiation import CapabilityNegotiator
from .registry import EncoderRegistry

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FEATURE_FORMATS_CONFIG"

# Checked in order when no explicit path or environment variable is given
CONFIG_SEARCH_PATHS = [
    Path.home() / ".feature_formats" / "config.yaml",
    Path(__file__).parent / "default_formats.yaml",
]

DEFAULT_CONFIG: Dict[str, Any] = {
    "default_format": None,
    "strict_identifiers": False,
    "encoders": [],
    "namespaces": {},
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _optional_string(entry: Dict[str, Any], key: str, index: int) -> Optional[str]:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"encoders[{index}].{key} must be a string, got {value!r}")
    return value


def build_predicate(declaration: Any) -> CapabilityPredicate:
    """Turn a predicate declaration into a callable.

    Accepts a bare name (``accept_all``) or a mapping with ``name`` and
    optional ``args`` / ``kwargs``. The arguments of ``all_of`` are nested
    declarations:

        predicate:
          name: all_of
          args: [{name: requires_parameter, args: [typeName]},
                 {name: max_features_at_most, args: [1000]}]
    """
    if declaration is None:
        return accept_all
    if isinstance(declaration, str):
        name, args, kwargs = declaration, [], {}
    elif isinstance(declaration, dict):
        name = declaration.get("name")
        args = declaration.get("args") or []
        kwargs = declaration.get("kwargs") or {}
    else:
        raise ConfigError(f"Predicate must be a name or a mapping, got {declaration!r}")

    factory = PREDICATES.get(name)
    if factory is None:
        known = ", ".join(sorted(PREDICATES))
        raise ConfigError(f"Unknown predicate {name!r}, expected one of: {known}")
    if not isinstance(args, list) or not isinstance(kwargs, dict):
        raise ConfigError(f"Predicate {name!r} needs a list of args and a mapping of kwargs")
    if name in COMBINATORS:
        args = [build_predicate(nested) for nested in args]
    try:
        return factory(*args, **kwargs)
    except TypeError as e:
        raise ConfigError(f"Bad arguments for predicate {name!r}: {e}") from e


def build_descriptor(entry: Dict[str, Any], index: int) -> EncoderDescriptor:
    """Build one descriptor from its YAML mapping."""
    if not isinstance(entry, dict):
        raise ConfigError(f"encoders[{index}] must be a mapping, got {entry!r}")

    aliases = entry.get("aliases")
    if isinstance(aliases, str):
        aliases = [aliases]
    if not aliases:
        raise ConfigError(f"encoders[{index}] declares no aliases")
    if not isinstance(aliases, list):
        raise ConfigError(f"encoders[{index}].aliases must be a list, got {aliases!r}")
    for alias in aliases:
        # YAML reads unquoted yes/no/1.0 as bool and float; quote them
        if not isinstance(alias, str):
            raise ConfigError(f"encoders[{index}] alias {alias!r} must be a quoted string")

    kwargs: Dict[str, Any] = {
        "aliases": tuple(aliases),
        "predicate": build_predicate(entry.get("predicate")),
        "identifier": _optional_string(entry, "identifier", index),
        "type_name": _optional_string(entry, "type", index),
        "publish_all_aliases": _parse_bool(entry.get("publish_all_aliases", False), "publish_all_aliases"),
    }
    mime_type = _optional_string(entry, "mime_type", index)
    if mime_type:
        kwargs["mime_type"] = mime_type

    try:
        return EncoderDescriptor(**kwargs)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"encoders[{index}]: {e}") from e


class ServiceConfig:
    """Configuration for encoder negotiation and resource resolution."""

    def __init__(self, config_path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        if data is not None:
            self._config.update(data)
        else:
            self._load_config(config_path)

        self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from the first YAML file found."""
        if explicit_path is not None:
            search_paths = [Path(explicit_path)]
        elif os.environ.get(CONFIG_ENV_VAR):
            search_paths = [Path(os.environ[CONFIG_ENV_VAR])]
        else:
            search_paths = CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if not config_path.exists():
                continue
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to load config from {config_path}: {e}") from e
            if not isinstance(user_config, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping")
            self._config.update(user_config)
            self._config_path = config_path
            logger.info("Loaded configuration from %s", config_path)
            return

        if explicit_path is not None or os.environ.get(CONFIG_ENV_VAR):
            raise ConfigError(f"Config file not found: {search_paths[0]}")

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if "FEATURE_FORMATS_DEFAULT_FORMAT" in os.environ:
            self._config["default_format"] = os.environ["FEATURE_FORMATS_DEFAULT_FORMAT"] or None
        if "FEATURE_FORMATS_STRICT_IDENTIFIERS" in os.environ:
            self._config["strict_identifiers"] = os.environ["FEATURE_FORMATS_STRICT_IDENTIFIERS"]

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def default_format(self) -> Optional[str]:
        """Format used when a request names none."""
        return self._config.get("default_format")

    @property
    def strict_identifiers(self) -> bool:
        """Fail instead of warn on invalid identifier overrides."""
        return _parse_bool(self._config.get("strict_identifiers", False), "strict_identifiers")

    @property
    def encoders(self) -> List[Dict[str, Any]]:
        encoders = self._config.get("encoders") or []
        if not isinstance(encoders, list):
            raise ConfigError("encoders must be a list")
        return encoders

    @property
    def namespaces(self) -> Dict[str, Dict[str, List[str]]]:
        namespaces = self._config.get("namespaces") or {}
        if not isinstance(namespaces, dict):
            raise ConfigError("namespaces must be a mapping")
        return namespaces

    # =========================================================================
    # Builders
    # =========================================================================

    def build_registry(self, diagnostics: Optional[logging.Logger] = None) -> EncoderRegistry:
        """Build and seal the encoder registry.

        Raises:
            ConfigError: On malformed encoder entries
            RegistryError: On duplicate aliases or unpublishable identifiers
        """
        registry = EncoderRegistry(diagnostics=diagnostics, strict_identifiers=self.strict_identifiers)
        for index, entry in enumerate(self.encoders):
            registry.register(build_descriptor(entry, index))
        return registry.seal()

    def build_negotiator(self, registry: Optional[EncoderRegistry] = None) -> CapabilityNegotiator:
        return CapabilityNegotiator(registry or self.build_registry(), default_format=self.default_format)

    def build_catalog(self) -> InMemoryCatalog:
        return InMemoryCatalog.from_names(self.namespaces)

    def build_directory(self, diagnostics: Optional[logging.Logger] = None) -> ResourceDirectory:
        return ResourceDirectory(self.build_catalog(), diagnostics=diagnostics)
