"""Configuration classes for OPML reading, writing and fetching.

The defaults reproduce the canonical OPML behaviour exactly; configuration only
narrows or widens what the tokenizer accepts, how remote locators are fetched,
and cosmetic aspects of the written XML.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_OPML_VERSION = "2.0"
DEFAULT_USER_AGENT = "opml-toolkit/0.1.0"

_VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_COMPONENTS = ["reader", "writer", "fetch", "global_"]


@dataclass(frozen=True)
class ReaderConfig:
    """Configuration for turning XML events into a Document."""

    default_version: str = DEFAULT_OPML_VERSION

    # Passed through to the defusedxml SAX reader
    forbid_dtd: bool = False
    forbid_entities: bool = True
    forbid_external: bool = True

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if not self.default_version:
            raise ValueError("default_version cannot be empty")


@dataclass(frozen=True)
class WriterConfig:
    """Configuration for serializing a Document to XML text."""

    indent_width: int = 2
    encoding: str = "UTF-8"
    xml_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate writer configuration."""
        if self.indent_width < 0:
            raise ValueError("indent_width must be >= 0")
        if not self.encoding:
            raise ValueError("encoding cannot be empty")


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for opening remote locators."""

    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    allowed_schemes: Tuple[str, ...] = ("http", "https")

    def __post_init__(self) -> None:
        """Validate fetch configuration."""
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if not self.allowed_schemes:
            raise ValueError("allowed_schemes cannot be empty")


@dataclass(frozen=True)
class GlobalConfig:
    """Settings that apply across all components."""

    # None leaves the host application's logging setup untouched
    logging_level: Optional[str] = None
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if (self.logging_level is not None
                and self.logging_level not in _VALID_LOGGING_LEVELS):
            raise ValueError(f"logging_level must be one of {_VALID_LOGGING_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class OPMLConfig:
    """Immutable configuration for every OPML component.

    Thread-safe due to frozen dataclass implementation, so one instance may be
    shared by any number of concurrent parse and serialize calls.
    """

    reader: ReaderConfig = field(default_factory=ReaderConfig)
    writer: WriterConfig = field(default_factory=WriterConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate component types and cross-component constraints."""
        expected = {
            "reader": ReaderConfig,
            "writer": WriterConfig,
            "fetch": FetchConfig,
            "global_": GlobalConfig,
        }
        for field_name, expected_type in expected.items():
            if not isinstance(getattr(self, field_name), expected_type):
                raise ConfigValidationError(
                    f"{field_name} must be a {expected_type.__name__}",
                    field_name=field_name,
                )

        if self.reader.forbid_dtd and not self.reader.forbid_entities:
            raise ConfigValidationError(
                "Entities cannot be allowed while DTDs are forbidden",
                field_name="reader",
                suggestions=["Set reader.forbid_entities=True",
                             "Set reader.forbid_dtd=False"],
            )

    def override(self, **kwargs: Any) -> "OPMLConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; component fields use ``component__field``

        Returns:
            New OPMLConfig instance with overrides applied

        Example:
            >>> config = OPMLConfig()
            >>> new_config = config.override(
            ...     writer__indent_width=4,
            ...     fetch__timeout_seconds=5.0
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                # global__field addresses the global_ component
                if component == "global":
                    component = "global_"
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {_COMPONENTS}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, values in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **values)
            new_fields.update(top_level)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if is_dataclass(obj):
                return {f.name: _dataclass_to_dict(getattr(obj, f.name))
                        for f in fields(obj)}
            if isinstance(obj, tuple):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OPMLConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently dropped.
        """
        component_types = {
            "reader": ReaderConfig,
            "writer": WriterConfig,
            "fetch": FetchConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        try:
            for key, value in data.items():
                component_type = component_types.get(key)
                if component_type is None:
                    values[key] = value
                    continue
                component_values = dict(value)
                if "allowed_schemes" in component_values:
                    component_values["allowed_schemes"] = tuple(
                        component_values["allowed_schemes"]
                    )
                values[key] = component_type(**component_values)
            return cls(**values)
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "OPMLConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def hardened(cls) -> "OPMLConfig":
        """Create preset for untrusted input: no DTDs, short network timeout."""
        return cls(
            reader=ReaderConfig(
                forbid_dtd=True,
                forbid_entities=True,
                forbid_external=True
            ),
            fetch=FetchConfig(timeout_seconds=10.0, allowed_schemes=("https",)),
            name="hardened",
            description="Rejects DTDs and entity declarations; fetches over HTTPS only"
        )

    @classmethod
    def permissive(cls) -> "OPMLConfig":
        """Create preset for legacy exports that declare internal entities."""
        return cls(
            reader=ReaderConfig(
                forbid_dtd=False,
                forbid_entities=False,
                forbid_external=True
            ),
            name="permissive",
            description="Accepts internal entity declarations found in older exports"
        )
