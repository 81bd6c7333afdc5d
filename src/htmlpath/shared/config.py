"""Configuration classes for htmlpath.

Configuration is split per collaborator: the tokenizer, the network fetch
layer and process-wide settings. ``ParserConfig`` bundles them into one
immutable object that can be overridden, serialized and loaded from JSON.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from htmlpath.shared.errors import HTMLPathError

DEFAULT_USER_AGENT = "htmlpath/0.1 (+https://pypi.org/project/htmlpath/)"
BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"

_COMPONENTS = ("tokenizer", "fetch", "global_")
_VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigError(HTMLPathError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for turning markup text into tokens."""

    convert_charrefs: bool = True
    emit_text: bool = True
    emit_comments: bool = False
    feed_chunk_size: int = 8192

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.feed_chunk_size <= 0:
            raise ValueError("feed_chunk_size must be > 0")


@dataclass(frozen=True)
class FetchConfig:
    """Configuration for fetching markup over HTTP."""

    timeout_seconds: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = 8192
    verify_tls: bool = True
    encoding: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate fetch configuration."""
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if not self.user_agent:
            raise ValueError("user_agent cannot be empty")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")


@dataclass(frozen=True)
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in _VALID_LEVELS:
            raise ValueError(f"logging_level must be one of {_VALID_LEVELS}")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for parsing and fetching.

    Immutable, so a single instance can be shared between parsers.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Check that every component has the expected type."""
        expected = {
            "tokenizer": TokenizerConfig,
            "fetch": FetchConfig,
            "global_": GlobalConfig,
        }
        for field_name, field_type in expected.items():
            if not isinstance(getattr(self, field_name), field_type):
                raise ConfigValidationError(
                    f"{field_name} must be a {field_type.__name__}",
                    field_name=field_name,
                )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; ``component__field`` addresses a
                field of a component configuration

        Returns:
            New ParserConfig instance with overrides applied

        Raises:
            ConfigValidationError: If a field is unknown or a value is invalid

        Example:
            >>> config = ParserConfig().override(fetch__timeout_seconds=30.0)
            >>> config.fetch.timeout_seconds
            30.0
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration override: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Missing fields keep their defaults; unknown keys are rejected.

        Raises:
            ConfigValidationError: If the data does not describe a valid configuration
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a mapping")

        component_types = {
            "tokenizer": TokenizerConfig,
            "fetch": FetchConfig,
            "global_": GlobalConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"{key} must be a mapping", field_name=key
                    )
                try:
                    values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(
                        f"Invalid {key} configuration: {e}", field_name=key
                    ) from e
            elif key == "name":
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=list(component_types) + ["name"],
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Configuration is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def web_scraping(cls) -> "ParserConfig":
        """Create configuration preset for fetching real-world pages."""
        return cls(
            tokenizer=TokenizerConfig(emit_text=False),
            fetch=FetchConfig(
                timeout_seconds=30.0,
                user_agent=BROWSER_USER_AGENT,
                chunk_size=16384,
            ),
            name="web_scraping",
        )
