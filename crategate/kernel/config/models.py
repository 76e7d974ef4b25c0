"""Configuration data models for crategate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from crategate.kernel.exceptions import ConfigurationError

OwnershipPolicy = Literal["advisory", "strict"]

_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_LOG_FORMATS = frozenset({"console", "json", "structured", "rich"})


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration for crategate.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to

    Examples
    --------
    TOML configuration:

    ```toml
    [logging]
    level = "DEBUG"
    format = "rich"
    ```

    Environment variable overrides:

    ```bash
    export CRATEGATE_LOG_LEVEL=DEBUG
    export CRATEGATE_LOG_FORMAT=rich
    export CRATEGATE_LOG_FILE=/tmp/crategate.log
    ```
    """

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None

    def __post_init__(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError("logging.level", f"unknown level {self.level!r}")
        if self.format not in _LOG_FORMATS:
            raise ConfigurationError("logging.format", f"unknown format {self.format!r}")


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Registry read-API settings.

    Attributes
    ----------
    url : str
        Base URL of the registry (``/api/v1/crates/...`` is appended)
    timeout : float
        Per-request timeout in seconds; exceeding it blocks the publish
    user_agent : str
        crates.io rejects requests without a descriptive User-Agent
    username : str | None
        Registry login used for the ownership check
    ownership_policy : "advisory" | "strict"
        ``strict`` escalates "not an owner" and "ownership unknown" to Blocking
    """

    url: str = "https://crates.io"
    timeout: float = 10.0
    user_agent: str = "crategate (https://github.com/crategate/crategate)"
    username: str | None = None
    ownership_policy: OwnershipPolicy = "advisory"

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigurationError("registry.url", "cannot be empty")
        if self.timeout <= 0:
            raise ConfigurationError("registry.timeout", "must be positive")
        if self.ownership_policy not in ("advisory", "strict"):
            raise ConfigurationError(
                "registry.ownership_policy",
                f"expected 'advisory' or 'strict', got {self.ownership_policy!r}",
            )


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Working-tree check settings."""

    timeout: float = 10.0
    max_listed_paths: int = 10

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigurationError("git.timeout", "must be positive")
        if self.max_listed_paths < 1:
            raise ConfigurationError("git.max_listed_paths", "must be at least 1")


@dataclass(frozen=True, slots=True)
class MetadataConfig:
    """Manifest sanity check settings.

    Attributes
    ----------
    expected_edition : str | None
        Edition suggested when the manifest declares another one; None disables the hint
    require_repository : bool
        Also warn when ``package.repository`` is missing (off by default)
    """

    expected_edition: str | None = "2021"
    require_repository: bool = False

    def __post_init__(self) -> None:
        if self.expected_edition is not None and not isinstance(self.expected_edition, str):
            raise ConfigurationError(
                "metadata.expected_edition",
                f'must be a string such as "2021", got {self.expected_edition!r}',
            )
        if not isinstance(self.require_repository, bool):
            raise ConfigurationError("metadata.require_repository", "must be true or false")


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Underlying publish command settings."""

    command: tuple[str, ...] = ("cargo", "publish")
    append_allow_dirty: bool = False

    def __post_init__(self) -> None:
        if not self.command:
            raise ConfigurationError("publish.command", "cannot be empty")


@dataclass(frozen=True, slots=True)
class CrateGateConfig:
    """Complete crategate configuration."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    git: GitConfig = field(default_factory=GitConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
