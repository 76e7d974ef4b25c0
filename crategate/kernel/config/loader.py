"""TOML configuration loader for crategate."""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

from crategate.kernel.config.models import (
    CrateGateConfig,
    GitConfig,
    LoggingConfig,
    MetadataConfig,
    PublishConfig,
    RegistryConfig,
)
from crategate.kernel.exceptions import ConfigurationError
from crategate.kernel.logging import get_logger

logger = get_logger(__name__)

# Constants for boolean environment variable parsing
_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_SECTIONS: dict[str, type] = {
    "registry": RegistryConfig,
    "git": GitConfig,
    "metadata": MetadataConfig,
    "publish": PublishConfig,
    "logging": LoggingConfig,
}


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


def _subtable(data: dict[str, Any], *keys: str) -> Any:
    """Walk nested tables, returning None as soon as a level is absent or not a table."""
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _require_table(value: Any, location: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigurationError(location, f"must be a table, got {type(value).__name__}")
    return dict(value)


def _parse_command(value: Any) -> tuple[str, ...]:
    """Accept ``"cargo publish"`` or ``["cargo", "publish"]``."""
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, list) and all(isinstance(part, str) for part in value):
        return tuple(value)
    raise ConfigurationError(
        "publish.command", f"must be a string or a list of strings, got {value!r}"
    )


class ConfigLoader:
    """Loads crategate configuration from TOML files and the environment."""

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def __init__(self, project_root: str | Path | None = None) -> None:
        self._root = Path(project_root) if project_root else Path.cwd()

    def load(self, path: str | Path | None = None) -> CrateGateConfig:
        """Load configuration, falling back to defaults when no file exists.

        Parameters
        ----------
        path : str | Path | None
            Explicit configuration file. If None, searches the project root.

        Returns
        -------
        CrateGateConfig
            Parsed configuration with environment overrides applied

        Raises
        ------
        ConfigurationError
            If an explicit file is missing or any file or value is invalid
        """
        config_path = self._find_config_file(path)
        if config_path is None:
            logger.debug("No configuration file found, using defaults")
            data: dict[str, Any] = {}
        else:
            data = self._load_table(config_path)

        data = self._substitute_env_vars(data)
        config = self._parse_config(data)
        return self._apply_env_overrides(config)

    def _find_config_file(self, path: str | Path | None) -> Path | None:
        """Find the configuration file to use, or None for defaults."""
        if path:
            config_path = Path(path)
            if not config_path.exists():
                raise ConfigurationError("config", f"file not found: {config_path}")
            return config_path

        if env_path := os.getenv("CRATEGATE_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.exists():
                logger.debug("Using config from CRATEGATE_CONFIG_PATH: {path}", path=config_path)
                return config_path
            logger.warning("CRATEGATE_CONFIG_PATH set but file not found: {path}", path=config_path)

        for name in ("crategate.toml", ".crategate.toml"):
            candidate = self._root / name
            if candidate.exists():
                return candidate

        cargo_toml = self._root / "Cargo.toml"
        if cargo_toml.exists():
            return cargo_toml
        return None

    def _load_table(self, config_path: Path) -> dict[str, Any]:
        """Read the crategate table out of a TOML file."""
        logger.debug("Loading configuration from {path}", path=config_path)
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            if config_path.name == "Cargo.toml":
                # The manifest reader reports broken manifests itself
                logger.debug("Cargo.toml is not valid TOML, using default configuration")
                return {}
            raise ConfigurationError(str(config_path), f"invalid TOML: {e}") from e

        if config_path.name == "Cargo.toml":
            # Structural manifest problems are reported by the manifest reader
            for section in ("package", "workspace"):
                table = _subtable(data, section, "metadata", "crategate")
                if table is not None:
                    return _require_table(table, f"{section}.metadata.crategate")
            return {}

        # Standalone file: [tool.crategate] or flat top-level keys
        table = _subtable(data, "tool", "crategate")
        if table is not None:
            return _require_table(table, "tool.crategate")
        return data

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively replace ``${VAR}`` placeholders with environment values."""
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable ${{{var}}} not found, keeping placeholder",
                        var=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> CrateGateConfig:
        """Build the config dataclasses from raw TOML tables."""
        sections: dict[str, Any] = {}
        for name, cls in _SECTIONS.items():
            raw = data.get(name, {})
            if not isinstance(raw, dict):
                raise ConfigurationError(name, "must be a table")
            known = {f.name for f in fields(cls)}
            if unknown := sorted(set(raw) - known):
                logger.warning(
                    "Ignoring unknown keys in [{section}]: {keys}",
                    section=name,
                    keys=", ".join(unknown),
                )
            values = {key: value for key, value in raw.items() if key in known}
            if name == "publish" and "command" in values:
                values["command"] = _parse_command(values["command"])
            try:
                sections[name] = cls(**values)
            except TypeError as e:
                raise ConfigurationError(name, str(e)) from e
        return CrateGateConfig(**sections)

    def _apply_env_overrides(self, config: CrateGateConfig) -> CrateGateConfig:
        """Apply ``CRATEGATE_*`` environment variable overrides.

        Environment variables take precedence over TOML configuration:
        - CRATEGATE_REGISTRY_URL: Registry base URL
        - CRATEGATE_TIMEOUT: Registry request timeout in seconds
        - CRATEGATE_USERNAME: Registry login for the ownership check
        - CRATEGATE_OWNERSHIP_POLICY: advisory or strict
        - CRATEGATE_ALLOW_DIRTY: Append --allow-dirty on a dirty tree (true/false)
        - CRATEGATE_LOG_LEVEL / CRATEGATE_LOG_FORMAT / CRATEGATE_LOG_FILE
        """
        registry_changes: dict[str, Any] = {}
        if env_url := os.getenv("CRATEGATE_REGISTRY_URL"):
            registry_changes["url"] = env_url
        if env_timeout := os.getenv("CRATEGATE_TIMEOUT"):
            try:
                registry_changes["timeout"] = float(env_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    "CRATEGATE_TIMEOUT", f"not a number: {env_timeout!r}"
                ) from e
        if env_user := os.getenv("CRATEGATE_USERNAME"):
            registry_changes["username"] = env_user
        if env_policy := os.getenv("CRATEGATE_OWNERSHIP_POLICY"):
            registry_changes["ownership_policy"] = env_policy.lower()

        publish_changes: dict[str, Any] = {}
        if env_dirty := os.getenv("CRATEGATE_ALLOW_DIRTY"):
            try:
                publish_changes["append_allow_dirty"] = _parse_bool_env(env_dirty)
            except ValueError as e:
                logger.warning("Invalid CRATEGATE_ALLOW_DIRTY value: {error}", error=e)

        logging_changes: dict[str, Any] = {}
        if env_level := os.getenv("CRATEGATE_LOG_LEVEL"):
            logging_changes["level"] = env_level.upper()
        if env_format := os.getenv("CRATEGATE_LOG_FORMAT"):
            logging_changes["format"] = env_format.lower()
        if env_file := os.getenv("CRATEGATE_LOG_FILE"):
            logging_changes["output_file"] = env_file

        return replace(
            config,
            registry=replace(config.registry, **registry_changes),
            publish=replace(config.publish, **publish_changes),
            logging=replace(config.logging, **logging_changes),
        )


def load_config(
    path: str | Path | None = None, project_root: str | Path | None = None
) -> CrateGateConfig:
    """Load configuration from TOML file or return defaults.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search the project root
    project_root : str | Path | None
        Directory searched for ``crategate.toml`` / ``Cargo.toml``

    Returns
    -------
    CrateGateConfig
        Loaded configuration or defaults if no file found
    """
    return ConfigLoader(project_root).load(path)


def get_default_config() -> CrateGateConfig:
    """Get default configuration."""
    return CrateGateConfig()
