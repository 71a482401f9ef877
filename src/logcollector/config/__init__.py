"""Configuration file and environment handling for logcollector."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import CollectorConfig

DEFAULT_CONFIG_PATH = Path("~/.logcollector/config.yaml")
ENV_PREFIX = "LOGCOLLECTOR_"
_CONFIG_HEADER = "# logcollector configuration file; edit with `logcollector config set`.\n"


def env_variable(setting: str) -> str:
    """Return the environment variable that overrides ``setting``.

    Args:
        setting: Field name on ``CollectorConfig``, such as ``encoding``.

    Returns:
        str: Variable name, such as ``LOGCOLLECTOR_ENCODING``.
    """
    return ENV_PREFIX + setting.upper()


class ConfigManager:
    """Resolve settings from the config file, the environment and CLI options.

    Later sources win: defaults, then ``config.yaml``, then ``LOGCOLLECTOR_*``
    variables, then values passed to :meth:`load`.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        overrides: Mapping[str, Any] | None = None,
        *,
        include_env: bool = True,
    ) -> CollectorConfig:
        """Build the effective settings.

        A missing configuration file yields the defaults; nothing is created.

        Args:
            overrides: Settings taken from command line options. ``None`` values
                are ignored.
            include_env: Whether ``LOGCOLLECTOR_*`` variables apply.

        Returns:
            CollectorConfig: Validated settings.

        Raises:
            ConfigError: If the file cannot be read or a value is invalid.
        """
        data = self.read_settings()
        if include_env:
            data.update(self._env_settings())
        if overrides:
            data.update({key: value for key, value in overrides.items() if value is not None})
        return _validate(data)

    def read_settings(self) -> dict[str, Any]:
        """Return the settings stored in the configuration file.

        Raises:
            ConfigError: If the file cannot be read or is not a YAML mapping.
        """
        if not self._config_path.exists():
            return {}

        try:
            text = self._config_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Unable to read configuration file {self._config_path}: {exc}") from exc

        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def set_value(self, setting: str, value: Any) -> tuple[Any, Any]:
        """Validate and persist one setting in the configuration file.

        Args:
            setting: Field name on ``CollectorConfig``.
            value: New value for the field.

        Returns:
            tuple[Any, Any]: The previous and the new value of the setting.

        Raises:
            ConfigError: If the setting is unknown, the value is invalid, or the
                file cannot be read or written.
        """
        if setting not in CollectorConfig.model_fields:
            known = ", ".join(CollectorConfig.model_fields)
            raise ConfigError(f"Unknown setting '{setting}'. Known settings: {known}.")

        data = self.read_settings()
        previous = data.get(setting, CollectorConfig.model_fields[setting].default)
        data[setting] = value
        updated = getattr(_validate(data), setting)
        if updated != previous:
            data[setting] = updated
            self._write(data)
        return previous, updated

    def _env_settings(self) -> dict[str, str]:
        settings: dict[str, str] = {}
        for name in CollectorConfig.model_fields:
            raw = self._env.get(env_variable(name))
            if raw is not None and raw != "":
                settings[name] = raw
        return settings

    def _write(self, data: Mapping[str, Any]) -> None:
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            self._config_path.write_text(
                _CONFIG_HEADER + yaml.safe_dump(dict(data), sort_keys=False), encoding="utf-8"
            )
        except OSError as exc:
            raise ConfigError(
                f"Unable to write configuration file {self._config_path}: {exc}"
            ) from exc


def _validate(data: Mapping[str, Any]) -> CollectorConfig:
    try:
        return CollectorConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "CollectorConfig",
    "ConfigError",
    "env_variable",
]
