"""
Configuration management with YAML loading and environment variable support.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import CONFIG_FILE_NAMES, DEFAULT_DELEGATE, DEFAULT_IMPLEMENTATION, ENV_CONFIG_DIR, ENV_LOG_LEVEL
from .runners.base import RunnerEvents, RunnerOptions
from .runners.registry import RunnerFactoryConfig


class ConfigError(ValueError):
    """Raised when a config file has the wrong shape."""


@dataclass
class LoggingConfig:
    level: str = field(default_factory=lambda: os.environ.get(ENV_LOG_LEVEL, "WARNING"))
    console_logging: bool = True
    file_logging: bool = False
    file: Path | None = None


@dataclass
class FeatureConfig:
    """A named runner declaration: which runner, which delegate, which options."""

    implementation: str = DEFAULT_IMPLEMENTATION
    delegate: str | None = DEFAULT_DELEGATE
    options: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @classmethod
    def from_dict(cls, name: str, data: dict) -> FeatureConfig:
        if not isinstance(data, dict):
            raise ConfigError(f"feature '{name}' must be a mapping")
        feature = cls()
        for key, value in data.items():
            if key == "className":
                key = "implementation"
            if key in {f.name for f in fields(cls)}:
                setattr(feature, key, value)
        return feature


@dataclass
class AppConfig:
    runner: RunnerOptions = field(default_factory=RunnerOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    features: dict[str, FeatureConfig] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path) -> AppConfig:
        """Load configuration from YAML file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> AppConfig:
        """Create config from dictionary."""
        config = cls()

        if "runner" in data:
            if not isinstance(data["runner"], dict):
                raise ConfigError("runner must be a mapping of options")
            config.runner = RunnerOptions.from_dict(data["runner"])

        if "logging" in data:
            if not isinstance(data["logging"], dict):
                raise ConfigError("logging must be a mapping")
            for key, value in data["logging"].items():
                if hasattr(config.logging, key):
                    if key == "file" and isinstance(value, str):
                        value = Path(value)
                    setattr(config.logging, key, value)

        if "features" in data:
            features = data["features"] or {}
            if not isinstance(features, dict):
                raise ConfigError("features must be a mapping of name -> feature")
            for name, feature_data in features.items():
                config.features[name] = FeatureConfig.from_dict(name, feature_data)

        return config

    def feature_config(
        self,
        name: str | None = None,
        events: RunnerEvents | None = None,
        data: list | None = None,
    ) -> RunnerFactoryConfig:
        """
        Build a factory config for a named feature.

        Feature options are layered over the ``runner`` defaults. Without a
        name the defaults are used with the built-in runner and delegate.

        Raises:
            KeyError: If the feature is not configured
        """
        if name is None:
            feature = FeatureConfig()
        else:
            feature = self.features[name]

        defaults = {f.name: getattr(self.runner, f.name) for f in fields(RunnerOptions)}
        merged = RunnerOptions.from_dict({**defaults, **feature.options})
        return RunnerFactoryConfig(
            implementation=feature.implementation,
            options=merged,
            events=events,
            delegate=feature.delegate,
            data=data,
        )


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    if config_dir := os.environ.get(ENV_CONFIG_DIR):
        return Path(config_dir)

    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "sequence-runner"

    return Path.home() / ".config" / "sequence-runner"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Path to config file (default: searches standard locations)
        config_dir: Config directory searched before the working directory

    Returns:
        AppConfig (defaults when no file is found)
    """
    if config_dir is None:
        config_dir = _get_default_config_dir()

    if config_path is None:
        search_paths = [config_dir / name for name in CONFIG_FILE_NAMES]
        search_paths += [Path.cwd() / name for name in reversed(CONFIG_FILE_NAMES)]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    return AppConfig.from_yaml(config_path) if config_path else AppConfig()
