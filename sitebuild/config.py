"""Configuration loader and validator for the site builder."""
import logging
import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "sitebuild.yaml"


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


def normalize_extensions(extensions: list[str]) -> list[str]:
    """Normalize file extensions to lower case with a leading dot.

    Args:
        extensions: Extensions such as "JS", ".css" or ".Html"

    Returns:
        Normalized extension list, order preserved, duplicates removed
    """
    normalized = []
    for extension in extensions:
        extension = str(extension).strip().lower()
        if not extension:
            continue
        if not extension.startswith("."):
            extension = f".{extension}"
        if extension not in normalized:
            normalized.append(extension)
    return normalized


class PathsConfig:
    """Input/output directory configuration."""

    def __init__(self, data: dict[str, Any], base_dir: Path | None = None):
        self.input_dir: Path = self._resolve(data.get("input_dir", "site"), base_dir)
        self.output_dir: Path = self._resolve(data.get("output_dir", "dist"), base_dir)
        self.manifest_name: str = data.get("manifest_name", "manifest.json")

    @staticmethod
    def _resolve(value: str, base_dir: Path | None) -> Path:
        path = Path(value)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / self.manifest_name

    def validate(self) -> None:
        """Validate directory settings."""
        input_dir = self.input_dir.resolve()
        output_dir = self.output_dir.resolve()

        if input_dir == output_dir:
            raise ConfigurationError(
                f"input_dir and output_dir must differ, both are: {self.input_dir}"
            )
        # The output directory is deleted on every build
        if output_dir in input_dir.parents:
            raise ConfigurationError(
                f"output_dir {self.output_dir} must not contain input_dir {self.input_dir}"
            )
        # Build artifacts would be picked up again as sources
        if input_dir in output_dir.parents:
            raise ConfigurationError(
                f"output_dir {self.output_dir} must not be inside input_dir {self.input_dir}"
            )
        if not self.manifest_name or "/" in self.manifest_name or "\\" in self.manifest_name:
            raise ConfigurationError(
                f"manifest_name must be a bare file name, got: {self.manifest_name!r}"
            )


class BundleConfig:
    """Entry point compilation settings."""

    def __init__(self, data: dict[str, Any]):
        self.extensions: list[str] = normalize_extensions(
            data.get("extensions", [".js", ".css"])
        )
        self.minify: bool = data.get("minify", True)
        self.hash_length: int = data.get("hash_length", 8)

    def validate(self) -> None:
        """Validate bundle settings."""
        if not self.extensions:
            raise ConfigurationError("bundle.extensions must not be empty")
        if not isinstance(self.hash_length, int) or not 4 <= self.hash_length <= 32:
            raise ConfigurationError(
                f"bundle.hash_length must be between 4 and 32, got: {self.hash_length}"
            )


class HtmlConfig:
    """HTML rewriting settings."""

    def __init__(self, data: dict[str, Any]):
        self.extensions: list[str] = normalize_extensions(
            data.get("extensions", [".html", ".htm"])
        )


class PreviewConfig:
    """Local preview server configuration."""

    def __init__(self, data: dict[str, Any]):
        self.host: str = data.get("host", "127.0.0.1")
        self.port: int = data.get("port", 8000)
        self.cache_control: str = data.get("cache_control", "no-cache")


class LoggingConfig:
    """Logging configuration."""

    def __init__(self, data: dict[str, Any]):
        self.level: str = str(data.get("level", "INFO")).upper()

    def validate(self) -> None:
        if not isinstance(logging.getLevelName(self.level), int):
            raise ConfigurationError(f"Unknown logging level: {self.level}")


class Config:
    """Main configuration class."""

    def __init__(self, config_path: str | None = None):
        """Load configuration from a YAML file.

        Lookup order when no path is given: $SITEBUILD_CONFIG, then
        ./sitebuild.yaml. If neither exists the built-in defaults are used.
        An explicitly requested file that does not exist is an error.

        Args:
            config_path: Path to config file
        """
        explicit = config_path is not None
        if config_path is None:
            env_path = os.getenv("SITEBUILD_CONFIG")
            explicit = env_path is not None
            config_path = env_path or DEFAULT_CONFIG_FILE

        self.config_path: Path | None = Path(config_path)
        base_dir = None

        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

            if not data:
                raise ConfigurationError("Config file is empty")
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Config file must contain a mapping: {self.config_path}"
                )
            base_dir = self.config_path.parent
        elif explicit:
            raise ConfigurationError(f"Config file not found: {config_path}")
        else:
            data = {}
            self.config_path = None

        # Load sections
        self.paths = PathsConfig(data.get("paths", {}), base_dir)
        self.bundle = BundleConfig(data.get("bundle", {}))
        self.html = HtmlConfig(data.get("html", {}))
        self.preview = PreviewConfig(data.get("preview", {}))
        self.logging = LoggingConfig(data.get("logging", {}))

        # Validate configuration
        self.validate()

    def validate(self) -> None:
        """Validate entire configuration."""
        self.paths.validate()
        self.bundle.validate()
        self.logging.validate()

        overlap = set(self.bundle.extensions) & set(self.html.extensions)
        if overlap:
            raise ConfigurationError(
                f"Extensions cannot be both bundled and rewritten as HTML: {sorted(overlap)}"
            )


def load_config(config_path: str | None = None) -> Config:
    """Load and return configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Config object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    return Config(config_path)
