"""
Configuration management for ngtestgen.

Settings are layered, later sources overriding earlier ones:

1. **Default values**: hard-coded defaults in DefaultSettings
2. **Global config**: ~/.config/ngtestgen/ngtestgen.toml (XDG_CONFIG_HOME)
3. **Workspace config**: <workspace>/ngtestgen.toml or the "ngtestgen" key of
   <workspace>/package.json
4. **Environment variables**: NGTESTGEN_* variables (e.g., NGTESTGEN_TARGET_COVERAGE)

Configuration File Format
-------------------------
Global or workspace config (ngtestgen.toml):

    target_coverage = 80
    test_file_extension = ".spec.ts"
    source_extensions = [".ts"]
    excluded_directories = ["node_modules", "dist", ".angular"]
    generate_test_config = false

Workspace config in package.json:

    {
      "name": "my-app",
      "ngtestgen": {
        "excluded_directories": ["e2e"]
      }
    }

Excluded directories from a workspace are merged with the global list rather
than replacing it.

Usage
-----
    from ngtestgen.config import WorkspaceSettings, settings

    print(settings.config_file)
    workspace = WorkspaceSettings(path=Path("/path/to/angular-app"))
    print(workspace.excluded_directories)
"""

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import WorkspaceNotFoundError

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "ngtestgen.toml"
PACKAGE_JSON_FILENAME = "package.json"
PACKAGE_JSON_KEY = "ngtestgen"

DEFAULT_EXCLUDED_DIRECTORIES = [
    "node_modules",
    "dist",
    ".angular",
]

DEFAULT_WORKSPACE_MARKER = "angular.json"


def get_config_dir() -> Path:
    """
    Get the XDG config directory for ngtestgen.

    Falls back to ~/.config if XDG_CONFIG_HOME is not set.

    Returns:
        Path to the ngtestgen configuration directory.
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / "ngtestgen"


class DefaultSettings(BaseSettings):
    """
    Default settings shared between global and per-workspace settings.

    Attributes:
        target_coverage: Coverage percentage the generated suite aims for.
            Informational only, never enforced.
        test_file_extension: Suffix of generated test files (marker + extension).
        source_extensions: File extensions scanned for sources.
        excluded_directories: Directory names pruned from the walk (exact
            path-segment match).
        generate_test_config: Write a minimal vitest.config.ts when the
            workspace has no test runner configuration.
    """

    model_config = SettingsConfigDict(extra="ignore")

    target_coverage: int = Field(default=80, ge=0, le=100)
    test_file_extension: str = ".spec.ts"
    source_extensions: list[str] = Field(default_factory=lambda: [".ts"])
    excluded_directories: list[str] = Field(
        default_factory=lambda: DEFAULT_EXCLUDED_DIRECTORIES.copy()
    )
    generate_test_config: bool = False

    @field_validator("test_file_extension", mode="after")
    @classmethod
    def validate_test_file_extension(cls, value: str) -> str:
        """Require a leading dot, a marker and an extension (e.g. '.spec.ts')."""
        parts = value.split(".")
        if not value.startswith(".") or len(parts) != 3 or not all(parts[1:]):
            raise ValueError(
                f"test_file_extension must look like '.spec.ts', got {value!r}"
            )
        return value

    @field_validator("source_extensions", mode="after")
    @classmethod
    def normalize_source_extensions(cls, value: list[str]) -> list[str]:
        """Lower-case extensions and make sure each starts with a dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]

    @property
    def test_marker(self) -> str:
        """Marker segment of generated test files ('spec' for '.spec.ts')."""
        return self.test_file_extension.split(".")[1]

    @property
    def test_extension(self) -> str:
        """Extension of generated test files ('.ts' for '.spec.ts')."""
        return "." + self.test_file_extension.split(".")[2]


class Settings(DefaultSettings):
    """
    Global application settings.

    Loads ~/.config/ngtestgen/ngtestgen.toml on initialization when it exists.
    Unlike workspace settings, the global file is only written on request
    (`ngt config init`).

    Environment Variables:
        NGTESTGEN_*: Override any setting via environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="NGTESTGEN_",
        validate_assignment=True,
        extra="ignore",
    )

    config_dir: Path = Field(default_factory=get_config_dir)
    workspace_marker: str = DEFAULT_WORKSPACE_MARKER

    @property
    def config_file(self) -> Path:
        """Path to the global ngtestgen.toml file."""
        return self.config_dir / CONFIG_FILENAME

    def model_post_init(self, __context: Any) -> None:
        """Load the global configuration file if it exists."""
        super().model_post_init(__context)
        if self.config_file.exists():
            self.from_toml()

    def from_toml(self) -> "Settings":
        """
        Load settings from the global ngtestgen.toml file.

        Validation and parse errors are logged and the current values kept.

        Returns:
            Self for method chaining.
        """
        try:
            with open(self.config_file, "rb") as f:
                toml_data = tomllib.load(f)
            if (target_coverage := toml_data.get("target_coverage")) is not None:
                self.target_coverage = target_coverage
            if test_file_extension := toml_data.get("test_file_extension"):
                self.test_file_extension = test_file_extension
            if source_extensions := toml_data.get("source_extensions"):
                self.source_extensions = source_extensions
            if excluded_directories := toml_data.get("excluded_directories"):
                self.excluded_directories = excluded_directories
            if (generate_test_config := toml_data.get("generate_test_config")) is not None:
                self.generate_test_config = generate_test_config
            if workspace_marker := toml_data.get("workspace_marker"):
                self.workspace_marker = workspace_marker
            logger.debug(f"Loaded settings from {self.config_file}")
        except ValidationError as e:
            logger.warning(f"Validation error in {self.config_file}: {e}")
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to load {self.config_file}: {e}")
        return self

    def to_toml(self) -> str:
        """Serialize current settings to TOML.

        Returns:
            TOML formatted string.
        """
        doc = tomlkit.document()
        doc.add(tomlkit.comment("ngtestgen global configuration"))
        doc.add(tomlkit.nl())

        doc.add(tomlkit.comment("Coverage percentage the generated tests aim for (informational)"))
        doc.add("target_coverage", tomlkit.integer(self.target_coverage))
        doc.add(tomlkit.nl())

        doc.add(tomlkit.comment("Suffix of generated test files"))
        doc.add("test_file_extension", tomlkit.string(self.test_file_extension))
        doc.add(tomlkit.nl())

        extensions = tomlkit.array()
        for ext in self.source_extensions:
            extensions.append(ext)
        doc.add(tomlkit.comment("File extensions scanned for sources"))
        doc.add("source_extensions", extensions)
        doc.add(tomlkit.nl())

        excluded = tomlkit.array()
        for directory in self.excluded_directories:
            excluded.append(directory)
        doc.add(tomlkit.comment("Directory names skipped while scanning"))
        doc.add("excluded_directories", excluded)
        doc.add(tomlkit.nl())

        doc.add(tomlkit.comment("Write a minimal vitest.config.ts when none exists"))
        doc.add("generate_test_config", self.generate_test_config)
        doc.add(tomlkit.nl())

        doc.add(tomlkit.comment("File that marks the root of a workspace"))
        doc.add("workspace_marker", tomlkit.string(self.workspace_marker))

        return tomlkit.dumps(doc)

    def save(self) -> Path:
        """Write the current settings to the global config file.

        Returns:
            Path of the written file.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(self.to_toml())
        logger.info(f"Saved settings to {self.config_file}")
        return self.config_file


settings = Settings()


class WorkspaceSettings(DefaultSettings):
    """
    Per-workspace settings.

    Inherits the global settings and lets a workspace override them through
    ngtestgen.toml or the "ngtestgen" key of package.json in its root.

    Attributes:
        path: Absolute path to the workspace root (the directory scanned).
    """

    model_config = SettingsConfigDict(
        env_prefix="NGTESTGEN_",
        extra="ignore",
        validate_assignment=True,
    )

    path: Path

    def model_post_init(self, __context: Any) -> None:
        """
        Load workspace configuration.

        Searches in the following order:
        1. ngtestgen.toml in the workspace root
        2. "ngtestgen" key of package.json in the workspace root
        3. Falls back to global settings
        """
        super().model_post_init(__context)
        toml_path = self.path / CONFIG_FILENAME
        package_json_path = self.path / PACKAGE_JSON_FILENAME
        if toml_path.is_file():
            self.from_toml()
            return
        if package_json_path.is_file() and self.from_package_json() is not None:
            return
        self._apply({})
        logger.debug(f"No config found for {self.path}, using global defaults")

    def _apply(self, data: dict[str, Any]) -> None:
        """Merge workspace values over the global settings."""
        self.target_coverage = data.get("target_coverage", settings.target_coverage)
        self.test_file_extension = data.get("test_file_extension", settings.test_file_extension)
        self.source_extensions = data.get("source_extensions", settings.source_extensions)
        self.excluded_directories = list(
            dict.fromkeys(settings.excluded_directories + data.get("excluded_directories", []))
        )
        self.generate_test_config = data.get(
            "generate_test_config", settings.generate_test_config
        )

    def from_toml(self) -> "WorkspaceSettings":
        """
        Load settings from the workspace's ngtestgen.toml file.

        Returns:
            Self for method chaining.
        """
        toml_path = self.path / CONFIG_FILENAME
        try:
            toml_data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            self._apply(toml_data)
            logger.debug(f"Loaded config from {toml_path}")
        except ValidationError as e:
            logger.warning(f"Failed to parse {toml_path}: {e}")
            self._apply({})
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Failed to parse {toml_path}: {e}")
            self._apply({})
        return self

    def from_package_json(self) -> "WorkspaceSettings | None":
        """
        Load settings from the "ngtestgen" key of package.json.

        Returns:
            Self for method chaining, or None if package.json has no such key.
        """
        package_json_path = self.path / PACKAGE_JSON_FILENAME
        try:
            data = json.loads(package_json_path.read_text(encoding="utf-8"))
            section = data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
            if not isinstance(section, dict):
                return None
            self._apply(section)
            logger.debug(f"Loaded config from {package_json_path} [{PACKAGE_JSON_KEY}]")
        except ValidationError as e:
            logger.warning(f"Failed to parse {package_json_path}: {e}")
            self._apply({})
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to parse {package_json_path}: {e}")
            self._apply({})
        return self


def find_workspace_root(start: Path, marker: str | None = None) -> Path:
    """
    Find the closest directory at or above ``start`` containing the workspace marker.

    Args:
        start: Directory to start searching from.
        marker: Marker file name; defaults to the configured workspace marker
            (angular.json).

    Returns:
        Absolute path of the workspace root.

    Raises:
        WorkspaceNotFoundError: If no ancestor contains the marker.
    """
    marker = marker or settings.workspace_marker
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / marker).is_file():
            return directory
    raise WorkspaceNotFoundError(f"No {marker} found in {start} or any parent directory")
