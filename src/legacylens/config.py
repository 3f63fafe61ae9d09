"""
Global Configuration and Safety Defaults.

This module centralizes the limits applied while bundling source code for
analysis, and the user settings (analysis endpoint, layout geometry,
viewport fitting) read from `.legacylens/config.yaml`.

Environment variables take precedence over the config file:
    LEGACYLENS_ENDPOINT: URL of the analysis service.
    LEGACYLENS_TIMEOUT: Request timeout in seconds.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# --- Safety Limits ---
# Files larger than this are left out of the bundle
MAX_FILE_SIZE_BYTES = 500 * 1024

# The analysis service rejects request bodies above roughly this size
MAX_CONTEXT_BYTES = 4 * 1024 * 1024

DEFAULT_CONFIG_PATH = Path(".legacylens/config.yaml")
DEFAULT_ENDPOINT = "http://localhost:3000/api/analyze-codebase"
DEFAULT_TIMEOUT_SEC = 120.0

# --- Blocklists ---

IGNORE_DIRECTORIES: Set[str] = {
    # Version Control
    ".git",
    ".svn",
    ".hg",
    # Environments & Dependencies
    "node_modules",
    "vendor",
    "target",
    "build",
    "dist",
    "out",
    "bin",
    "obj",
    "__pycache__",
    ".next",
    # IDEs
    ".idea",
    ".vscode",
    # Generated
    "coverage",
    # LegacyLens internal
    ".legacylens",
}

# Extensions treated as readable source (lower case, without the dot)
TEXT_EXTENSIONS: Set[str] = {
    # Web
    "js", "jsx", "ts", "tsx", "html", "css", "scss", "less", "json", "md", "svg",
    # Backend/System
    "py", "java", "c", "cpp", "h", "hpp", "cs", "go", "rs", "php", "rb",
    "swift", "kt", "pl", "pm", "sh", "bat", "ps1", "cob", "cbl",
    # Config/Data
    "yaml", "yml", "xml", "toml", "ini", "sql", "graphql",
    # Misc
    "dockerfile", "gitignore", "env", "txt", "conf", "properties", "gradle", "lock",
}

# Extensionless files worth sending
SPECIFIC_FILES: Set[str] = {
    "Dockerfile",
    "Makefile",
    "LICENSE",
    "README",
    "Gemfile",
    "Procfile",
    "Rakefile",
    ".gitignore",
    ".env",
}


def is_ignored_directory(dir_name: str) -> bool:
    """Check if directory name is in the blocklist."""
    return dir_name in IGNORE_DIRECTORIES


def is_source_file(name: str) -> bool:
    """Check if a file name looks like readable source."""
    if name in SPECIFIC_FILES:
        return True
    dot = name.rfind(".")
    if dot <= 0:
        return False
    return name[dot + 1:].lower() in TEXT_EXTENSIONS


# --- Settings ---


class LayoutConfig(BaseModel):
    """Node box geometry and ordering effort for the layered layout."""

    model_config = ConfigDict(frozen=True)

    node_width: float = Field(default=240.0, gt=0)
    node_height: float = Field(default=120.0, gt=0)
    horizontal_spacing: float = Field(default=50.0, ge=0)
    vertical_spacing: float = Field(default=100.0, ge=0)
    ordering_passes: int = Field(default=4, ge=0)


class ViewportConfig(BaseModel):
    """Canvas size and zoom limits used when fitting the drawing."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(default=1280.0, gt=0)
    height: float = Field(default=750.0, gt=0)
    padding: float = Field(default=0.1, ge=0)
    min_zoom: float = Field(default=0.1, gt=0)
    max_zoom: float = Field(default=2.0, gt=0)


class AnalysisSettings(BaseModel):
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = Field(default=DEFAULT_TIMEOUT_SEC, gt=0)


class Settings(BaseModel):
    """
    User settings for a LegacyLens workspace.

    Unknown keys in the YAML file are ignored so older config files keep
    loading.
    """

    model_config = ConfigDict(extra="ignore")

    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """
        Load settings from YAML, then apply environment overrides.

        A missing file yields the defaults.

        Args:
            path: Config file location. Defaults to .legacylens/config.yaml.

        Returns:
            Settings: The merged settings.
        """
        config_path = path or DEFAULT_CONFIG_PATH
        data: Dict[str, Any] = {}

        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Expected a mapping in {config_path}")
            logger.debug(f"Loaded settings from {config_path}")

        analysis = dict(data.get("analysis") or {})
        if os.getenv("LEGACYLENS_ENDPOINT"):
            analysis["endpoint"] = os.environ["LEGACYLENS_ENDPOINT"]
        if os.getenv("LEGACYLENS_TIMEOUT"):
            analysis["timeout"] = os.environ["LEGACYLENS_TIMEOUT"]
        data["analysis"] = analysis

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {config_path}: {e}") from e

    def to_yaml_dict(self) -> Dict[str, Any]:
        return {"version": "1.0", **self.model_dump()}
