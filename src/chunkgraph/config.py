"""
Global Configuration and Safety Defaults.

Module-level constants protect the analyzer from minified bundles, vendored
blobs and other sources that are too large to parse usefully. Per-project
settings live in ``.chunkgraph/config.yaml`` and are validated by
``ChunkGraphConfig``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.errors import ConfigError

logger = logging.getLogger(__name__)

# --- Safety Limits ---
# Sources larger than this are not parsed (generated or vendored code)
MAX_SOURCE_BYTES = 2 * 1024 * 1024  # 2MB

# --- Defaults ---
DEFAULT_RUNTIME = "client"
CONFIG_DIR = ".chunkgraph"
CONFIG_FILE = "config.yaml"
DEFAULT_CONFIG_PATH = Path(CONFIG_DIR) / CONFIG_FILE


class ChunkGraphConfig(BaseModel):
    """Per-project settings."""

    model_config = ConfigDict(extra="ignore")

    runtime: str = DEFAULT_RUNTIME
    # Directory that relative module resources are resolved against
    context: Optional[str] = None
    # Chunk names whose modules are reported as fully used; "re:" marks a regex
    disable_tree_shaking: List[str] = Field(default_factory=list)
    prefetch_markers: List[str] = Field(default_factory=lambda: ["webpackPrefetch"])
    preload_markers: List[str] = Field(default_factory=lambda: ["webpackPreload"])
    max_source_bytes: int = Field(default=MAX_SOURCE_BYTES, ge=0)

    def context_dir(self, fallback: Optional[Path] = None) -> Path:
        if self.context:
            return Path(self.context)
        return fallback or Path.cwd()


DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0",
    "runtime": DEFAULT_RUNTIME,
    "context": None,
    "disable_tree_shaking": [],
    "prefetch_markers": ["webpackPrefetch"],
    "preload_markers": ["webpackPreload"],
    "max_source_bytes": MAX_SOURCE_BYTES,
}


def load_config(path: Optional[Path] = None) -> ChunkGraphConfig:
    """
    Load configuration from YAML.

    With no explicit path, ``.chunkgraph/config.yaml`` is used when present
    and defaults apply otherwise. An explicit path that does not exist is an
    error.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return ChunkGraphConfig()
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    try:
        config = ChunkGraphConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return config


def write_default_config(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(DEFAULT_CONFIG, f, sort_keys=False, default_flow_style=False)
