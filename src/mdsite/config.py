"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


CONFIG_FILE = "config.yaml"


class GalleryConfig(BaseModel):
    """The `gallerytag` namespace. Unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    url:          Optional[str] = Field(default=None, description="Base URL prefix for full-size images")
    columns:      int = Field(default=4, ge=1, description="Layout hint; does not drive the clear-fix")
    thumb_width:  Optional[int] = Field(default=100, ge=1, description="Thumbnail width in pixels")
    thumb_height: Optional[int] = Field(default=100, ge=1, description="Thumbnail height in pixels")


class Settings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    app_name:   str = "mdsite"
    source_dir: str = Field(default=".",       description="Content tree root")
    posts_dir:  str = Field(default="_posts",  description="Post directory, relative to source_dir")
    output_dir: str = Field(default="_site",   description="Directory for rendered pages and derived files")
    workers:    int = Field(default=4, ge=1,   description="Max concurrent thumbnail generations")
    gallerytag: GalleryConfig = Field(default_factory=GalleryConfig)
    series:     dict[str, Any] = Field(default_factory=dict, description="Per-series registry, any shape")


# Only flat scalar fields can be set from the environment.
ENV_FIELDS = ("source_dir", "posts_dir", "output_dir", "workers")


def load_config(overrides: dict[str, Any] = None, path: Path = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    config_path = path or Path(CONFIG_FILE)
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {config_path.name}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {config_path.name}: expected a mapping, got {type(data).__name__}")

    for name in ENV_FIELDS:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
