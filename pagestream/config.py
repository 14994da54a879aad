"""Streamer configuration: settings schema and pagestream.yaml loader"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "pagestream.yaml"
ENV_PREFIX = "PAGESTREAM_"


class Settings(BaseModel):
    error_preview_chars: int = Field(default=200, ge=0, description="Max raw characters carried by a block_error event")
    strip_code_fences: bool = Field(default=True, description="Silently skip fences or prose around the JSON array")


def load_config(overrides: Optional[Dict[str, Any]] = None, path: Optional[Path] = None) -> Settings:
    """Load Settings from pagestream.yaml, then PAGESTREAM_<FIELD> env vars, then non-None overrides."""
    config_path = Path(path) if path is not None else Path(CONFIG_FILE)
    data: Dict[str, Any] = {}
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {config_path}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
