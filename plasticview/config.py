"""Global configuration: constants, settings, and logging setup.

Settings are merged in layers: defaults -> ``config.json`` -> environment
variables.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Name looked up on PATH when no explicit cm path is configured
DEFAULT_CM_COMMAND = "cm"

# File expected inside a directory handed to path validation
CM_EXECUTABLE_NAME = "cm.exe" if sys.platform == "win32" else "cm"

DEFAULT_CHANGESET_LIMIT = 100

# Changesets requested from each repository before merging
PER_REPOSITORY_LIMIT = 20

CHANGESET_FORMAT = "{changesetid}|{owner}|{date}|{comment}|{branch}"

# Header lines printed by `cm find repos`
REPOSITORY_HEADER = "Repository"
REPOSITORY_HEADERS = ("Repository", "Name")

CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_DIR = Path.home() / ".plasticview"

_ENV_KEYS: dict[str, str] = {
    "PLASTICVIEW_CM_PATH": "cm_path",
    "PLASTICVIEW_CHANGESET_LIMIT": "changeset_limit",
    "PLASTICVIEW_MAX_WORKERS": "max_workers",
    "PLASTICVIEW_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Runtime settings for the command surface."""

    cm_path: str | None = None
    changeset_limit: int = Field(default=DEFAULT_CHANGESET_LIMIT, ge=0)
    max_workers: int = Field(default=1, ge=1)
    log_level: str = "INFO"


def load_settings(config_dir: str | Path | None = None) -> Settings:
    """Load merged settings: defaults -> config.json -> env vars."""
    root = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
    values: dict[str, Any] = {}

    config_json = root / CONFIG_FILENAME
    if config_json.is_file():
        try:
            data = json.loads(config_json.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.debug("Could not read %s", config_json, exc_info=True)
        else:
            if isinstance(data, dict):
                for key, value in data.items():
                    if key in Settings.model_fields:
                        _apply_setting(values, key, value, str(config_json))

    for env_key, field_name in _ENV_KEYS.items():
        env_val = os.environ.get(env_key)
        if env_val is not None:
            _apply_setting(values, field_name, env_val, env_key)

    return Settings(**values)


def _apply_setting(values: dict[str, Any], key: str, value: Any, source: str) -> None:
    """Set *key* only if the merged settings stay valid; otherwise keep the lower layer."""
    try:
        Settings(**{**values, key: value})
    except ValidationError as exc:
        logger.warning(
            "Ignoring invalid %s=%r from %s: %s",
            key, value, source, exc.errors()[0]["msg"],
        )
        return
    values[key] = value


def save_cm_path(cm_path: str, config_dir: str | Path | None = None) -> Path:
    """Persist a validated cm path into ``config.json``.

    Existing keys in the file are preserved. Returns the file path.
    """
    root = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
    root.mkdir(parents=True, exist_ok=True)
    config_json = root / CONFIG_FILENAME

    data: dict[str, Any] = {}
    if config_json.is_file():
        try:
            loaded = json.loads(config_json.read_text(encoding="utf-8"))
            if isinstance(loaded, dict):
                data = loaded
        except (json.JSONDecodeError, OSError):
            logger.debug("Overwriting unreadable %s", config_json, exc_info=True)

    data["cm_path"] = cm_path
    config_json.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("Saved cm path %s to %s", cm_path, config_json)
    return config_json


def configure_logging(level: str = "INFO") -> None:
    """Attach a basic handler unless the host application already did."""
    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
