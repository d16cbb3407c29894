"""Load and persist the JSON configuration file."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from models.config import BrowserConfig
from runtime.errors import ConfigLoadError, ConfigSaveError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"


def read_config(path: str | os.PathLike[str]) -> BrowserConfig:
    """Parse ``path`` into a config, raising ``ConfigLoadError`` on any problem."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigLoadError(f"could not read configuration {path}: {exc}") from exc
    try:
        return BrowserConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigLoadError(f"invalid configuration {path}: {exc}") from exc


def write_config(config: BrowserConfig, path: str | os.PathLike[str]) -> None:
    payload = config.model_dump(mode="json", by_alias=True)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
    except OSError as exc:
        raise ConfigSaveError(f"could not write configuration {path}: {exc}") from exc


def load_config(path: str | os.PathLike[str]) -> BrowserConfig:
    """Like ``read_config`` but falls back to defaults."""
    try:
        return read_config(path)
    except ConfigLoadError as exc:
        logger.warning("%s; using defaults", exc)
        return BrowserConfig()


def save_config(config: BrowserConfig, path: str | os.PathLike[str]) -> bool:
    try:
        write_config(config, path)
    except ConfigSaveError as exc:
        logger.warning("%s", exc)
        return False
    return True


def resolve_defaults(config: BrowserConfig, app_dir: str | os.PathLike[str]) -> BrowserConfig:
    """Fill the directory settings left empty with locations beside the app."""
    app_dir = Path(app_dir)
    updates = {}
    if not config.root:
        updates["root"] = str(app_dir)
    if not config.document_root:
        updates["document_root"] = str(app_dir / "root")
    if not updates:
        return config
    return config.model_copy(update=updates)
