# dirbrowse/models/config.py
# Purpose: Startup configuration snapshot, persisted as JSON.
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from models.rules import PathRule


class MatchMode(str, Enum):
    """How a compiled rule is applied to a path."""

    SEARCH = "search"
    ANCHORED = "anchored"


class BrowserConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = "0.0.0.0"
    port: int = Field(default=80, ge=0, le=65535)
    download_enabled: bool = True
    avoid_paths: List[PathRule] = Field(default_factory=list)
    allow_paths: List[PathRule] = Field(default_factory=list)
    root: str = Field(default="", description="Directory shown when no dir is requested")
    document_root: str = Field(default="", description="Folder holding js/css/img assets")
    match_mode: MatchMode = MatchMode.SEARCH
    request_timeout: float = Field(default=15.0, gt=0)
