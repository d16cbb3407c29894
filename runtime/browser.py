# dirbrowse/runtime/browser.py
# Purpose: Per-request pipeline: navigate, gate, then list or download.
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.config import BrowserConfig
from models.listing import ListingView, Messages, NavigationRequest, Operation, OrderDirection, OrderKey
from models.rules import AccessDecision
from runtime.download import Download, open_download_async
from runtime.errors import DownloadError, DownloadErrorKind, ListingError
from runtime.lister import list_directory_async
from runtime.navigator import resolve
from runtime.policy import AccessPolicy

logger = logging.getLogger(__name__)

DOWNLOADS_DISABLED = "File downloads are not enabled"


class BrowseQuery(BaseModel):
    """Validated request fields; anything unrecognized falls back to a default."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    directory: str = Field(default="", alias="dir")
    operation: Operation = Field(default=Operation.NONE, alias="op")
    folder: str = ""
    file_id: str = Field(default="", alias="id")
    order_key: OrderKey = Field(default=OrderKey.NAME, alias="o")
    order_direction: OrderDirection = Field(default=OrderDirection.ASC, alias="ot")

    @field_validator("directory", "folder", "file_id", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("operation", mode="before")
    @classmethod
    def _operation(cls, value: Any) -> Operation:
        return value if isinstance(value, Operation) else Operation.parse(value)

    @field_validator("order_key", mode="before")
    @classmethod
    def _order_key(cls, value: Any) -> OrderKey:
        return value if isinstance(value, OrderKey) else OrderKey.parse(value)

    @field_validator("order_direction", mode="before")
    @classmethod
    def _order_direction(cls, value: Any) -> OrderDirection:
        if isinstance(value, OrderDirection):
            return value
        return OrderDirection.from_toggle(value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BrowseQuery":
        keys = ("dir", "op", "folder", "id", "o", "ot")
        return cls.model_validate({k: data.get(k) for k in keys if data.get(k) is not None})

    def navigation(self) -> NavigationRequest:
        return NavigationRequest(
            base_path=self.directory,
            operation=self.operation,
            folder_name=self.folder or None,
        )


@dataclass
class BrowseResult:
    path: str
    decision: AccessDecision
    messages: Messages = field(default_factory=Messages)
    view: Optional[ListingView] = None
    download: Optional[Download] = None
    download_enabled: bool = False


def _download_message(exc: DownloadError) -> str:
    if exc.kind is DownloadErrorKind.NOT_A_FILE:
        return f"{exc.path} is not a regular file"
    return f"Could not open file {exc.path}, {exc.cause}"


class Browser:
    """Handles one browse or download request against a fixed configuration."""

    def __init__(self, config: BrowserConfig, policy: Optional[AccessPolicy] = None) -> None:
        self.config = config
        self.policy = policy or AccessPolicy.from_config(config)

    async def handle(self, query: BrowseQuery) -> BrowseResult:
        path = resolve(query.navigation(), self.config.root)
        decision = self.policy.evaluate(path)
        result = BrowseResult(
            path=path,
            decision=decision,
            download_enabled=self.config.download_enabled and decision.accessible,
        )

        if query.operation is Operation.DOWNLOAD and decision.accessible:
            if not self.config.download_enabled:
                result.messages.alert(DOWNLOADS_DISABLED)
            elif query.file_id:
                try:
                    result.download = await open_download_async(path, query.file_id)
                    return result
                except DownloadError as exc:
                    logger.warning("Download refused: %s", exc)
                    result.messages.error(_download_message(exc))

        if not decision.accessible:
            logger.info("Access to %s withheld: %s", path, decision.reason)
            result.messages.alert(decision.reason or "Access denied")
            return result

        try:
            result.view = await list_directory_async(path, query.order_key, query.order_direction)
        except ListingError as exc:
            logger.warning("%s", exc)
            result.messages.error(f"Could not read directory {path}, {exc.cause}")
            result.view = ListingView(
                current_path=path,
                order_key=query.order_key,
                order_direction=query.order_direction,
            )
        return result
