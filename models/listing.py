from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Operation(str, Enum):
    """Navigation operations carried by the ``op`` query field."""

    NONE = ""
    ENTER = "in"
    UP = "up"
    DOWNLOAD = "download"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Operation":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.NONE


class OrderKey(str, Enum):
    NAME = "name"
    DATE = "date"
    SIZE = "size"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "OrderKey":
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.NAME


class OrderDirection(str, Enum):
    """Sort direction.

    The page never states the direction it wants; it echoes back the
    ``toggle_marker`` of the listing it is showing. ``"z"`` means the page was
    ascending, so the next listing is descending, and anything else gives
    ascending.
    """

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_toggle(cls, marker: Optional[str]) -> "OrderDirection":
        if (marker or "").strip().lower() == "z":
            return cls.DESC
        return cls.ASC

    @property
    def toggle_marker(self) -> str:
        return "z" if self is OrderDirection.ASC else "a"

    def toggled(self) -> "OrderDirection":
        return OrderDirection.from_toggle(self.toggle_marker)


class NavigationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_path: str = ""
    operation: Operation = Operation.NONE
    folder_name: Optional[str] = None


class DirectoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    is_dir: bool = False
    size: int = 0
    modified_at: datetime


class ListingView(BaseModel):
    current_path: str
    order_key: OrderKey = OrderKey.NAME
    order_direction: OrderDirection = OrderDirection.ASC
    entries: List[DirectoryEntry] = Field(default_factory=list)

    @property
    def toggle_marker(self) -> str:
        return self.order_direction.toggle_marker


class Messages(BaseModel):
    """User-visible notes grouped the way the page shows them."""

    alerts: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    def alert(self, text: str) -> None:
        self.alerts.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)

    def as_dict(self) -> Dict[str, List[str]]:
        return {"Alerts": list(self.alerts), "Errors": list(self.errors)}

    def __bool__(self) -> bool:
        return bool(self.alerts or self.errors)
