from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PathRule(BaseModel):
    """A labelled path mask; ``*`` matches any run of characters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    pattern: str = Field(default="", alias="path")


class AccessDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    avoided: bool = False
    allowed: bool = True
    reason: Optional[str] = None

    @property
    def accessible(self) -> bool:
        return not self.avoided and self.allowed
