"""Exception types raised by the browsing pipeline."""

from __future__ import annotations

from enum import Enum


class BrowserError(Exception): ...


class CompileError(BrowserError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"cannot compile pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class ListingError(BrowserError):
    READ_FAILED = "read_failed"

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"could not read directory {path}: {cause}")
        self.kind = self.READ_FAILED
        self.path = path
        self.cause = cause


class DownloadErrorKind(str, Enum):
    OPEN_FAILED = "open_failed"
    STAT_FAILED = "stat_failed"
    NOT_A_FILE = "not_a_file"
    STREAM_FAILED = "stream_failed"


class DownloadError(BrowserError):
    def __init__(self, kind: DownloadErrorKind, path: str, cause: BaseException | str) -> None:
        super().__init__(f"{kind.value}: {path}: {cause}")
        self.kind = kind
        self.path = path
        self.cause = cause


class ConfigLoadError(BrowserError): ...


class ConfigSaveError(BrowserError): ...
