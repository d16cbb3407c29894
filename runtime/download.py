# dirbrowse/runtime/download.py
# Purpose: Stream one approved file to the client as an attachment.
from __future__ import annotations

import asyncio
import logging
import os
import stat as stat_mod
from dataclasses import dataclass, field
from typing import Any, Awaitable, BinaryIO, Callable, Dict
from urllib.parse import quote

from runtime.errors import DownloadError, DownloadErrorKind
from runtime.navigator import join_path

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

Writer = Callable[[bytes], Awaitable[Any]]


def _printable(name: str) -> str:
    text = os.fsencode(name).decode("utf-8", "replace")
    return "".join(ch if ch.isprintable() else "_" for ch in text)


def content_disposition(name: str) -> str:
    """Attachment header value; non-ASCII names also get an RFC 5987 ``filename*``."""
    text = _printable(name)
    fallback = text.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    value = f'attachment; filename="{fallback}"'
    if not text.isascii():
        value += f"; filename*=UTF-8''{quote(text, safe='')}"
    return value


@dataclass
class Download:
    """An opened file plus the response metadata announcing it."""

    path: str
    name: str
    size: int
    handle: BinaryIO = field(repr=False)
    chunk_size: int = CHUNK_SIZE

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Disposition": content_disposition(self.name),
            "Content-Type": "application/octet-stream",
            "Content-Length": str(self.size),
        }

    def close(self) -> None:
        if not self.handle.closed:
            self.handle.close()

    async def copy_to(self, write: Writer) -> int:
        """Copy the whole file through ``write``; the handle is always closed.

        Returns the number of bytes sent. Client disconnects and read errors
        surface as ``DownloadError(STREAM_FAILED)``.
        """
        loop = asyncio.get_running_loop()
        sent = 0
        try:
            while True:
                chunk = await loop.run_in_executor(None, self.handle.read, self.chunk_size)
                if not chunk:
                    return sent
                await write(chunk)
                sent += len(chunk)
        except (OSError, RuntimeError) as exc:
            # ConnectionResetError is an OSError; aiohttp raises RuntimeError
            # when writing to a closed transport
            raise DownloadError(DownloadErrorKind.STREAM_FAILED, self.path, exc) from exc
        finally:
            self.close()


def open_download(directory: str, file_id: str) -> Download:
    """Open ``file_id`` inside ``directory`` for download.

    The caller checks the access policy and the download switch first.
    """
    file_path = join_path(directory, file_id)
    # opening a fifo for reading would block until a writer shows up
    if os.path.exists(file_path) and not os.path.isfile(file_path):
        raise DownloadError(DownloadErrorKind.NOT_A_FILE, file_path, "not a regular file")
    try:
        handle = open(file_path, "rb")
    except (OSError, ValueError) as exc:
        raise DownloadError(DownloadErrorKind.OPEN_FAILED, file_path, exc) from exc
    try:
        info = os.fstat(handle.fileno())
    except OSError as exc:
        handle.close()
        raise DownloadError(DownloadErrorKind.STAT_FAILED, file_path, exc) from exc
    if not stat_mod.S_ISREG(info.st_mode):
        handle.close()
        raise DownloadError(DownloadErrorKind.NOT_A_FILE, file_path, "not a regular file")
    return Download(
        path=file_path,
        name=os.path.basename(file_path) or file_id,
        size=info.st_size,
        handle=handle,
    )


async def open_download_async(directory: str, file_id: str) -> Download:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, open_download, directory, file_id)
