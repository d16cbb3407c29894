import os

import pytest

from runtime.download import content_disposition, open_download, open_download_async
from runtime.errors import DownloadError, DownloadErrorKind


def test_headers_announce_attachment(tree):
    download = open_download(str(tree), "a.txt")
    try:
        assert download.name == "a.txt"
        assert download.size == 20
        assert download.headers == {
            "Content-Disposition": 'attachment; filename="a.txt"',
            "Content-Type": "application/octet-stream",
            "Content-Length": "20",
        }
    finally:
        download.close()


def test_missing_file_is_open_failure(tree):
    with pytest.raises(DownloadError) as info:
        open_download(str(tree), "nope.bin")
    assert info.value.kind is DownloadErrorKind.OPEN_FAILED


def test_directory_is_not_downloadable(tree):
    with pytest.raises(DownloadError) as info:
        open_download(str(tree), "sub")
    assert info.value.kind is DownloadErrorKind.NOT_A_FILE


@pytest.mark.asyncio
async def test_copy_streams_whole_file_and_closes(tree):
    download = await open_download_async(str(tree), "b.txt")
    download.chunk_size = 3
    received = []

    async def write(chunk: bytes) -> None:
        received.append(chunk)

    sent = await download.copy_to(write)
    assert sent == 10
    assert b"".join(received) == b"x" * 10
    assert len(received) == 4
    assert download.handle.closed


@pytest.mark.asyncio
async def test_write_failure_is_stream_error(tree):
    download = await open_download_async(str(tree), "a.txt")
    download.chunk_size = 4

    async def write(chunk: bytes) -> None:
        raise ConnectionResetError("client went away")

    with pytest.raises(DownloadError) as info:
        await download.copy_to(write)
    assert info.value.kind is DownloadErrorKind.STREAM_FAILED
    assert download.handle.closed


def test_null_byte_in_id_is_open_failure(tree):
    with pytest.raises(DownloadError) as info:
        open_download(str(tree), "a\x00b")
    assert info.value.kind is DownloadErrorKind.OPEN_FAILED


def test_nested_id_suggests_base_name(tree):
    download = open_download(str(tree), "sub/inner.txt")
    try:
        assert download.headers["Content-Disposition"] == 'attachment; filename="inner.txt"'
    finally:
        download.close()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("x\ny.txt", 'attachment; filename="x_y.txt"'),
        ('say "hi".txt', 'attachment; filename="say \\"hi\\".txt"'),
        ("café.txt", "attachment; filename=\"caf?.txt\"; filename*=UTF-8''caf%C3%A9.txt"),
        (
            os.fsdecode(b"bad\xff.txt"),
            "attachment; filename=\"bad?.txt\"; filename*=UTF-8''bad%EF%BF%BD.txt",
        ),
    ],
)
def test_content_disposition_is_header_safe(name, expected):
    assert content_disposition(name) == expected
