"""
Test suite for streaming downloads.
"""

import aiohttp
import pytest

from conftest import PNG_BYTES
from vidluxe.media.download import download_file


async def test_download_writes_body(tmp_path, file_server):
    output = await download_file(str(file_server.make_url("/files/a.png")), tmp_path / "a.png")

    assert output.read_bytes() == PNG_BYTES


async def test_truncated_body_leaves_no_file(tmp_path, file_server):
    with pytest.raises(aiohttp.ClientError):
        await download_file(str(file_server.make_url("/truncated.png")), tmp_path / "t.png")

    assert list(tmp_path.iterdir()) == []


async def test_http_error_leaves_no_file(tmp_path, file_server):
    with pytest.raises(aiohttp.ClientResponseError):
        await download_file(str(file_server.make_url("/missing.png")), tmp_path / "m.png")

    assert list(tmp_path.iterdir()) == []


async def test_shared_session_stays_open(tmp_path, file_server):
    async with aiohttp.ClientSession() as session:
        await download_file(str(file_server.make_url("/files/a.png")), tmp_path / "a.png", session=session)
        await download_file(str(file_server.make_url("/files/b.png")), tmp_path / "b.png", session=session)
        assert not session.closed

    assert sorted(p.name for p in tmp_path.iterdir()) == ["a.png", "b.png"]
