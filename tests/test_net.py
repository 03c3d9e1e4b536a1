"""Tests for net — shared HTTP client and document cache."""

import pytest

from ametrine.errors import FetchError
from ametrine.net import HttpClient, file_exists


@pytest.mark.asyncio
async def test_file_exists(tmp_path):
    (tmp_path / "f").write_bytes(b"")
    assert await file_exists(tmp_path / "f")
    assert not await file_exists(tmp_path)
    assert not await file_exists(tmp_path / "missing")


@pytest.mark.asyncio
async def test_prefer_cache_round_trip(upstream, tmp_path):
    upstream.files["/doc.json"] = b'{"a":  1}'
    async with HttpClient(cache_dir=tmp_path) as client:
        first = await client.fetch_json(upstream.url("/doc.json"), prefer_cache=True)
        second = await client.fetch_json(upstream.url("/doc.json"), prefer_cache=True)
    assert first == second == (b'{"a":  1}', {"a": 1})
    assert upstream.hits["/doc.json"] == 1


@pytest.mark.asyncio
async def test_unreadable_cache_entry_is_refetched(upstream, tmp_path):
    upstream.files["/doc.json"] = b'{"a": 1}'
    url = upstream.url("/doc.json")
    async with HttpClient(cache_dir=tmp_path) as client:
        await client.fetch_json(url, prefer_cache=True)
        for entry in tmp_path.iterdir():
            entry.write_bytes(b"garbage")
        raw, data = await client.fetch_json(url, prefer_cache=True)
    assert data == {"a": 1}
    assert upstream.hits["/doc.json"] == 2


@pytest.mark.asyncio
async def test_invalid_json_is_not_cached(upstream, tmp_path):
    upstream.files["/doc.json"] = b"<html>"
    async with HttpClient(cache_dir=tmp_path) as client:
        with pytest.raises(FetchError):
            await client.fetch_json(upstream.url("/doc.json"), prefer_cache=True)
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_session_is_recreated_after_close():
    client = HttpClient()
    session = await client.get_session()
    await client.close()
    assert session.closed
    assert not (await client.get_session()).closed
    await client.close()
