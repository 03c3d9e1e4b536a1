import asyncio
import hashlib
import json
import logging
import pathlib
from typing import Any, Optional, Tuple

import aiohttp
import aiofiles
import aiofiles.os

from .errors import FetchError

log = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30
DEFAULT_MAX_CONNECTIONS = 16


async def file_exists(file_path: pathlib.Path) -> bool:
    """Checks if a regular file exists asynchronously."""
    try:
        stats = await aiofiles.os.stat(file_path)
        return stats.st_mode & 0o100000 != 0
    except OSError: # Includes FileNotFoundError
        return False


class HttpClient:
    """
    Shared aiohttp session for every stage of a launch.

    Documents fetched with prefer_cache=True are kept under cache_dir and
    served from there on later runs, keyed by the SHA1 of their URL.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        cache_dir: Optional[pathlib.Path] = None,
    ):
        self.timeout = timeout
        self.max_connections = max_connections
        self.cache_dir = cache_dir
        self._session: Optional[aiohttp.ClientSession] = None

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=aiohttp.TCPConnector(limit=self.max_connections),
            )
        return self._session

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        await self.get_session()
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def fetch_bytes(self, url: str) -> bytes:
        """GETs url and returns the body, raising FetchError on any failure."""
        if not url:
            raise FetchError(url, "no URL given")
        session = await self.get_session()
        try:
            async with session.get(url) as response:
                response.raise_for_status()
                return await response.read()
        except aiohttp.ClientResponseError as e:
            raise FetchError(url, f"HTTP {e.status} {e.message}") from e
        except aiohttp.ClientError as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise FetchError(url, f"timed out after {self.timeout}s") from e

    async def fetch_json(self, url: str, prefer_cache: bool = False) -> Tuple[bytes, Any]:
        """Returns both the raw body and its parsed JSON value."""
        if prefer_cache:
            cached = await self._read_cache(url)
            if cached is not None:
                try:
                    return cached, json.loads(cached)
                except ValueError:
                    log.warning(f"Discarding unreadable cached copy of {url}")

        raw = await self.fetch_bytes(url)
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise FetchError(url, f"invalid JSON: {e}") from e

        if prefer_cache:
            await self._write_cache(url, raw)
        return raw, data

    # --- Response cache ---

    def _cache_path(self, url: str) -> Optional[pathlib.Path]:
        if self.cache_dir is None:
            return None
        return self.cache_dir / hashlib.sha1(url.encode('utf-8')).hexdigest()

    async def _read_cache(self, url: str) -> Optional[bytes]:
        path = self._cache_path(url)
        if path is None or not await file_exists(path):
            return None
        try:
            async with aiofiles.open(path, 'rb') as f:
                data = await f.read()
        except OSError as e:
            log.warning(f"Could not read cached copy of {url}: {e}")
            return None
        log.debug(f"Using cached copy of {url}")
        return data

    async def _write_cache(self, url: str, raw: bytes):
        path = self._cache_path(url)
        if path is None:
            return
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, 'wb') as f:
                await f.write(raw)
        except OSError as e:
            log.warning(f"Could not cache {url} at {path}: {e}")
