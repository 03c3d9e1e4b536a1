import asyncio
import logging
import pathlib
from typing import Dict, List, Optional

import aiohttp
import aiofiles
import aiofiles.os
from tqdm.asyncio import tqdm

from .errors import DownloadCancelled, DownloadTaskFailure, PersistenceError
from .models import AssetIndex, DownloadReport, DownloadTask, VersionInfo
from .net import HttpClient, file_exists
from .paths import Layout

log = logging.getLogger(__name__)

LIBRARIES_ENDPOINT = "https://libraries.minecraft.net/"
RESOURCES_ENDPOINT = "https://resources.download.minecraft.net/"

DEFAULT_MAX_DOWNLOADS = 16
DEFAULT_DOWNLOAD_TIMEOUT = 60
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _join_url(endpoint: str, path: str) -> str:
    return endpoint.rstrip('/') + '/' + path.lstrip('/')


def plan_downloads(
    version: VersionInfo,
    asset_index: AssetIndex,
    layout: Layout,
    libraries_endpoint: str = LIBRARIES_ENDPOINT,
    resources_endpoint: str = RESOURCES_ENDPOINT,
) -> List[DownloadTask]:
    """Every artifact a version needs, at most one task per local path."""
    tasks: Dict[pathlib.Path, DownloadTask] = {}

    def add(url: str, path: pathlib.Path):
        tasks.setdefault(path, DownloadTask(remote_url=url, local_path=path))

    for lib in version.libraries:
        add(_join_url(libraries_endpoint, lib), layout.libraries_root / lib)

    for asset in asset_index.objects.values():
        entry = f"{asset.hash[:2]}/{asset.hash}"
        add(_join_url(resources_endpoint, entry), layout.asset_objects_dir / asset.hash[:2] / asset.hash)

    add(version.client_jar_url, layout.client_jar)
    return list(tasks.values())


async def _discard(path: pathlib.Path):
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning(f"Could not remove partial download {path}: {e}")


async def _stop(workers: List[asyncio.Future]):
    for worker in workers:
        worker.cancel()
    await asyncio.gather(*workers, return_exceptions=True)


class DownloadOrchestrator:
    """
    Turns a resolved version into a complete local file set.

    Files that already exist are never fetched again (presence is the whole
    cache policy). The rest are downloaded by at most max_downloads
    concurrent workers; a failing task is recorded and never retried, and
    does not stop its siblings.
    """

    def __init__(
        self,
        client: HttpClient,
        max_downloads: int = DEFAULT_MAX_DOWNLOADS,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
        libraries_endpoint: str = LIBRARIES_ENDPOINT,
        resources_endpoint: str = RESOURCES_ENDPOINT,
        show_progress: bool = True,
    ):
        if max_downloads < 1:
            raise ValueError("max_downloads must be at least 1")
        self.client = client
        self.max_downloads = max_downloads
        self.timeout = timeout
        self.libraries_endpoint = libraries_endpoint
        self.resources_endpoint = resources_endpoint
        self.show_progress = show_progress

    async def run(
        self,
        version: VersionInfo,
        asset_index: AssetIndex,
        layout: Layout,
        cancel: Optional[asyncio.Event] = None,
    ) -> DownloadReport:
        tasks = plan_downloads(version, asset_index, layout, self.libraries_endpoint, self.resources_endpoint)
        report = DownloadReport(planned=len(tasks))

        present = await asyncio.gather(*(file_exists(task.local_path) for task in tasks))
        pending = []
        for task, exists in zip(tasks, present):
            if exists:
                report.skipped.append(task)
            else:
                pending.append(task)
        log.info(f"{len(tasks)} files required for {version.id}: "
                 f"{len(report.skipped)} already present, {len(pending)} to download")

        if pending:
            await self._download_all(pending, report, cancel)

        report.index_error = await self.persist_asset_index(version, asset_index, layout)

        if report.failed:
            log.warning(f"{len(report.failed)} of {report.scheduled} downloads failed")
        else:
            log.info('Download check complete.')
        return report

    async def _download_all(self, pending: List[DownloadTask], report: DownloadReport, cancel: Optional[asyncio.Event]):
        semaphore = asyncio.Semaphore(self.max_downloads)
        pbar = tqdm(total=len(pending), desc="Downloads", unit="file", leave=False, disable=not self.show_progress)
        try:
            workers = [
                asyncio.ensure_future(self._settle(task, report, semaphore, pbar, cancel))
                for task in pending
            ]
            everything = asyncio.gather(*workers, return_exceptions=True)
            try:
                if cancel is None:
                    await everything
                    return

                cancelled = asyncio.ensure_future(cancel.wait())
                try:
                    await asyncio.wait({everything, cancelled}, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    cancelled.cancel()
            except asyncio.CancelledError:
                log.warning("Download run cancelled, stopping remaining tasks")
                report.cancelled = True
                await _stop(workers)
                raise
            if not everything.done():
                log.warning("Download cancelled, stopping remaining tasks")
                report.cancelled = True
                await _stop(workers)
        finally:
            pbar.close()

    async def _settle(
        self,
        task: DownloadTask,
        report: DownloadReport,
        semaphore: asyncio.Semaphore,
        pbar: tqdm,
        cancel: Optional[asyncio.Event],
    ):
        try:
            async with semaphore:
                if cancel is not None and cancel.is_set():
                    raise DownloadCancelled(task, "cancelled before start")
                await self.download(task)
        except DownloadTaskFailure as failure:
            report.failed.append(failure)
            log.error(f"Error downloading {failure}")
        except asyncio.CancelledError:
            report.failed.append(DownloadCancelled(task, "cancelled"))
            raise
        else:
            report.succeeded.append(task)
        finally:
            pbar.update(1)
            settled = len(report.succeeded) + len(report.failed)
            log.debug(f"{task.local_path} ({report.scheduled - settled} left)")

    def _stall_timeout(self) -> aiohttp.ClientTimeout:
        """No limit on a whole transfer, only on connecting and on each read."""
        return aiohttp.ClientTimeout(total=None, sock_connect=self.timeout, sock_read=self.timeout)

    async def download(self, task: DownloadTask):
        """Fetches one task into its local path, raising DownloadTaskFailure on error."""
        part = task.local_path.with_name(task.local_path.name + '.part')
        try:
            await aiofiles.os.makedirs(task.local_path.parent, exist_ok=True)
        except OSError as e:
            raise PersistenceError(task, f"cannot create directory: {e}") from e

        session = await self.client.get_session()
        try:
            async with session.get(task.remote_url, timeout=self._stall_timeout()) as response:
                response.raise_for_status()
                async with aiofiles.open(part, 'wb') as f:
                    async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                        await f.write(chunk)
            await aiofiles.os.replace(part, task.local_path)
        except aiohttp.ClientResponseError as e:
            raise DownloadTaskFailure(task, f"HTTP {e.status} {e.message}") from e
        except aiohttp.ServerTimeoutError as e:
            raise DownloadTaskFailure(task, f"stalled for more than {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise DownloadTaskFailure(task, str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise DownloadTaskFailure(task, f"stalled for more than {self.timeout}s") from e
        except OSError as e:
            raise PersistenceError(task, str(e)) from e
        finally:
            if await file_exists(part):
                await _discard(part)

    async def persist_asset_index(
        self, version: VersionInfo, asset_index: AssetIndex, layout: Layout
    ) -> Optional[PersistenceError]:
        """Writes the asset index bytes exactly as fetched; always overwrites."""
        path = layout.asset_index_path(version.assets_id)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, 'wb') as f:
                await f.write(asset_index.raw)
        except OSError as e:
            failure = PersistenceError(DownloadTask(remote_url=version.asset_index_url, local_path=path), str(e))
            failure.__cause__ = e
            log.error(f"Failed to write asset index: {failure}")
            return failure
        log.debug(f"Wrote asset index to {path}")
        return None
