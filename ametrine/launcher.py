import asyncio
import logging
import pathlib
from dataclasses import dataclass
from typing import Optional

import aiofiles.os

from .arguments import LaunchCommand, build_launch_command
from .assets import AssetIndexFetcher
from .config import LauncherConfig
from .downloader import LIBRARIES_ENDPOINT, RESOURCES_ENDPOINT, DownloadOrchestrator
from .manifest import VERSION_MANIFEST_URL, ManifestFetcher
from .models import DownloadReport, PlatformDescriptor, VersionInfo
from .net import HttpClient
from .paths import Layout, get_cache_root, get_data_root
from .process import find_java
from .versions import VersionResolver

log = logging.getLogger(__name__)


@dataclass
class PreparedLaunch:
    version: VersionInfo
    layout: Layout
    report: DownloadReport
    command: LaunchCommand
    java: str


async def prepare_launch(
    config: LauncherConfig,
    platform: PlatformDescriptor,
    manifest_url: str = VERSION_MANIFEST_URL,
    libraries_endpoint: str = LIBRARIES_ENDPOINT,
    resources_endpoint: str = RESOURCES_ENDPOINT,
    show_progress: bool = True,
    cancel: Optional[asyncio.Event] = None,
) -> PreparedLaunch:
    """
    Runs every stage up to (not including) spawning the game.

    Download failures do not stop the pipeline; they are left in the report
    and the game is expected to fail on its own if a file is missing.
    """
    data_root = config.data_root or get_data_root()
    cache_root = config.cache_root or get_cache_root()
    log.info(f"Data directory: {data_root}, cache directory: {cache_root}")

    client = HttpClient(
        timeout=config.fetch_timeout,
        max_connections=config.max_downloads,
        cache_dir=cache_root / 'network',
    )
    async with client:
        manifest = await ManifestFetcher(client, manifest_url).fetch()
        version_id = config.resolve_version_id(manifest)

        version = await VersionResolver(client, platform).resolve(manifest, version_id)
        asset_index = await AssetIndexFetcher(client).fetch(version)

        layout = Layout(data_root=pathlib.Path(data_root), cache_root=pathlib.Path(cache_root), version_id=version.id)
        orchestrator = DownloadOrchestrator(
            client,
            max_downloads=config.max_downloads,
            timeout=config.download_timeout,
            libraries_endpoint=libraries_endpoint,
            resources_endpoint=resources_endpoint,
            show_progress=show_progress,
        )
        report = await orchestrator.run(version, asset_index, layout, cancel=cancel)

    for failure in report.failed:
        log.warning(f"Missing after download: {failure.task.local_path} ({failure.reason})")

    await asyncio.gather(
        aiofiles.os.makedirs(layout.natives_dir, exist_ok=True),
        aiofiles.os.makedirs(layout.instance_dir, exist_ok=True),
    )

    command = build_launch_command(version, layout, platform, username=config.username)
    java = find_java(version.java_major_version, config.java)
    return PreparedLaunch(version=version, layout=layout, report=report, command=command, java=java)
