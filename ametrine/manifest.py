import logging
from typing import Any, Dict

from .errors import FetchError
from .models import VersionManifest
from .net import HttpClient

log = logging.getLogger(__name__)

VERSION_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"


def parse_manifest(url: str, data: Any) -> VersionManifest:
    """Maps the version_manifest_v2 document onto a VersionManifest."""
    if not isinstance(data, dict) or not isinstance(data.get('versions'), list):
        raise FetchError(url, "manifest has no 'versions' list")

    latest = data.get('latest') or {}
    version_urls: Dict[str, str] = {}
    for entry in data['versions']:
        if not isinstance(entry, dict) or not entry.get('id') or not entry.get('url'):
            log.warning(f"Ignoring malformed manifest entry: {entry!r}")
            continue
        version_urls[entry['id']] = entry['url']

    return VersionManifest(
        latest_release=latest.get('release', ''),
        latest_snapshot=latest.get('snapshot', ''),
        version_urls=version_urls,
    )


class ManifestFetcher:
    def __init__(self, client: HttpClient, url: str = VERSION_MANIFEST_URL):
        self.client = client
        self.url = url

    async def fetch(self) -> VersionManifest:
        log.info(f"Fetching version manifest from {self.url}")
        _, data = await self.client.fetch_json(self.url)
        manifest = parse_manifest(self.url, data)
        log.info(f"Manifest lists {len(manifest.version_urls)} versions "
                 f"(latest release {manifest.latest_release}, latest snapshot {manifest.latest_snapshot})")
        return manifest
