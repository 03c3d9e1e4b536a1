import logging
from typing import Any, Dict

from .errors import FetchError
from .models import AssetIndex, AssetObject, VersionInfo
from .net import HttpClient

log = logging.getLogger(__name__)


def parse_asset_index(url: str, raw: bytes, data: Any) -> AssetIndex:
    if not isinstance(data, dict) or not isinstance(data.get('objects', {}), dict):
        raise FetchError(url, "asset index has no 'objects' mapping")

    objects: Dict[str, AssetObject] = {}
    for name, details in data.get('objects', {}).items():
        asset_hash = details.get('hash') if isinstance(details, dict) else None
        if not asset_hash:
            log.warning(f"Asset '{name}' is missing hash in index, skipping.")
            continue
        size = details.get('size')
        objects[name] = AssetObject(hash=asset_hash, size=size if isinstance(size, int) else 0)
    return AssetIndex(objects=objects, raw=raw)


class AssetIndexFetcher:
    def __init__(self, client: HttpClient):
        self.client = client

    async def fetch(self, version: VersionInfo) -> AssetIndex:
        url = version.asset_index_url
        log.info(f"Fetching asset index '{version.assets_id}' for {version.id}")
        raw, data = await self.client.fetch_json(url, prefer_cache=True)
        index = parse_asset_index(url, raw, data)
        log.info(f"Asset index '{version.assets_id}' lists {len(index.objects)} objects")
        return index
