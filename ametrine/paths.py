import os
import pathlib
import platform
from dataclasses import dataclass

APP_NAME = 'ametrine'


def get_data_root() -> pathlib.Path:
    """Per-user application data directory."""
    system = platform.system()
    if system == 'Windows':
        base = os.getenv('LOCALAPPDATA') or os.getenv('APPDATA') or os.path.expanduser('~')
    elif system == 'Darwin':
        base = os.path.expanduser('~/Library/Application Support')
    else:
        base = os.getenv('XDG_DATA_HOME') or os.path.expanduser('~/.local/share')
    return pathlib.Path(base) / APP_NAME


def get_cache_root() -> pathlib.Path:
    """Per-user cache directory."""
    system = platform.system()
    if system == 'Windows':
        base = os.path.join(os.getenv('LOCALAPPDATA') or os.path.expanduser('~'), APP_NAME, 'cache')
        return pathlib.Path(base)
    elif system == 'Darwin':
        base = os.path.expanduser('~/Library/Caches')
    else:
        base = os.getenv('XDG_CACHE_HOME') or os.path.expanduser('~/.cache')
    return pathlib.Path(base) / APP_NAME


@dataclass(frozen=True)
class Layout:
    """Local directory layout for one version, rooted at the data and cache roots."""
    data_root: pathlib.Path
    cache_root: pathlib.Path
    version_id: str

    @property
    def assets_root(self) -> pathlib.Path:
        return self.data_root / 'assets'

    @property
    def asset_objects_dir(self) -> pathlib.Path:
        return self.assets_root / 'objects'

    @property
    def asset_indexes_dir(self) -> pathlib.Path:
        return self.assets_root / 'indexes'

    def asset_index_path(self, assets_id: str) -> pathlib.Path:
        return self.asset_indexes_dir / f"{assets_id}.json"

    @property
    def libraries_root(self) -> pathlib.Path:
        return self.data_root / 'libraries'

    @property
    def version_root(self) -> pathlib.Path:
        return self.data_root / 'versions' / self.version_id

    @property
    def client_jar(self) -> pathlib.Path:
        return self.version_root / 'client.jar'

    @property
    def instance_dir(self) -> pathlib.Path:
        return self.data_root / 'instances' / self.version_id / 'minecraft'

    @property
    def natives_dir(self) -> pathlib.Path:
        return self.cache_root / 'natives'
