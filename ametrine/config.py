import json
import logging
import os
import pathlib
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .arguments import DEFAULT_USERNAME
from .downloader import DEFAULT_DOWNLOAD_TIMEOUT, DEFAULT_MAX_DOWNLOADS
from .errors import ConfigError
from .models import VersionManifest
from .net import DEFAULT_FETCH_TIMEOUT
from .replacer import replace_text

log = logging.getLogger(__name__)

CONFIG_ENV = 'AMETRINE_CONFIG'
CONFIG_FILENAME = 'launcher_config.json'
THISDIR_PLACEHOLDER = ':thisdir:'


@dataclass(frozen=True)
class LauncherConfig:
    version: str = 'release'
    data_root: Optional[pathlib.Path] = None
    cache_root: Optional[pathlib.Path] = None
    java: Optional[str] = None
    username: str = DEFAULT_USERNAME
    max_downloads: int = DEFAULT_MAX_DOWNLOADS
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    log_level: str = 'INFO'

    def resolve_version_id(self, manifest: VersionManifest) -> str:
        """'release' and 'snapshot' follow the manifest's latest pointers."""
        if self.version == 'release':
            return manifest.latest_release
        if self.version == 'snapshot':
            return manifest.latest_snapshot
        return self.version


def default_config_path() -> pathlib.Path:
    return pathlib.Path(os.getenv(CONFIG_ENV) or CONFIG_FILENAME)


def _check(key: str, value: Any, expected, positive: bool = False):
    if isinstance(value, bool) or not isinstance(value, expected):
        kind = expected.__name__ if isinstance(expected, type) else 'a number'
        raise ConfigError(f"Config key '{key}' must be {kind}, got {value!r}")
    if positive and value <= 0:
        raise ConfigError(f"Config key '{key}' must be positive, got {value!r}")


def parse_config(raw: Dict[str, Any]) -> LauncherConfig:
    known = {f.name for f in fields(LauncherConfig)}
    for key in raw:
        if key not in known:
            log.warning(f"Ignoring unknown config key '{key}'")
    values = {key: value for key, value in raw.items() if key in known and value is not None}

    for key in ('version', 'java', 'username', 'log_level', 'data_root', 'cache_root'):
        if key in values:
            _check(key, values[key], str)
    if 'max_downloads' in values:
        _check('max_downloads', values['max_downloads'], int, positive=True)
    for key in ('download_timeout', 'fetch_timeout'):
        if key in values:
            _check(key, values[key], (int, float), positive=True)
    if 'log_level' in values and not isinstance(logging.getLevelName(values['log_level'].upper()), int):
        raise ConfigError(f"Unknown log level {values['log_level']!r}")
    for key in ('data_root', 'cache_root'):
        if key in values:
            values[key] = pathlib.Path(values[key]).expanduser()

    return LauncherConfig(**values)


def load_config(path: Optional[pathlib.Path] = None) -> LauncherConfig:
    """Loads the launcher config; a missing file means all defaults."""
    path = path or default_config_path()
    if not path.is_file():
        log.debug(f"No config file at {path}, using defaults.")
        return LauncherConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Error parsing {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    raw = replace_text(raw, {THISDIR_PLACEHOLDER: str(path.resolve().parent)})
    return parse_config(raw)
