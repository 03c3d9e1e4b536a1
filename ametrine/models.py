import pathlib
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from .errors import DownloadTaskFailure


class RuleAction(Enum):
    ALLOW = "allow"
    DISALLOW = "disallow"


@dataclass(frozen=True)
class PlatformDescriptor:
    """
    The host platform as the upstream rule documents name it.

    name is one of 'windows', 'osx', 'linux'; architecture is one of
    'x64', 'x86', 'arm64', 'arm32'.
    """
    name: str
    architecture: str


@dataclass(frozen=True)
class RuleClause:
    action: RuleAction
    os_name: Optional[str] = None
    os_arch: Optional[str] = None


@dataclass(frozen=True)
class LibraryEntry:
    relative_path: str
    rules: Tuple[RuleClause, ...] = ()


@dataclass(frozen=True)
class VersionManifest:
    latest_release: str
    latest_snapshot: str
    version_urls: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "version_urls", MappingProxyType(dict(self.version_urls)))


@dataclass(frozen=True)
class VersionInfo:
    id: str
    type: str
    main_class: str
    assets_id: str
    asset_index_url: str
    client_jar_url: str
    java_major_version: int
    libraries: Tuple[str, ...]

    def __post_init__(self):
        if not self.id.strip():
            raise ValueError("ID must not be empty")
        if not self.main_class.strip():
            raise ValueError("Main class must not be empty")
        if not isinstance(self.java_major_version, int):
            raise ValueError("Java major version must be an integer")


@dataclass(frozen=True)
class AssetObject:
    hash: str
    size: int


@dataclass(frozen=True)
class AssetIndex:
    """Parsed asset index plus the exact bytes it was parsed from."""
    objects: Mapping[str, AssetObject]
    raw: bytes

    def __post_init__(self):
        object.__setattr__(self, "objects", MappingProxyType(dict(self.objects)))


@dataclass(frozen=True)
class DownloadTask:
    remote_url: str
    local_path: pathlib.Path


@dataclass
class DownloadReport:
    """Outcome of one orchestration run."""
    planned: int = 0
    skipped: List[DownloadTask] = field(default_factory=list)
    succeeded: List[DownloadTask] = field(default_factory=list)
    failed: List[DownloadTaskFailure] = field(default_factory=list)
    cancelled: bool = False
    index_error: Optional[DownloadTaskFailure] = None

    @property
    def scheduled(self) -> int:
        return self.planned - len(self.skipped)

    @property
    def ok(self) -> bool:
        return not self.failed and self.index_error is None
