import logging
from typing import Any, Dict, List, Optional

from .errors import MalformedVersion, UnknownVersion
from .models import LibraryEntry, PlatformDescriptor, RuleAction, RuleClause, VersionInfo, VersionManifest
from .net import HttpClient
from .rules import is_included

log = logging.getLogger(__name__)


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ''


def parse_rule(rule: Any) -> Optional[RuleClause]:
    if not isinstance(rule, dict):
        return None
    try:
        action = RuleAction(rule.get('action'))
    except ValueError:
        log.warning(f"Unknown rule action: {rule.get('action')!r}. Ignoring rule.")
        return None
    os_rule = _section(rule, 'os')
    return RuleClause(
        action=action,
        os_name=os_rule.get('name'),
        os_arch=os_rule.get('arch'),
    )


def parse_library(lib: Any) -> Optional[LibraryEntry]:
    """Returns None for entries without a main artifact (e.g. natives-only entries)."""
    if not isinstance(lib, dict):
        return None
    path = _string(_section(_section(lib, 'downloads'), 'artifact'), 'path')
    if not path:
        log.debug(f"Library {lib.get('name', 'N/A')} has no artifact path, skipping.")
        return None
    rules = lib.get('rules')
    clauses = [parse_rule(rule) for rule in rules] if isinstance(rules, list) else []
    return LibraryEntry(relative_path=path, rules=tuple(c for c in clauses if c is not None))


def parse_version(data: Any, platform: PlatformDescriptor) -> VersionInfo:
    """
    Maps a version document onto a VersionInfo for the given platform.

    id, mainClass and downloads.client.url are required; every other field
    falls back to an empty value. Libraries keep their document order.
    """
    if not isinstance(data, dict):
        raise MalformedVersion(None, 'id')

    version_id = _string(data, 'id')
    if not version_id.strip():
        raise MalformedVersion(None, 'id')
    main_class = _string(data, 'mainClass')
    if not main_class.strip():
        raise MalformedVersion(version_id, 'mainClass')
    client_jar_url = _string(_section(_section(data, 'downloads'), 'client'), 'url')
    if not client_jar_url:
        raise MalformedVersion(version_id, 'downloads.client.url')

    java_major = _section(data, 'javaVersion').get('majorVersion')

    libraries: List[str] = []
    raw_libraries = data.get('libraries')
    for lib in raw_libraries if isinstance(raw_libraries, list) else []:
        entry = parse_library(lib)
        if entry is None:
            continue
        if not is_included(entry.rules, platform):
            log.debug(f"Skipping library due to rules: {entry.relative_path}")
            continue
        libraries.append(entry.relative_path)

    return VersionInfo(
        id=version_id,
        type=_string(data, 'type'),
        main_class=main_class,
        assets_id=_string(data, 'assets'),
        asset_index_url=_string(_section(data, 'assetIndex'), 'url'),
        client_jar_url=client_jar_url,
        java_major_version=java_major if isinstance(java_major, int) else 0,
        libraries=tuple(libraries),
    )


class VersionResolver:
    def __init__(self, client: HttpClient, platform: PlatformDescriptor):
        self.client = client
        self.platform = platform

    async def resolve(self, manifest: VersionManifest, version_id: str) -> VersionInfo:
        url = manifest.version_urls.get(version_id)
        if url is None:
            raise UnknownVersion(version_id)

        log.info(f"Fetching version document for {version_id}")
        _, data = await self.client.fetch_json(url, prefer_cache=True)
        try:
            version = parse_version(data, self.platform)
        except MalformedVersion:
            log.error(f"Version document at {url} cannot be launched")
            raise
        log.info(f"Resolved {version.id} ({version.type or 'unknown type'}): "
                 f"{len(version.libraries)} libraries for {self.platform.name}/{self.platform.architecture}")
        return version
