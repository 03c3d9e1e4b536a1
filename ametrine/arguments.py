from dataclasses import dataclass
from typing import List, Tuple

from . import __version__
from .models import PlatformDescriptor, VersionInfo
from .paths import Layout

LAUNCHER_BRAND = 'Ametrine'
LAUNCHER_VERSION = __version__
DEFAULT_USERNAME = 'Player'

# Windows drivers key their optimizations off this exact heap dump name.
WINDOWS_HEAP_DUMP_FLAG = '-XX:HeapDumpPath=MojangTricksIntelDriversForPerformance_javaw.exe_minecraft.exe.heapdump'


@dataclass(frozen=True)
class LaunchCommand:
    classpath: str
    arguments: Tuple[str, ...]


def classpath_separator(platform: PlatformDescriptor) -> str:
    return ';' if platform.name == 'windows' else ':'


def build_classpath(version: VersionInfo, layout: Layout, platform: PlatformDescriptor) -> str:
    """Libraries in resolved order, then the client jar last."""
    entries = [str(layout.libraries_root / lib) for lib in version.libraries]
    entries.append(str(layout.client_jar))
    return classpath_separator(platform).join(entries)


def platform_jvm_flags(platform: PlatformDescriptor) -> List[str]:
    flags = []
    if platform.name == 'osx':
        flags.append('-XstartOnFirstThread')
    if platform.name == 'windows':
        flags.append(WINDOWS_HEAP_DUMP_FLAG)
    if platform.architecture == 'x86':
        flags.append('-Xss1M')
    return flags


def build_launch_command(
    version: VersionInfo,
    layout: Layout,
    platform: PlatformDescriptor,
    username: str = DEFAULT_USERNAME,
) -> LaunchCommand:
    """
    Builds the runtime classpath and the full argument vector.

    No session arguments (uuid, client id, xuid, user type) are emitted and
    the access token is empty, which the game accepts as an offline session.
    """
    classpath = build_classpath(version, layout, platform)
    natives = str(layout.natives_dir)

    args = platform_jvm_flags(platform)
    args += [
        f"-Djava.library.path={natives}",
        f"-Djna.tmpdir={natives}",
        f"-Dorg.lwjgl.system.SharedLibraryExtractPath={natives}",
        f"-Dio.netty.native.workdir={natives}",
        f"-Dminecraft.launcher.brand={LAUNCHER_BRAND}",
        f"-Dminecraft.launcher.version={LAUNCHER_VERSION}",
        '-cp', classpath,
        version.main_class,
    ]
    args += [
        '--username', username,
        '--version', version.id,
        '--gameDir', str(layout.instance_dir),
        '--assetsDir', str(layout.assets_root),
        '--assetIndex', version.assets_id,
        '--accessToken', '',
        '--versionType', version.type,
    ]
    return LaunchCommand(classpath=classpath, arguments=tuple(args))
