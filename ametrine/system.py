import logging
import platform

from .models import PlatformDescriptor

log = logging.getLogger(__name__)


def get_os_name() -> str:
    """Gets the current OS name ('windows', 'osx', 'linux')."""
    system = platform.system()
    if system == 'Windows': return 'windows'
    elif system == 'Darwin': return 'osx'
    elif system == 'Linux': return 'linux'
    else: raise OSError(f"Unsupported platform: {system}")


def get_arch_name() -> str:
    """Gets the current architecture name ('x64', 'x86', 'arm64', 'arm32')."""
    machine = platform.machine().lower()
    if machine in ['amd64', 'x86_64']: return 'x64'
    elif machine in ['i386', 'i686', 'x86']: return 'x86'
    elif machine in ['arm64', 'aarch64']: return 'arm64'
    elif machine.startswith('arm') and '64' not in machine: return 'arm32'
    else:
        log.warning(f"Unsupported architecture: {platform.machine()}. Falling back to 'x64'. This might cause issues.")
        return 'x64'


def detect_platform() -> PlatformDescriptor:
    """Resolves the host platform once; callers pass the result along explicitly."""
    return PlatformDescriptor(name=get_os_name(), architecture=get_arch_name())
