import asyncio
import logging
import os
import pathlib
import shlex
import shutil
from typing import Optional, Sequence

log = logging.getLogger(__name__)

JVM_PATH_TEMPLATE = '/usr/lib/jvm/java-{major}-openjdk/bin/java'


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def find_java(major_version: int, override: Optional[str] = None) -> str:
    """
    Picks the runtime executable for a version.

    An explicit override always wins. Otherwise the distribution JVM for the
    required major version is used when installed, then `java` on PATH.
    """
    if override:
        return override
    if major_version:
        candidate = JVM_PATH_TEMPLATE.format(major=major_version)
        if _is_executable(candidate):
            return candidate
        log.warning(f"Java {major_version} not found at {candidate}, falling back to PATH")
    return shutil.which('java') or 'java'


async def launch(
    binary: str,
    arguments: Sequence[str],
    cwd: Optional[pathlib.Path] = None,
) -> asyncio.subprocess.Process:
    """
    Starts the runtime with stdout/stderr forwarded to ours.

    The process is returned as soon as it is spawned; nothing here waits for
    it or looks at its exit code.
    """
    log.info(f"Launching {binary}")
    log.debug(f"Launch command: {shlex.join([binary, *arguments])}")
    process = await asyncio.create_subprocess_exec(
        binary,
        *arguments,
        stdout=None, # inherit ours
        stderr=None,
        cwd=str(cwd) if cwd is not None else None,
    )
    log.info(f"Minecraft process started (PID: {process.pid}).")
    return process
