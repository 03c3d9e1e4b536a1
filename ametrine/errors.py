from typing import Optional


class LauncherError(Exception):
    """Base class for every error raised by the launcher."""


class ConfigError(LauncherError):
    pass


class FetchError(LauncherError):
    """A manifest, version or asset index document could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class UnknownVersion(LauncherError):
    def __init__(self, version_id: str):
        super().__init__(f"Version '{version_id}' is not listed in the version manifest")
        self.version_id = version_id


class MalformedVersion(LauncherError):
    def __init__(self, version_id: Optional[str], field: str):
        super().__init__(f"Version document for '{version_id or 'unknown'}' is missing required field '{field}'")
        self.version_id = version_id
        self.field = field


class DownloadTaskFailure(LauncherError):
    """
    A single artifact download failed.

    These are collected into a DownloadReport instead of being raised out of
    the orchestrator. The underlying exception is available as __cause__.
    """

    def __init__(self, task, reason: str):
        super().__init__(f"{task.remote_url} -> {task.local_path}: {reason}")
        self.task = task
        self.reason = reason


class PersistenceError(DownloadTaskFailure):
    """Writing a downloaded body (or the asset index) to disk failed."""


class DownloadCancelled(DownloadTaskFailure):
    pass
