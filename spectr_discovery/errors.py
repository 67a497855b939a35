"""Exception types raised by spectr root discovery.

Errors that prevent any meaningful answer (a bad start path, an invalid
override) propagate to the caller. Errors that only prevent exploring one
branch of the directory tree are absorbed by the walkers and logged.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class DiscoveryError(Exception):
    """Base class for all discovery failures."""


class PathResolutionError(DiscoveryError):
    """The start directory or override path could not be made absolute."""

    def __init__(self, path: Union[str, Path], reason: Optional[BaseException] = None):
        self.path = str(path)
        message = f"failed to get absolute path for {self.path!r}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)


class RootNotFound(DiscoveryError):
    """An explicit root does not contain the workspace marker directory."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = str(path) if path is not None else None
        super().__init__(message)


class DirectoryReadError(DiscoveryError):
    """A directory could not be listed during the downward walk.

    Built for logging only; the walker skips the directory and carries on.
    """

    def __init__(self, path: Union[str, Path], reason: Optional[BaseException] = None):
        self.path = str(path)
        self.reason = reason
        message = f"cannot read directory {self.path}"
        if reason is not None:
            message = f"{message}: {reason.strerror if isinstance(reason, OSError) and reason.strerror else reason}"
        super().__init__(message)


class ConfigError(DiscoveryError):
    """spectr.yaml could not be read, parsed or validated."""


class CatalogError(DiscoveryError):
    """A specs/ or changes/ directory exists but could not be listed."""
