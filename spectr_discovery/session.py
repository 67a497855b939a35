"""Per-process memo of the roots seen from the current working directory."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .engine import RootDiscovery
from .errors import DiscoveryError, PathResolutionError, RootNotFound
from .models import WorkspaceRoot

NO_ROOT_MESSAGE = "no spectr directory found\nHint: Run 'spectr init' to initialize Spectr"


class DiscoverySession:
    """Cache one discovery result (or error) per working directory.

    A different cwd invalidates the cached entry. A session is meant to
    live for one command or tool call; long-lived hosts create a new one
    per call or call ``reset()``.
    """

    def __init__(self, engine: Optional[RootDiscovery] = None):
        self.engine = engine or RootDiscovery()
        self._lock = threading.Lock()
        self._cwd: Optional[str] = None
        self._roots: Optional[List[WorkspaceRoot]] = None
        self._error: Optional[DiscoveryError] = None

    def roots(self, cwd: Union[str, Path, None] = None) -> List[WorkspaceRoot]:
        """Discovered roots for ``cwd`` (the process cwd by default)."""
        if cwd is None:
            try:
                cwd = os.getcwd()
            except OSError as e:
                raise PathResolutionError(".", e) from e
        key = str(cwd)

        with self._lock:
            if self._cwd != key:
                self._cwd = key
                self._roots = None
                self._error = None

            if self._error is not None:
                raise self._error
            if self._roots is not None:
                return list(self._roots)

            try:
                self._roots = self.engine.find_roots(key)
            except DiscoveryError as e:
                self._error = e
                raise
            return list(self._roots)

    def single_root(self, cwd: Union[str, Path, None] = None) -> WorkspaceRoot:
        """The closest root; ``RootNotFound`` when there is none."""
        roots = self.roots(cwd)
        if not roots:
            raise RootNotFound(NO_ROOT_MESSAGE)
        return roots[0]

    def reset(self) -> None:
        with self._lock:
            self._cwd = None
            self._roots = None
            self._error = None


def has_multiple_roots(roots: Sequence[WorkspaceRoot]) -> bool:
    return len(roots) > 1
