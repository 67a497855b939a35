"""Version-control boundary detection.

A boundary is the nearest directory at or above a path that holds the VCS
marker (``.git``, a directory for normal clones or a file for linked
worktrees). Lookups are memoized in a ``BoundaryCache`` owned by the
detector.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from .models import VCS_MARKER

logger = logging.getLogger("spectr.discovery.boundary")

_MISSING = object()


class _ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class BoundaryCache:
    """Memo table mapping a directory to its boundary (or None).

    Never evicts; the boundary of a fixed path does not change while a
    process runs. ``clear()`` exists for tests and long-lived hosts.
    """

    def __init__(self):
        self._entries: Dict[str, Optional[Path]] = {}
        self._lock = _ReadWriteLock()

    def lookup(self, key: str) -> Tuple[bool, Optional[Path]]:
        """Return ``(hit, boundary)``."""
        with self._lock.read():
            value = self._entries.get(key, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def store(self, key: str, boundary: Optional[Path]) -> None:
        with self._lock.write():
            self._entries[key] = boundary

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return str(key) in self._entries


def has_marker_at_level(path: Union[str, Path], marker: str = VCS_MARKER) -> bool:
    """True when ``marker`` exists directly inside ``path`` (dir or file)."""
    try:
        os.stat(os.path.join(path, marker))
    except OSError:
        return False
    return True


class BoundaryDetector:
    """Find the nearest enclosing version-control boundary of a path."""

    def __init__(self, cache: Optional[BoundaryCache] = None, vcs_marker: str = VCS_MARKER):
        self.cache = cache if cache is not None else BoundaryCache()
        self.vcs_marker = vcs_marker

    def find_boundary(self, path: Union[str, Path]) -> Optional[Path]:
        """Return the closest ancestor of ``path`` (inclusive) holding the marker."""
        key = str(path)
        hit, boundary = self.cache.lookup(key)
        if hit:
            return boundary

        boundary = self._find_boundary_uncached(Path(path))
        self.cache.store(key, boundary)
        return boundary

    def has_marker_at_level(self, path: Union[str, Path]) -> bool:
        return has_marker_at_level(path, self.vcs_marker)

    def _find_boundary_uncached(self, start: Path) -> Optional[Path]:
        current = start
        while True:
            if has_marker_at_level(current, self.vcs_marker):
                logger.debug("Boundary for %s is %s", start, current)
                return current
            parent = current.parent
            if parent == current:
                return None
            current = parent
