"""Upward and downward search passes.

Both passes have the same shape: they take a start directory and return
the workspace roots they found, in the order they found them. Both build
their results through a ``RootEmitter`` so the marker test, the gating
rule and the relative-path bookkeeping live in one place.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from .boundary import BoundaryDetector
from .config import DiscoveryConfig
from .errors import DirectoryReadError, PathResolutionError
from .models import WorkspaceRoot, relative_display_path
from .skip import SkipPolicy
from .spectr_logging import log_directory_skipped, log_root_found

logger = logging.getLogger("spectr.discovery.walkers")

_UNSET = object()


class SearchPass(Protocol):
    """A search strategy: start directory in, roots out."""

    def __call__(self, start_dir: Union[str, Path]) -> List[WorkspaceRoot]:
        ...


def absolute_path(path: Union[str, Path]) -> Path:
    """Absolute, normalized path; symlinks are left alone."""
    try:
        return Path(os.path.abspath(os.fspath(path)))
    except (OSError, TypeError, ValueError) as e:
        raise PathResolutionError(path, e) from e


class RootEmitter:
    """Turn candidate directories into ``WorkspaceRoot`` values."""

    def __init__(self, detector: BoundaryDetector, config: DiscoveryConfig):
        self.detector = detector
        self.config = config

    def has_marker(self, directory: Union[str, Path]) -> bool:
        return os.path.isdir(os.path.join(directory, self.config.root_dir))

    def emit(
        self,
        directory: Path,
        display_base: Path,
        *,
        source: str,
        boundary: object = _UNSET,
        gated: bool = False,
    ) -> Optional[WorkspaceRoot]:
        """Build a root for ``directory`` or return None when it is not one.

        ``gated`` applies the same-level VCS marker rule when the config
        asks for it.
        """
        if not self.has_marker(directory):
            return None

        if gated and self.config.require_vcs_marker and not self.detector.has_marker_at_level(directory):
            logger.debug("Ignoring %s: no %s next to %s/", directory, self.config.vcs_marker, self.config.root_dir)
            return None

        if boundary is _UNSET:
            boundary = self.detector.find_boundary(directory)

        root = WorkspaceRoot(
            path=directory,
            relative_to=relative_display_path(directory, display_base),
            boundary_root=boundary,
            marker=self.config.root_dir,
        )
        log_root_found(directory, source, relative_to=root.relative_to)
        return root


def walk_up(start_dir: Union[str, Path], emitter: RootEmitter) -> List[WorkspaceRoot]:
    """Collect roots from ``start_dir`` up to its boundary, closest first.

    Without a boundary the walk continues to the filesystem root. Every
    result shares the boundary of ``start_dir``. The same-level VCS marker
    rule applies as in the downward pass.
    """
    abs_start = absolute_path(start_dir)
    boundary = emitter.detector.find_boundary(abs_start)

    roots: List[WorkspaceRoot] = []
    current = abs_start
    while True:
        root = emitter.emit(current, abs_start, source="upward", boundary=boundary, gated=True)
        if root is not None:
            roots.append(root)

        if boundary is not None and current == boundary:
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return roots


def walk_down(
    search_root: Union[str, Path],
    display_base: Union[str, Path],
    max_depth: int,
    emitter: RootEmitter,
    skip_policy: Optional[SkipPolicy] = None,
) -> List[WorkspaceRoot]:
    """Collect roots in the subtree of ``search_root``, pre-order.

    ``search_root`` is depth 0 and each child is one deeper. Directories
    deeper than ``max_depth`` are neither visited nor reported. Names
    rejected by ``skip_policy`` are pruned before they are entered, and a
    directory holding its own VCS marker is reported but not entered
    (except ``search_root`` itself). Unreadable directories are logged and
    skipped.
    """
    abs_root = absolute_path(search_root)
    base = absolute_path(display_base)
    policy = skip_policy or SkipPolicy(emitter.config.skip_dirs, emitter.config.vcs_marker)

    depths: Dict[str, int] = {str(abs_root): 0}
    roots: List[WorkspaceRoot] = []

    def on_error(error: OSError) -> None:
        failed = DirectoryReadError(error.filename or abs_root, error)
        logger.debug("Skipping unreadable directory: %s", failed)
        log_directory_skipped(Path(failed.path), "unreadable", error=str(failed))

    for dirpath, dirnames, _filenames in os.walk(abs_root, topdown=True, onerror=on_error):
        depth = depths.get(dirpath)
        if depth is None:
            depth = _depth_from_segments(dirpath, abs_root)
            depths[dirpath] = depth

        current = Path(dirpath)
        root = emitter.emit(current, base, source="downward", gated=True)
        if root is not None:
            roots.append(root)

        if dirpath != str(abs_root) and emitter.detector.has_marker_at_level(dirpath):
            # nested repository: report it, do not enter it
            dirnames[:] = []
            log_directory_skipped(current, "nested_boundary")
            continue

        kept = []
        for name in sorted(dirnames):
            if policy.should_skip(name):
                continue
            child_depth = depth + 1
            if child_depth > max_depth:
                log_directory_skipped(current / name, "max_depth", depth=child_depth)
                continue
            depths[os.path.join(dirpath, name)] = child_depth
            kept.append(name)
        dirnames[:] = kept

    return roots


def _depth_from_segments(path: str, root: Path) -> int:
    relative = os.path.relpath(path, root)
    if relative == os.curdir:
        return 0
    return len(Path(relative).parts)
