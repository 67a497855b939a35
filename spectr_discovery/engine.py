"""Root discovery engine.

``RootDiscovery.find_roots`` runs the override check, the upward pass and,
when the start directory is outside any repository or is the repository
root itself, the downward pass. Results are merged, de-duplicated by path
(first occurrence wins, so upward matches beat downward ones) and ranked by
how many ``..`` steps separate them from the start directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from .boundary import BoundaryDetector
from .config import DiscoveryConfig
from .models import WorkspaceRoot, upward_distance
from .override import override_value, resolve_override
from .skip import SkipPolicy
from .spectr_logging import log_error_with_context, log_operation, log_performance, observability_hooks
from .walkers import RootEmitter, absolute_path, walk_down, walk_up

logger = logging.getLogger("spectr.discovery")


def dedupe_roots(roots: Iterable[WorkspaceRoot]) -> List[WorkspaceRoot]:
    """Drop repeated paths, keeping the first occurrence and the order."""
    seen = set()
    result: List[WorkspaceRoot] = []
    for root in roots:
        if root.path in seen:
            continue
        seen.add(root.path)
        result.append(root)
    return result


def rank_roots(roots: Iterable[WorkspaceRoot]) -> List[WorkspaceRoot]:
    """Sort by number of leading ``..`` segments, then by relative path."""
    return sorted(roots, key=lambda root: (upward_distance(root.relative_to), root.relative_to))


def should_search_downward(abs_start: Path, boundary: Optional[Path]) -> bool:
    """Outside a repository, or at a repository root (monorepo parent)."""
    return boundary is None or abs_start == boundary


class RootDiscovery:
    """Discover spectr workspace roots around a start directory.

    One instance owns one boundary cache; share the instance (or its
    detector) to share the cache.
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        detector: Optional[BoundaryDetector] = None,
        skip_policy: Optional[SkipPolicy] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config = config or DiscoveryConfig()
        self.detector = detector or BoundaryDetector(vcs_marker=self.config.vcs_marker)
        self.skip_policy = skip_policy or SkipPolicy(self.config.skip_dirs, self.config.vcs_marker)
        self.environ = environ
        self.emitter = RootEmitter(self.detector, self.config)

    def walk_up(self, start_dir: Union[str, Path]) -> List[WorkspaceRoot]:
        return walk_up(start_dir, self.emitter)

    def walk_down(
        self,
        start_dir: Union[str, Path],
        display_base: Union[str, Path, None] = None,
        max_depth: Optional[int] = None,
    ) -> List[WorkspaceRoot]:
        return walk_down(
            start_dir,
            display_base if display_base is not None else start_dir,
            self.config.max_depth if max_depth is None else max_depth,
            self.emitter,
            self.skip_policy,
        )

    @log_performance("find_roots")
    def find_roots(self, start_dir: Union[str, Path]) -> List[WorkspaceRoot]:
        """Return the ranked, duplicate-free roots visible from ``start_dir``.

        Raises ``PathResolutionError`` for an unusable start directory and
        ``RootNotFound`` for an override without a marker. Finding nothing
        is not an error: the result is an empty list.
        """
        override = override_value(self.config.override_env, self.environ)
        if override is not None:
            with log_operation(
                "resolve_override",
                failure_level=logging.WARNING,
                value=override,
                start_dir=str(start_dir),
            ):
                return resolve_override(override, start_dir, self.emitter)

        abs_start = absolute_path(start_dir)
        roots = self.walk_up(abs_start)

        boundary = self.detector.find_boundary(abs_start)
        if should_search_downward(abs_start, boundary):
            roots.extend(self._walk_down_quietly(abs_start))

        ranked = rank_roots(dedupe_roots(roots))
        observability_hooks.log_discovery_event(
            "discovery_completed",
            start_dir=str(abs_start),
            boundary_root=str(boundary) if boundary else None,
            count=len(ranked),
        )
        logger.debug("Found %d root(s) from %s", len(ranked), abs_start)
        return ranked

    def _walk_down_quietly(self, abs_start: Path) -> List[WorkspaceRoot]:
        # a failing downward pass never fails the call
        try:
            return self.walk_down(abs_start, abs_start)
        except Exception as e:
            log_error_with_context(e, {"operation": "walk_down", "start_dir": str(abs_start)})
            return []


def find_spectr_roots(
    start_dir: Union[str, Path],
    config: Optional[DiscoveryConfig] = None,
) -> List[WorkspaceRoot]:
    """Discover roots from ``start_dir`` with a one-off engine.

    Nothing is cached between calls. Construct a ``RootDiscovery`` and
    reuse it to share a boundary cache.
    """
    return RootDiscovery(config).find_roots(start_dir)
