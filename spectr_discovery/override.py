"""Explicit root selection through the SPECTR_ROOT environment variable."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional, Union

from .errors import RootNotFound
from .models import WorkspaceRoot
from .walkers import RootEmitter, absolute_path

logger = logging.getLogger("spectr.discovery.override")


def override_value(config_env: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the override path, or None when the variable is unset or empty."""
    value = (environ if environ is not None else os.environ).get(config_env, "")
    return value or None


def resolve_override(value: str, start_dir: Union[str, Path], emitter: RootEmitter) -> List[WorkspaceRoot]:
    """Validate an explicit root and return it as the only result.

    Relative values are taken relative to ``start_dir``. The resolved
    directory must contain the workspace marker, otherwise ``RootNotFound``
    is raised naming the resolved path. No VCS gating applies here.
    """
    abs_start = absolute_path(start_dir)
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = abs_start / candidate
    resolved = absolute_path(candidate)

    env_name = emitter.config.override_env
    marker = emitter.config.root_dir
    marker_dir = resolved / marker
    try:
        is_dir = marker_dir.is_dir()
    except OSError as e:
        raise RootNotFound(f"failed to check {env_name} path {resolved}: {e}", resolved) from e
    if not is_dir:
        raise RootNotFound(f"{env_name} path does not contain {marker}/ directory: {resolved}", resolved)

    root = emitter.emit(resolved, abs_start, source="override")
    if root is None:
        # the marker vanished between the two checks
        raise RootNotFound(f"{env_name} path does not contain {marker}/ directory: {resolved}", resolved)

    logger.debug("Using %s=%s", env_name, resolved)
    return [root]
