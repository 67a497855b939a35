"""spectr discovery - locate spectr/ workspace roots around a directory."""

from .boundary import BoundaryCache, BoundaryDetector
from .config import DiscoveryConfig, load_config
from .engine import RootDiscovery, dedupe_roots, find_spectr_roots, rank_roots
from .errors import (
    CatalogError,
    ConfigError,
    DirectoryReadError,
    DiscoveryError,
    PathResolutionError,
    RootNotFound,
)
from .models import WorkspaceRoot
from .session import DiscoverySession
from .skip import SkipPolicy

__all__ = [
    "BoundaryCache",
    "BoundaryDetector",
    "CatalogError",
    "ConfigError",
    "DirectoryReadError",
    "DiscoveryConfig",
    "DiscoveryError",
    "DiscoverySession",
    "PathResolutionError",
    "RootDiscovery",
    "RootNotFound",
    "SkipPolicy",
    "WorkspaceRoot",
    "dedupe_roots",
    "find_spectr_roots",
    "load_config",
    "rank_roots",
]
