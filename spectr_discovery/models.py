"""Data models for spectr root discovery.

This module contains the value objects produced by the discovery engine
and consumed by the catalog, the session cache and the MCP server.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_ROOT_DIR = "spectr"
VCS_MARKER = ".git"
PARENT_SEGMENT = ".."


@dataclass(frozen=True, slots=True)
class WorkspaceRoot:
    """A directory that holds a spectr/ workspace marker.

    Two roots are the same root when their ``path`` is the same; the
    relative path and the boundary are display and ranking data only.
    """

    path: Path
    relative_to: str
    boundary_root: Optional[Path] = None
    marker: str = DEFAULT_ROOT_DIR

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkspaceRoot):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    @property
    def spectr_dir(self) -> Path:
        """Absolute path of the marker directory itself."""
        return self.path / self.marker

    @property
    def changes_dir(self) -> Path:
        """Absolute path of the changes/ directory inside the marker."""
        return self.spectr_dir / "changes"

    @property
    def specs_dir(self) -> Path:
        """Absolute path of the specs/ directory inside the marker."""
        return self.spectr_dir / "specs"

    @property
    def display_name(self) -> str:
        """Directory name for the start root, otherwise the relative path."""
        if self.relative_to == ".":
            return self.path.name
        return self.relative_to

    @property
    def upward_distance(self) -> int:
        """Number of leading ``..`` segments in ``relative_to``."""
        return upward_distance(self.relative_to)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "path": str(self.path),
            "relative_to": self.relative_to,
            "boundary_root": str(self.boundary_root) if self.boundary_root else None,
            "display_name": self.display_name,
            "marker": self.marker,
            "specs_dir": str(self.specs_dir),
            "changes_dir": str(self.changes_dir),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceRoot":
        """Create from dictionary representation."""
        boundary = data.get("boundary_root")
        return cls(
            path=Path(data["path"]),
            relative_to=data.get("relative_to", "."),
            boundary_root=Path(boundary) if boundary else None,
            marker=data.get("marker", DEFAULT_ROOT_DIR),
        )


def upward_distance(relative_to: str) -> int:
    """Count the leading parent-directory segments of a relative path.

    ``"."`` and ``"packages/auth"`` are 0, ``".."`` and ``"../lib"`` are 1,
    ``"../.."`` and ``"../../other"`` are 2.
    """
    count = 0
    for part in relative_to.replace(os.sep, "/").split("/"):
        if part != PARENT_SEGMENT:
            break
        count += 1
    return count


def relative_display_path(path: Path, base: Path) -> str:
    """Express ``path`` relative to ``base``, or absolute when impossible."""
    try:
        return os.path.relpath(path, base)
    except ValueError:
        # different drives on Windows
        return str(path)
