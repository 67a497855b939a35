"""Specs and changes held by a discovered root.

Directory listings only: a spec is a directory under ``specs/`` with a
``spec.md``; an active change is a directory under ``changes/`` (other
than ``archive/``) with a ``proposal.md``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple, Union

from .errors import CatalogError
from .models import DEFAULT_ROOT_DIR, WorkspaceRoot

ARCHIVE_DIR = "archive"
SPEC_FILE = "spec.md"
PROPOSAL_FILE = "proposal.md"

CHANGE_TYPE = "change"
SPEC_TYPE = "spec"

logger = logging.getLogger("spectr.catalog")


def _list_entries(directory: Path, required_file: str, excluded: Tuple[str, ...] = ()) -> List[str]:
    if not directory.exists():
        return []

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise CatalogError(f"failed to read {directory.name} directory {directory}: {e}") from e

    names = []
    for entry in entries:
        name = entry.name
        if name.startswith(".") or name in excluded:
            continue
        if not entry.is_dir():
            continue
        if (entry / required_file).exists():
            names.append(name)

    names.sort()
    return names


def _marker_dir(root: Union[WorkspaceRoot, str, Path], marker: str) -> Path:
    if isinstance(root, WorkspaceRoot):
        return root.spectr_dir
    return Path(root) / marker


def list_specs(root: Union[WorkspaceRoot, str, Path], marker: str = DEFAULT_ROOT_DIR) -> List[str]:
    """Spec ids under ``<root>/<marker>/specs``, sorted; [] when absent."""
    return _list_entries(_marker_dir(root, marker) / "specs", SPEC_FILE)


def list_active_changes(root: Union[WorkspaceRoot, str, Path], marker: str = DEFAULT_ROOT_DIR) -> List[str]:
    """Active change ids under ``<root>/<marker>/changes``, sorted; [] when absent."""
    return _list_entries(_marker_dir(root, marker) / "changes", PROPOSAL_FILE, (ARCHIVE_DIR,))


def _first_component(path: str) -> str:
    trimmed = path.strip("/")
    if not trimmed:
        return ""
    return trimmed.split("/", 1)[0]


def normalize_item_path(value: str, marker: str = DEFAULT_ROOT_DIR) -> Tuple[str, str]:
    """Extract an item id and its inferred type from a path argument.

    >>> normalize_item_path("spectr/changes/add-auth/specs/auth/spec.md")
    ('add-auth', 'change')
    >>> normalize_item_path("/repo/spectr/specs/auth")
    ('auth', 'spec')
    >>> normalize_item_path("auth")
    ('auth', '')
    """
    if not value:
        return "", ""

    normalized = value.replace("\\", "/")

    changes_prefix = f"{marker}/changes/"
    index = normalized.find(changes_prefix)
    if index != -1:
        change_id = _first_component(normalized[index + len(changes_prefix):])
        if change_id and change_id != ARCHIVE_DIR:
            return change_id, CHANGE_TYPE

    specs_prefix = f"{marker}/specs/"
    index = normalized.find(specs_prefix)
    if index != -1:
        spec_id = _first_component(normalized[index + len(specs_prefix):])
        if spec_id:
            return spec_id, SPEC_TYPE

    cleaned = normalized.rstrip("/")
    if not cleaned:
        return value, ""
    if "/" not in cleaned:
        return cleaned, ""
    return value, ""
