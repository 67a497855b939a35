"""MCP server exposing spectr workspace discovery tools."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.resources import TextResource

from spectr_discovery import (
    DiscoveryError,
    DiscoverySession,
    RootDiscovery,
    WorkspaceRoot,
    load_config,
)
from spectr_discovery.catalog import list_active_changes, list_specs, normalize_item_path
from spectr_discovery.session import has_multiple_roots
from spectr_discovery.spectr_logging import setup_logging

mcp = FastMCP("spectr-discovery")


def _resolve_cwd(cwd: Optional[str]) -> Path:
    if cwd:
        resolved = Path(cwd).expanduser()
        if not resolved.is_dir():
            raise ValueError(f"Provided cwd '{cwd}' is not a directory.")
        return Path(os.path.abspath(resolved))
    return Path.cwd()


def _session(cwd: Path) -> DiscoverySession:
    """A fresh session per tool call, configured from the spectr.yaml nearest to cwd.

    Roots, errors and boundaries found by one call are not reused by the next.
    """
    return DiscoverySession(RootDiscovery(load_config(cwd)))


def _active_root(cwd: Optional[str]) -> WorkspaceRoot:
    resolved = _resolve_cwd(cwd)
    try:
        return _session(resolved).single_root(resolved)
    except DiscoveryError as e:
        raise ValueError(str(e)) from e


@mcp.tool()
def find_workspace_roots(cwd: Optional[str] = None) -> Dict[str, Any]:
    """List every spectr/ workspace visible from cwd, closest first.
    Set SPECTR_ROOT to pin a single workspace."""

    resolved = _resolve_cwd(cwd)
    try:
        roots = _session(resolved).roots(resolved)
    except DiscoveryError as e:
        raise ValueError(str(e)) from e

    return {
        "cwd": str(resolved),
        "roots": [root.to_dict() for root in roots],
        "count": len(roots),
        "multiple": has_multiple_roots(roots),
    }


@mcp.tool()
def get_active_root(cwd: Optional[str] = None) -> Dict[str, Any]:
    """Return the closest spectr/ workspace, the one single-root commands operate on."""

    return _active_root(cwd).to_dict()


@mcp.tool(name="list_specs")
def list_workspace_specs(cwd: Optional[str] = None) -> Dict[str, Any]:
    """List spec ids (directories with spec.md) of the active workspace."""

    root = _active_root(cwd)
    return {"root": str(root.path), "specs": list_specs(root)}


@mcp.tool(name="list_changes")
def list_workspace_changes(cwd: Optional[str] = None) -> Dict[str, Any]:
    """List active change ids (directories with proposal.md, archive excluded) of the active workspace."""

    root = _active_root(cwd)
    return {"root": str(root.path), "changes": list_active_changes(root)}


@mcp.tool()
def normalize_item(value: str) -> Dict[str, str]:
    """Turn a path like spectr/changes/<id>/... or spectr/specs/<id> into an item id and type."""

    item_id, item_type = normalize_item_path(value)
    return {"id": item_id, "type": item_type}


def _text(text: str) -> TextResource:
    return TextResource(uri="spectr://roots", name="roots", text=text, mime_type="text/plain")


@mcp.resource("spectr://roots")
def resource_roots():
    """Resource view of the workspaces discovered from the server's cwd."""

    try:
        roots = _session(Path.cwd()).roots()
    except DiscoveryError as e:
        return _text(f"Discovery failed: {e}")

    if not roots:
        return _text("No spectr/ workspace found. Run 'spectr init' or set SPECTR_ROOT.")

    lines = ["Spectr Workspaces"]
    for root in roots:
        lines.append("")
        lines.append(f"- {root.display_name}: {root.path}")
        if root.boundary_root:
            lines.append(f"  Repository: {root.boundary_root}")
    return _text("\n".join(lines))


if __name__ == "__main__":
    setup_logging()
    mcp.run(transport="stdio")
