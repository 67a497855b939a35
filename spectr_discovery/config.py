"""spectr.yaml loading and validation.

The configuration supplies the workspace marker name and the knobs of the
discovery engine. A project without spectr.yaml gets the defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import ConfigError
from .models import DEFAULT_ROOT_DIR, VCS_MARKER

CONFIG_FILE_NAME = "spectr.yaml"
OVERRIDE_ENV = "SPECTR_ROOT"
REQUIRE_VCS_ENV = "SPECTR_REQUIRE_VCS"
DEFAULT_MAX_DEPTH = 5

_INVALID_ROOT_DIR_CHARS = ("/", "\\", "..", "*")
_FALSE_VALUES = {"0", "false", "no", "off"}

logger = logging.getLogger("spectr.config")


@dataclass(slots=True)
class DiscoveryConfig:
    """Settings consulted by the discovery engine."""

    root_dir: str = DEFAULT_ROOT_DIR
    vcs_marker: str = VCS_MARKER
    max_depth: int = DEFAULT_MAX_DEPTH
    override_env: str = OVERRIDE_ENV
    require_vcs_marker: bool = True
    skip_dirs: Tuple[str, ...] = ()
    project_root: Optional[Path] = None
    source: Optional[Path] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def root_path(self) -> Path:
        """Absolute path of the marker directory of the configured project."""
        return (self.project_root or Path.cwd()) / self.root_dir

    @property
    def specs_path(self) -> Path:
        return self.root_path / "specs"

    @property
    def changes_path(self) -> Path:
        return self.root_path / "changes"

    def validate(self) -> List[str]:
        """Validate the configuration and return any issues."""
        issues = []

        if not self.root_dir:
            issues.append("root_dir cannot be empty")
        else:
            found = [char for char in _INVALID_ROOT_DIR_CHARS if char in self.root_dir]
            if found:
                issues.append(
                    "root_dir must be a simple directory name "
                    f"(found invalid characters: {', '.join(found)})"
                )
            if self.root_dir.startswith("."):
                issues.append("root_dir cannot start with '.' (hidden directories not allowed)")

        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 0:
            issues.append(f"max_depth must be a non-negative integer, got: {self.max_depth!r}")

        return issues

    def with_project_root(self, project_root: Union[str, Path]) -> "DiscoveryConfig":
        return replace(self, project_root=Path(project_root))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "root_dir": self.root_dir,
            "vcs_marker": self.vcs_marker,
            "max_depth": self.max_depth,
            "override_env": self.override_env,
            "require_vcs_marker": self.require_vcs_marker,
            "skip_dirs": list(self.skip_dirs),
            "project_root": str(self.project_root) if self.project_root else None,
            "source": str(self.source) if self.source else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveryConfig":
        """Create from the mapping found in spectr.yaml.

        Unknown keys (theme and friends) are kept in ``extra``.
        """
        known = {"root_dir", "max_depth", "require_vcs_marker", "skip_dirs"}
        skip_dirs = data.get("skip_dirs") or ()
        if isinstance(skip_dirs, str):
            skip_dirs = (skip_dirs,)
        return cls(
            root_dir=data.get("root_dir") or DEFAULT_ROOT_DIR,
            max_depth=data.get("max_depth", DEFAULT_MAX_DEPTH),
            require_vcs_marker=bool(data.get("require_vcs_marker", True)),
            skip_dirs=tuple(str(name) for name in skip_dirs),
            extra={k: v for k, v in data.items() if k not in known},
        )


def _parse_config_file(config_path: Path) -> DiscoveryConfig:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read config file {config_path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"invalid configuration in {config_path}: expected a mapping")

    return DiscoveryConfig.from_dict(data)


def _apply_env(config: DiscoveryConfig) -> DiscoveryConfig:
    require_vcs = os.getenv(REQUIRE_VCS_ENV)
    if require_vcs is None or require_vcs == "":
        return config
    return replace(config, require_vcs_marker=require_vcs.strip().lower() not in _FALSE_VALUES)


def load_config(start_path: Union[str, Path, None] = None) -> DiscoveryConfig:
    """Find spectr.yaml at ``start_path`` or above and load it.

    Without a config file the defaults are returned with ``project_root``
    set to ``start_path``.
    """
    try:
        abs_path = Path(os.path.abspath(start_path if start_path is not None else os.getcwd()))
    except OSError as e:
        raise ConfigError(f"failed to resolve absolute path for {start_path!r}: {e}") from e

    current = abs_path
    while True:
        config_path = current / CONFIG_FILE_NAME
        if config_path.is_file():
            config = _parse_config_file(config_path)
            config.project_root = current
            config.source = config_path

            issues = config.validate()
            if issues:
                raise ConfigError(f"invalid configuration in {config_path}: {'; '.join(issues)}")

            logger.debug("Loaded %s", config_path)
            return _apply_env(config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return _apply_env(DiscoveryConfig(project_root=abs_path))
