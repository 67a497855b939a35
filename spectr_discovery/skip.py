"""Directory names excluded from the downward walk."""

from __future__ import annotations

from typing import FrozenSet, Iterable

from .models import VCS_MARKER

HIDDEN_PREFIX = "."
EGG_INFO_SUFFIX = ".egg-info"

# Dependency trees, build outputs and tool caches.
DEFAULT_SKIP_DIRS: FrozenSet[str] = frozenset(
    {
        VCS_MARKER,
        "node_modules",
        "vendor",
        "target",
        "dist",
        "build",
        ".cache",
        ".local",
        ".npm",
        ".pnpm",
        ".yarn",
        ".cargo",
        ".rustup",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".nox",
        ".eggs",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        "coverage",
        ".coverage",
        ".gradle",
        ".m2",
        ".ivy2",
        "bin",
        "obj",
        "out",
        ".next",
        ".nuxt",
        ".svelte-kit",
        ".vercel",
        ".netlify",
        "_build",
        "site-packages",
        ".terraform",
        ".pulumi",
        ".serverless",
        "testdata",
        "fixtures",
        ".direnv",
        ".devenv",
        "result",  # nix build output symlink
        ".nix-defexpr",
        ".nix-profile",
        "zig-cache",
        "zig-out",
        ".zig-cache",
        "bazel-bin",
        "bazel-out",
        "bazel-testlogs",
    }
)


class SkipPolicy:
    """Classify directory names the downward walk must not enter."""

    def __init__(self, extra_names: Iterable[str] = (), vcs_marker: str = VCS_MARKER):
        self.vcs_marker = vcs_marker
        self.extra_names: FrozenSet[str] = frozenset(extra_names)
        self.names: FrozenSet[str] = DEFAULT_SKIP_DIRS | {vcs_marker} | self.extra_names

    def with_names(self, *names: str) -> "SkipPolicy":
        """Return a new policy that also skips ``names``."""
        return SkipPolicy(self.extra_names | frozenset(names), self.vcs_marker)

    def should_skip(self, dir_name: str) -> bool:
        """True when ``dir_name`` must be pruned from the walk."""
        if dir_name in self.names:
            return True
        if dir_name.endswith(EGG_INFO_SUFFIX):
            return True
        # the VCS directory is in the set; every other hidden name goes too
        return len(dir_name) > 1 and dir_name.startswith(HIDDEN_PREFIX)

    def __contains__(self, dir_name: str) -> bool:
        return self.should_skip(dir_name)


DEFAULT_SKIP_POLICY = SkipPolicy()


def should_skip_directory(dir_name: str) -> bool:
    """Module-level shortcut using the default policy."""
    return DEFAULT_SKIP_POLICY.should_skip(dir_name)
