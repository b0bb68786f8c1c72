# SPDX-License-Identifier: MIT
"""Workspace configuration for internal-vendor.

The workspace roots (each GOPATH entry's ``src`` directory) and the toolchain
root (``$GOROOT/src``) are collected into a :class:`WorkspaceConfig` that is
passed explicitly to the classifier and the workspace context. Only
:meth:`WorkspaceConfig.from_environment` and :func:`load_config` look at the
process environment.
"""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import ConfigError, MissingToolchainRootError, MissingWorkspaceRootError

CONFIG_FILENAME = "internal-vendor.toml"

DEFAULT_SOURCE_SUFFIXES = (".go",)
DEFAULT_SKIP_DIRS = ("testdata", "node_modules")
# cgo pseudo-package; it has no directory but is always available.
DEFAULT_PSEUDO_PACKAGES = ("C",)
DEFAULT_MAX_WORKERS = 8


@dataclass
class WorkspaceConfig:
    """Roots and walk settings used to resolve and scan import paths.

    Attributes:
        workspace_roots: Ordered directories under which import paths resolve
            (each GOPATH entry joined with ``src``)
        toolchain_root: Directory holding standard library packages
            (``$GOROOT/src``)
        source_suffixes: File suffixes scanned for import declarations
        skip_dirs: Directory names never descended into while walking
        pseudo_packages: Import paths with no directory that count as std
        max_workers: Upper bound on the parse worker pool
    """

    workspace_roots: list[Path]
    toolchain_root: Path
    source_suffixes: tuple[str, ...] = DEFAULT_SOURCE_SUFFIXES
    skip_dirs: tuple[str, ...] = DEFAULT_SKIP_DIRS
    pseudo_packages: tuple[str, ...] = DEFAULT_PSEUDO_PACKAGES
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        """Validate roots and normalize paths."""
        self.workspace_roots = [Path(root).resolve() for root in self.workspace_roots]
        self.workspace_roots = [root for root in self.workspace_roots if root.is_dir()]
        if not self.workspace_roots:
            raise MissingWorkspaceRootError()
        if self.toolchain_root is None:
            raise MissingToolchainRootError()
        self.toolchain_root = Path(self.toolchain_root).resolve()
        if not self.toolchain_root.is_dir():
            raise MissingToolchainRootError()
        if self.max_workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.max_workers}")
        self.source_suffixes = tuple(self.source_suffixes)
        self.skip_dirs = tuple(self.skip_dirs)
        self.pseudo_packages = tuple(self.pseudo_packages)

    def is_source_file(self, name: str) -> bool:
        """Check if a file name counts as source for import scanning."""
        if name.startswith(".") or name.startswith("_"):
            return False
        return name.endswith(self.source_suffixes)

    def should_skip_dir(self, name: str) -> bool:
        """Check if the walk should not descend into a directory."""
        if name.startswith(".") or name.startswith("_"):
            return True
        return name in self.skip_dirs

    def workspace_root_for(self, directory: Path) -> Optional[Path]:
        """Return the first workspace root that contains ``directory``."""
        directory = directory.resolve()
        for root in self.workspace_roots:
            if directory == root or root in directory.parents:
                return root
        return None

    @classmethod
    def from_environment(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "WorkspaceConfig":
        """Create a config from GOPATH and GOROOT.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            **overrides: Field values that replace the defaults

        Returns:
            WorkspaceConfig instance

        Raises:
            MissingWorkspaceRootError: If GOPATH is unset or has no existing entry
            MissingToolchainRootError: If GOROOT cannot be determined
        """
        env = os.environ if environ is None else environ

        gopath = overrides.pop("gopath", None) or env.get("GOPATH", "")
        if isinstance(gopath, str):
            gopath = [entry for entry in gopath.split(os.pathsep) if entry]
        if not gopath:
            raise MissingWorkspaceRootError()

        goroot = overrides.pop("goroot", None) or env.get("GOROOT") or _go_env_goroot()
        if not goroot:
            raise MissingToolchainRootError()

        return cls(
            workspace_roots=[Path(entry) / "src" for entry in gopath],
            toolchain_root=Path(goroot) / "src",
            **overrides,
        )


def _go_env_goroot() -> Optional[str]:
    """Ask the go tool for GOROOT, returning None if it is unavailable."""
    try:
        result = subprocess.run(
            ["go", "env", "GOROOT"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def read_config_file(project_dir: str | Path) -> dict[str, Any]:
    """Read ``internal-vendor.toml`` from the project directory.

    Args:
        project_dir: Project root directory

    Returns:
        Config overrides suitable for :meth:`WorkspaceConfig.from_environment`
        (empty if the file does not exist)

    Raises:
        ConfigError: If the file is invalid
    """
    path = Path(project_dir) / CONFIG_FILENAME
    if not path.exists():
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax in {path}: {e}") from e

    overrides: dict[str, Any] = {}

    gopath = data.get("gopath")
    if gopath is not None:
        if isinstance(gopath, str):
            gopath = [gopath]
        if not isinstance(gopath, list) or not all(isinstance(g, str) for g in gopath):
            raise ConfigError("'gopath' must be a string or a list of strings")
        overrides["gopath"] = [_relative_to(project_dir, g) for g in gopath]

    goroot = data.get("goroot")
    if goroot is not None:
        if not isinstance(goroot, str):
            raise ConfigError("'goroot' must be a string")
        overrides["goroot"] = _relative_to(project_dir, goroot)

    for key in ("source_suffixes", "skip_dirs", "pseudo_packages"):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings")
        overrides[key] = tuple(value)

    workers = data.get("workers")
    if workers is not None:
        if not isinstance(workers, int) or isinstance(workers, bool):
            raise ConfigError("'workers' must be an integer")
        overrides["max_workers"] = workers

    return overrides


def _relative_to(project_dir: str | Path, value: str) -> str:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = Path(project_dir) / path
    return str(path)


def load_config(
    project_dir: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> WorkspaceConfig:
    """Load the workspace configuration for a project.

    Values from ``internal-vendor.toml`` in the project directory take
    precedence over GOPATH and GOROOT from the environment.

    Args:
        project_dir: Project directory (defaults to no config file)
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        WorkspaceConfig instance
    """
    overrides = read_config_file(project_dir) if project_dir is not None else {}
    return WorkspaceConfig.from_environment(environ, **overrides)
