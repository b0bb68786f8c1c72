# SPDX-License-Identifier: MIT
"""Package graph of a project.

:class:`WorkspaceContext` walks a project tree, parses the imports of every
source file and classifies each package it finds. The result is a map from
import path to :class:`Package` plus a reverse index from import path to the
files that reference it, which is what the rewrite step operates on.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from .classifier import StatusClassifier
from .config import WorkspaceConfig, load_config
from .errors import ProjectOutsideWorkspaceError
from .imports import parse_file_imports
from .manifest import INTERNAL_FOLDER, VendorFile, find_project_root, read_vendor_file
from .status import ListItem, ListStatus, sort_list_items

log = structlog.get_logger("internal_vendor.workspace")


@dataclass
class Package:
    """A package seen while loading the workspace.

    Attributes:
        import_path: Import path of the package
        dir: Directory the import path resolves to, or None if unresolved
        status: Classification of the package
        files: Source files of the package (only for packages in the project)
        imports: For each file, the import paths it references in order
    """

    import_path: str
    dir: Optional[Path]
    status: ListStatus
    files: list[Path] = field(default_factory=list)
    imports: dict[Path, list[str]] = field(default_factory=dict)


def _raise(error: OSError) -> None:
    raise error


class WorkspaceContext:
    """Loads and classifies the packages of one project.

    Args:
        root_dir: Project root (the directory holding ``internal/vendor.json``)
        config: Workspace roots and walk settings
        vendor_file: Already loaded vendor file; read from disk if omitted

    Raises:
        ProjectOutsideWorkspaceError: If the project is not below a workspace root
    """

    def __init__(
        self,
        root_dir: str | Path,
        config: WorkspaceConfig,
        vendor_file: Optional[VendorFile] = None,
    ) -> None:
        self.root_dir = Path(root_dir).resolve()
        self.config = config
        self.classifier = StatusClassifier(config)
        self.vendor_file = vendor_file if vendor_file is not None else read_vendor_file(self.root_dir)

        root_workspace = config.workspace_root_for(self.root_dir)
        if root_workspace is None or root_workspace == self.root_dir:
            raise ProjectOutsideWorkspaceError(self.root_dir)
        self.root_workspace = root_workspace
        self.root_import_path = self.root_dir.relative_to(root_workspace).as_posix()

        self.packages: dict[str, Package] = {}
        self.file_imports: dict[str, list[Path]] = {}

    @classmethod
    def from_directory(
        cls,
        start_dir: Optional[str | Path] = None,
        config: Optional[WorkspaceConfig] = None,
    ) -> "WorkspaceContext":
        """Create a context for the project containing ``start_dir``.

        Args:
            start_dir: Directory inside the project (defaults to cwd)
            config: Workspace config (defaults to :func:`load_config`)
        """
        root = find_project_root(start_dir)
        if config is None:
            config = load_config(root)
        return cls(root, config)

    # ── paths ────────────────────────────────────────────────────────────

    def dir_import_path(self, directory: Path) -> str:
        """Import path of a directory inside the project."""
        return directory.resolve().relative_to(self.root_workspace).as_posix()

    def import_path_dir(self, import_path: str) -> Path:
        """Directory an import path maps to in the project's workspace root."""
        return self.root_workspace.joinpath(*import_path.split("/"))

    def local_import_path(self, import_path: str) -> str:
        """Import path a package gets once vendored into this project.

        The final component of the import path is placed under the project's
        ``internal`` folder, so any ``/internal/`` segment of the original is
        dropped along with the rest of its prefix::

            example.com/foo         -> <project>/internal/foo
            other/internal/pkg      -> <project>/internal/pkg
            other/internal/a/b      -> <project>/internal/b
        """
        name = import_path.rsplit("/", 1)[-1]
        return f"{self.root_import_path}/{INTERNAL_FOLDER}/{name}"

    # ── loading ──────────────────────────────────────────────────────────

    def _walk(self) -> list[tuple[Path, list[Path]]]:
        """Directories of the project that hold source files, sorted."""
        found: list[tuple[Path, list[Path]]] = []
        for dirpath, dirnames, filenames in os.walk(self.root_dir, onerror=_raise):
            dirnames[:] = sorted(d for d in dirnames if not self.config.should_skip_dir(d))
            files = sorted(
                Path(dirpath) / name
                for name in filenames
                if self.config.is_source_file(name) and os.path.isfile(os.path.join(dirpath, name))
            )
            if files:
                found.append((Path(dirpath), files))
        found.sort(key=lambda item: item[0])
        return found

    def _parse_all(self, files: list[Path]) -> dict[Path, list[str]]:
        """Parse imports of all files, in parallel, keyed by file."""
        if not files:
            return {}
        workers = min(self.config.max_workers, len(files))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(parse_file_imports, files))
        return dict(zip(files, results))

    def _resolve_package(self, import_path: str) -> Package:
        resolved = self.classifier.resolve(import_path)
        status = self.classifier.classify_resolved(
            import_path, resolved, self.vendor_file, self.root_import_path
        )
        return Package(
            import_path=import_path,
            dir=resolved[0] if resolved else None,
            status=status,
        )

    def load_packages(self, *focus: str) -> dict[str, Package]:
        """Build the package map of the project.

        Args:
            *focus: Import paths to include even if nothing imports them

        Returns:
            Map of import path to Package (also stored on ``self.packages``)

        Raises:
            ImportParseError: If any source file has unparsable imports
            OSError: If the tree cannot be read
        """
        source_dirs = self._walk()
        all_files = [f for _, files in source_dirs for f in files]
        parsed = self._parse_all(all_files)

        packages: dict[str, Package] = {}
        file_imports: dict[str, set[Path]] = {}

        for directory, files in source_dirs:
            import_path = self.dir_import_path(directory)
            status = self.classifier.classify_resolved(
                import_path, (directory, False), self.vendor_file, self.root_import_path
            )
            pkg = Package(import_path=import_path, dir=directory, status=status)
            for file in files:
                pkg.files.append(file)
                pkg.imports[file] = parsed[file]
                for imported in parsed[file]:
                    file_imports.setdefault(imported, set()).add(file)
            packages[import_path] = pkg

        for import_path in sorted(set(file_imports) | set(focus)):
            if import_path not in packages:
                packages[import_path] = self._resolve_package(import_path)

        # Vendored originals that nothing references any more.
        for vendored in self.vendor_file.package:
            if vendored.vendor in file_imports:
                continue
            pkg = packages.get(vendored.vendor) or self._resolve_package(vendored.vendor)
            pkg.status = ListStatus.UNUSED
            packages[vendored.vendor] = pkg

        self.packages = packages
        self.file_imports = {path: sorted(files) for path, files in sorted(file_imports.items())}

        log.debug(
            "workspace.loaded",
            root=str(self.root_dir),
            import_path=self.root_import_path,
            files=len(all_files),
            packages=len(packages),
        )
        return packages

    def list_items(self) -> list[ListItem]:
        """Project loaded packages into sorted list rows."""
        return sort_list_items(
            ListItem(status=pkg.status, path=pkg.import_path) for pkg in self.packages.values()
        )

    def files_importing(self, import_path: str) -> list[Path]:
        """Files that reference ``import_path``, sorted."""
        return list(self.file_imports.get(import_path, []))
