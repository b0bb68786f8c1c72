# SPDX-License-Identifier: MIT
"""Init, list, add, update and remove.

Add, update and remove start with the same steps as list. Instead of
returning the packages they find the affected files, alter their imports and
write them back, copying files and folders as needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog

from .config import WorkspaceConfig
from .errors import (
    ImportParseError,
    ImportRewriteError,
    LocalPackageError,
    NotInWorkspaceError,
    VendorExistsError,
    VendorFileExistsError,
)
from .manifest import (
    INTERNAL_FOLDER,
    VendorFile,
    VendorPackage,
    has_vendor_file,
    vendor_file_path,
    write_vendor_file,
)
from .relocator import copy_package, remove_copied, remove_package
from .rewriter import RewriteResult, Rule, rewrite_files
from .status import ListItem, ListStatus
from .workspace import WorkspaceContext

log = structlog.get_logger("internal_vendor.commands")


@dataclass
class AddResult:
    """Outcome of vendoring one package.

    Attributes:
        import_path: Original import path
        local_path: Import path of the vendored copy
        dest_dir: Directory the package was copied to
        copied_files: Files created by the copy
        rewrites: Per-file rewrite results for files that referenced the package
    """

    import_path: str
    local_path: str
    dest_dir: Path
    copied_files: list[Path] = field(default_factory=list)
    rewrites: list[RewriteResult] = field(default_factory=list)

    @property
    def files_modified(self) -> list[Path]:
        return [r.path for r in self.rewrites if r.modified]


def normalize_import_path(import_path: str) -> str:
    """Turn an OS-style path argument into a slash separated import path."""
    return import_path.replace("\\", "/").strip().rstrip("/")


def cmd_init(start_dir: Optional[str | Path] = None) -> Path:
    """Create ``internal/vendor.json`` in ``start_dir`` (defaults to cwd).

    Returns:
        Path of the created vendor file

    Raises:
        VendorFileExistsError: If the vendor file already exists
    """
    project_dir = Path(start_dir) if start_dir else Path.cwd()
    if has_vendor_file(project_dir):
        raise VendorFileExistsError(vendor_file_path(project_dir))

    (project_dir / INTERNAL_FOLDER).mkdir(parents=True, exist_ok=True)
    path = write_vendor_file(project_dir, VendorFile())
    log.info("commands.initialized", path=str(path))
    return path


def cmd_list(
    start_dir: Optional[str | Path] = None,
    config: Optional[WorkspaceConfig] = None,
) -> list[ListItem]:
    """List every package the project references, most notable first."""
    ctx = WorkspaceContext.from_directory(start_dir, config)
    ctx.load_packages()
    return ctx.list_items()


def _first_missing_ancestor(path: Path, stop: Path) -> Optional[Path]:
    """Topmost directory between ``stop`` and ``path`` that does not exist yet.

    Returns None if ``path`` itself already exists.
    """
    if path.exists():
        return None
    missing = path
    for parent in path.parents:
        if parent == stop or parent.exists():
            break
        missing = parent
    return missing


def _undo_copy(
    import_path: str,
    dest_dir: Path,
    created_root: Optional[Path],
    preserved: set[Path],
) -> None:
    if created_root is not None:
        log.warning("commands.add_rolled_back", import_path=import_path, dest=str(created_root))
        remove_package(created_root)
    else:
        log.warning("commands.add_rolled_back", import_path=import_path, dest=str(dest_dir))
        remove_copied(dest_dir, preserved)


def cmd_add(
    import_path: str,
    start_dir: Optional[str | Path] = None,
    config: Optional[WorkspaceConfig] = None,
) -> AddResult:
    """Vendor an external package into the project's internal folder.

    The package is copied and every file that imports it is rewritten before
    the vendor file records the new entry. If reloading or rewriting fails
    before any file is written, the copy is undone (directories that existed
    beforehand are kept) and the vendor file is left as it was.

    Args:
        import_path: Import path of the package to vendor
        start_dir: Directory inside the project (defaults to cwd)
        config: Workspace config (defaults to environment)

    Returns:
        AddResult describing what was done

    Raises:
        VendorExistsError: If the package is already vendored
        LocalPackageError: If the package belongs to this project
        NotInWorkspaceError: If the package cannot be found in any workspace root
    """
    import_path = normalize_import_path(import_path)
    ctx = WorkspaceContext.from_directory(start_dir, config)
    ctx.load_packages(import_path)

    if ctx.vendor_file.find_vendor(import_path) is not None:
        raise VendorExistsError(import_path)

    pkg = ctx.packages[import_path]
    if pkg.status == ListStatus.INTERNAL:
        raise VendorExistsError(import_path)
    if pkg.status == ListStatus.LOCAL:
        raise LocalPackageError(import_path)
    if pkg.status != ListStatus.EXTERNAL or pkg.dir is None:
        raise NotInWorkspaceError(import_path)

    local_path = ctx.local_import_path(import_path)
    dest_dir = ctx.import_path_dir(local_path)
    created_root = _first_missing_ancestor(dest_dir, ctx.root_dir)
    preserved = set(dest_dir.rglob("*")) if created_root is None else set()

    copied = copy_package(pkg.dir, dest_dir)
    try:
        ctx.load_packages(import_path)
        rewrites = rewrite_files(
            ctx.files_importing(import_path),
            [Rule(from_path=import_path, to_path=local_path)],
        )
    except (ImportParseError, OSError):
        _undo_copy(import_path, dest_dir, created_root, preserved)
        raise
    except ImportRewriteError as e:
        if e.written:
            # Some files already point at the copy; keep it so they still build.
            log.error(
                "commands.add_partial_rewrite",
                import_path=import_path,
                written=[str(p) for p in e.written],
            )
        else:
            _undo_copy(import_path, dest_dir, created_root, preserved)
        raise

    ctx.vendor_file.add(VendorPackage(vendor=import_path, local=local_path))
    write_vendor_file(ctx.root_dir, ctx.vendor_file)

    result = AddResult(
        import_path=import_path,
        local_path=local_path,
        dest_dir=dest_dir,
        copied_files=copied,
        rewrites=rewrites,
    )
    log.info(
        "commands.add_committed",
        import_path=import_path,
        local_path=local_path,
        files_copied=len(copied),
        files_rewritten=len(result.files_modified),
    )
    return result


def cmd_update(import_path: str) -> None:
    """Update a vendored package. Not implemented; does nothing."""
    log.info("commands.update_noop", import_path=normalize_import_path(import_path))


def cmd_remove(import_path: str) -> None:
    """Remove a vendored package. Not implemented; does nothing."""
    log.info("commands.remove_noop", import_path=normalize_import_path(import_path))
