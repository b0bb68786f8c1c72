# SPDX-License-Identifier: MIT
"""Copying package trees into the project."""

from __future__ import annotations

import shutil
from pathlib import Path

import structlog

from .errors import PackageExistsError, RelocateError

log = structlog.get_logger("internal_vendor.relocator")


def _has_files(directory: Path) -> bool:
    return any(p.is_file() or p.is_symlink() for p in directory.rglob("*"))


def _ignore_hidden(directory: str, names: list[str]) -> set[str]:
    return {name for name in names if name.startswith(".")}


def copy_package(source_dir: str | Path, dest_dir: str | Path) -> list[Path]:
    """Copy a package tree to ``dest_dir``.

    Hidden files and directories (version control metadata and the like) are
    not copied. Parent directories of ``dest_dir`` are created as needed.

    Args:
        source_dir: Resolved directory of the package
        dest_dir: Directory inside the project

    Returns:
        Copied files, sorted

    Raises:
        PackageExistsError: If ``dest_dir`` already contains files
        RelocateError: If the source is missing or the copy fails
    """
    source = Path(source_dir)
    dest = Path(dest_dir)

    if not source.is_dir():
        raise RelocateError(f"Package directory does not exist: {source}")
    if dest.exists() and _has_files(dest):
        raise PackageExistsError(dest)

    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest, ignore=_ignore_hidden, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise RelocateError(f"Failed to copy {source} to {dest}: {e}") from e

    copied = sorted(p for p in dest.rglob("*") if p.is_file())
    log.info("relocator.copied", source=str(source), dest=str(dest), files=len(copied))
    return copied


def remove_package(dest_dir: str | Path) -> None:
    """Remove a tree created by :func:`copy_package`."""
    dest = Path(dest_dir)
    if dest.exists():
        shutil.rmtree(dest)
        log.info("relocator.removed", dest=str(dest))


def remove_copied(dest_dir: str | Path, preserved: set[Path]) -> None:
    """Undo :func:`copy_package` into a directory that existed beforehand.

    Args:
        dest_dir: Directory the package was copied into
        preserved: Entries below ``dest_dir`` that were there before the copy
    """
    dest = Path(dest_dir)
    # Reverse order visits children before their parent directory.
    for path in sorted(dest.rglob("*"), reverse=True):
        if path in preserved:
            continue
        if path.is_dir() and not path.is_symlink():
            path.rmdir()
        else:
            path.unlink()
    log.info("relocator.copy_undone", dest=str(dest), kept=len(preserved))
