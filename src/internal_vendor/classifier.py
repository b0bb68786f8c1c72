# SPDX-License-Identifier: MIT
"""Import path resolution and status classification."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import WorkspaceConfig
from .manifest import INTERNAL_FOLDER, VendorFile
from .status import ListStatus


def is_valid_import_path(import_path: str) -> bool:
    """Check that an import path can be resolved at all.

    Rejects empty, absolute and relative paths, backslashes, and empty or
    dot segments.
    """
    if not import_path or "\\" in import_path:
        return False
    if import_path.startswith("/"):
        return False
    for segment in import_path.split("/"):
        if segment in ("", ".", ".."):
            return False
    return True


def has_path_prefix(import_path: str, prefix: str) -> bool:
    """Check if ``import_path`` is ``prefix`` or lies below it."""
    return import_path == prefix or import_path.startswith(prefix + "/")


class StatusClassifier:
    """Resolves import paths against the workspace and toolchain roots."""

    def __init__(self, config: WorkspaceConfig) -> None:
        self.config = config

    def resolve(self, import_path: str) -> Optional[tuple[Path, bool]]:
        """Find the directory of an import path.

        The toolchain root shadows the workspace roots, which are searched
        in order.

        Returns:
            ``(directory, is_std)`` or None if the path is not found
        """
        if not is_valid_import_path(import_path):
            return None
        relative = Path(*import_path.split("/"))
        candidate = self.config.toolchain_root / relative
        if candidate.is_dir():
            return candidate, True
        for root in self.config.workspace_roots:
            candidate = root / relative
            if candidate.is_dir():
                return candidate, False
        return None

    def classify(
        self,
        import_path: str,
        vendor_file: Optional[VendorFile],
        project_import_path: str,
    ) -> ListStatus:
        """Decide the status of an import path.

        Args:
            import_path: Path to classify
            vendor_file: Vendor file of the project, if loaded
            project_import_path: Import path of the project root

        Returns:
            The first matching status
        """
        return self.classify_resolved(
            import_path,
            self.resolve(import_path),
            vendor_file,
            project_import_path,
        )

    def classify_resolved(
        self,
        import_path: str,
        resolved: Optional[tuple[Path, bool]],
        vendor_file: Optional[VendorFile],
        project_import_path: str,
    ) -> ListStatus:
        """Classify using a resolution computed by the caller."""
        if not is_valid_import_path(import_path):
            return ListStatus.UNKNOWN
        if import_path in self.config.pseudo_packages:
            return ListStatus.STD
        if resolved is None:
            return ListStatus.MISSING

        _, is_std = resolved
        if is_std:
            return ListStatus.STD

        internal_root = f"{project_import_path}/{INTERNAL_FOLDER}"
        if has_path_prefix(import_path, internal_root):
            return ListStatus.INTERNAL
        if vendor_file is not None and vendor_file.find_local(import_path) is not None:
            return ListStatus.INTERNAL

        if has_path_prefix(import_path, project_import_path):
            return ListStatus.LOCAL

        return ListStatus.EXTERNAL
