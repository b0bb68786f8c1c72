# SPDX-License-Identifier: MIT
"""Exception hierarchy for internal-vendor.

Every error the tool raises on purpose derives from :class:`VendorError`, so
the CLI can report them uniformly and let anything else surface as a crash.
"""

from __future__ import annotations

from pathlib import Path


class VendorError(Exception):
    """Base class for all internal-vendor errors."""

    pass


# =============================================================================
# Environment errors
# =============================================================================


class ConfigError(VendorError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass


class MissingToolchainRootError(ConfigError):
    """Raised when the toolchain root (GOROOT) cannot be determined."""

    def __init__(self) -> None:
        super().__init__("Unable to determine GOROOT.")


class MissingWorkspaceRootError(ConfigError):
    """Raised when no workspace root (GOPATH entry) exists."""

    def __init__(self) -> None:
        super().__init__("Missing GOPATH.")


class ProjectOutsideWorkspaceError(VendorError):
    """Raised when the project root is not inside any workspace root."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir
        super().__init__(f"Project directory {project_dir} is not inside a GOPATH src directory.")


# =============================================================================
# Manifest state errors
# =============================================================================


class VendorFileError(VendorError):
    """Raised when the vendor file exists but cannot be decoded."""

    pass


class VendorFileValidationError(VendorFileError):
    """Raised when the vendor file does not match its schema.

    Attributes:
        errors: Schema violations, each with a field path and message
    """

    def __init__(self, errors: list) -> None:
        self.errors = errors
        message = f"Vendor file validation failed with {len(errors)} error(s)"
        if errors:
            message += f": {errors[0]}"
        super().__init__(message)


class VendorFileExistsError(VendorError):
    """Raised by init when the vendor file is already present."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} file already exists.")


class MissingVendorFileError(VendorError):
    """Raised when no internal folder with a vendor file can be found."""

    def __init__(self, start_dir: Path | None = None) -> None:
        self.start_dir = start_dir
        message = "Unable to find internal folder with vendor file."
        if start_dir is not None:
            message = f"{message} Searched upward from {start_dir}."
        super().__init__(message)


class LockTimeoutError(VendorError):
    """Raised when the vendor file lock cannot be acquired in time."""

    pass


# =============================================================================
# Add classification errors
# =============================================================================


class VendorExistsError(VendorError):
    """Raised when adding a package that is already vendored."""

    def __init__(self, import_path: str) -> None:
        self.import_path = import_path
        super().__init__(f"Package {import_path!r} already exists as a vendor package.")


class LocalPackageError(VendorError):
    """Raised when adding a package that belongs to the current project."""

    def __init__(self, import_path: str) -> None:
        self.import_path = import_path
        super().__init__(f"Cannot vendor a local package: {import_path!r}.")


class NotInWorkspaceError(VendorError):
    """Raised when the package to add cannot be resolved in any GOPATH."""

    def __init__(self, import_path: str) -> None:
        self.missing = import_path
        super().__init__(f"Package {import_path!r} not in GOPATH.")


# =============================================================================
# I/O and parse errors
# =============================================================================


class ImportParseError(VendorError):
    """Raised when the import declarations of a source file cannot be parsed."""

    pass


class ImportRewriteError(VendorError):
    """Raised when import rewriting fails.

    Attributes:
        written: Files already replaced on disk before the failure
    """

    def __init__(self, message: str, written: list[Path] | None = None) -> None:
        self.written = list(written or [])
        super().__init__(message)


class RelocateError(VendorError):
    """Raised when copying a package into the project fails."""

    pass


class PackageExistsError(RelocateError):
    """Raised when the copy destination already holds files."""

    def __init__(self, dest_dir: Path) -> None:
        self.dest_dir = dest_dir
        super().__init__(f"Destination {dest_dir} already contains files.")
