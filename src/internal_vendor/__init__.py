# SPDX-License-Identifier: MIT
"""Vendoring of Go packages into a project's internal folder.

This package finds the packages a project imports, copies external ones into
``<project>/internal/`` and rewrites import declarations to use the copy.

Example:
    >>> from internal_vendor import WorkspaceConfig, cmd_add, cmd_init, cmd_list
    >>>
    >>> config = WorkspaceConfig.from_environment()
    >>> cmd_init("src/example.com/me/app")
    >>> for item in cmd_list("src/example.com/me/app", config):
    ...     print(item)
    >>> cmd_add("example.com/foo", "src/example.com/me/app", config)
"""

__version__ = "0.1.0"

from .classifier import StatusClassifier, is_valid_import_path
from .commands import AddResult, cmd_add, cmd_init, cmd_list, cmd_remove, cmd_update
from .config import WorkspaceConfig, load_config
from .errors import (
    ConfigError,
    ImportParseError,
    ImportRewriteError,
    LocalPackageError,
    LockTimeoutError,
    MissingToolchainRootError,
    MissingVendorFileError,
    MissingWorkspaceRootError,
    NotInWorkspaceError,
    PackageExistsError,
    ProjectOutsideWorkspaceError,
    RelocateError,
    VendorError,
    VendorExistsError,
    VendorFileError,
    VendorFileExistsError,
    VendorFileValidationError,
)
from .imports import ImportSpec, parse_file_imports, parse_imports
from .manifest import (
    TOOL_NAME,
    VendorFile,
    VendorPackage,
    find_project_root,
    read_vendor_file,
    write_vendor_file,
)
from .relocator import copy_package, remove_package
from .rewriter import RewriteResult, Rule, rewrite_files, rewrite_source
from .schema import VENDOR_FILE_SCHEMA, ValidationErrorDetail, validate_vendor_data
from .status import ListItem, ListStatus, sort_list_items
from .workspace import Package, WorkspaceContext

__all__ = [
    # Commands
    "AddResult",
    "cmd_add",
    "cmd_init",
    "cmd_list",
    "cmd_remove",
    "cmd_update",
    # Config
    "WorkspaceConfig",
    "load_config",
    # Status
    "ListItem",
    "ListStatus",
    "sort_list_items",
    "StatusClassifier",
    "is_valid_import_path",
    # Manifest
    "TOOL_NAME",
    "VendorFile",
    "VendorPackage",
    "find_project_root",
    "read_vendor_file",
    "write_vendor_file",
    "VENDOR_FILE_SCHEMA",
    "ValidationErrorDetail",
    "validate_vendor_data",
    # Workspace
    "Package",
    "WorkspaceContext",
    # Imports
    "ImportSpec",
    "parse_file_imports",
    "parse_imports",
    # Rewriter
    "Rule",
    "RewriteResult",
    "rewrite_files",
    "rewrite_source",
    # Relocator
    "copy_package",
    "remove_package",
    # Errors
    "VendorError",
    "ConfigError",
    "MissingToolchainRootError",
    "MissingWorkspaceRootError",
    "ProjectOutsideWorkspaceError",
    "VendorFileError",
    "VendorFileExistsError",
    "VendorFileValidationError",
    "MissingVendorFileError",
    "LockTimeoutError",
    "VendorExistsError",
    "LocalPackageError",
    "NotInWorkspaceError",
    "ImportParseError",
    "ImportRewriteError",
    "RelocateError",
    "PackageExistsError",
]
