# SPDX-License-Identifier: MIT
"""The vendor file: persisted record of vendored packages.

The file lives at ``internal/vendor.json`` in the project root::

    {
    	"tool": "internal-vendor",
    	"package": [
    		{
    			"vendor": "example.com/foo",
    			"local": "example.com/me/project/internal/foo"
    		}
    	]
    }

Keys the tool does not know about are carried through load and save, so a
file written by this tool round-trips byte for byte.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from .errors import MissingVendorFileError, VendorFileError, VendorFileValidationError
from .fsutil import file_lock, write_atomic
from .schema import validate_vendor_data

log = structlog.get_logger("internal_vendor.manifest")

TOOL_NAME = "internal-vendor"
INTERNAL_FOLDER = "internal"
VENDOR_FILENAME = "vendor.json"

_PACKAGE_KEYS = ("vendor", "local", "version", "versionTime")


@dataclass
class VendorPackage:
    """A single vendored package.

    Attributes:
        vendor: Import path the package had when it was vendored
        local: Import path of the copy inside the project
        version: Version identifier, if known
        version_time: RFC 3339 timestamp of the version, if known
        extra: Unknown keys preserved from the file
    """

    vendor: str
    local: str
    version: Optional[str] = None
    version_time: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def version_datetime(self) -> Optional[datetime]:
        """Parse ``version_time`` into a datetime, if set."""
        if not self.version_time:
            return None
        return datetime.fromisoformat(self.version_time.replace("Z", "+00:00"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VendorPackage":
        """Build an entry from an already validated JSON object."""
        return cls(
            vendor=data["vendor"],
            local=data["local"],
            version=data.get("version"),
            version_time=data.get("versionTime"),
            extra={k: v for k, v in data.items() if k not in _PACKAGE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"vendor": self.vendor, "local": self.local}
        if self.version is not None:
            data["version"] = self.version
        if self.version_time is not None:
            data["versionTime"] = self.version_time
        data.update(self.extra)
        return data


@dataclass
class VendorFile:
    """Contents of ``internal/vendor.json``.

    Attributes:
        tool: Identity of the tool that manages the file
        package: Vendored packages in the order they were added
        extra: Unknown top-level keys preserved from the file
        key_order: Top-level keys in the order they appeared in the file, or
            None for a file created in memory
        source_text: Text the file was decoded from, if any
        source_data: Decoded JSON of ``source_text``
    """

    tool: str = TOOL_NAME
    package: list[VendorPackage] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    key_order: Optional[tuple[str, ...]] = field(default=None, compare=False, repr=False)
    source_text: Optional[str] = field(default=None, compare=False, repr=False)
    source_data: Any = field(default=None, compare=False, repr=False)

    def find_vendor(self, import_path: str) -> Optional[VendorPackage]:
        """Find the entry whose original import path is ``import_path``."""
        for pkg in self.package:
            if pkg.vendor == import_path:
                return pkg
        return None

    def find_local(self, import_path: str) -> Optional[VendorPackage]:
        """Find the entry whose local import path is ``import_path``."""
        for pkg in self.package:
            if pkg.local == import_path:
                return pkg
        return None

    def vendor_paths(self) -> list[str]:
        return [pkg.vendor for pkg in self.package]

    def local_paths(self) -> list[str]:
        return [pkg.local for pkg in self.package]

    def add(self, package: VendorPackage) -> None:
        """Append an entry."""
        self.package.append(package)

    @classmethod
    def from_dict(cls, data: Any) -> "VendorFile":
        """Build a VendorFile from decoded JSON.

        Raises:
            VendorFileValidationError: If the data does not match the schema
        """
        errors = validate_vendor_data(data)
        if errors:
            raise VendorFileValidationError(errors)
        return cls(
            tool=data.get("tool", ""),
            package=[VendorPackage.from_dict(p) for p in data.get("package") or []],
            extra={k: v for k, v in data.items() if k not in ("tool", "package")},
            key_order=tuple(data),
        )

    def to_dict(self) -> dict[str, Any]:
        """Encode to JSON-ready data.

        A loaded file keeps its top-level key order, and ``tool`` or
        ``package`` are only added when the file had them or they hold a
        value.
        """
        values: dict[str, Any] = {
            "tool": self.tool,
            "package": [pkg.to_dict() for pkg in self.package],
        }
        values.update(self.extra)
        if self.key_order is None:
            return values

        data: dict[str, Any] = {}
        for key in self.key_order:
            if key in values:
                data[key] = values[key]
        if "tool" not in data and self.tool:
            data["tool"] = self.tool
        if "package" not in data and self.package:
            data["package"] = values["package"]
        for key, value in values.items():
            if key not in data and key not in ("tool", "package"):
                data[key] = value
        return data

    def dumps(self) -> str:
        """Encode the file the way it is stored on disk.

        A file read with :meth:`loads` is returned as the exact text it was
        read from as long as its contents have not changed.
        """
        data = self.to_dict()
        if self.source_text is not None and data == self.source_data:
            return self.source_text
        return json.dumps(data, indent="\t", ensure_ascii=False) + "\n"

    @classmethod
    def loads(cls, text: str) -> "VendorFile":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise VendorFileError(f"Invalid JSON in vendor file: {e}") from e
        vendor_file = cls.from_dict(data)
        vendor_file.source_text = text
        vendor_file.source_data = data
        return vendor_file


def vendor_file_path(project_dir: str | Path) -> Path:
    """Location of the vendor file for a project root."""
    return Path(project_dir) / INTERNAL_FOLDER / VENDOR_FILENAME


def has_vendor_file(project_dir: str | Path) -> bool:
    return vendor_file_path(project_dir).is_file()


def find_project_root(start_dir: Optional[str | Path] = None) -> Path:
    """Find the project root by looking upward for ``internal/vendor.json``.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to the project root directory

    Raises:
        MissingVendorFileError: If no vendor file is found
    """
    start = Path(start_dir) if start_dir else Path.cwd()
    start = start.resolve()

    current = start
    while True:
        if has_vendor_file(current):
            return current
        if current == current.parent:
            break
        current = current.parent

    raise MissingVendorFileError(start)


def read_vendor_file(project_dir: str | Path) -> VendorFile:
    """Load the vendor file of a project.

    Args:
        project_dir: Project root directory

    Returns:
        Decoded VendorFile

    Raises:
        MissingVendorFileError: If the file does not exist
        VendorFileError: If the file cannot be decoded
    """
    path = vendor_file_path(project_dir)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        raise MissingVendorFileError(Path(project_dir)) from None
    # Text is kept verbatim, including CRLF line endings.
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise VendorFileError(f"Vendor file {path} is not valid UTF-8: {e}") from e
    vendor_file = VendorFile.loads(text)
    log.debug("manifest.loaded", path=str(path), packages=len(vendor_file.package))
    return vendor_file


def write_vendor_file(project_dir: str | Path, vendor_file: VendorFile) -> Path:
    """Persist the vendor file atomically under the write lock.

    Args:
        project_dir: Project root directory
        vendor_file: Contents to write

    Returns:
        Path of the written file
    """
    path = vendor_file_path(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    with file_lock(path):
        write_atomic(path, vendor_file.dumps().encode("utf-8"))
    log.debug("manifest.written", path=str(path), packages=len(vendor_file.package))
    return path
