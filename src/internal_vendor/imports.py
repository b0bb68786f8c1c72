# SPDX-License-Identifier: MIT
"""Go import declaration parsing.

Uses tree-sitter with the Go grammar. Only the package clause and the import
declarations are inspected; everything after them is ignored, so syntax
errors inside function bodies do not prevent a file from being scanned.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser

from .errors import ImportParseError

GO_LANGUAGE = Language(tsgo.language())

_PATH_LITERALS = ("interpreted_string_literal", "raw_string_literal")

_local = threading.local()


def _parser() -> Parser:
    """Per-thread parser; tree-sitter parsers must not be shared across threads."""
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = Parser(GO_LANGUAGE)
        _local.parser = parser
    return parser


@dataclass(frozen=True)
class ImportSpec:
    """A single import spec found in a source file.

    Attributes:
        path: The imported path, without quotes
        name: Alias given to the import (``.`` and ``_`` included), or None
        start: Byte offset of the opening quote of the path literal
        end: Byte offset just past the closing quote
        raw: True for a backquoted literal
        line: 1-based line number of the path literal
    """

    path: str
    name: Optional[str]
    start: int
    end: int
    raw: bool
    line: int

    def quoted(self, path: str) -> bytes:
        """Render ``path`` as a literal using this spec's quote style."""
        quote = "`" if self.raw else '"'
        return f"{quote}{path}{quote}".encode("utf-8")


def _spec_from_node(node: Node, source: bytes, filename: str) -> ImportSpec:
    path_node = node.child_by_field_name("path")
    if path_node is None or path_node.type not in _PATH_LITERALS:
        raise ImportParseError(f"{filename}:{node.start_point[0] + 1}: import spec without a path")

    literal = source[path_node.start_byte : path_node.end_byte]
    try:
        path = literal[1:-1].decode("utf-8")
    except UnicodeDecodeError as e:
        raise ImportParseError(f"{filename}: import path is not valid UTF-8: {e}") from e
    if "\\" in path and path_node.type == "interpreted_string_literal":
        raise ImportParseError(
            f"{filename}:{path_node.start_point[0] + 1}: escape sequences in import paths are not supported"
        )

    name_node = node.child_by_field_name("name")
    name = None
    if name_node is not None:
        name = source[name_node.start_byte : name_node.end_byte].decode("utf-8")

    return ImportSpec(
        path=path,
        name=name,
        start=path_node.start_byte,
        end=path_node.end_byte,
        raw=path_node.type == "raw_string_literal",
        line=path_node.start_point[0] + 1,
    )


def _collect_specs(decl: Node, source: bytes, filename: str) -> list[ImportSpec]:
    specs: list[ImportSpec] = []
    for child in decl.named_children:
        if child.type == "import_spec":
            specs.append(_spec_from_node(child, source, filename))
        elif child.type == "import_spec_list":
            for spec in child.named_children:
                if spec.type == "import_spec":
                    specs.append(_spec_from_node(spec, source, filename))
    return specs


def parse_imports(source: bytes, filename: str = "<source>") -> list[ImportSpec]:
    """Extract the import specs of a Go source file.

    Args:
        source: File content
        filename: Name used in error messages

    Returns:
        Import specs in source order

    Raises:
        ImportParseError: If the package clause or an import declaration
            cannot be parsed
    """
    tree = _parser().parse(source)
    root = tree.root_node

    specs: list[ImportSpec] = []
    has_package = False
    in_preamble = True

    for child in root.children:
        if child.type == "comment":
            continue
        if child.type == "package_clause":
            if child.has_error:
                raise ImportParseError(f"{filename}:{child.start_point[0] + 1}: invalid package clause")
            has_package = True
        elif child.type == "import_declaration":
            if child.has_error:
                raise ImportParseError(
                    f"{filename}:{child.start_point[0] + 1}: invalid import declaration"
                )
            specs.extend(_collect_specs(child, source, filename))
        elif child.type == "ERROR" or child.is_missing:
            if in_preamble:
                raise ImportParseError(f"{filename}:{child.start_point[0] + 1}: syntax error")
        else:
            in_preamble = False

    if not has_package:
        raise ImportParseError(f"{filename}: missing package clause")

    return specs


def parse_file_imports(path: str | Path) -> list[str]:
    """Return the import paths of a file in source order.

    Raises:
        ImportParseError: If the imports cannot be parsed
        OSError: If the file cannot be read
    """
    path = Path(path)
    source = path.read_bytes()
    return [spec.path for spec in parse_imports(source, filename=str(path))]
