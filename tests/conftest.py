# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures.

Every test runs against a synthetic GOPATH and GOROOT created in ``tmp_path``:

    tmp/gopath/src/example.com/me/app     the project (import path example.com/me/app)
    tmp/gopath/src/example.com/foo        an external package
    tmp/goroot/src/fmt, strings, ...      the standard library
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Generator

import pytest
import structlog
from click.testing import CliRunner

from internal_vendor.config import WorkspaceConfig
from internal_vendor.manifest import VendorFile, write_vendor_file

PROJECT_IMPORT_PATH = "example.com/me/app"

MAIN_GO = """package main

import (
\t"fmt"

\tfoo "example.com/foo" // greeting helpers
\t"example.com/me/app/util"
)

func main() {
\tfmt.Println(foo.Hello(), util.Name())
}
"""

UTIL_GO = """package util

import "strings"

func Name() string { return strings.ToUpper("app") }
"""

FOO_GO = """// Package foo says hello.
package foo

import "strings"

func Hello() string { return strings.Repeat("hi", 1) }
"""


@dataclass
class GoWorkspace:
    """A temporary GOPATH/GOROOT pair with helpers to add files."""

    root: Path

    @property
    def gopath(self) -> Path:
        return self.root / "gopath"

    @property
    def src(self) -> Path:
        return self.gopath / "src"

    @property
    def goroot(self) -> Path:
        return self.root / "goroot"

    @property
    def project(self) -> Path:
        return self.src / PROJECT_IMPORT_PATH

    @property
    def config(self) -> WorkspaceConfig:
        return WorkspaceConfig(
            workspace_roots=[self.src],
            toolchain_root=self.goroot / "src",
            max_workers=2,
        )

    @property
    def environ(self) -> dict[str, str]:
        return {"GOPATH": str(self.gopath), "GOROOT": str(self.goroot)}

    def write(self, relative: str, content: str) -> Path:
        """Write a file relative to the GOPATH src directory."""
        path = self.src / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def write_std(self, import_path: str, name: str = "doc.go") -> Path:
        package = import_path.rsplit("/", 1)[-1]
        path = self.goroot / "src" / import_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"package {package}\n", encoding="utf-8")
        return path

    def write_project(self, relative: str, content: str) -> Path:
        """Write a file relative to the project root."""
        return self.write(f"{PROJECT_IMPORT_PATH}/{relative}", content)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def go_workspace(tmp_path: Path) -> Generator[GoWorkspace, None, None]:
    """Create an empty GOPATH and a GOROOT with a few std packages."""
    ws = GoWorkspace(root=tmp_path)
    ws.src.mkdir(parents=True)
    for std in ("fmt", "strings", "net/http", "os"):
        ws.write_std(std)
    yield ws


@pytest.fixture
def project(go_workspace: GoWorkspace) -> GoWorkspace:
    """A project that imports fmt, a local package and example.com/foo."""
    go_workspace.write_project("main.go", MAIN_GO)
    go_workspace.write_project("util/util.go", UTIL_GO)
    go_workspace.write("example.com/foo/foo.go", FOO_GO)
    write_vendor_file(go_workspace.project, VendorFile())
    return go_workspace


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()
