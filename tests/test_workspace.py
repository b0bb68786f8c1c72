# SPDX-License-Identifier: MIT
"""Tests for the workspace context."""

from __future__ import annotations

import pytest

from internal_vendor.errors import (
    ImportParseError,
    MissingVendorFileError,
    ProjectOutsideWorkspaceError,
)
from internal_vendor.manifest import VendorFile, VendorPackage, write_vendor_file
from internal_vendor.status import ListItem, ListStatus, is_sorted
from internal_vendor.workspace import WorkspaceContext

from conftest import PROJECT_IMPORT_PATH, GoWorkspace


def load(project: GoWorkspace, *focus: str) -> WorkspaceContext:
    ctx = WorkspaceContext(project.project, project.config)
    ctx.load_packages(*focus)
    return ctx


class TestContext:
    def test_root_import_path(self, project: GoWorkspace):
        ctx = WorkspaceContext(project.project, project.config)

        assert ctx.root_import_path == PROJECT_IMPORT_PATH
        assert ctx.root_workspace == project.src.resolve()

    def test_from_directory_searches_upward(self, project: GoWorkspace):
        ctx = WorkspaceContext.from_directory(project.project / "util", project.config)

        assert ctx.root_dir == project.project.resolve()

    def test_from_directory_without_vendor_file(self, go_workspace: GoWorkspace):
        go_workspace.write_project("main.go", "package main\n")

        with pytest.raises(MissingVendorFileError):
            WorkspaceContext.from_directory(go_workspace.project, go_workspace.config)

    def test_project_outside_workspace(self, go_workspace: GoWorkspace):
        outside = go_workspace.root / "elsewhere"
        write_vendor_file(outside, VendorFile())

        with pytest.raises(ProjectOutsideWorkspaceError):
            WorkspaceContext(outside, go_workspace.config)

    @pytest.mark.parametrize(
        "import_path, expected",
        [
            ("example.com/foo", f"{PROJECT_IMPORT_PATH}/internal/foo"),
            ("github.com/a/b", f"{PROJECT_IMPORT_PATH}/internal/b"),
            ("other.com/x/internal/pkg", f"{PROJECT_IMPORT_PATH}/internal/pkg"),
            ("other.com/x/internal/a/b", f"{PROJECT_IMPORT_PATH}/internal/b"),
        ],
    )
    def test_local_import_path(self, project: GoWorkspace, import_path, expected):
        ctx = WorkspaceContext(project.project, project.config)

        assert ctx.local_import_path(import_path) == expected

    def test_import_path_dir(self, project: GoWorkspace):
        ctx = WorkspaceContext(project.project, project.config)

        assert ctx.import_path_dir(f"{PROJECT_IMPORT_PATH}/internal/foo") == (
            project.src.resolve() / "example.com" / "me" / "app" / "internal" / "foo"
        )


class TestLoadPackages:
    """Tests for WorkspaceContext.load_packages."""

    def test_statuses(self, project: GoWorkspace):
        ctx = load(project)

        statuses = {path: pkg.status for path, pkg in ctx.packages.items()}

        assert statuses == {
            PROJECT_IMPORT_PATH: ListStatus.LOCAL,
            f"{PROJECT_IMPORT_PATH}/util": ListStatus.LOCAL,
            "fmt": ListStatus.STD,
            "strings": ListStatus.STD,
            "example.com/foo": ListStatus.EXTERNAL,
        }

    def test_project_package_files_and_imports(self, project: GoWorkspace):
        ctx = load(project)

        main = ctx.packages[PROJECT_IMPORT_PATH]
        main_go = project.project.resolve() / "main.go"
        assert main.files == [main_go]
        assert main.imports[main_go] == ["fmt", "example.com/foo", f"{PROJECT_IMPORT_PATH}/util"]

    def test_file_imports_index(self, project: GoWorkspace):
        ctx = load(project)
        root = project.project.resolve()

        assert ctx.files_importing("example.com/foo") == [root / "main.go"]
        assert ctx.files_importing("strings") == [root / "util" / "util.go"]
        assert ctx.files_importing("nothing/here") == []

    def test_focus_path_included(self, project: GoWorkspace):
        project.write("example.com/unreferenced/u.go", "package u\n")

        ctx = load(project, "example.com/unreferenced", "example.com/nowhere")

        assert ctx.packages["example.com/unreferenced"].status is ListStatus.EXTERNAL
        assert ctx.packages["example.com/nowhere"].status is ListStatus.MISSING
        assert ctx.packages["example.com/nowhere"].dir is None

    def test_missing_import(self, project: GoWorkspace):
        project.write_project("extra.go", 'package main\n\nimport "example.com/gone"\n')

        ctx = load(project)

        assert ctx.packages["example.com/gone"].status is ListStatus.MISSING

    def test_internal_directory_is_internal(self, project: GoWorkspace):
        project.write_project("internal/foo/foo.go", "package foo\n")

        ctx = load(project)

        assert ctx.packages[f"{PROJECT_IMPORT_PATH}/internal/foo"].status is ListStatus.INTERNAL

    def test_unused_vendor_entry(self, project: GoWorkspace):
        write_vendor_file(
            project.project,
            VendorFile(package=[VendorPackage(vendor="example.com/old", local=f"{PROJECT_IMPORT_PATH}/internal/old")]),
        )

        ctx = load(project)

        assert ctx.packages["example.com/old"].status is ListStatus.UNUSED
        assert ListItem(ListStatus.UNUSED, "example.com/old") in ctx.list_items()

    def test_referenced_vendor_entry_is_not_unused(self, project: GoWorkspace):
        write_vendor_file(
            project.project,
            VendorFile(package=[VendorPackage(vendor="example.com/foo", local=f"{PROJECT_IMPORT_PATH}/internal/foo")]),
        )

        ctx = load(project)

        assert ctx.packages["example.com/foo"].status is ListStatus.EXTERNAL

    def test_skipped_directories(self, project: GoWorkspace):
        project.write_project("testdata/bad.go", "not go at all")
        project.write_project(".git/hooks/x.go", "not go at all")
        project.write_project("_scratch/x.go", "not go at all")
        project.write_project("README.md", "# app\n")

        ctx = load(project)

        assert set(ctx.packages) == {
            PROJECT_IMPORT_PATH,
            f"{PROJECT_IMPORT_PATH}/util",
            "fmt",
            "strings",
            "example.com/foo",
        }

    def test_parse_error_propagates(self, project: GoWorkspace):
        project.write_project("broken.go", 'import "fmt"\n')

        with pytest.raises(ImportParseError, match="broken.go"):
            load(project)

    def test_repeated_loads_are_identical(self, project: GoWorkspace):
        ctx = WorkspaceContext(project.project, project.config)

        first = ctx.load_packages()
        first_index = dict(ctx.file_imports)
        second = ctx.load_packages()

        assert first == second
        assert first_index == ctx.file_imports

    def test_list_items_sorted(self, project: GoWorkspace):
        write_vendor_file(
            project.project,
            VendorFile(package=[VendorPackage(vendor="example.com/old", local=f"{PROJECT_IMPORT_PATH}/internal/old")]),
        )

        items = load(project).list_items()

        assert is_sorted(items)
        assert [str(item) for item in items] == [
            "u example.com/old",
            "e example.com/foo",
            f"l {PROJECT_IMPORT_PATH}",
            f"l {PROJECT_IMPORT_PATH}/util",
            "s fmt",
            "s strings",
        ]
