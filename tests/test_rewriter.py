# SPDX-License-Identifier: MIT
"""Tests for the import rewriter."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from internal_vendor.errors import ImportRewriteError
from internal_vendor.rewriter import Rule, rewrite_files, rewrite_source

FOO_RULE = Rule(from_path="example.com/foo", to_path="example.com/me/app/internal/foo")


class TestRewriteSource:
    """Tests for rewrite_source."""

    def test_single_import(self):
        source = b'package main\n\nimport "example.com/foo"\n'

        result, count = rewrite_source(source, [FOO_RULE])

        assert result == b'package main\n\nimport "example.com/me/app/internal/foo"\n'
        assert count == 1

    def test_alias_comment_and_layout_preserved(self):
        source = b"""package main

import (
\t"fmt"

\tfoo   "example.com/foo" // greeting helpers
\t_ "example.com/foo/sub"
)

func main() { fmt.Println(foo.Hello()) }
"""

        result, count = rewrite_source(source, [FOO_RULE])

        assert count == 1
        assert result == source.replace(
            b'foo   "example.com/foo" // greeting helpers',
            b'foo   "example.com/me/app/internal/foo" // greeting helpers',
        )

    def test_only_exact_matches(self):
        source = b'package main\n\nimport (\n\t"example.com/foo/sub"\n\t"example.com/foobar"\n)\n'

        result, count = rewrite_source(source, [FOO_RULE])

        assert result == source
        assert count == 0

    def test_raw_string_quote_style_kept(self):
        source = b"package main\n\nimport `example.com/foo`\n"

        result, _ = rewrite_source(source, [FOO_RULE])

        assert result == b"package main\n\nimport `example.com/me/app/internal/foo`\n"

    def test_repeated_import_in_separate_declarations(self):
        source = b'package main\n\nimport "example.com/foo"\nimport f2 "example.com/foo"\n'

        result, count = rewrite_source(source, [FOO_RULE])

        assert count == 2
        assert result.count(b"example.com/me/app/internal/foo") == 2
        assert b"f2 " in result

    def test_multiple_rules(self):
        source = b'package main\n\nimport (\n\t"a.com/x"\n\t"b.com/y"\n)\n'
        rules = [Rule("a.com/x", "me/internal/x"), Rule("b.com/y", "me/internal/y")]

        result, count = rewrite_source(source, rules)

        assert count == 2
        assert result == b'package main\n\nimport (\n\t"me/internal/x"\n\t"me/internal/y"\n)\n'

    def test_first_rule_wins(self):
        source = b'package main\n\nimport "a.com/x"\n'
        rules = [Rule("a.com/x", "first/x"), Rule("a.com/x", "second/x")]

        result, _ = rewrite_source(source, rules)

        assert b'"first/x"' in result

    def test_no_rules(self):
        source = b'package main\n\nimport "fmt"\n'

        assert rewrite_source(source, []) == (source, 0)

    def test_parse_error(self):
        with pytest.raises(ImportRewriteError):
            rewrite_source(b'import "example.com/foo"\n', [FOO_RULE], filename="bad.go")


class TestRewriteFiles:
    """Tests for rewrite_files."""

    def test_rewrites_matching_files_only(self, tmp_path: Path):
        uses = tmp_path / "uses.go"
        uses.write_bytes(b'package main\n\nimport "example.com/foo"\n')
        other = tmp_path / "other.go"
        other.write_bytes(b'package main\n\nimport "fmt"\n')
        other_mtime = other.stat().st_mtime_ns

        results = rewrite_files([uses, other], [FOO_RULE])

        assert [(r.path.name, r.modified, r.imports_rewritten) for r in results] == [
            ("other.go", False, 0),
            ("uses.go", True, 1),
        ]
        assert b"example.com/me/app/internal/foo" in uses.read_bytes()
        assert other.stat().st_mtime_ns == other_mtime

    def test_batch_aborts_before_writing(self, tmp_path: Path):
        good = tmp_path / "a.go"
        original = b'package main\n\nimport "example.com/foo"\n'
        good.write_bytes(original)
        bad = tmp_path / "b.go"
        bad.write_bytes(b'import "example.com/foo"\n')

        with pytest.raises(ImportRewriteError):
            rewrite_files([good, bad], [FOO_RULE])

        assert good.read_bytes() == original

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ImportRewriteError, match="Failed to read"):
            rewrite_files([tmp_path / "gone.go"], [FOO_RULE])

    def test_no_files(self):
        assert rewrite_files([], [FOO_RULE]) == []


IMPORT_POOL = ["fmt", "os", "example.com/foo", "example.com/bar", "github.com/x/y", "example.com/foo/sub"]


@st.composite
def go_sources(draw):
    """A Go file importing a random selection of paths, some aliased."""
    paths = draw(st.lists(st.sampled_from(IMPORT_POOL), min_size=0, max_size=6))
    lines = []
    for i, path in enumerate(paths):
        alias = draw(st.sampled_from(["", f"a{i} ", "_ "]))
        comment = draw(st.sampled_from(["", " // note"]))
        lines.append(f"\t{alias}\"{path}\"{comment}")
    body = "\n".join(lines)
    return f"package main\n\nimport (\n{body}\n)\n\nfunc main() {{}}\n".encode("utf-8")


rule_sets = st.lists(
    st.sampled_from(IMPORT_POOL).map(
        lambda p: Rule(from_path=p, to_path=f"example.com/me/app/internal/{p}")
    ),
    max_size=4,
)


class TestRewriteProperties:
    @given(source=go_sources(), rules=rule_sets)
    def test_rewrite_is_idempotent(self, source, rules):
        once, _ = rewrite_source(source, rules)
        twice, count = rewrite_source(once, rules)

        assert twice == once
        assert count == 0

    @given(source=go_sources())
    def test_rules_that_never_match_leave_source_unchanged(self, source):
        rules = [Rule("nowhere.example/pkg", "x/internal/pkg")]

        assert rewrite_source(source, rules) == (source, 0)

    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture], max_examples=25)
    @given(source=go_sources(), rules=rule_sets)
    def test_rewriting_files_twice_equals_once(self, tmp_path: Path, source, rules):
        path = tmp_path / "main.go"
        path.write_bytes(source)

        rewrite_files([path], rules)
        once = path.read_bytes()
        results = rewrite_files([path], rules)

        assert path.read_bytes() == once
        assert not results[0].modified
