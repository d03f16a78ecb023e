"""
Tests for the Import Tree Walker.

Verifies:
1. Indent arithmetic for the ASCII tree.
2. Diamond imports with and without abbreviated repeats.
3. Cycles terminate.
4. Depth truncation rows.
5. Standard packages are elided unless included.
6. ``classified == import_count + 1`` in every case.
"""

from pathlib import Path
from unittest.mock import patch

import libcst as cst
import pytest

from ctypes_geiger.analysis.counter import AnalysisSession
from ctypes_geiger.analysis.tree import (
  TRUNCATION_MESSAGE,
  IndentType,
  RowKind,
  RowStatus,
  Stats,
  TreeWalker,
  child_indents,
  display_name,
  indent_string,
  next_indents,
)
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.loader.graph import Package, SourceFile


def _pkg(path: str, code: str = "", imports=()) -> Package:
  pkg = Package(path=path, sources=[SourceFile(path=Path(f"{path}.py"), module=cst.parse_module(code))])
  for child in imports:
    pkg.imports[child.path] = child
  return pkg


def _walk(root: Package, **options):
  config = GeigerConfig(**options)
  return TreeWalker(AnalysisSession(config), config).walk(root)


def _diamond():
  shared = _pkg("shared", "x = ctypes.c_void_p(0)\n")
  left = _pkg("left", "", [shared])
  right = _pkg("right", "", [shared])
  return _pkg("root", "", [left, right])


def test_indent_helpers():
  assert next_indents([]) == []
  assert next_indents([IndentType.T]) == [IndentType.I]
  assert next_indents([IndentType.I, IndentType.L]) == [IndentType.I, IndentType.SPACE]
  assert child_indents(1, 2, [IndentType.I]) == [IndentType.I, IndentType.T]
  assert child_indents(2, 2, [IndentType.I]) == [IndentType.I, IndentType.L]
  assert indent_string([IndentType.I, IndentType.SPACE, IndentType.T, IndentType.L]) == "│   ├─└─"


def test_stats_are_additive():
  total = Stats(import_count=1, unsafe_count=1) + Stats(import_count=2, safe_count=3)
  assert total == Stats(import_count=3, unsafe_count=1, safe_count=3)
  assert total.classified == 4


def test_diamond_with_shortened_repeats():
  result = _walk(_diamond())

  assert [r.label for r in result.rows] == ["root", "├─left", "│ └─shared", "└─right", "  └─shared..."]
  assert result.rows[-1].kind == RowKind.REPEAT
  assert result.rows[-1].status == RowStatus.UNSAFE
  assert result.stats == Stats(import_count=3, unsafe_count=1, transitively_unsafe_count=3, safe_count=0)
  assert result.stats.classified == result.stats.import_count + 1


def test_diamond_rendered_twice_is_classified_once():
  result = _walk(_diamond(), shorten_repeats=False)

  assert [r.label for r in result.rows] == ["root", "├─left", "│ └─shared", "└─right", "  └─shared"]
  assert all(r.kind == RowKind.PACKAGE for r in result.rows)
  assert result.stats.import_count == 3
  assert result.stats.classified == 4


def test_root_total_counts_shared_package_once():
  result = _walk(_diamond())

  assert result.rows[0].total == 1
  assert result.rows[0].counts.local == 0
  assert result.rows[0].status == RowStatus.TRANSITIVE


@pytest.mark.parametrize("shorten", [True, False])
def test_cycle_terminates(shorten):
  a = _pkg("a")
  b = _pkg("b", "", [a])
  a.imports["b"] = b

  result = _walk(a, shorten_repeats=shorten)

  assert [r.label for r in result.rows] == ["a", "└─b", "  └─a..."]
  assert result.stats.import_count == 1
  assert result.stats.classified == 2
  assert result.stats.safe_count == 2


def test_depth_truncation():
  c = _pkg("c")
  b = _pkg("b", "", [c])
  a = _pkg("a", "", [b])
  root = _pkg("root", "", [a])

  result = _walk(root, max_depth=1)

  labels = [r.label for r in result.rows]
  assert labels == ["root", "└─a", f"  └─{TRUNCATION_MESSAGE}"]
  assert result.rows[-1].kind == RowKind.TRUNCATED
  assert result.rows[-1].counts is None
  assert result.stats.import_count == 1
  assert result.stats.classified == 2


def test_depth_zero_truncates_root_children():
  root = _pkg("root", "", [_pkg("a")])

  result = _walk(root, max_depth=0)

  assert [r.label for r in result.rows] == ["root", f"└─{TRUNCATION_MESSAGE}"]
  assert result.stats.import_count == 0
  assert result.stats.classified == 1


def test_leaf_at_max_depth_is_not_truncated():
  root = _pkg("root", "", [_pkg("a")])

  result = _walk(root, max_depth=1)

  assert [r.label for r in result.rows] == ["root", "└─a"]


def test_standard_children_elided():
  root = _pkg("root", "", [Package(path="os", standard=True), _pkg("acme")])

  hidden = _walk(root)
  shown = _walk(root, include_standard=True)

  assert [r.label for r in hidden.rows] == ["root", "└─acme"]
  assert hidden.stats.import_count == 1
  assert [r.label for r in shown.rows] == ["root", "├─acme", "└─os"]
  assert shown.stats.import_count == 2


def test_children_sorted():
  root = _pkg("root", "", [_pkg("zeta"), _pkg("alpha"), _pkg("mid")])

  result = _walk(root)

  assert [r.package for r in result.rows] == ["root", "alpha", "mid", "zeta"]


def test_display_name_links_installed_packages():
  pkg = Package(path="rich.console", installed=True)
  local = Package(path="acme")

  with patch("ctypes_geiger.analysis.tree._distributions", return_value={"rich": ["rich"]}):
    assert display_name(pkg, GeigerConfig(link_style=True)) == "https://pypi.org/project/rich/"
    assert display_name(pkg, GeigerConfig()) == "rich.console"
    assert display_name(local, GeigerConfig(link_style=True)) == "acme"
