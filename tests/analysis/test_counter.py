"""
Tests for the Package Usage Counter.

Verifies:
1. The reference scenarios produce the expected per-role counts.
2. Match and role filters narrow the tally.
3. Standard packages count as zero unless included.
4. Cache hits neither re-visit nor re-emit source lines.
5. Transitive totals count each reachable package exactly once.
"""

from pathlib import Path

import libcst as cst
import pytest

from ctypes_geiger.analysis.counter import AnalysisSession, LocalPackageCounts
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.enums import RoleKind
from ctypes_geiger.loader.graph import Package, SourceFile


def _pkg(path: str, code: str = "", imports=()) -> Package:
  pkg = Package(path=path, sources=[SourceFile(path=Path(f"{path}.py"), module=cst.parse_module(code))])
  for child in imports:
    pkg.imports[child.path] = child
  return pkg


def test_scenario_a_counts(scenario_a):
  session = AnalysisSession(GeigerConfig())
  counts = session.count(_pkg("testdata", scenario_a))

  assert counts == LocalPackageCounts(local=5, variable=2, parameter=1, assignment=1, call=1, other=0)


def test_scenario_b_pointer_only(scenario_b):
  counts = AnalysisSession(GeigerConfig()).count(_pkg("mixed", scenario_b))

  assert counts.local == 7
  assert counts.assignment == 3
  assert counts.variable == 2


def test_scenario_b_all_kinds(scenario_b):
  counts = AnalysisSession(GeigerConfig(match_filter="all")).count(_pkg("mixed", scenario_b))

  assert counts.local == 13
  assert counts.assignment == 8
  assert counts.variable == 3
  assert counts.parameter == 1
  assert counts.call == 1
  assert counts.other == 0


def test_role_filter_keeps_only_that_role(scenario_b):
  config = GeigerConfig(match_filter="all", role_filter="variable")
  counts = AnalysisSession(config).count(_pkg("mixed", scenario_b))

  assert counts.local == counts.variable == 3
  assert counts.assignment == 0


def test_standard_package_counts_zero():
  std = _pkg("ctypes", "x = ctypes.c_void_p(0)\n")
  std.standard = True

  assert AnalysisSession(GeigerConfig()).count(std).local == 0
  assert AnalysisSession(GeigerConfig(include_standard=True)).count(std).local == 1


def test_first_party_package_with_standard_name_is_counted():
  local = _pkg("code", "x = ctypes.c_void_p(0)\n")

  assert AnalysisSession(GeigerConfig()).count(local).local == 1


def test_counts_invariant():
  counts = LocalPackageCounts.from_roles({RoleKind.CALL: 2, RoleKind.OTHER: 1})
  assert counts.local == 3
  assert counts.role(RoleKind.CALL) == 2

  with pytest.raises(ValueError):
    LocalPackageCounts(local=2, variable=1)


def test_count_is_cached_and_emits_once(tmp_path, capture_console):
  source = tmp_path / "native.py"
  source.write_text("import ctypes\nx = ctypes.c_void_p(0)\n", encoding="utf-8")
  pkg = Package(path="native", sources=[SourceFile(path=source, module=cst.parse_module(source.read_text()))])

  session = AnalysisSession(GeigerConfig(emit_source_lines=True))
  first = session.count(pkg)
  second = session.count(pkg)

  assert first is second
  assert session.emitter.emitted == 1
  output = capture_console.export_text()
  assert f"{source}:2:5: x = ctypes.c_void_p(0)" in output


def test_clear_drops_cache():
  pkg = _pkg("a", "x = ctypes.c_void_p(0)\n")
  session = AnalysisSession(GeigerConfig())
  first = session.count(pkg)

  session.clear()

  assert session.count(pkg) is not first


def test_total_count_diamond_counts_shared_package_once():
  shared = _pkg("shared", "x = ctypes.c_void_p(0)\ny = ctypes.c_void_p(1)\n")
  left = _pkg("left", "p: ctypes.c_void_p\n", [shared])
  right = _pkg("right", "", [shared])
  root = _pkg("root", "", [left, right])

  session = AnalysisSession(GeigerConfig())

  assert session.total_count(root) == 3
  assert session.total_count(right) == 2
  # Fresh visited set per call
  assert session.total_count(root) == 3


def test_total_count_terminates_on_cycles():
  a = _pkg("a", "x = ctypes.c_void_p(0)\n")
  b = _pkg("b", "y = ctypes.c_void_p(0)\n", [a])
  a.imports["b"] = b

  assert AnalysisSession(GeigerConfig()).total_count(a) == 2


def test_total_count_respects_visited():
  a = _pkg("a", "x = ctypes.c_void_p(0)\n")

  assert AnalysisSession(GeigerConfig()).total_count(a, {"a"}) == 0
