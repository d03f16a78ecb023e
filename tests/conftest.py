"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Project tree factory writing packages below ``tmp_path``.
- Recording console injection for output assertions.
- The two reference source scenarios used across the suite.
"""

import io
import sys
from pathlib import Path
from typing import Callable, Dict

import pytest
from rich.console import Console

# Add src to path so we can import 'ctypes_geiger' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from ctypes_geiger.utils.console import reset_console, set_console  # noqa: E402

# Class field, parameter, assignment, local declaration and call argument.
SCENARIO_A = """\
import ctypes


class Bar:
  baz: ctypes.c_void_p


def foo(x: ctypes.c_void_p):
  _ = ctypes.c_void_p(id(x))


def entry():
  x = 42
  y: ctypes.c_void_p
  foo(ctypes.c_void_p(id(x)))
  foo(y)
"""

# Every construct kind; 7 pointer sites and 13 sites overall.
SCENARIO_B = """\
import ctypes


class Header(ctypes.Structure):
  data: ctypes.c_void_p


def release(handle: ctypes.c_void_p) -> None:
  pass


def acquire(addr):
  ptr = ctypes.c_void_p(addr)
  release(ctypes.c_void_p(addr))
  null: ctypes.c_void_p
  buf = [ctypes.c_void_p(0)]
  size = ctypes.sizeof(Header)
  align = ctypes.alignment(Header)
  where = ctypes.addressof(buf)
  raw = ctypes.string_at(addr, size)
  text = ctypes.c_char_p(raw)
  width: ctypes.c_size_t
  return ctypes.c_void_p(addr)
"""


@pytest.fixture
def scenario_a() -> str:
  return SCENARIO_A


@pytest.fixture
def scenario_b() -> str:
  return SCENARIO_B


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
  """
  Returns a factory writing ``{relative_path: source}`` below ``tmp_path``.
  """

  def _make(files: Dict[str, str]) -> Path:
    for rel, code in files.items():
      target = tmp_path / rel
      target.parent.mkdir(parents=True, exist_ok=True)
      target.write_text(code, encoding="utf-8")
    return tmp_path

  return _make


@pytest.fixture
def capture_console():
  """Injects a wide recording console and restores stdout afterwards."""
  recorder = Console(record=True, width=250, file=io.StringIO())
  set_console(recorder)
  yield recorder
  reset_console()
