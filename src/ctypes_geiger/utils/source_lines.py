"""
Source Line Emission.

Prints the source line of every counted usage in the compiler-style format
``<file>:<line>:<col>: <code>`` so that editors can jump to it.
"""

from pathlib import Path
from typing import Dict, List

from rich.markup import escape

from ctypes_geiger.utils.console import console, log_warning


class SourceLineEmitter:
  """
  Re-reads located lines from disk and prints them to the active console.

  File contents are cached per emitter, which lives as long as one
  analysis session.

  Attributes:
      emitted (int): Number of lines printed so far.
  """

  def __init__(self) -> None:
    self._lines: Dict[Path, List[str]] = {}
    self.emitted = 0

  def emit(self, path: Path, line: int, column: int) -> bool:
    """
    Prints a single located line.

    Args:
        path: The source file.
        line: 1-based line number.
        column: 1-based column number.

    Returns:
        bool: False if the file could not be re-read (a warning is logged).
    """
    try:
      lines = self._read(path)
    except OSError as e:
      log_warning(f"Cannot re-read {escape(str(path))}: {escape(str(e))}")
      return False

    text = lines[line - 1].strip() if 0 < line <= len(lines) else ""
    console.print(f"{path}:{line}:{column}: {text}", markup=False, highlight=False, soft_wrap=True)
    self.emitted += 1
    return True

  def _read(self, path: Path) -> List[str]:
    if path not in self._lines:
      self._lines[path] = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return self._lines[path]
