"""
Tests for Source Line Emission.
"""

from ctypes_geiger.utils.source_lines import SourceLineEmitter


def test_emit_prints_location_and_trimmed_line(tmp_path, capture_console):
  source = tmp_path / "mod.py"
  source.write_text("def f():\n    return ctypes.sizeof(x)   \n", encoding="utf-8")
  emitter = SourceLineEmitter()

  assert emitter.emit(source, 2, 12)

  assert f"{source}:2:12: return ctypes.sizeof(x)" in capture_console.export_text()
  assert emitter.emitted == 1


def test_unreadable_file_degrades_to_warning(tmp_path, capture_console):
  emitter = SourceLineEmitter()

  assert emitter.emit(tmp_path / "gone.py", 1, 1) is False

  output = capture_console.export_text()
  assert "Cannot re-read" in output
  assert emitter.emitted == 0
