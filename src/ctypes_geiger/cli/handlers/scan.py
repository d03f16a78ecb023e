"""
Scan Command Handler.

Loads the requested roots, analyses each one with its own session and prints
the report tables followed by the match description and the legend.
"""

from typing import Any, Dict, List

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ctypes_geiger.analysis.report import RootReport, analyze_package, render_footer, render_report, reports_to_json
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.loader import LoadError, ProjectLoader
from ctypes_geiger.utils.console import console, log_error
from ctypes_geiger.utils.source_lines import SourceLineEmitter


def handle_scan(targets: List[str], json_mode: bool = False, **overrides: Any) -> int:
  """
  Counts usages below every target and prints the reports.

  Args:
      targets: Package directories, module files or dotted module names.
      json_mode: If True, print a JSON array instead of tables. Source lines are not emitted.
      **overrides: ``GeigerConfig`` values from the command line; None means unset.

  Returns:
      int: 0 on success, 1 on invalid configuration or a load failure.
  """
  if not json_mode:
    return _scan(targets, False, overrides)

  # stdout carries the JSON document only
  console.route_logs(Console(stderr=True))
  try:
    return _scan(targets, True, overrides)
  finally:
    console.route_logs(None)


def _scan(targets: List[str], json_mode: bool, overrides: Dict[str, Any]) -> int:
  try:
    config = GeigerConfig.load(**overrides)
  except ValidationError as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return 1

  if json_mode:
    config = config.model_copy(update={"emit_source_lines": False})

  loader = ProjectLoader(config.search_paths, include_standard=config.include_standard)
  try:
    roots = [loader.load(target) for target in targets]
  except LoadError as e:
    log_error(escape(str(e)))
    return 1

  reports: List[RootReport] = []
  for root in roots:
    emitter = SourceLineEmitter()
    try:
      report = analyze_package(root, config, emitter)
    except LoadError as e:
      log_error(escape(str(e)))
      return 1

    if json_mode:
      reports.append(report)
      continue

    if not config.hide_stats:
      # Separates emitted code lines from the table
      if config.emit_source_lines:
        console.print()
      render_report(report, config)

  if json_mode:
    print(reports_to_json(reports))
    return 0

  if not config.hide_stats:
    render_footer(config)
  return 0
