"""
Main Entry Point for ctypes-geiger CLI.

This module handles argument parsing and dispatches to the command handlers
defined in `ctypes_geiger.cli.handlers`.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from ctypes_geiger import __version__
from ctypes_geiger.cli import handlers


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.
  Options left unset fall back to ``[tool.ctypes_geiger]`` in pyproject.toml.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="ctypes-geiger: Count raw-memory ctypes usages in an import tree")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: SCAN ---
  cmd_scan = subparsers.add_parser("scan", help="Count usages in packages and their imports")
  cmd_scan.add_argument(
    "targets",
    nargs="*",
    default=["."],
    help="Package directories, module files or importable module names (default: .)",
  )
  cmd_scan.add_argument("-d", "--max-depth", type=int, default=None, help="Maximum depth in the import tree (default: 10)")
  cmd_scan.add_argument(
    "--show-only-once",
    action=argparse.BooleanOptionalAction,
    default=None,
    help="Show a repeated package only once and abbreviate it afterwards (default: on)",
  )
  cmd_scan.add_argument(
    "-l", "--link", action="store_true", default=None, help="Print PyPI links instead of package names"
  )
  cmd_scan.add_argument(
    "-v", "--verbose", action="store_true", default=None, help="Show usage counts per role in separate columns"
  )
  cmd_scan.add_argument(
    "-q", "--hide-stats", action="store_true", default=None, help="Hide the table and summary (use with --show-code)"
  )
  cmd_scan.add_argument("--show-code", action="store_true", default=None, help="Print the code lines with usages")
  cmd_scan.add_argument(
    "--include-std", action="store_true", default=None, help="Also analyze and show standard library packages"
  )
  cmd_scan.add_argument(
    "-m",
    "--match",
    default=None,
    help="Construct to count: all, pointer, sizeof, offsetof, alignof, sliceheader, stringheader, uintptr (default: pointer)",
  )
  cmd_scan.add_argument(
    "-f",
    "--filter",
    default=None,
    help="Only count usages in this role: all, variable, parameter, assignment, call, other (default: all)",
  )
  cmd_scan.add_argument(
    "--search-path",
    type=Path,
    action="append",
    default=None,
    help="Extra directory to resolve imports in (repeatable)",
  )
  cmd_scan.add_argument("--json", action="store_true", help="Output the reports as JSON")

  # --- Command: CATALOGUE ---
  subparsers.add_parser("catalogue", help="List the counted constructs")

  args = parser.parse_args(argv)

  if args.command == "scan":
    return handlers.handle_scan(
      args.targets,
      json_mode=args.json,
      max_depth=args.max_depth,
      shorten_repeats=args.show_only_once,
      link_style=args.link,
      detailed_stats=args.verbose,
      hide_stats=args.hide_stats,
      emit_source_lines=args.show_code,
      include_standard=args.include_std,
      match_filter=args.match,
      role_filter=args.filter,
      search_paths=args.search_path,
    )

  elif args.command == "catalogue":
    return handlers.handle_catalogue()

  return 1
