"""
Report Assembly.

Turns the rows and stats of a walked root into a borderless Rich table, the
summary sentence and the legend, or into machine readable JSON.
"""

import json
from typing import List, Optional, Sequence

from pydantic import BaseModel
from rich.table import Table
from rich.text import Text

from ctypes_geiger.analysis.counter import AnalysisSession
from ctypes_geiger.analysis.matchers import CATALOGUE, match_allowed
from ctypes_geiger.analysis.tree import ReportRow, RowKind, RowStatus, Stats, TreeWalker
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.enums import ALL, RoleKind
from ctypes_geiger.loader.graph import Package
from ctypes_geiger.utils.console import console
from ctypes_geiger.utils.source_lines import SourceLineEmitter

_ROW_STYLES = {
  RowStatus.UNSAFE: "red",
  RowStatus.TRANSITIVE: "",
  RowStatus.SAFE: "green",
}


class RootReport(BaseModel):
  """
  Result of analysing one requested root.

  Attributes:
      root: Import path of the root package.
      rows: Table rows in display order.
      stats: Classification totals of the whole tree.
  """

  root: str
  rows: List[ReportRow]
  stats: Stats


def analyze_package(root: Package, config: GeigerConfig, emitter: Optional[SourceLineEmitter] = None) -> RootReport:
  """
  Analyses one loaded root with a fresh session.

  Args:
      root: The loaded root package.
      config: Active configuration.
      emitter: Destination of located source lines, if any.

  Returns:
      RootReport: Rows and stats of the root.
  """
  session = AnalysisSession(config, emitter)
  result = TreeWalker(session, config).walk(root)
  return RootReport(root=root.path, rows=result.rows, stats=result.stats)


def column_headers(config: GeigerConfig) -> List[str]:
  """
  Lists the table headers for the active configuration.

  Args:
      config: Active configuration.

  Returns:
      List[str]: Header labels, the package path always last.
  """
  local = "Local Package" if config.role_filter == ALL else f"Local Package {config.role_filter}"
  headers = ["With Dependencies", local]
  if config.detailed_columns:
    headers.extend(role.value.capitalize() for role in RoleKind)
  headers.append("Package Path")
  return headers


def row_cells(row: ReportRow, config: GeigerConfig) -> List[str]:
  """
  Formats one report row as table cells.

  Args:
      row: The report row.
      config: Active configuration.

  Returns:
      List[str]: One string per column of ``column_headers(config)``.
  """
  width = len(column_headers(config))
  if row.kind == RowKind.TRUNCATED or row.counts is None:
    return [""] * (width - 1) + [row.label]

  cells = [str(row.total), str(row.counts.local)]
  if config.detailed_columns:
    cells.extend(str(row.counts.role(role)) for role in RoleKind)
  cells.append(row.label)
  return cells


def row_style(row: ReportRow) -> str:
  if row.status is None:
    return ""
  return _ROW_STYLES[row.status]


def build_table(report: RootReport, config: GeigerConfig) -> Table:
  """
  Builds the borderless report table.

  Count columns are centred, the package path column is left aligned.

  Args:
      report: The root report.
      config: Active configuration.

  Returns:
      Table: The populated Rich table.
  """
  table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
  headers = column_headers(config)
  for i, header in enumerate(headers):
    justify = "left" if i == len(headers) - 1 else "center"
    table.add_column(header, justify=justify, no_wrap=True)

  for row in report.rows:
    table.add_row(*[Text(cell) for cell in row_cells(row, config)], style=row_style(row) or None)
  return table


def summary_lines(report: RootReport) -> List[Text]:
  """
  Produces the package classification summary.

  Category lines are only present when their count is positive.

  Args:
      report: The root report.

  Returns:
      List[Text]: Styled summary lines.
  """
  stats = report.stats
  lines = [Text(f"Package {report.root} including imports effectively makes up {stats.import_count + 1} packages")]
  if stats.unsafe_count > 0:
    lines.append(Text(f"  {stats.unsafe_count} of those contain unsafe usages", style="red"))
  if stats.transitively_unsafe_count > 0:
    lines.append(
      Text(
        f"  {stats.transitively_unsafe_count} of those further import packages that contain unsafe usages",
        style="white",
      )
    )
  if stats.safe_count > 0:
    lines.append(Text(f"  {stats.safe_count} of those do not contain any unsafe usages", style="green"))
  return lines


def match_description(config: GeigerConfig) -> str:
  """
  Describes which constructs were counted.

  Args:
      config: Active configuration.

  Returns:
      str: E.g. ``Counting occurrences of ctypes.c_void_p``.
  """
  names = [name for kind, name in CATALOGUE.items() if match_allowed(kind, config.match_filter)]
  return f"Counting occurrences of {', '.join(names)}"


def legend_lines() -> List[Text]:
  return [
    Text.assemble(("Packages in green", "green"), " have no unsafe usages"),
    Text.assemble(("Packages in red", "red"), " contain unsafe usages"),
    Text.assemble(("Packages in white", "white"), " import packages with unsafe usages"),
  ]


def render_report(report: RootReport, config: GeigerConfig) -> None:
  """
  Prints the table and the summary of one root to the active console.

  Args:
      report: The root report.
      config: Active configuration.
  """
  console.print(build_table(report, config))
  console.print()
  for line in summary_lines(report):
    console.print(line)
  console.print()


def render_footer(config: GeigerConfig) -> None:
  """
  Prints the counted constructs and the colour legend once after all roots.

  Args:
      config: Active configuration.
  """
  console.print(match_description(config), markup=False, highlight=False)
  console.print()
  for line in legend_lines():
    console.print(line)


def reports_to_json(reports: Sequence[RootReport], indent: Optional[int] = 2) -> str:
  """
  Serializes reports for machine consumption.

  Args:
      reports: Reports of all requested roots.
      indent: JSON indentation.

  Returns:
      str: A JSON array with one object per root.
  """
  return json.dumps([r.model_dump(mode="json") for r in reports], indent=indent)
