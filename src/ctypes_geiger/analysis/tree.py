"""
Import Tree Walker.

Walks the import graph of a root package depth-first (pre-order), producing
one report row per rendered package and the package classification stats.

Tree shape
----------
Each row is prefixed by an indent built from four segments::

    acme
    ├─acme.codec
    │ └─acme.frames
    └─acme.util...

Rules:

1.  Children are visited in lexicographic order of their import path.
2.  Standard packages are skipped unless they are part of the analysis.
3.  At ``max_depth`` a single "Maximum depth reached" row replaces the children.
4.  A package that was already rendered is either abbreviated (``...`` suffix)
    or rendered again, but it is classified only once.
"""

import importlib.metadata
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, Mapping, Optional, Sequence, Set

from pydantic import BaseModel

from ctypes_geiger.analysis.counter import AnalysisSession, LocalPackageCounts
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.loader.graph import Package

TRUNCATION_MESSAGE = "Maximum depth reached. Use --max-depth= to increase it"
REPEAT_SUFFIX = "..."


class IndentType(str, Enum):
  """Segments of the ASCII tree prefix."""

  SPACE = "  "
  I = "│ "  # noqa: E741
  T = "├─"
  L = "└─"


def indent_string(indents: Sequence[IndentType]) -> str:
  return "".join(i.value for i in indents)


def next_indents(indents: Sequence[IndentType]) -> List[IndentType]:
  """
  Computes the prefix shared by the children of a row.

  The last segment of the parent is replaced: nothing continues below an
  ``L`` or a space, while a vertical bar continues below ``I`` and ``T``.

  Args:
      indents: Indent segments of the parent row.

  Returns:
      List[IndentType]: Segments to which the child connector is appended.
  """
  if not indents:
    return []
  last = indents[-1]
  tail = IndentType.SPACE if last in (IndentType.L, IndentType.SPACE) else IndentType.I
  return list(indents[:-1]) + [tail]


def child_indents(index: int, count: int, nxt: Sequence[IndentType]) -> List[IndentType]:
  """
  Appends the connector of the ``index``-th (1-based) of ``count`` children.

  Returns:
      List[IndentType]: ``L`` for the last child, ``T`` otherwise.
  """
  return list(nxt) + [IndentType.L if index == count else IndentType.T]


class Stats(BaseModel):
  """
  Package classification totals of a (sub)tree.

  Attributes:
      import_count: Distinct packages imported, excluding the root itself.
      unsafe_count: Packages with local usages.
      transitively_unsafe_count: Packages without local usages that reach some.
      safe_count: Packages whose transitive count is zero.
  """

  import_count: int = 0
  unsafe_count: int = 0
  transitively_unsafe_count: int = 0
  safe_count: int = 0

  def __add__(self, other: "Stats") -> "Stats":
    return Stats(
      import_count=self.import_count + other.import_count,
      unsafe_count=self.unsafe_count + other.unsafe_count,
      transitively_unsafe_count=self.transitively_unsafe_count + other.transitively_unsafe_count,
      safe_count=self.safe_count + other.safe_count,
    )

  @property
  def classified(self) -> int:
    return self.unsafe_count + self.transitively_unsafe_count + self.safe_count


class RowStatus(str, Enum):
  UNSAFE = "unsafe"
  TRANSITIVE = "transitive"
  SAFE = "safe"

  @classmethod
  def of(cls, local: int, total: int) -> "RowStatus":
    if local > 0:
      return cls.UNSAFE
    if total == 0:
      return cls.SAFE
    return cls.TRANSITIVE


class RowKind(str, Enum):
  PACKAGE = "package"
  REPEAT = "repeat"
  TRUNCATED = "truncated"


class ReportRow(BaseModel):
  """
  One line of the report table.

  ``truncated`` rows only carry a label; the other kinds carry the package
  path, its counts and its status.
  """

  kind: RowKind
  label: str
  package: Optional[str] = None
  total: Optional[int] = None
  counts: Optional[LocalPackageCounts] = None
  status: Optional[RowStatus] = None


@dataclass
class WalkResult:
  rows: List[ReportRow]
  stats: Stats


@lru_cache(maxsize=None)
def _distributions() -> Mapping[str, List[str]]:
  return importlib.metadata.packages_distributions()


def display_name(pkg: Package, config: GeigerConfig) -> str:
  """
  Returns the printed name of a package.

  With ``link_style`` enabled, installed packages that belong to a known
  distribution are shown as their PyPI project URL.

  Args:
      pkg: The package.
      config: Active configuration.

  Returns:
      str: The import path or the project link.
  """
  if config.link_style and pkg.installed:
    dists = _distributions().get(pkg.path.split(".")[0])
    if dists:
      return f"https://pypi.org/project/{dists[0]}/"
  return pkg.path


class TreeWalker:
  """
  Renders the import tree of one root into report rows.

  Attributes:
      session (AnalysisSession): Counting state of the root being walked.
      config (GeigerConfig): Active configuration.
  """

  def __init__(self, session: AnalysisSession, config: GeigerConfig):
    self.session = session
    self.config = config

  def walk(self, root: Package) -> WalkResult:
    """
    Walks the tree below ``root``.

    Args:
        root: The requested root package.

    Returns:
        WalkResult: Rows in display order and the aggregated stats.
    """
    rows: List[ReportRow] = []
    seen: Set[str] = set()
    stats = self._visit(root, [], rows, seen, frozenset())
    return WalkResult(rows=rows, stats=stats)

  def _children(self, pkg: Package) -> List[Package]:
    return [
      child for _, child in pkg.sorted_imports() if self.config.include_standard or not child.standard
    ]

  def _row(self, kind: RowKind, pkg: Package, indents: Sequence[IndentType], suffix: str = "") -> ReportRow:
    counts = self.session.count(pkg)
    total = self.session.total_count(pkg)
    return ReportRow(
      kind=kind,
      label=f"{indent_string(indents)}{display_name(pkg, self.config)}{suffix}",
      package=pkg.path,
      total=total,
      counts=counts,
      status=RowStatus.of(counts.local, total),
    )

  def _visit(
    self,
    pkg: Package,
    indents: List[IndentType],
    rows: List[ReportRow],
    seen: Set[str],
    ancestors: frozenset,
  ) -> Stats:
    first_visit = pkg.path not in seen
    seen.add(pkg.path)

    row = self._row(RowKind.PACKAGE, pkg, indents)
    rows.append(row)

    stats = Stats()
    if first_visit:
      if row.status == RowStatus.UNSAFE:
        stats.unsafe_count += 1
      elif row.status == RowStatus.TRANSITIVE:
        stats.transitively_unsafe_count += 1
      else:
        stats.safe_count += 1

    children = self._children(pkg)
    nxt = next_indents(indents)

    if len(indents) == self.config.max_depth and children:
      rows.append(
        ReportRow(
          kind=RowKind.TRUNCATED,
          label=f"{indent_string(nxt + [IndentType.L])}{TRUNCATION_MESSAGE}",
        )
      )
      return stats

    stats.import_count += len(children)
    path = ancestors | {pkg.path}

    for index, child in enumerate(children, start=1):
      indent = child_indents(index, len(children), nxt)

      if child.path in seen:
        # Already counted through another import path
        stats.import_count -= 1
        if self.config.shorten_repeats or child.path in path:
          rows.append(self._row(RowKind.REPEAT, child, indent, suffix=REPEAT_SUFFIX))
          continue

      stats = stats + self._visit(child, indent, rows, seen, path)

    return stats
