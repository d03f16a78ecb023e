"""
Package Usage Counter.

Counts the raw-memory usages of a package and of its transitive imports.

The ``AnalysisSession`` owns the per-root cache. One session is created for
every requested root, so a package reached through several import paths is
visited exactly once per root and its source lines are emitted only once.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Set

import libcst as cst
from libcst.metadata import CodePosition, MetadataWrapper, PositionProvider

from ctypes_geiger.analysis.matchers import classify_match, classify_role, match_allowed, role_allowed
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.enums import MatchKind, RoleKind
from ctypes_geiger.loader.graph import Package, SourceFile
from ctypes_geiger.utils.source_lines import SourceLineEmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalPackageCounts:
  """
  Usage counts of a single package, broken down by role.

  ``local`` always equals the sum of the five role counts.
  """

  local: int = 0
  variable: int = 0
  parameter: int = 0
  assignment: int = 0
  call: int = 0
  other: int = 0

  def __post_init__(self) -> None:
    parts = self.variable + self.parameter + self.assignment + self.call + self.other
    if self.local != parts:
      raise ValueError(f"local count {self.local} does not match the role counts ({parts})")

  @classmethod
  def from_roles(cls, roles: Mapping[RoleKind, int]) -> "LocalPackageCounts":
    """
    Builds counts from a role tally.

    Args:
        roles: Number of usages per role; missing roles count as zero.

    Returns:
        LocalPackageCounts: The consistent counts.
    """
    values = {role.value: roles.get(role, 0) for role in RoleKind}
    return cls(local=sum(values.values()), **values)

  def role(self, role: RoleKind) -> int:
    return getattr(self, role.value)


@dataclass(frozen=True)
class Usage:
  """A recognised construct with its role and (optionally) its start position."""

  kind: MatchKind
  role: RoleKind
  node: cst.CSTNode
  position: Optional[CodePosition] = None


class UsageCollector(cst.CSTVisitor):
  """
  Walks a module and records every construct usage.

  The ancestor chain is maintained in ``on_visit``/``on_leave``. Import
  statements are pruned; their names are declarations, not usages.
  """

  def __init__(self) -> None:
    self.usages: List[Usage] = []
    self._stack: List[cst.CSTNode] = []
    # Separate guards for selector and identifier matches
    self._seen_attributes: Set[int] = set()
    self._seen_names: Set[int] = set()

  def on_visit(self, node: cst.CSTNode) -> bool:
    self._stack.append(node)
    if isinstance(node, (cst.Import, cst.ImportFrom)):
      return False
    if isinstance(node, cst.Attribute):
      self._check(node, self._seen_attributes)
    elif isinstance(node, cst.Name):
      self._check(node, self._seen_names)
    return True

  def on_leave(self, original_node: cst.CSTNode) -> None:
    self._stack.pop()

  def _check(self, node: cst.CSTNode, seen: Set[int]) -> None:
    if id(node) in seen:
      return
    kind = classify_match(node)
    if kind is None:
      return
    seen.add(id(node))
    chain = self._stack
    # ``ctypes.c_size_t``: the name is classified where the whole attribute sits
    if len(chain) > 1 and isinstance(chain[-2], cst.Attribute) and chain[-2].attr is node:
      chain = chain[:-1]
    role = classify_role(chain)
    self.usages.append(Usage(kind=kind, role=role, node=node, position=self._position(node)))

  def _position(self, node: cst.CSTNode) -> Optional[CodePosition]:
    return None


class LocatingUsageCollector(UsageCollector):
  """
  UsageCollector that also resolves the start position of each usage.

  Must be run through a ``MetadataWrapper``.
  """

  METADATA_DEPENDENCIES = (PositionProvider,)

  def _position(self, node: cst.CSTNode) -> Optional[CodePosition]:
    return self.get_metadata(PositionProvider, node).start


class AnalysisSession:
  """
  Explicit analysis state for one requested root.

  Attributes:
      config (GeigerConfig): Active configuration.
      emitter (SourceLineEmitter): Destination of located source lines.
  """

  def __init__(self, config: GeigerConfig, emitter: Optional[SourceLineEmitter] = None):
    self.config = config
    self.emitter = emitter if emitter is not None else SourceLineEmitter()
    self._cache: Dict[str, LocalPackageCounts] = {}

  def count(self, pkg: Package) -> LocalPackageCounts:
    """
    Counts the filtered usages inside a single package.

    Standard packages count as zero unless they are part of the analysis.
    Results are cached by package path; a cache hit neither re-visits the
    syntax nor re-emits source lines.

    Args:
        pkg: The package to count.

    Returns:
        LocalPackageCounts: The per-role counts.
    """
    if not self.config.include_standard and pkg.standard:
      return LocalPackageCounts()

    cached = self._cache.get(pkg.path)
    if cached is not None:
      logger.debug(f"Cache hit for '{pkg.path}'")
      return cached

    tally: Counter = Counter()
    for source in pkg.sources:
      for usage in self._collect(source):
        if not match_allowed(usage.kind, self.config.match_filter):
          continue
        if not role_allowed(usage.role, self.config.role_filter):
          continue
        tally[usage.role] += 1
        if usage.position is not None:
          self.emitter.emit(source.path, usage.position.line, usage.position.column + 1)

    counts = LocalPackageCounts.from_roles(tally)
    self._cache[pkg.path] = counts
    return counts

  def total_count(self, pkg: Package, visited: Optional[Set[str]] = None) -> int:
    """
    Sums the local counts over all packages reachable from ``pkg``.

    Each distinct package contributes once, whatever the number of import
    paths leading to it.

    Args:
        pkg: The starting package.
        visited: Package paths already accounted for. A fresh set is used if None.

    Returns:
        int: The transitive usage count.
    """
    if visited is None:
      visited = set()
    if pkg.path in visited:
      return 0
    visited.add(pkg.path)

    total = self.count(pkg).local
    for _, child in pkg.sorted_imports():
      total += self.total_count(child, visited)
    return total

  def clear(self) -> None:
    """Drops all cached counts."""
    self._cache.clear()

  def _collect(self, source: SourceFile) -> List[Usage]:
    if self.config.emit_source_lines:
      collector: UsageCollector = LocatingUsageCollector()
      MetadataWrapper(source.module, unsafe_skip_copy=True).visit(collector)
    else:
      collector = UsageCollector()
      source.module.visit(collector)
    return collector.usages
