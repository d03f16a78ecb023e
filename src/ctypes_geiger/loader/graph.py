"""
Package graph data model.

A ``Package`` is a node of the import graph: an importable package directory
(all ``*.py`` files directly inside it) or a standalone module file. The
analysis engine only reads packages; the loader creates and owns them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import libcst as cst


@dataclass
class SourceFile:
  """A parsed source file belonging to a package."""

  path: Path
  module: cst.Module


@dataclass(eq=False)
class Package:
  """
  Node of the import graph.

  Two Package values with the same ``path`` denote the same package; equality
  and hashing therefore only consider the path.

  Attributes:
      path (str): Dotted import path (e.g. ``acme.codec``).
      sources (List[SourceFile]): Parsed files in a stable (sorted) order.
      imports (Dict[str, Package]): Directly imported packages keyed by import path.
      location (Optional[Path]): Directory or file the package was loaded from.
      installed (bool): True if the package lives in a site-packages directory.
      standard (bool): True if the import resolved to the standard library rather
          than to a search path.
  """

  path: str
  sources: List[SourceFile] = field(default_factory=list)
  imports: Dict[str, "Package"] = field(default_factory=dict)
  location: Optional[Path] = None
  installed: bool = False
  standard: bool = False

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Package):
      return NotImplemented
    return self.path == other.path

  def __hash__(self) -> int:
    return hash(self.path)

  def __repr__(self) -> str:
    return f"Package({self.path!r}, sources={len(self.sources)}, imports={sorted(self.imports)})"

  def sorted_imports(self) -> Iterator[Tuple[str, "Package"]]:
    """
    Iterates the direct imports in lexicographic order of their import path.

    Yields:
        Tuple[str, Package]: Import path and imported package.
    """
    for key in sorted(self.imports):
      yield key, self.imports[key]
