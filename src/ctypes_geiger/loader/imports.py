"""
Import Collection.

This module provides the ``ImportCollector``, a LibCST visitor that lists the
modules a source file imports. Relative imports are resolved against the
package that owns the file.

Two kinds of names are collected:

1.  ``modules``: names that must be modules (``import a.b``, ``from a import b`` -> ``a``).
2.  ``candidates``: names that may be submodules (``from a import b`` -> ``a.b``).
    The loader only keeps a candidate if a module of that exact name exists.
"""

import logging
from typing import Optional, Set, Union

import libcst as cst

logger = logging.getLogger(__name__)


def dotted_name(node: Union[cst.Name, cst.Attribute]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier.

  Returns:
    str: The dotted representation (e.g., "acme.codec.frames").
    Returns an empty string if the node is not a Name/Attribute chain.

  Example:
    >>> dotted_name(cst.Attribute(value=cst.Name("os"), attr=cst.Name("path")))
    'os.path'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    return f"{dotted_name(node.value)}.{node.attr.value}"
  return ""


class ImportCollector(cst.CSTVisitor):
  """
  Collects the modules imported by a single source file.

  Attributes:
      package (Optional[str]): Import path of the package owning the file,
          or None for a standalone module (relative imports are then invalid).
      modules (Set[str]): Imported module names.
      candidates (Set[str]): Names that are modules only if they exist as such.
  """

  def __init__(self, package: Optional[str]):
    """
    Initializes the collector.

    Args:
        package: Import path of the package the scanned file belongs to.
    """
    self.package = package
    self.modules: Set[str] = set()
    self.candidates: Set[str] = set()

  def visit_Import(self, node: cst.Import) -> bool:
    """
    Visits ``import x``, ``import x.y as z``.

    Args:
        node: The import statement node.

    Returns:
        False, import statements have no nested imports.
    """
    for alias in node.names:
      name = dotted_name(alias.name)
      if name:
        self.modules.add(name)
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    """
    Visits ``from x import y`` and its relative forms.

    Args:
        node: The import-from statement node.

    Returns:
        False, import statements have no nested imports.
    """
    base = self._resolve_base(node)
    if not base:
      return False

    self.modules.add(base)

    if isinstance(node.names, cst.ImportStar):
      return False

    for alias in node.names:
      name = dotted_name(alias.name)
      if name:
        self.candidates.add(f"{base}.{name}")
    return False

  def _resolve_base(self, node: cst.ImportFrom) -> str:
    """
    Computes the absolute module name an import-from refers to.

    Args:
        node: The import-from statement node.

    Returns:
        The absolute dotted name, or an empty string for an invalid relative import.
    """
    module = dotted_name(node.module) if node.module else ""
    level = len(node.relative)
    if level == 0:
      return module

    if not self.package:
      logger.debug(f"Relative import outside of a package ignored: level {level}")
      return ""

    parts = self.package.split(".")
    if level - 1 >= len(parts):
      logger.debug(f"Relative import beyond top-level package '{self.package}' ignored")
      return ""

    base = ".".join(parts[: len(parts) - (level - 1)])
    return f"{base}.{module}" if module else base
