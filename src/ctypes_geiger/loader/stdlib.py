"""
Standard Library Classification.

Decides whether an import path belongs to the interpreter's own distribution.
The set of standard module names is enumerated once per process.
"""

import sys
from functools import lru_cache
from typing import FrozenSet, Optional

from ctypes_geiger.loader.errors import LoadError


@lru_cache(maxsize=None)
def standard_packages() -> FrozenSet[str]:
  """
  Enumerates the top-level module names shipped with the running interpreter.

  Returns:
      FrozenSet[str]: Standard module names (e.g. ``os``, ``json``, ``ctypes``).

  Raises:
      LoadError: If the interpreter does not expose ``sys.stdlib_module_names``.
  """
  names = getattr(sys, "stdlib_module_names", None)
  if not names:
    raise LoadError("Cannot enumerate the standard library (requires Python 3.10+)")
  return frozenset(names) | frozenset(sys.builtin_module_names)


def is_standard(path: str) -> bool:
  """
  Checks whether a package path is part of the standard library.

  The loader collapses standard imports onto their top-level name, so an exact
  membership test is sufficient.

  Args:
      path: The package import path.

  Returns:
      True if the path names a standard package.
  """
  return path in standard_packages()


def standard_root(name: str) -> Optional[str]:
  """
  Maps a dotted import to the standard package it belongs to.

  Args:
      name: A dotted import name such as ``os.path``.

  Returns:
      The top-level name (``os``) if it is a standard package, else None.
  """
  root = name.split(".")[0]
  if is_standard(root):
    return root
  return None
