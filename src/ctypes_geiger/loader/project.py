"""
Project Loader.

Builds the import graph of a Python project. Every package (a directory of
``*.py`` files, or a standalone module file) is parsed once with LibCST, its
imports are collected with the ``ImportCollector`` and resolved against the
search paths.

Resolution rules:

1.  Standard library imports collapse onto their top-level name (``os.path`` -> ``os``).
    They are only parsed when standard packages are included in the analysis. A
    project directory or module of the same name (``code``, ``types``) on an explicit
    search path takes precedence, as it does for the interpreter.
2.  ``import a.b.c`` resolves to the package directory ``a/b/c/`` or, if ``c`` is a
    module file, to the package ``a.b`` that contains it.
3.  Names that resolve nowhere (optional dependencies, C extensions) are skipped.
"""

import logging
import sys
import sysconfig
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import libcst as cst

from ctypes_geiger.loader.errors import LoadError
from ctypes_geiger.loader.graph import Package, SourceFile
from ctypes_geiger.loader.imports import ImportCollector
from ctypes_geiger.loader.stdlib import standard_root

logger = logging.getLogger(__name__)

_INSTALL_DIRS = {"site-packages", "dist-packages"}


def _stdlib_dirs() -> List[Path]:
  paths = sysconfig.get_paths()
  return [Path(paths[key]).resolve() for key in ("stdlib", "platstdlib") if key in paths]


def _default_sys_paths() -> List[Path]:
  """
  Lists the directories of ``sys.path`` that may hold third-party packages.

  Returns:
      List[Path]: Existing directories, excluding the standard library itself.
  """
  excluded = set(_stdlib_dirs())
  result: List[Path] = []
  for entry in sys.path:
    if not entry:
      continue
    path = Path(entry).resolve()
    if path.is_dir() and path not in excluded and path.name != "lib-dynload":
      result.append(path)
  return result


def _has_sources(directory: Path) -> bool:
  return any(directory.glob("*.py"))


def _locate_in(root: Path, name: str) -> Optional[Tuple[str, Path]]:
  """
  Looks up a dotted module name below a single search root.

  Args:
      root: The search root directory.
      name: Dotted module name.

  Returns:
      Tuple of (package path, location) or None if nothing matches.
  """
  parts = name.split(".")
  target = root.joinpath(*parts)
  if target.is_dir() and _has_sources(target):
    return name, target

  module_file = target.parent / f"{parts[-1]}.py"
  if module_file.is_file():
    if len(parts) > 1:
      return ".".join(parts[:-1]), module_file.parent
    return name, module_file

  return None


class ProjectLoader:
  """
  Loads package graphs for requested roots.

  Packages are memoised per loader, so the same import path always maps to
  the same ``Package`` instance within one run.

  Attributes:
      search_paths (List[Path]): Ordered directories used to resolve imports.
      include_standard (bool): Whether standard packages are parsed.
  """

  def __init__(
    self,
    search_paths: Sequence[Path] = (),
    include_standard: bool = False,
    use_sys_path: bool = True,
  ):
    """
    Initializes the loader.

    Args:
        search_paths: Directories searched first, in order.
        include_standard: Parse standard library packages as well.
        use_sys_path: Append the third-party entries of ``sys.path``.
    """
    self.search_paths: List[Path] = []
    self._site_paths: Set[Path] = set()
    for p in search_paths:
      self._add_search_path(Path(p))
    if use_sys_path:
      for p in _default_sys_paths():
        if p not in self.search_paths:
          self._site_paths.add(p)
        self._add_search_path(p)

    self.include_standard = include_standard
    self._packages: Dict[str, Package] = {}

  def _add_search_path(self, path: Path, first: bool = False) -> None:
    resolved = path.resolve()
    if first:
      self._site_paths.discard(resolved)
    if resolved in self.search_paths:
      if not first:
        return
      self.search_paths.remove(resolved)
    if first:
      self.search_paths.insert(0, resolved)
    else:
      self.search_paths.append(resolved)

  def load(self, target: str) -> Package:
    """
    Loads the package graph rooted at a path or dotted module name.

    Args:
        target: A package directory, a ``.py`` file, or an importable dotted name.

    Returns:
        Package: The root package with its transitive imports attached.

    Raises:
        LoadError: If the target cannot be found or any reachable file fails to parse.
    """
    path = Path(target)
    standard = False
    if path.exists():
      name, location, root = self._from_filesystem(path.resolve())
      self._add_search_path(root, first=True)
    else:
      found = self._resolve(target, strict=False)
      if found is None:
        raise LoadError(f"Cannot find a package, module or path named '{target}'")
      name, location, standard = found

    logger.debug(f"Loading root package '{name}' from {location}")
    return self._build(name, location, standard)

  def _from_filesystem(self, path: Path) -> Tuple[str, Path, Path]:
    """
    Derives the import path of a filesystem target.

    Args:
        path: Resolved file or directory.

    Returns:
        Tuple of (package path, location, search root).

    Raises:
        LoadError: If the target holds no Python sources.
    """
    if path.is_file():
      if path.suffix != ".py":
        raise LoadError(f"Not a Python source file: {path}")
      if not (path.parent / "__init__.py").exists():
        return path.stem, path, path.parent
      path = path.parent

    if not _has_sources(path):
      raise LoadError(f"No Python sources found in {path}")

    parts = [path.name]
    top = path
    if (path / "__init__.py").exists():
      while (top.parent / "__init__.py").exists():
        top = top.parent
        parts.insert(0, top.name)

    return ".".join(parts), path, top.parent

  def _resolve(self, name: str, strict: bool) -> Optional[Tuple[str, Optional[Path], bool]]:
    """
    Resolves an imported dotted name to a package.

    Args:
        name: Imported dotted name.
        strict: Only accept an exact match (used for ``from a import b`` candidates).
            Otherwise the longest resolvable prefix is used.

    Returns:
        Tuple of (package path, location, standard) or None if unresolvable.
        Standard packages that are not parsed have no location.
    """
    std = standard_root(name)
    if std and not self._shadowed(std):
      return std, self._standard_location(std), True

    parts = name.split(".")
    names = [name] if strict else [".".join(parts[:i]) for i in range(len(parts), 0, -1)]
    for candidate in names:
      for root in self.search_paths:
        found = _locate_in(root, candidate)
        if found:
          return found[0], found[1], False

    if not strict:
      logger.debug(f"Unresolved import '{name}' skipped")
    return None

  def _shadowed(self, name: str) -> bool:
    """
    Checks whether a project directory hides a standard top-level package.

    Only explicit search paths and root directories count; ``sys.path``
    entries come after the standard library at import time. Built-in modules
    cannot be hidden.

    Args:
        name: Standard top-level name.

    Returns:
        True if a local package or module of that name exists.
    """
    if name in sys.builtin_module_names:
      return False
    for root in self.search_paths:
      if root not in self._site_paths and _locate_in(root, name):
        logger.debug(f"Local '{name}' in {root} shadows the standard package")
        return True
    return False

  def _standard_location(self, name: str) -> Optional[Path]:
    if not self.include_standard:
      return None
    for root in _stdlib_dirs():
      found = _locate_in(root, name)
      if found:
        return found[1]
    # Built-in or extension module without Python source
    return None

  def _build(self, name: str, location: Optional[Path], standard: bool = False) -> Package:
    """
    Creates (or returns the memoised) package and recursively its imports.

    Args:
        name: Package import path.
        location: Directory or module file, None for source-less packages.
        standard: The package was resolved to the standard library.

    Returns:
        Package: The populated package.
    """
    if name in self._packages:
      return self._packages[name]

    installed = location is not None and bool(_INSTALL_DIRS.intersection(location.parts))
    pkg = Package(path=name, location=location, installed=installed, standard=standard)
    # Registered before recursing so that import cycles terminate
    self._packages[name] = pkg

    if location is None or (standard and not self.include_standard):
      return pkg

    owner = name if location.is_dir() else None
    files = sorted(location.glob("*.py")) if location.is_dir() else [location]

    modules = set()
    candidates = set()
    for file in files:
      module = self._parse(file)
      pkg.sources.append(SourceFile(path=file, module=module))
      collector = ImportCollector(owner)
      module.visit(collector)
      modules |= collector.modules
      candidates |= collector.candidates

    resolved: Dict[str, Tuple[Optional[Path], bool]] = {}
    for imported in sorted(modules):
      found = self._resolve(imported, strict=False)
      if found:
        resolved.setdefault(found[0], found[1:])
    for imported in sorted(candidates):
      found = self._resolve(imported, strict=True)
      if found:
        resolved.setdefault(found[0], found[1:])

    for child_name in sorted(resolved):
      if child_name == name:
        continue
      child_location, child_standard = resolved[child_name]
      pkg.imports[child_name] = self._build(child_name, child_location, child_standard)

    return pkg

  @staticmethod
  def _parse(file: Path) -> cst.Module:
    """
    Parses a source file with LibCST.

    Args:
        file: Path to the ``.py`` file.

    Returns:
        cst.Module: The parsed module.

    Raises:
        LoadError: If the file cannot be read or parsed.
    """
    try:
      return cst.parse_module(file.read_bytes())
    except OSError as e:
      raise LoadError(f"Cannot read {file}: {e}") from e
    except cst.ParserSyntaxError as e:
      raise LoadError(f"Failed to parse {file}: {e}") from e
