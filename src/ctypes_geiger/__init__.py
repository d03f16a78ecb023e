"""
ctypes-geiger Package.

Counts raw-memory usages of ``ctypes`` in a Python package and in every
package it transitively imports, and shows them as an import tree.

Usage
-----

.. code-block:: python

    import ctypes_geiger as geiger

    report = geiger.analyze("src/mypkg", match_filter="all")
    print(report.stats.unsafe_count)
    for row in report.rows:
        print(row.total, row.label)
"""

from typing import Any, Optional

from ctypes_geiger.analysis.report import RootReport, analyze_package
from ctypes_geiger.config import GeigerConfig
from ctypes_geiger.loader import LoadError, ProjectLoader

__version__ = "0.1.0"


def analyze(target: str, config: Optional[GeigerConfig] = None, **options: Any) -> RootReport:
  """
  Loads and analyses a single root without printing anything.

  Args:
      target: A package directory, module file or importable dotted name.
      config: Full configuration. Built from ``options`` if omitted.
      **options: ``GeigerConfig`` field values, used when ``config`` is None.

  Returns:
      RootReport: Rows and stats of the root.

  Raises:
      LoadError: If the package graph cannot be loaded.
  """
  if config is None:
    config = GeigerConfig(**options)
  loader = ProjectLoader(config.search_paths, include_standard=config.include_standard)
  root = loader.load(target)
  return analyze_package(root, config)


__all__ = ["GeigerConfig", "LoadError", "ProjectLoader", "RootReport", "analyze", "__version__"]
