"""
Loader Package.

Builds the package import graph consumed by the analysis engine.
"""

from ctypes_geiger.loader.errors import LoadError
from ctypes_geiger.loader.graph import Package, SourceFile
from ctypes_geiger.loader.project import ProjectLoader

__all__ = ["LoadError", "Package", "ProjectLoader", "SourceFile"]
