"""
Loader error types.
"""


class LoadError(Exception):
  """
  Raised when the package graph for a requested root cannot be produced.

  Covers unknown targets, unreadable files and syntax errors. A LoadError is
  fatal for the whole run; no partial report is produced.
  """
