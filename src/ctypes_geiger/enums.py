"""
Enumerations for ctypes-geiger.

This module defines the closed catalogues used across the codebase: the kinds
of raw-memory constructs that are counted and the syntactic roles a counted
usage can play.
"""

from enum import Enum


class MatchKind(str, Enum):
  """
  Catalogue of raw-memory constructs detected by the node matcher.

  The values double as the accepted values of the ``--match`` filter.
  """

  POINTER = "pointer"  # ctypes.c_void_p
  SIZEOF = "sizeof"  # ctypes.sizeof
  OFFSETOF = "offsetof"  # ctypes.addressof
  ALIGNOF = "alignof"  # ctypes.alignment
  SLICE_HEADER = "sliceheader"  # ctypes.string_at
  STRING_HEADER = "stringheader"  # ctypes.c_char_p
  UINTPTR = "uintptr"  # c_size_t


class RoleKind(str, Enum):
  """
  Syntactic role of a counted usage.

  Exactly one role is assigned per usage. The values double as the accepted
  values of the ``--filter`` option.
  """

  VARIABLE = "variable"
  PARAMETER = "parameter"
  ASSIGNMENT = "assignment"
  CALL = "call"
  OTHER = "other"


# Filter value accepted by both the match and the role filter.
ALL = "all"
