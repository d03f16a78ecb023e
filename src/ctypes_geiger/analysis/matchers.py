"""
Node Matcher and Role Classifier.

Recognises the raw-memory constructs of ``ctypes`` in a LibCST tree and decides
which syntactic role a recognised usage plays, based on the chain of ancestor
nodes from the module down to (and including) the matched node.

Role priority (first hit wins):

1.  **assignment**: assignment, augmented assignment, walrus, return or a
    list, set or dict display anywhere in the chain. Tuple displays do not
    count (``isinstance(p, (a, b))`` is a call argument).
2.  **call**: a call anywhere above the matched node's own parent.
3.  **parameter**: a function/lambda signature, or a return annotation.
4.  **variable**: an annotated declaration or a class header argument.
5.  **other**.
"""

from typing import Dict, Optional, Sequence

import libcst as cst

from ctypes_geiger.enums import ALL, MatchKind, RoleKind

# Ordered catalogue: kind -> display name
CATALOGUE: Dict[MatchKind, str] = {
  MatchKind.POINTER: "ctypes.c_void_p",
  MatchKind.SIZEOF: "ctypes.sizeof",
  MatchKind.OFFSETOF: "ctypes.addressof",
  MatchKind.ALIGNOF: "ctypes.alignment",
  MatchKind.SLICE_HEADER: "ctypes.string_at",
  MatchKind.STRING_HEADER: "ctypes.c_char_p",
  MatchKind.UINTPTR: "c_size_t",
}

_RECEIVER = "ctypes"

_ATTRIBUTE_KINDS: Dict[str, MatchKind] = {
  "c_void_p": MatchKind.POINTER,
  "sizeof": MatchKind.SIZEOF,
  "addressof": MatchKind.OFFSETOF,
  "alignment": MatchKind.ALIGNOF,
  "string_at": MatchKind.SLICE_HEADER,
  "c_char_p": MatchKind.STRING_HEADER,
}

_NAME_KINDS: Dict[str, MatchKind] = {
  "c_size_t": MatchKind.UINTPTR,
}

_ASSIGNMENT_NODES = (
  cst.Assign,
  cst.AugAssign,
  cst.NamedExpr,
  cst.Return,
  cst.List,
  cst.Set,
  cst.Dict,
)


def classify_match(node: cst.CSTNode) -> Optional[MatchKind]:
  """
  Identifies a raw-memory construct.

  Only ``receiver.member`` attributes with a bare name receiver and bare
  names are candidates; matching is purely by identifier.

  Args:
      node: Any CST node.

  Returns:
      The construct kind, or None if the node is not a construct.
  """
  if isinstance(node, cst.Attribute):
    if isinstance(node.value, cst.Name) and node.value.value == _RECEIVER:
      return _ATTRIBUTE_KINDS.get(node.attr.value)
    return None
  if isinstance(node, cst.Name):
    return _NAME_KINDS.get(node.value)
  return None


def classify_role(chain: Sequence[cst.CSTNode]) -> RoleKind:
  """
  Determines the syntactic role of a usage from its ancestor chain.

  Args:
      chain: Nodes from the module root down to the matched node (inclusive).

  Returns:
      RoleKind: Exactly one role.
  """
  if any(isinstance(n, _ASSIGNMENT_NODES) for n in chain):
    return RoleKind.ASSIGNMENT

  # The two innermost entries are the match and its own call, if any
  if any(isinstance(n, cst.Call) for n in chain[:-2]):
    return RoleKind.CALL

  for i, n in enumerate(chain):
    if isinstance(n, cst.Parameters):
      return RoleKind.PARAMETER
    if isinstance(n, cst.Annotation) and i > 0 and isinstance(chain[i - 1], cst.FunctionDef):
      return RoleKind.PARAMETER

  for i, n in enumerate(chain):
    if isinstance(n, cst.AnnAssign):
      return RoleKind.VARIABLE
    if isinstance(n, cst.ClassDef) and i + 1 < len(chain) and isinstance(chain[i + 1], cst.Arg):
      return RoleKind.VARIABLE

  return RoleKind.OTHER


def match_allowed(kind: MatchKind, match_filter: str) -> bool:
  """True if the construct kind passes the match filter."""
  return match_filter == ALL or kind.value == match_filter


def role_allowed(role: RoleKind, role_filter: str) -> bool:
  """True if the role passes the role filter."""
  return role_filter == ALL or role.value == role_filter
