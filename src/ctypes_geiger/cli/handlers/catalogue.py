"""
Catalogue Command Handler.

Lists the constructs the scanner recognises and the filter value selecting each.
"""

from rich.table import Table

from ctypes_geiger.analysis.matchers import CATALOGUE
from ctypes_geiger.enums import RoleKind
from ctypes_geiger.utils.console import console


def handle_catalogue() -> int:
  """
  Prints the construct catalogue and the usage roles.

  Returns:
      int: Always 0.
  """
  table = Table(title="Counted constructs")
  table.add_column("--match", style="cyan")
  table.add_column("Construct", style="bold")

  for kind, name in CATALOGUE.items():
    table.add_row(kind.value, name)

  console.print(table)
  console.print(f"Roles (--filter): {', '.join(r.value for r in RoleKind)}", markup=False)
  return 0
