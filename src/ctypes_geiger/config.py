"""
Runtime Configuration Store.

Holds the options steering one audit run. Values come from the
``[tool.ctypes_geiger]`` table of the nearest ``pyproject.toml`` and are
overridden by explicit command line arguments.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ctypes_geiger.enums import ALL, MatchKind, RoleKind

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore


class GeigerConfig(BaseModel):
  """
  Configuration surface of the audit engine.
  """

  max_depth: int = Field(10, description="Maximum indentation depth of the import tree.")
  shorten_repeats: bool = Field(True, description="Show each package only once and abbreviate repeated imports.")
  include_standard: bool = Field(False, description="Also analyze and show standard library packages.")
  match_filter: str = Field(MatchKind.POINTER.value, description="Construct kind to count, or 'all'.")
  role_filter: str = Field(ALL, description="Usage role to count, or 'all'.")
  emit_source_lines: bool = Field(False, description="Print every counted source line.")
  detailed_stats: bool = Field(False, description="Show per-role columns in the table.")
  hide_stats: bool = Field(False, description="Suppress the table and the summary.")
  link_style: bool = Field(False, description="Print PyPI links instead of import paths for installed packages.")
  search_paths: List[Path] = Field(default_factory=list, description="Extra directories to resolve imports in.")

  @field_validator("max_depth")
  @classmethod
  def validate_depth(cls, v: int) -> int:
    """
    Rejects negative depth limits.

    Args:
        v (int): The requested depth.

    Returns:
        int: The unchanged depth.

    Raises:
        ValueError: If the depth is negative.
    """
    if v < 0:
      raise ValueError(f"max_depth must not be negative, got {v}")
    return v

  @field_validator("match_filter")
  @classmethod
  def validate_match_filter(cls, v: str) -> str:
    """
    Normalizes the match filter to lowercase and checks it against the catalogue.

    Args:
        v (str): Raw filter value.

    Returns:
        str: The normalized filter.

    Raises:
        ValueError: If the value is neither 'all' nor a known construct kind.
    """
    v_clean = v.lower().strip()
    allowed = [ALL] + [k.value for k in MatchKind]
    if v_clean not in allowed:
      raise ValueError(f"Unknown match filter: '{v_clean}'. Supported: {allowed}")
    return v_clean

  @field_validator("role_filter")
  @classmethod
  def validate_role_filter(cls, v: str) -> str:
    """
    Normalizes the role filter to lowercase and checks it against the known roles.

    Args:
        v (str): Raw filter value.

    Returns:
        str: The normalized filter.

    Raises:
        ValueError: If the value is neither 'all' nor a known role.
    """
    v_clean = v.lower().strip()
    allowed = [ALL] + [r.value for r in RoleKind]
    if v_clean not in allowed:
      raise ValueError(f"Unknown role filter: '{v_clean}'. Supported: {allowed}")
    return v_clean

  @property
  def detailed_columns(self) -> bool:
    """
    Whether the table shows one column per role.

    Per-role columns only make sense when no role filter is active.

    Returns:
        bool: True if the detailed layout is used.
    """
    return self.detailed_stats and self.role_filter == ALL

  @classmethod
  def load(cls, search_path: Optional[Path] = None, **overrides: Any) -> "GeigerConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Overrides whose value is None are ignored, so argparse defaults of None
    fall through to the TOML value and then to the model default.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        **overrides: Field values taking precedence over the TOML settings.

    Returns:
        GeigerConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    values: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields}

    # Relative search paths in the TOML are relative to the file, not the cwd
    if toml_dir and "search_paths" in values:
      values["search_paths"] = [(toml_dir / Path(p)).resolve() for p in values["search_paths"]]

    for key, val in overrides.items():
      if val is None:
        continue
      if key == "search_paths":
        values[key] = list(values.get(key, [])) + [Path(p) for p in val]
      else:
        values[key] = val

    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("ctypes_geiger", {}), parent

  return {}, None
