"""
Tests for Standard Library Classification.
"""

from unittest.mock import MagicMock, patch

import pytest

from ctypes_geiger.loader.errors import LoadError
from ctypes_geiger.loader.stdlib import is_standard, standard_packages, standard_root


def test_membership():
  assert is_standard("os")
  assert is_standard("ctypes")
  assert not is_standard("os.path")
  assert not is_standard("acme")


@pytest.mark.parametrize(
  "name, root",
  [
    ("os.path", "os"),
    ("xml.etree.ElementTree", "xml"),
    ("sys", "sys"),
    ("numpy.core", None),
    ("acme", None),
  ],
)
def test_standard_root(name, root):
  assert standard_root(name) == root


def test_missing_enumeration_is_fatal():
  standard_packages.cache_clear()
  try:
    with patch("ctypes_geiger.loader.stdlib.sys", MagicMock(spec=[])):
      with pytest.raises(LoadError):
        standard_packages()
  finally:
    standard_packages.cache_clear()
