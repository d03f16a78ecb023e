"""
Entry point for module execution (``python -m ctypes_geiger``).

This module delegates execution to the CLI handler in ``ctypes_geiger.cli.__main__``.
"""

import sys
from ctypes_geiger.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
