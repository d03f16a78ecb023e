"""
Command Handlers.
"""

from .catalogue import handle_catalogue
from .scan import handle_scan

__all__ = ["handle_catalogue", "handle_scan"]
