"""Screen modules for the TUI."""
from __future__ import annotations

# Import all screen modules to register their key handlers with the router
from . import menu, output

__all__ = ["menu", "output"]
