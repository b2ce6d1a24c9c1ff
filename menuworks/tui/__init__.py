"""TUI (Terminal User Interface) module for menuworks.

Provides the menu navigation engine and the key-driven main loop.
"""
from .navigator import Navigator
from .router import Router
from .state import NavigationState

__all__ = ["Navigator", "Router", "NavigationState"]
