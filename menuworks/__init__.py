"""MenuWorks: a retro, keyboard-driven terminal launcher."""

__version__ = "1.0.0"
