"""gitr: clone git repositories into organized, deterministic paths."""

__version__ = "0.1.0"
