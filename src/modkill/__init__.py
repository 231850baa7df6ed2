"""modkill - find and remove node_modules to free disk space safely."""

__version__ = "0.1.0"
