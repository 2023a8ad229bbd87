"""Arch Linux installer for an already partitioned and mounted target."""

__version__ = "0.1.0"
