"""Crossbuild and release helper for Go projects."""

__version__ = "0.5.0"
