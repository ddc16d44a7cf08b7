"""Crossbuild and release services."""
