"""Ecosystem simulation building blocks: neural brains, genetics, grids and memory monitoring."""

__version__ = "2.0.0"