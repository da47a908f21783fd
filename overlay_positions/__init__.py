"""Drag overlay labels, callouts and notes into place and export their positions."""

__version__ = "1.0.0"
