"""Unified-layered SVG layout, validation and resilient generation engine."""

__version__ = "0.1.0"
