"""Helm Steward - chart resolution and release lifecycle engine."""

__version__ = "0.1.0"
