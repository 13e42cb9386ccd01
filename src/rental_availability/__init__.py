"""Vacation-rental availability search."""

__version__ = "0.1.0"
