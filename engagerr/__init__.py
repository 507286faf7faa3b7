"""Engagerr content relationship graph and family aggregation."""

__version__ = "1.0.0"
