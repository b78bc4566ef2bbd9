"""Synthetic order-flow simulator for an automated market maker demo."""

__version__ = "0.1.0"
