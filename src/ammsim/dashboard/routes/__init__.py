"""Metrics feed routers."""
