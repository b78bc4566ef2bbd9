"""Metrics feed: JSON API and WebSocket snapshot stream."""
