"""Metrics snapshot assembly."""

from ammsim.metrics.snapshot import annualized_apr, build_snapshot, side_metrics

__all__ = ["annualized_apr", "build_snapshot", "side_metrics"]
