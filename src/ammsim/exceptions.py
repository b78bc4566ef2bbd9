"""Custom exceptions for the AMM order-flow simulator.

Only two failure classes exist in the simulation core and both are fatal:
a configuration that cannot be represented on the pool's tick grid, and
an accounting invariant broken by the pool. Neither is retried.
"""


class SimulationError(Exception):
    """Base exception for all simulator errors."""


class ConfigurationInconsistency(SimulationError):
    """Raised when settings cannot be honoured (e.g. corridor narrower than one tick)."""


class InvariantViolation(SimulationError):
    """Raised when a trade breaks an accounting invariant (e.g. a reserve decreased)."""
