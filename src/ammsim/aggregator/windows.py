"""Rolling windows for day-scale and intraday statistics.

Two flavours:
- TrailingWindow: fixed depth FIFO of completed days. The in-progress
  day is not stored; averages add it on top.
- IntradayWindow: grows without bound during a day, cleared at rollover.
"""

from collections import deque
from decimal import Decimal

from ammsim.decimals import ZERO

#: Completed days kept; with the in-progress day this makes 30.
TRAILING_DEPTH = 29


class TrailingWindow:
    """Bounded FIFO of completed-day values, oldest evicted first."""

    def __init__(self, depth: int = TRAILING_DEPTH) -> None:
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        self._values: deque[Decimal] = deque(maxlen=depth)

    def push(self, value: Decimal) -> None:
        self._values.append(value)

    def values(self) -> list[Decimal]:
        """Stored values, oldest first."""
        return list(self._values)

    def average_with(self, today: Decimal) -> Decimal:
        """Mean of stored values plus ``today`` when it is nonzero.

        A partially elapsed day counts as one full sample rather than
        diluting the average toward zero; an untouched day is left out.
        Zero when nothing is included.
        """
        total = sum(self._values, ZERO)
        count = len(self._values)
        if today != ZERO:
            total += today
            count += 1
        if count == 0:
            return ZERO
        return total / count

    def __len__(self) -> int:
        return len(self._values)


class IntradayWindow:
    """Unbounded sample list, emptied at each day rollover."""

    def __init__(self) -> None:
        self._values: list[Decimal] = []

    def push(self, value: Decimal) -> None:
        self._values.append(value)

    def clear(self) -> None:
        self._values.clear()

    def mean(self) -> Decimal:
        """Arithmetic mean; zero for an empty window."""
        if not self._values:
            return ZERO
        return sum(self._values, ZERO) / len(self._values)

    def __len__(self) -> int:
        return len(self._values)
