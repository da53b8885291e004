"""
batch_core/delays.py
────────────────────
DelayCalculator: launch offsets that make a batch land in order.

Timing anchor
──────────────
FORTIFY is the slowest operation, so the first fortify is launched at the
dispatch instant (delay 0) and every other task is positioned around its
landing time W (fortify_time), with S = task_delay:

   EXTRACT:    =        → W - E - S     lands at W - S
  FORTIFY₁: ======      → 0             lands at W
  REPLENISH:   =====    → W - R + S     lands at W + S
  FORTIFY₂:   ======    → 2S            lands at W + 2S

Every landing is exactly S after the previous one. The four offsets are a
contract for the dispatcher: it adds them to one shared dispatch instant.
Nothing here schedules timers.

Negative offsets
─────────────────
If E + S > W or R > W + S, an offset goes negative: the task would have to
be launched before the dispatch instant. Clamping it to zero would silently
break the landing order, so NegativeDelayError is raised instead.
"""

from __future__ import annotations

import logging
from typing import List, NamedTuple

import numpy as np
from numpy.typing import NDArray

from controller.shared.models import OperationDurations

logger = logging.getLogger(__name__)

LANDING_TOLERANCE: float = 1e-9
"""Slack allowed when checking landing gaps against task_delay.

Offsets are sums and differences of floats, so a gap that is exactly
task_delay on paper may come out a few ulps short.
"""


class NegativeDelayError(Exception):
    """
    Raised when a computed launch offset is negative.

    Means the duration estimates and task_delay can't produce the required
    landing order: fortify_time is not comfortably longer than the extract
    or replenish time plus spacing.

    Attributes:
        negative: Names of the offending offsets mapped to their values.
        reason:   Human-readable explanation.
    """

    def __init__(self, negative: dict) -> None:
        self.negative = negative
        details = ", ".join(f"{name}={value:g}" for name, value in negative.items())
        self.reason = (
            f"Negative launch offset(s): {details}. fortify_time must be at "
            f"least max(extract_time, replenish_time) + task_delay."
        )
        super().__init__(self.reason)


class DelayVector(NamedTuple):
    """Launch offsets in batch order: Extract, Fortify₁, Replenish, Fortify₂."""

    extract: float
    fortify_primary: float
    replenish: float
    fortify_secondary: float


class DelayCalculator:
    """
    Computes launch offsets for the four tasks of a batch.

    Stateless: one instance can be shared across all calculations.
    """

    def calculate_delays(
        self,
        durations: OperationDurations,
        task_delay: float,
    ) -> DelayVector:
        """
        Compute the four launch offsets.

        Args:
            durations:  Per-operation duration estimates.
            task_delay: Minimum spacing between two landings.

        Returns:
            DelayVector with fortify_primary always 0.

        Raises:
            NegativeDelayError: if any offset comes out below zero.
        """
        fortify_time = durations.fortify_time
        delays = DelayVector(
            extract=fortify_time - durations.extract_time - task_delay,
            fortify_primary=0.0,
            replenish=fortify_time - durations.replenish_time + task_delay,
            fortify_secondary=task_delay * 2,
        )

        negative = {
            name: value for name, value in delays._asdict().items() if value < 0
        }
        if negative:
            raise NegativeDelayError(negative)

        logger.debug("calculate_delays: %s (task_delay=%s)", tuple(delays), task_delay)
        return delays

    @staticmethod
    def landing_times(
        delays: DelayVector,
        durations: OperationDurations,
    ) -> NDArray[np.float64]:
        """
        Time after the dispatch instant at which each task completes.

        Returns:
            float64 array of shape (4,), in batch order.
        """
        run_times: List[float] = [
            durations.extract_time,
            durations.fortify_time,
            durations.replenish_time,
            durations.fortify_time,
        ]
        return np.asarray(delays, dtype=np.float64) + np.asarray(run_times, dtype=np.float64)

    @staticmethod
    def landing_order_holds(
        landing: NDArray[np.float64],
        task_delay: float,
    ) -> bool:
        """
        True if landings are strictly increasing and at least task_delay apart.
        """
        gaps = np.diff(landing)
        if not np.all(gaps > 0):
            return False
        return bool(np.all(gaps >= task_delay - LANDING_TOLERANCE))
