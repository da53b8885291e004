"""
batch_core/threads.py
─────────────────────
ThreadCalculator: turns per-thread effects into whole thread counts.

What this is
─────────────
Given an EffectModel (oracle or analytic), a Node snapshot and an
OperatorProfile, the calculator sizes the four operations of a batch:

  extract            = floor(greed / extraction_yield_fraction)
  fortify (primary)  = ceil(extract / 25)
  replenish          = ceil(replenish_threads_for(node, yield_max / max(yield, 1)))
  fortify (second.)  = ceil(replenish / 12.5)

Rounding policy
────────────────
  • EXTRACT rounds DOWN: taking slightly less than greed is harmless, taking
    more drains the node further than the replenish step is sized for.
  • Everything that has to fully neutralise something rounds UP.

The two fortify ratios are fixed properties of the modelled environment:
one fortify thread removes the hardening added by 25 extract threads, or by
12.5 replenish threads.

Launchability
──────────────
A zero-thread operation can't be launched. The raw functions keep returning
the mathematically correct value (ceil(0 / 25) == 0); ThreadCounts.launchable()
lifts every count to at least 1, and the BatchAssembler applies it at its
boundary.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional

from controller.shared.models import Node, OperatorProfile
from batch_core.effect_model import EffectModel, replenish_multiplier

logger = logging.getLogger(__name__)

# ── Fortify ratios ────────────────────────────────────────────────────────────

EXTRACTS_PER_FORTIFY: float = 25
"""Extract threads whose hardening one fortify thread cancels."""

REPLENISHES_PER_FORTIFY: float = 12.5
"""Replenish threads whose hardening one fortify thread cancels."""

FORTIFY_EFFECT_PER_THREAD: float = 0.05
"""Hardening removed by one fortify thread in the modelled environment.

Only used as the default for one-shot restore calculations; host
environments that know better pass their own value.
"""


class DegenerateModelError(Exception):
    """
    Raised when the extraction yield fraction is unusable.

    The node is currently unexploitable by this operator: too hardened, or the
    operator is below the node's required skill. Dividing greed by that value
    would produce infinity or a negative thread count.

    Attributes:
        node_id:  The node that could not be sized.
        fraction: The offending fraction reported by the effect model.
        reason:   Human-readable explanation.
    """

    def __init__(self, node_id: str, fraction: float) -> None:
        self.node_id = node_id
        self.fraction = fraction
        self.reason = (
            f"Node {node_id!r} yields an extraction fraction of {fraction!r} per "
            f"thread. It is too hardened or above the operator's skill."
        )
        super().__init__(self.reason)


class ThreadCounts(NamedTuple):
    """Thread vector in batch order: Extract, Fortify₁, Replenish, Fortify₂."""

    extract: int
    fortify_primary: int
    replenish: int
    fortify_secondary: int

    def launchable(self) -> "ThreadCounts":
        """Same vector with every count raised to at least one thread."""
        return ThreadCounts(*(max(1, count) for count in self))


class ThreadCalculator:
    """
    Sizes the four operations of a batch.

    Holds nothing but the injected EffectModel, so one instance can be reused
    for every node in a calculation cycle.

    Usage:
        calculator = ThreadCalculator(select_effect_model(oracle))
        counts = calculator.calculate_threads(node, operator)
    """

    def __init__(self, model: EffectModel) -> None:
        self.model = model

    # ── Main entrypoint ────────────────────────────────────────────────────────

    def calculate_threads(
        self, node: Node, operator: OperatorProfile
    ) -> ThreadCounts:
        """
        Compute the raw thread vector for one batch against `node`.

        Raises:
            DegenerateModelError: if the node yields nothing per extract thread.
        """
        extract = self.extraction_threads(node, operator)
        replenish = self.replenish_threads(node, operator)
        counts = ThreadCounts(
            extract=extract,
            fortify_primary=self.fortify_threads_for_extraction(extract),
            replenish=replenish,
            fortify_secondary=self.fortify_threads_for_replenish(replenish),
        )
        logger.debug(
            "calculate_threads: node %s via %s model → %s",
            node.node_id, self.model.name, tuple(counts),
        )
        return counts

    # ── Per-operation sizing (public for direct testing) ──────────────────────

    def extraction_threads(self, node: Node, operator: OperatorProfile) -> int:
        """
        Extract threads needed to take `greed` of the node's yield.

        Returns:
            floor(greed / fraction), a non-negative int.

        Raises:
            DegenerateModelError: if fraction is not a finite positive number,
                or if greed / fraction overflows.
        """
        fraction = self.model.extraction_yield_fraction(node, operator)
        if not math.isfinite(fraction) or fraction <= 0.0:
            raise DegenerateModelError(node.node_id, fraction)
        threads = operator.greed / fraction
        # Subnormal fractions overflow the quotient
        if not math.isfinite(threads):
            raise DegenerateModelError(node.node_id, fraction)
        return math.floor(threads)

    def replenish_threads(self, node: Node, operator: OperatorProfile) -> int:
        """Replenish threads needed to grow the node back to yield_max."""
        threads = self.model.replenish_threads_for(
            node, replenish_multiplier(node), operator
        )
        return math.ceil(threads)

    @staticmethod
    def fortify_threads_for_extraction(
        extraction_threads: int,
        *,
        ratio: Optional[float] = None,
    ) -> int:
        """
        Fortify threads cancelling the hardening of `extraction_threads`.

        Args:
            extraction_threads: Extract thread count (≥ 0).
            ratio:              Override for EXTRACTS_PER_FORTIFY (keyword-only).
        """
        per_fortify = EXTRACTS_PER_FORTIFY if ratio is None else ratio
        return math.ceil(extraction_threads / per_fortify)

    @staticmethod
    def fortify_threads_for_replenish(
        replenish_threads: int,
        *,
        ratio: Optional[float] = None,
    ) -> int:
        """
        Fortify threads cancelling the hardening of `replenish_threads`.

        Args:
            replenish_threads: Replenish thread count (≥ 0).
            ratio:             Override for REPLENISHES_PER_FORTIFY (keyword-only).
        """
        per_fortify = REPLENISHES_PER_FORTIFY if ratio is None else ratio
        return math.ceil(replenish_threads / per_fortify)

    @staticmethod
    def minimal_fortify_threads(
        node: Node,
        fortify_effect_per_thread: float = FORTIFY_EFFECT_PER_THREAD,
    ) -> int:
        """
        Fortify threads needed to bring the node back down to hardening_min.

        Used for one-shot restores outside the steady batch cycle.

        Raises:
            ValueError: if fortify_effect_per_thread is not positive.
        """
        if fortify_effect_per_thread <= 0:
            raise ValueError(
                f"fortify_effect_per_thread must be > 0, got {fortify_effect_per_thread}"
            )
        return math.ceil(node.excess_hardening / fortify_effect_per_thread)

    def __repr__(self) -> str:
        return f"ThreadCalculator(model={self.model!r})"
