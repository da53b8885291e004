"""
batch_core/effect_model.py
──────────────────────────
EffectModel: how much one thread of each operation actually does.

Two questions drive every thread count in a batch:

  1. What fraction of yield_available does ONE extract thread take?
  2. How many replenish threads multiply yield_available by M?

Both have two answers, depending on what the host environment offers.

Two implementations
────────────────────
1. OracleModel
     The host exposes an exact-formula capability (a FormulaOracle). Its
     answers are ground truth: passed through untouched, never clamped.

2. AnalyticModel
     No oracle available. Closed-form approximations of the modelled
     environment's formulas:

       extraction fraction
         difficulty = (100 - hardening) / 100
         skill      = (hacking_skill - (required_skill - 1)) / hacking_skill
         fraction   = clamp(difficulty × skill × extraction_multiplier / 240, 0, 1)

       replenish threads for multiplier M
         adjusted = min(1 + (1.003 - 1) / hardening, 1.0035)
         threads  = ln(M) / (ln(adjusted) × regrowth_multiplier × growth_rate / 100)

The model is picked ONCE per calculation cycle by select_effect_model() and
injected into the ThreadCalculator. Nothing in here probes for the oracle
on its own.

Standalone use:
    from batch_core.effect_model import select_effect_model
    model = select_effect_model(environment.formula_oracle())
    fraction = model.extraction_yield_fraction(node, operator)
"""

from __future__ import annotations

import abc
import math
from typing import Optional, Protocol

from controller.shared.models import Node, OperatorProfile

# ── Analytic model constants ──────────────────────────────────────────────────
# Module-level so tests can import and assert against them directly.

BALANCE_FACTOR: float = 240.0
"""Divisor of the analytic extraction formula.

Empirically fixed by the modelled environment. Changing it makes the analytic
path disagree with what the environment actually does.
"""

BASE_GROWTH_RATE: float = 1.003
"""Per-thread regrowth base before hardening is taken into account."""

MAX_ADJUSTED_GROWTH_RATE: float = 1.0035
"""Hard ceiling on the hardening-adjusted growth rate.

Without it, a node with very low hardening would regrow unrealistically fast
and the analytic path would under-provision REPLENISH.
"""


class FormulaOracle(Protocol):
    """
    Exact-formula capability offered by some host environments.

    hack_percent  → fraction of yield taken by one extract thread.
    grow_threads  → threads needed to bring node.yield_available up to target.
    node_snapshot → the oracle's own representation of a node.
    """

    def hack_percent(self, node: Node, operator: OperatorProfile) -> float: ...

    def grow_threads(
        self, node: Node, operator: OperatorProfile, target_yield: float
    ) -> float: ...

    def node_snapshot(self, node_id: str) -> Node: ...


def replenish_multiplier(node: Node) -> float:
    """
    Factor by which yield_available must grow to reach yield_max.

    max(yield_available, 1) keeps a fully drained node from dividing by zero.
    """
    return node.yield_max / max(node.yield_available, 1.0)


class EffectModel(abc.ABC):
    """Per-thread effect estimates used by the ThreadCalculator."""

    name: str = "abstract"

    @abc.abstractmethod
    def extraction_yield_fraction(
        self, node: Node, operator: OperatorProfile
    ) -> float:
        """Fraction of node.yield_available one extract thread takes."""

    @abc.abstractmethod
    def replenish_threads_for(
        self,
        node: Node,
        target_multiplier: float,
        operator: OperatorProfile,
    ) -> float:
        """Real-valued thread count needed to multiply yield by target_multiplier."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class AnalyticModel(EffectModel):
    """
    Closed-form approximation, used when no oracle is available.

    Stateless: one instance can be shared across all calculations.
    """

    name = "analytic"

    def extraction_yield_fraction(
        self, node: Node, operator: OperatorProfile
    ) -> float:
        """
        Estimate the fraction of yield one extract thread takes.

        skill_multiplier goes negative for an under-levelled operator; the
        final clamp turns that into 0.0, which the ThreadCalculator reports
        as a degenerate model.

        Returns:
            float in [0.0, 1.0].
        """
        difficulty_multiplier = (100.0 - node.hardening) / 100.0
        skill_multiplier = (
            operator.hacking_skill - (node.required_skill - 1.0)
        ) / operator.hacking_skill

        fraction = (
            difficulty_multiplier
            * skill_multiplier
            * operator.extraction_multiplier
            / BALANCE_FACTOR
        )
        return min(max(fraction, 0.0), 1.0)

    @staticmethod
    def adjusted_growth_rate(node: Node) -> float:
        """
        Growth rate per thread after hardening, capped at MAX_ADJUSTED_GROWTH_RATE.

        Zero hardening sits above any finite rate, so it takes the cap directly.
        """
        if node.hardening <= 0:
            return MAX_ADJUSTED_GROWTH_RATE
        adjusted = 1.0 + (BASE_GROWTH_RATE - 1.0) / node.hardening
        return min(adjusted, MAX_ADJUSTED_GROWTH_RATE)

    def replenish_threads_for(
        self,
        node: Node,
        target_multiplier: float,
        operator: OperatorProfile,
    ) -> float:
        """
        Threads needed to multiply yield by target_multiplier.

        Inverse of regrowth_multiplier(). The caller rounds up.

        Returns:
            float ≥ 0.0. Exactly 0.0 when target_multiplier ≤ 1 (nothing to grow).
        """
        if target_multiplier <= 1.0:
            return 0.0

        per_thread = (
            math.log(self.adjusted_growth_rate(node))
            * operator.regrowth_multiplier
            * (node.growth_rate / 100.0)
        )
        return math.log(target_multiplier) / per_thread

    def regrowth_multiplier(
        self, node: Node, threads: float, operator: OperatorProfile
    ) -> float:
        """
        Multiplicative regrowth achieved by `threads` replenish threads.

        adjusted ** (threads × regrowth_multiplier × growth_rate / 100)
        """
        exponent = threads * operator.regrowth_multiplier * (node.growth_rate / 100.0)
        return self.adjusted_growth_rate(node) ** exponent

    def predicted_yield_after_replenish(
        self, node: Node, threads: float, operator: OperatorProfile
    ) -> float:
        """
        Yield the node is expected to hold after a replenish of `threads`.

        Starts from max(yield_available, 1), the same base replenish_multiplier()
        divides by, and never exceeds yield_max.
        """
        grown = max(node.yield_available, 1.0) * self.regrowth_multiplier(
            node, threads, operator
        )
        return min(grown, node.yield_max)


class OracleModel(EffectModel):
    """
    Exact model backed by the host's FormulaOracle.

    Every answer is delegated. The only work done here is building the node
    snapshot the oracle is asked about.
    """

    name = "oracle"

    def __init__(self, oracle: FormulaOracle) -> None:
        self._oracle = oracle

    def extraction_yield_fraction(
        self, node: Node, operator: OperatorProfile
    ) -> float:
        return self._oracle.hack_percent(node, operator)

    def replenish_threads_for(
        self,
        node: Node,
        target_multiplier: float,
        operator: OperatorProfile,
    ) -> float:
        """
        Ask the oracle how many threads bring the node back to yield_max.

        The oracle's own snapshot supplies everything structural; yield and
        hardening are overridden with the values on `node`, which may be a
        prediction rather than what the oracle last saw. target_multiplier is
        implied by that snapshot (yield_max / yield_available) and not passed on.
        """
        snapshot = self._oracle.node_snapshot(node.node_id).with_state(
            yield_available=node.yield_available,
            hardening=node.hardening,
        )
        return self._oracle.grow_threads(snapshot, operator, snapshot.yield_max)

    def __repr__(self) -> str:
        return f"OracleModel(oracle={self._oracle!r})"


def select_effect_model(oracle: Optional[FormulaOracle]) -> EffectModel:
    """
    Pick the effect model for one calculation cycle.

    Args:
        oracle: The host's exact-formula capability, or None if absent.

    Returns:
        OracleModel wrapping the oracle when one is available,
        otherwise an AnalyticModel.
    """
    if oracle is not None:
        return OracleModel(oracle)
    return AnalyticModel()
