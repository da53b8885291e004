"""
tests/test_effect_model.py
──────────────────────────
Test suite for batch_core/effect_model.py

What we are testing
────────────────────
Both effect models answer the same two questions (fraction of yield per
extract thread, replenish threads for a multiplier). The analytic model must
reproduce the closed-form formulas exactly; the oracle model must pass the
oracle's answers through untouched and ask it about the right node.

Test groups
────────────
Group 1: AnalyticModel.extraction_yield_fraction
Group 2: AnalyticModel replenish / regrowth
Group 3: OracleModel delegation
Group 4: select_effect_model and replenish_multiplier
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import pytest

from batch_core.effect_model import (
    BALANCE_FACTOR,
    MAX_ADJUSTED_GROWTH_RATE,
    AnalyticModel,
    OracleModel,
    replenish_multiplier,
    select_effect_model,
)
from controller.shared.models import Node, OperatorProfile


# ─────────────────────────────────────────────────────────────────────────────
# Helpers: fixture factories
# ─────────────────────────────────────────────────────────────────────────────

def _make_node(
    node_id: str = "n-test",
    yield_available: float = 1_000_000.0,
    yield_max: float = 1_000_000.0,
    hardening: float = 1.0,
    hardening_min: float = 1.0,
    growth_rate: float = 100.0,
    required_skill: float = 1.0,
) -> Node:
    """Defaults: full yield, hardening at its floor."""
    return Node(
        node_id=node_id,
        yield_available=yield_available,
        yield_max=yield_max,
        hardening=hardening,
        hardening_min=hardening_min,
        growth_rate=growth_rate,
        required_skill=required_skill,
    )


def _make_operator(
    hacking_skill: float = 100.0,
    extraction_multiplier: float = 1.0,
    regrowth_multiplier: float = 1.0,
    greed: float = 0.5,
    task_delay: float = 2.0,
) -> OperatorProfile:
    return OperatorProfile(
        hacking_skill=hacking_skill,
        extraction_multiplier=extraction_multiplier,
        regrowth_multiplier=regrowth_multiplier,
        greed=greed,
        task_delay=task_delay,
    )


class FakeOracle:
    """FormulaOracle returning fixed answers and recording what it was asked."""

    def __init__(
        self,
        hack_percent: float = 0.05,
        grow_threads: float = 30.0,
        snapshot: Optional[Node] = None,
    ) -> None:
        self._hack_percent = hack_percent
        self._grow_threads = grow_threads
        self._snapshot = snapshot
        self.grow_calls: List[Tuple[Node, OperatorProfile, float]] = []

    def hack_percent(self, node: Node, operator: OperatorProfile) -> float:
        return self._hack_percent

    def grow_threads(
        self, node: Node, operator: OperatorProfile, target_yield: float
    ) -> float:
        self.grow_calls.append((node, operator, target_yield))
        return self._grow_threads

    def node_snapshot(self, node_id: str) -> Node:
        if self._snapshot is not None:
            return self._snapshot
        return _make_node(node_id=node_id)


# ─────────────────────────────────────────────────────────────────────────────
# Group 1: AnalyticModel.extraction_yield_fraction
# ─────────────────────────────────────────────────────────────────────────────

class TestAnalyticExtractionFraction:

    model = AnalyticModel()

    def test_matches_closed_form(self) -> None:
        """difficulty × skill × multiplier / 240 for a well-levelled operator."""
        node = _make_node(hardening=10.0, required_skill=51.0)
        operator = _make_operator(hacking_skill=100.0, extraction_multiplier=2.0)

        expected = (90.0 / 100.0) * (50.0 / 100.0) * 2.0 / BALANCE_FACTOR
        assert self.model.extraction_yield_fraction(node, operator) == pytest.approx(expected)

    def test_balance_factor_is_240(self) -> None:
        assert BALANCE_FACTOR == 240

    def test_under_levelled_operator_clamps_to_zero(self) -> None:
        """Negative skill multiplier is not clamped on its own, only the final value."""
        node = _make_node(required_skill=50.0)
        operator = _make_operator(hacking_skill=10.0)

        assert self.model.extraction_yield_fraction(node, operator) == 0.0

    def test_fully_hardened_node_yields_nothing(self) -> None:
        node = _make_node(hardening=100.0, hardening_min=1.0)
        assert self.model.extraction_yield_fraction(node, _make_operator()) == 0.0

    def test_huge_multiplier_clamps_to_one(self) -> None:
        operator = _make_operator(extraction_multiplier=1000.0)
        assert self.model.extraction_yield_fraction(_make_node(), operator) == 1.0

    def test_fraction_always_in_unit_interval(self) -> None:
        for hardening in [1.0, 25.0, 50.0, 99.0, 100.0, 150.0]:
            for skill in [1.0, 10.0, 100.0, 1000.0]:
                node = _make_node(hardening=hardening, required_skill=20.0)
                operator = _make_operator(hacking_skill=skill)
                fraction = self.model.extraction_yield_fraction(node, operator)
                assert 0.0 <= fraction <= 1.0, f"h={hardening} s={skill} → {fraction}"


# ─────────────────────────────────────────────────────────────────────────────
# Group 2: AnalyticModel replenish / regrowth
# ─────────────────────────────────────────────────────────────────────────────

class TestAnalyticReplenish:

    model = AnalyticModel()

    def test_adjusted_growth_rate_uses_hardening(self) -> None:
        node = _make_node(hardening=10.0)
        assert AnalyticModel.adjusted_growth_rate(node) == pytest.approx(1.0003)

    def test_adjusted_growth_rate_is_capped(self) -> None:
        """hardening 0.5 → 1.006 uncapped, must be held at 1.0035."""
        node = _make_node(hardening=0.5, hardening_min=0.5)
        assert AnalyticModel.adjusted_growth_rate(node) == MAX_ADJUSTED_GROWTH_RATE

    def test_zero_hardening_takes_capped_rate(self) -> None:
        node = _make_node(hardening=0.0, hardening_min=0.0)
        assert AnalyticModel.adjusted_growth_rate(node) == MAX_ADJUSTED_GROWTH_RATE

    def test_zero_hardening_replenish_is_finite(self) -> None:
        node = _make_node(hardening=0.0, hardening_min=0.0)
        threads = self.model.replenish_threads_for(node, 2.0, _make_operator())
        assert threads == pytest.approx(math.log(2.0) / math.log(MAX_ADJUSTED_GROWTH_RATE))

    def test_threads_match_closed_form(self) -> None:
        node = _make_node(hardening=1.0, growth_rate=50.0)
        operator = _make_operator(regrowth_multiplier=1.5)

        threads = self.model.replenish_threads_for(node, 2.0, operator)
        expected = math.log(2.0) / (math.log(1.003) * 1.5 * 0.5)
        assert threads == pytest.approx(expected)

    def test_no_growth_needed_gives_zero(self) -> None:
        assert self.model.replenish_threads_for(_make_node(), 1.0, _make_operator()) == 0.0

    def test_round_trip_restores_max_yield(self) -> None:
        """Threads from replenish_threads_for fed to the forward formula reach yield_max."""
        node = _make_node(yield_available=250_000.0, yield_max=1_000_000.0, hardening=3.0)
        operator = _make_operator(regrowth_multiplier=1.2)

        threads = self.model.replenish_threads_for(node, replenish_multiplier(node), operator)
        grown = max(node.yield_available, 1.0) * self.model.regrowth_multiplier(
            node, threads, operator
        )
        assert grown == pytest.approx(node.yield_max, rel=1e-9)

    def test_rounded_up_threads_never_fall_short(self) -> None:
        node = _make_node(yield_available=0.0, yield_max=5_000_000.0, hardening=5.0)
        operator = _make_operator()

        threads = math.ceil(
            self.model.replenish_threads_for(node, replenish_multiplier(node), operator)
        )
        predicted = self.model.predicted_yield_after_replenish(node, threads, operator)
        assert predicted == pytest.approx(node.yield_max)

    def test_predicted_yield_capped_at_max(self) -> None:
        node = _make_node(yield_available=900_000.0)
        predicted = self.model.predicted_yield_after_replenish(node, 10_000, _make_operator())
        assert predicted == node.yield_max


# ─────────────────────────────────────────────────────────────────────────────
# Group 3: OracleModel delegation
# ─────────────────────────────────────────────────────────────────────────────

class TestOracleModel:

    def test_fraction_passed_through_unclamped(self) -> None:
        """Oracle answers are ground truth, even outside [0, 1]."""
        model = OracleModel(FakeOracle(hack_percent=1.7))
        assert model.extraction_yield_fraction(_make_node(), _make_operator()) == 1.7

    def test_replenish_uses_current_state_over_oracle_snapshot(self) -> None:
        oracle_view = _make_node(
            node_id="n-oracle",
            yield_available=999.0,
            yield_max=2_000_000.0,
            hardening=40.0,
            growth_rate=75.0,
        )
        oracle = FakeOracle(grow_threads=123.4, snapshot=oracle_view)
        model = OracleModel(oracle)
        current = _make_node(node_id="n-oracle", yield_available=10_000.0, hardening=7.0)
        operator = _make_operator()

        threads = model.replenish_threads_for(current, 3.0, operator)

        assert threads == 123.4
        asked_node, asked_operator, target_yield = oracle.grow_calls[0]
        assert asked_node.yield_available == 10_000.0
        assert asked_node.hardening == 7.0
        # Structural fields come from the oracle's own view
        assert asked_node.growth_rate == 75.0
        assert target_yield == 2_000_000.0
        assert asked_operator is operator

    def test_snapshot_override_does_not_touch_oracle_view(self) -> None:
        oracle_view = _make_node(yield_available=999.0, hardening=40.0)
        model = OracleModel(FakeOracle(snapshot=oracle_view))

        model.replenish_threads_for(_make_node(yield_available=5.0, hardening=2.0), 2.0, _make_operator())

        assert oracle_view.yield_available == 999.0
        assert oracle_view.hardening == 40.0


# ─────────────────────────────────────────────────────────────────────────────
# Group 4: select_effect_model and replenish_multiplier
# ─────────────────────────────────────────────────────────────────────────────

class TestModelSelection:

    def test_oracle_present_selects_oracle_model(self) -> None:
        assert isinstance(select_effect_model(FakeOracle()), OracleModel)

    def test_oracle_absent_selects_analytic_model(self) -> None:
        assert isinstance(select_effect_model(None), AnalyticModel)

    def test_multiplier_for_partial_yield(self) -> None:
        node = _make_node(yield_available=250_000.0, yield_max=1_000_000.0)
        assert replenish_multiplier(node) == pytest.approx(4.0)

    def test_multiplier_for_drained_node_avoids_division_by_zero(self) -> None:
        node = _make_node(yield_available=0.0, yield_max=1_000_000.0)
        assert replenish_multiplier(node) == pytest.approx(1_000_000.0)
