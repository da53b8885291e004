"""
controller/control_plane/validation.py
──────────────────────────────────────
Precondition checks run before any batch computation.

Validation is the first gate in the batch pipeline. It runs AFTER pydantic
validation (which only knows that quantities are non-negative) and BEFORE
the thread and delay calculators, which assume their inputs make sense.

What it checks
───────────────
  Node:
    1. growth_rate > 0       (the analytic replenish formula divides by it)
    2. hardening ≥ hardening_min
    3. yield_available ≤ yield_max

  OperatorProfile:
    4. 0 < greed ≤ 1
    5. task_delay > 0
    6. hacking_skill > 0     (the skill multiplier divides by it)
    7. regrowth_multiplier > 0

  OperationDurations:
    8. every duration > 0

What it does NOT check
───────────────────────
  • Whether the node is exploitable at all: that depends on the effect model
    and surfaces as DegenerateModelError from the ThreadCalculator.
  • Whether the durations leave room for the landing order: that surfaces as
    NegativeDelayError from the DelayCalculator.
"""

from __future__ import annotations

from controller.shared.models import Node, OperationDurations, OperatorProfile


class InvalidConfigurationError(Exception):
    """
    Raised when batch inputs violate a precondition.

    Attributes:
        reason: Human-readable explanation of which precondition failed.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


def validate_batch_inputs(
    node: Node,
    operator: OperatorProfile,
    durations: OperationDurations,
) -> None:
    """
    Run every precondition check for one batch calculation.

    Returns None on success (caller proceeds to computation).

    Raises:
        InvalidConfigurationError: with a descriptive reason string.
    """
    validate_node(node)
    validate_operator(operator)
    validate_durations(durations)


def validate_node(node: Node) -> None:
    if node.growth_rate <= 0:
        raise InvalidConfigurationError(
            f"Node {node.node_id!r} has growth_rate={node.growth_rate}. "
            f"Must be > 0."
        )
    if node.hardening < node.hardening_min:
        raise InvalidConfigurationError(
            f"Node {node.node_id!r} has hardening={node.hardening} below "
            f"hardening_min={node.hardening_min}."
        )
    if node.yield_available > node.yield_max:
        raise InvalidConfigurationError(
            f"Node {node.node_id!r} has yield_available={node.yield_available} "
            f"above yield_max={node.yield_max}."
        )


def validate_operator(operator: OperatorProfile) -> None:
    if not 0.0 < operator.greed <= 1.0:
        raise InvalidConfigurationError(
            f"greed={operator.greed} is outside (0, 1]."
        )
    if operator.task_delay <= 0:
        raise InvalidConfigurationError(
            f"task_delay={operator.task_delay}. Must be > 0."
        )
    if operator.hacking_skill <= 0:
        raise InvalidConfigurationError(
            f"hacking_skill={operator.hacking_skill}. Must be > 0."
        )
    if operator.regrowth_multiplier <= 0:
        raise InvalidConfigurationError(
            f"regrowth_multiplier={operator.regrowth_multiplier}. Must be > 0."
        )


def validate_durations(durations: OperationDurations) -> None:
    for name, value in durations.model_dump().items():
        if value <= 0:
            raise InvalidConfigurationError(f"{name}={value}. Must be > 0.")
