"""
controller/control_plane/batch_assembler.py
───────────────────────────────────────────
The integration point handed to the dispatcher: one Batch per call.

Pipeline
─────────
  1. validate_batch_inputs()          → InvalidConfigurationError
  2. ThreadCalculator.calculate_threads() → DegenerateModelError
  3. ThreadCounts.launchable()         (every count ≥ 1)
  4. DelayCalculator.calculate_delays() → NegativeDelayError
  5. Zip threads and delays with BATCH_TASK_ORDER into four Tasks.

create_batch() does no I/O, launches nothing and never looks at the hosts;
calling it twice with the same inputs gives two equal Batches.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

from controller.shared.models import (
    BATCH_TASK_ORDER,
    Batch,
    Node,
    OperationDurations,
    OperatorProfile,
    Task,
)
from controller.control_plane.validation import validate_batch_inputs
from batch_core.delays import DelayCalculator
from batch_core.effect_model import AnalyticModel, EffectModel
from batch_core.threads import ThreadCalculator

_delay_calculator = DelayCalculator()


def create_batch(
    node: Node,
    operator: OperatorProfile,
    hosts: Iterable[Any],
    durations: OperationDurations,
    model: Optional[EffectModel] = None,
) -> Batch:
    """
    Build the four-task batch for `node`.

    Args:
        node:      Target snapshot.
        operator:  Operator snapshot (greed, task_delay, multipliers).
        hosts:     Usable hosts from the discovery collaborator. Passed through.
        durations: Duration estimates for this node.
        model:     Effect model for this calculation cycle. None = AnalyticModel.

    Returns:
        Batch with tasks in BATCH_TASK_ORDER.

    Raises:
        InvalidConfigurationError: inputs violate a precondition.
        DegenerateModelError:      node yields nothing per extract thread.
        NegativeDelayError:        durations leave no room for the landing order.
    """
    validate_batch_inputs(node, operator, durations)

    calculator = ThreadCalculator(model if model is not None else AnalyticModel())
    threads = calculator.calculate_threads(node, operator).launchable()
    delays = _delay_calculator.calculate_delays(durations, operator.task_delay)

    tasks = [
        Task(kind=kind, phase=phase, threads=count, delay=delay)
        for (kind, phase), count, delay in zip(BATCH_TASK_ORDER, threads, delays)
    ]
    return Batch(target=node, hosts=list(hosts), tasks=tasks)


def is_batch(job: Union[Batch, Task]) -> bool:
    """True for a whole Batch, False for a single Task."""
    return isinstance(job, Batch)
