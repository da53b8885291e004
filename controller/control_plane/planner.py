"""
controller/control_plane/planner.py
───────────────────────────────────
BatchPlanner: reads the host environment and turns a node id into a Batch.

This is the seam between the pure calculators and the orchestration layer
that dispatches batches. Per calculation cycle it:

  1. Takes one snapshot of the node, the operator and the duration estimates.
  2. Probes the host for the exact-formula oracle ONCE and picks the effect
     model (OracleModel if present, AnalyticModel otherwise).
  3. Calls create_batch() with the host's usable hosts.

Two ways to call it
────────────────────
  plan_batch(node_id) → Batch
      Raises InvalidConfigurationError / DegenerateModelError /
      NegativeDelayError unchanged. For callers that handle errors themselves.

  submit(node_id) → Dict
      Same pipeline, but a failed precondition becomes a REJECTED status with
      the violated precondition as message. A malformed batch is never
      returned.

Thread safety
──────────────
The planner keeps no state besides the environment reference. Planning
different nodes in parallel is safe as long as the environment is.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from controller.shared.models import Batch
from controller.control_plane.batch_assembler import create_batch
from controller.control_plane.environment import HostEnvironment
from controller.control_plane.validation import InvalidConfigurationError
from batch_core.delays import DelayCalculator, DelayVector, NegativeDelayError
from batch_core.effect_model import select_effect_model
from batch_core.threads import DegenerateModelError, ThreadCalculator

logger = logging.getLogger(__name__)


class BatchPlanner:
    """
    Plans batches against nodes of one host environment.

    Public API:
        plan_batch(node_id)      → Batch
        submit(node_id)          → Dict[str, Any]
        restore_threads(node_id) → int
    """

    def __init__(self, environment: HostEnvironment) -> None:
        self.environment = environment

    def plan_batch(self, node_id: str) -> Batch:
        """
        Build the next batch against `node_id`.

        Raises:
            InvalidConfigurationError, DegenerateModelError, NegativeDelayError
        """
        env = self.environment
        node = env.node_state(node_id)
        operator = env.operator_profile()
        durations = env.operation_durations(node_id)

        model = select_effect_model(env.formula_oracle())
        logger.debug("plan_batch: node %s using %s effect model", node_id, model.name)

        batch = create_batch(
            node=node,
            operator=operator,
            hosts=env.usable_hosts(),
            durations=durations,
            model=model,
        )

        landing = DelayCalculator.landing_times(
            DelayVector(*(task.delay for task in batch.tasks)), durations
        )
        logger.info(
            "plan_batch: node %s → threads %s, last landing at +%.1f (%d hosts)",
            node_id,
            [task.threads for task in batch.tasks],
            float(landing[-1]),
            len(batch.hosts),
        )
        return batch

    def submit(self, node_id: str) -> Dict[str, Any]:
        """
        Plan a batch and report the outcome as a status dict.

        Returns:
            {"status": "PLANNED"|"REJECTED", "node_id", "batch", "message"}
        """
        try:
            batch = self.plan_batch(node_id)
        except (
            InvalidConfigurationError,
            DegenerateModelError,
            NegativeDelayError,
        ) as e:
            logger.warning("submit: batch for node %s rejected: %s", node_id, e.reason)
            return {
                "status": "REJECTED",
                "node_id": node_id,
                "batch": None,
                "message": f"{e.__class__.__name__}: {e.reason}",
            }

        return {
            "status": "PLANNED",
            "node_id": node_id,
            "batch": batch,
            "message": f"Batch of {batch.total_threads} threads planned for {node_id}",
        }

    def restore_threads(self, node_id: str) -> int:
        """
        Fortify threads needed to bring `node_id` back to its hardening floor.

        One-shot preparation outside the steady batch cycle.
        """
        node = self.environment.node_state(node_id)
        return ThreadCalculator.minimal_fortify_threads(
            node, self.environment.fortify_effect_per_thread()
        )
