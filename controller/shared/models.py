"""
controller/shared/models.py
───────────────────────────
Every data structure the batch calculator reads or produces.

Design philosophy
-----------------
Every model is an immutable snapshot. A calculation cycle reads one Node,
one OperatorProfile and one OperationDurations value, and returns a brand
new Batch. Nothing in here is ever mutated after construction; "what would
the node look like if..." questions are answered with a copy that overrides
only the fields in question (see Node.with_state).

Pydantic handles schema facts (a quantity can't be negative, a task needs at
least one thread). Semantic preconditions that depend on several fields at
once (greed in (0, 1], hardening above its floor, ...) are checked by
controller/control_plane/validation.py before any computation runs.

Reading guide
-------------
Read top-to-bottom. Each model builds on the ones above it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: ENUMERATIONS
# ─────────────────────────────────────────────────────────────────────────────

class OperationKind(str, Enum):
    """
    The three operations a batch launches against a node.

    EXTRACT   → consumes yield in proportion to threads, raises hardening.
    FORTIFY   → lowers hardening. Used twice per batch to cancel the
                hardening raised by EXTRACT and by REPLENISH.
    REPLENISH → regrows yield toward yield_max, raises hardening.
    """
    EXTRACT = "extract"
    FORTIFY = "fortify"
    REPLENISH = "replenish"


class TaskPhase(str, Enum):
    """
    Distinguishes the two FORTIFY tasks of a batch.

    PRIMARY   → the first task of its kind. For FORTIFY: offsets EXTRACT.
    SECONDARY → the second FORTIFY, offsetting REPLENISH.
    """
    PRIMARY = "primary"
    SECONDARY = "secondary"


BATCH_TASK_ORDER: Tuple[Tuple[OperationKind, TaskPhase], ...] = (
    (OperationKind.EXTRACT, TaskPhase.PRIMARY),
    (OperationKind.FORTIFY, TaskPhase.PRIMARY),
    (OperationKind.REPLENISH, TaskPhase.PRIMARY),
    (OperationKind.FORTIFY, TaskPhase.SECONDARY),
)
"""Landing order of the four tasks in every Batch.

Extract → Fortify₁ → Replenish → Fortify₂. Thread vectors and delay
vectors use the same positional order.
"""


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: INPUT SNAPSHOTS
# What the host environment tells us about the target and the operator.
# ─────────────────────────────────────────────────────────────────────────────

class Node(BaseModel):
    """
    The target of a batch: a remote node whose yield drains and regrows.

    Fields:
        node_id         → Identifier the host environment uses for this node.
        yield_available → Extractable quantity right now.
        yield_max       → Ceiling that REPLENISH grows toward.
        hardening       → Current resistance level. Rises with EXTRACT and
                          REPLENISH, lowered by FORTIFY.
        hardening_min   → Floor that FORTIFY can't go below.
        growth_rate     → Intrinsic regrowth coefficient (percent scale,
                          100 = the reference growth rate).
        required_skill  → Skill threshold used by the analytic extraction
                          formula. Operators below it extract nothing.
    """
    model_config = ConfigDict(frozen=True)

    node_id: str = Field(..., description="Identifier of the node in the host environment")

    yield_available: float = Field(..., ge=0.0, description="Current extractable quantity")
    yield_max: float = Field(..., ge=0.0, description="Yield ceiling")

    hardening: float = Field(..., ge=0.0, description="Current resistance level")
    hardening_min: float = Field(0.0, ge=0.0, description="Resistance floor")

    growth_rate: float = Field(..., ge=0.0, description="Intrinsic regrowth coefficient")
    required_skill: float = Field(1.0, ge=0.0, description="Skill threshold for extraction")

    def with_state(self, yield_available: float, hardening: float) -> "Node":
        """
        Return a copy with the volatile state replaced.

        Used to build "predicted" snapshots: everything structural (ceilings,
        growth, required skill) comes from this node, only the two values that
        drift between calculations are overridden.
        """
        return self.model_copy(
            update={"yield_available": yield_available, "hardening": hardening}
        )

    @property
    def excess_hardening(self) -> float:
        """Hardening above the floor, i.e. what FORTIFY still has to remove."""
        return abs(self.hardening - self.hardening_min)


class OperatorProfile(BaseModel):
    """
    Everything about the operator that changes the outcome of a batch.

    Fields:
        hacking_skill         → Operator capability level.
        extraction_multiplier → Environment-wide multiplier on extracted yield.
        regrowth_multiplier   → Environment-wide multiplier on regrowth.
        greed                 → Target fraction of yield_available to extract
                                per cycle. Valid range (0, 1].
        task_delay            → Minimum spacing between two landings.
    """
    model_config = ConfigDict(frozen=True)

    hacking_skill: float = Field(..., ge=0.0, description="Operator capability level")
    extraction_multiplier: float = Field(1.0, ge=0.0)
    regrowth_multiplier: float = Field(1.0, ge=0.0)

    greed: float = Field(..., ge=0.0, description="Fraction of yield to extract per cycle")
    task_delay: float = Field(..., ge=0.0, description="Minimum spacing between landings")


class OperationDurations(BaseModel):
    """
    How long each operation runs once launched, as estimated by the host.

    FORTIFY runs twice per batch; both invocations share fortify_time.
    All three values are in the same time unit as OperatorProfile.task_delay.
    """
    model_config = ConfigDict(frozen=True)

    extract_time: float = Field(..., ge=0.0)
    fortify_time: float = Field(..., ge=0.0)
    replenish_time: float = Field(..., ge=0.0)


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: OUTPUT VALUES
# What the dispatcher receives.
# ─────────────────────────────────────────────────────────────────────────────

class Task(BaseModel):
    """
    One scheduled operation of a batch.

    threads is always a whole, launchable count. delay is the offset from the
    shared dispatch instant at which the dispatcher must launch the task.
    """
    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    phase: TaskPhase = TaskPhase.PRIMARY
    threads: int = Field(..., ge=1, description="Threads to launch")
    delay: float = Field(..., ge=0.0, description="Launch offset from the dispatch instant")


class Batch(BaseModel):
    """
    One complete, temporally ordered set of four tasks against one node.

    hosts is whatever the discovery collaborator handed in. The calculator
    never looks inside it.
    """
    model_config = ConfigDict(frozen=True)

    target: Node
    hosts: List[Any] = Field(default_factory=list)
    tasks: List[Task]

    @model_validator(mode="after")
    def _check_task_order(self) -> "Batch":
        order = tuple((task.kind, task.phase) for task in self.tasks)
        if order != BATCH_TASK_ORDER:
            raise ValueError(
                "Batch tasks must be exactly "
                f"{[f'{k.value}/{p.value}' for k, p in BATCH_TASK_ORDER]}, "
                f"got {[f'{k.value}/{p.value}' for k, p in order]}"
            )
        return self

    @property
    def total_threads(self) -> int:
        """Threads the dispatcher has to find room for across all hosts."""
        return sum(task.threads for task in self.tasks)
