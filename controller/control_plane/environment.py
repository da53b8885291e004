"""
controller/control_plane/environment.py
───────────────────────────────────────
What the batch planner needs from the host execution environment.

The host owns host discovery, payload deployment and the actual launching of
tasks. The planner only reads from it.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol

from controller.shared.models import Node, OperationDurations, OperatorProfile
from batch_core.effect_model import FormulaOracle


class HostEnvironment(Protocol):

    def node_state(self, node_id: str) -> Node:
        """Current snapshot of the target node."""
        ...

    def operator_profile(self) -> OperatorProfile:
        ...

    def operation_durations(self, node_id: str) -> OperationDurations:
        """Duration estimates for each operation against this node."""
        ...

    def formula_oracle(self) -> Optional[FormulaOracle]:
        """The exact-formula capability, or None when it isn't installed."""
        ...

    def usable_hosts(self) -> List[Any]:
        ...

    def fortify_effect_per_thread(self) -> float:
        """Hardening removed by a single fortify thread."""
        ...
