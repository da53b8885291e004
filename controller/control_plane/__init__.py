"""
controller/control_plane: batch assembly and planning.

Public API:
    create_batch()             → pure Batch construction from snapshots
    is_batch()                 → Batch vs single Task discriminator
    validate_batch_inputs()    → precondition checks
    InvalidConfigurationError  → raised by validation
    HostEnvironment            → what the planner needs from the host
    BatchPlanner               → environment → Batch, with status reporting
"""

from controller.control_plane.validation import (
    InvalidConfigurationError,
    validate_batch_inputs,
)
from controller.control_plane.batch_assembler import create_batch, is_batch
from controller.control_plane.environment import HostEnvironment
from controller.control_plane.planner import BatchPlanner

__all__ = [
    "InvalidConfigurationError",
    "validate_batch_inputs",
    "create_batch",
    "is_batch",
    "HostEnvironment",
    "BatchPlanner",
]
