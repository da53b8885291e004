"""
batch_core: thread and delay calculation core.

Public API:
    EffectModel, AnalyticModel, OracleModel → per-thread effect estimates
    select_effect_model()  → picks the model for one calculation cycle
    ThreadCalculator       → four thread counts for one batch
    DelayCalculator        → four launch offsets for one batch
    DegenerateModelError   → node yields nothing per extract thread
    NegativeDelayError     → durations leave no room for the landing order

Usage:
    from batch_core import ThreadCalculator, DelayCalculator, select_effect_model

    calculator = ThreadCalculator(select_effect_model(oracle))
    threads = calculator.calculate_threads(node, operator).launchable()
    delays = DelayCalculator().calculate_delays(durations, operator.task_delay)
"""

from batch_core.effect_model import (
    AnalyticModel,
    EffectModel,
    FormulaOracle,
    OracleModel,
    select_effect_model,
)
from batch_core.threads import DegenerateModelError, ThreadCalculator, ThreadCounts
from batch_core.delays import DelayCalculator, DelayVector, NegativeDelayError

__all__ = [
    "AnalyticModel",
    "EffectModel",
    "FormulaOracle",
    "OracleModel",
    "select_effect_model",
    "DegenerateModelError",
    "ThreadCalculator",
    "ThreadCounts",
    "DelayCalculator",
    "DelayVector",
    "NegativeDelayError",
]
