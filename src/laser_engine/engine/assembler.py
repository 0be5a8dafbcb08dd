"""Result assembly — consistency checks, warning merge, metadata.

The assembler is the only place a ``CalculationResult`` or
``CalculationFailure`` is constructed.  Before building a result it checks
the additive invariants:

  - cost.total        == material + energy + gas + labor
  - time.cutting      == Σ step minutes
  - time.total        == cutting + setup
  - steps[-1].cumulative_depth == declared total depth (multi-pass)

A violation is a programming fault and raises ``ConsistencyError``.
"""

from __future__ import annotations

import time
from typing import Any, Sequence

from pydantic import BaseModel

from laser_engine.config.settings import EngineSettings
from laser_engine.engine.contract import Advice, CalculationContext
from laser_engine.engine.fingerprint import fingerprint
from laser_engine.errors import ConsistencyError
from laser_engine.models.results import (
    CalculationFailure,
    CalculationResult,
    FailureKind,
    OutcomeMetrics,
    ResultMetadata,
    ResultWarning,
    SensitivityReport,
    StepParameters,
    StrategyCandidate,
    ValidationIssue,
)

DEPTH_TOLERANCE_MM = 1e-6
TOTAL_DEPTH = "total_depth"
"""Derived-parameter name a discrete strategy uses to declare its target depth."""


def _check(label: str, reported: float, expected: float, tolerance: float) -> None:
    if abs(reported - expected) > tolerance:
        raise ConsistencyError(
            f"{label}: reported {reported!r}, components sum to {expected!r}"
        )


def check_consistency(
    strategy: StrategyCandidate,
    steps: Sequence[StepParameters],
    outcome: OutcomeMetrics,
    tolerance: float,
) -> None:
    """Raise ``ConsistencyError`` if any additive or progress invariant fails."""
    cost = outcome.cost
    _check("cost.total", cost.total, cost.material + cost.energy + cost.gas + cost.labor, tolerance)

    t = outcome.time
    _check("time.cutting_minutes", t.cutting_minutes, sum(t.step_minutes), tolerance)
    _check("time.total_minutes", t.total_minutes, t.cutting_minutes + t.setup_minutes, tolerance)

    if steps:
        if len(steps) != len(t.step_minutes):
            raise ConsistencyError(
                f"{len(steps)} steps but {len(t.step_minutes)} step durations"
            )
        _check("steps.depth", steps[-1].cumulative_depth, sum(s.depth for s in steps), tolerance)
        _check(
            "steps.cumulative_depth",
            steps[-1].cumulative_depth,
            strategy.value(TOTAL_DEPTH),
            DEPTH_TOLERANCE_MM,
        )


def _metadata(
    calculator_id: str,
    calculator_version: str,
    settings: EngineSettings,
    started: float,
    request: BaseModel | None,
) -> ResultMetadata:
    return ResultMetadata(
        calculator_id=calculator_id,
        calculator_version=calculator_version,
        schema_version=settings.schema_version,
        duration_ms=round((time.perf_counter() - started) * 1000, 3),
        fingerprint=fingerprint(calculator_id, calculator_version, request) if request is not None else None,
    )


def assemble_result(
    calculator: Any,
    ctx: CalculationContext,
    strategy: StrategyCandidate,
    steps: Sequence[StepParameters],
    outcome: OutcomeMetrics,
    sensitivity: SensitivityReport,
    analysis: BaseModel,
    advice: Advice,
    input_warnings: Sequence[ValidationIssue],
    started: float,
) -> CalculationResult:
    """Check invariants and build the frozen result.

    Input-stage warnings come first, then result-stage warnings, each in
    the order its stage produced them.
    """
    check_consistency(strategy, steps, outcome, ctx.settings.consistency_tolerance)

    warnings = [
        ResultWarning(stage="input", message=w.message, field=w.field, code=w.code)
        for w in input_warnings
    ]
    warnings.extend(ResultWarning(stage="result", message=m) for m in advice.warnings)

    return CalculationResult(
        calculator_id=calculator.id,
        request=ctx.request.model_dump(mode="json"),
        strategy=strategy,
        steps=tuple(steps),
        outcome=outcome,
        sensitivity=sensitivity,
        recommendations=advice.recommendations,
        warnings=tuple(warnings),
        analysis=analysis,
        metadata=_metadata(calculator.id, calculator.version, ctx.settings, started, ctx.request),
    )


def assemble_failure(
    calculator: Any,
    kind: FailureKind,
    message: str,
    started: float,
    issues: Sequence[ValidationIssue] = (),
    request: BaseModel | None = None,
) -> CalculationFailure:
    """Build a failure.  ``request`` is None when the inputs never parsed."""
    return CalculationFailure(
        calculator_id=calculator.id,
        kind=kind,
        message=message,
        issues=tuple(issues),
        metadata=_metadata(calculator.id, calculator.version, calculator.settings, started, request),
    )
