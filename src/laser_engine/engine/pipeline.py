"""Calculation pipeline — the single entry point every calculator runs through.

    validate → derive → expand → predict → sensitivity → analyze → advise → assemble

Validation failures short-circuit: no derivation stage runs and the
caller gets a ``CalculationFailure`` carrying only the issues.  Any
exception raised after the request parsed is logged and returned as an
``internal`` failure; nothing propagates to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from laser_engine.engine.assembler import assemble_failure, assemble_result
from laser_engine.engine.contract import Calculator
from laser_engine.engine.sensitivity import analyze_sensitivity
from laser_engine.engine.validation import validate_inputs, validate_structure
from laser_engine.models.results import CalculationFailure, CalculationResult

logger = logging.getLogger(__name__)


def run_calculation(calculator: Calculator, inputs: Any) -> CalculationResult | CalculationFailure:
    """Run one calculation end to end.

    Parameters
    ----------
    calculator : Calculator
        Any object implementing the calculator contract.
    inputs : Any
        Raw caller inputs (usually a dict of field name → value).

    Returns
    -------
    CalculationResult | CalculationFailure
        Discriminated on ``status``.
    """
    started = time.perf_counter()
    request = None
    try:
        report = validate_inputs(calculator, inputs)
        if report.context is None:
            return assemble_failure(
                calculator, "structural",
                f"{len(report.errors)} invalid input field(s)",
                started, report.issues,
            )

        ctx = report.context
        request = ctx.request
        if report.errors:
            return assemble_failure(
                calculator, "domain", report.errors[0].message,
                started, report.issues, request=request,
            )

        strategy = calculator.derive(ctx)
        logger.debug("%s: derived %s (confidence %.2f)", calculator.id, strategy.name, strategy.confidence)
        steps = calculator.expand(ctx, strategy)
        outcome = calculator.predict(ctx, strategy, steps)
        factors = calculator.sensitivity_factors(ctx, strategy, steps, outcome)
        sensitivity = analyze_sensitivity(factors)
        analysis = calculator.analyze(ctx, strategy, steps, outcome)
        advice = calculator.advise(ctx, strategy, steps, outcome, analysis)
        return assemble_result(
            calculator, ctx, strategy, steps, outcome, sensitivity,
            analysis, advice, report.warnings, started,
        )
    except Exception as exc:
        logger.exception("%s: calculation failed", calculator.id)
        if request is None:
            # domain_validate may have raised before the context was exposed
            request, _ = validate_structure(calculator.request_model, inputs)
        return assemble_failure(
            calculator, "internal",
            f"Internal error in {calculator.id}: {type(exc).__name__}: {exc}",
            started, request=request,
        )
