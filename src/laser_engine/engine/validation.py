"""Input validation — structural checks, then domain checks.

Structural validation is delegated to the calculator's pydantic request
model; each pydantic error becomes a ``ValidationIssue`` whose ``field`` is
the dotted location.  Domain validation runs only on a structurally valid
request and is implemented by the calculator itself.

Nothing here raises on bad input: issues are returned as data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from laser_engine.engine.contract import CalculationContext, Calculator
from laser_engine.models.results import ValidationIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of running both validation stages."""

    issues: tuple[ValidationIssue, ...]
    stage: Literal["structural", "domain"]
    """Last stage that ran."""
    context: CalculationContext | None = None
    """Set when the request parsed; carries the request for derivation."""

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity == "error")

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity == "warning")

    @property
    def is_valid(self) -> bool:
        return self.context is not None and not self.errors


def _field_path(loc: tuple[Any, ...]) -> str | None:
    return ".".join(str(part) for part in loc) or None


def validate_structure(
    model_cls: type[BaseModel], inputs: Any,
) -> tuple[BaseModel | None, list[ValidationIssue]]:
    """Parse ``inputs`` into ``model_cls``.

    Returns the request (or None) and the structural issues found.
    """
    try:
        return model_cls.model_validate(inputs), []
    except ValidationError as exc:
        issues = [
            ValidationIssue(
                field=_field_path(err["loc"]),
                message=err["msg"],
                code=err["type"].upper(),
            )
            for err in exc.errors()
        ]
        return None, issues


def validate_inputs(calculator: Calculator, inputs: Any) -> ValidationReport:
    """Run structural then domain validation for one calculator."""
    request, issues = validate_structure(calculator.request_model, inputs)
    if request is None:
        logger.debug("%s: %d structural issue(s)", calculator.id, len(issues))
        return ValidationReport(issues=tuple(issues), stage="structural")

    ctx = CalculationContext(request, calculator.tables, calculator.settings, calculator.estimate)
    domain_issues = calculator.domain_validate(ctx)
    logger.debug("%s: %d domain issue(s)", calculator.id, len(domain_issues))
    return ValidationReport(issues=tuple(domain_issues), stage="domain", context=ctx)
