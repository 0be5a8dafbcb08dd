"""Sensitivity analysis — fixed perturbations of derived parameters.

Each calculator describes how its outcomes respond to its derived
parameters as a set of ``SensitivityFactor`` records (a local elasticity
around the base point).  The analyzer applies every perturbation in
``PERTURBATIONS`` to every factor and labels the impact.  It uses the
proportional model only; derivation is never re-run.

Impact bands (|relative change|):
  - < 2 %   minimal
  - < 10 %  noticeable
  - ≥ 10 %  significant
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from laser_engine.models.results import ImpactBand, SensitivityEntry, SensitivityReport

PERTURBATIONS: tuple[float, ...] = (-0.20, -0.10, -0.05, 0.05, 0.10, 0.20)

MINIMAL_BELOW_PCT = 2.0
NOTICEABLE_BELOW_PCT = 10.0


@dataclass(frozen=True)
class SensitivityFactor:
    """How one outcome responds to one derived parameter."""

    parameter: str
    """Derived parameter being perturbed (e.g. 'pressure')."""

    outcome: str
    """Outcome whose change is reported (e.g. 'total_cost')."""

    base_value: float
    """Outcome value at the derived optimum."""

    elasticity: float
    """Fractional outcome change per fractional parameter change."""

    symmetric: bool = False
    """True when any departure from the optimum degrades the outcome
    (delta = −|base × elasticity × p|) instead of tracking the sign of p."""


def classify_impact(relative_change_pct: float) -> ImpactBand:
    magnitude = abs(relative_change_pct)
    if magnitude < MINIMAL_BELOW_PCT:
        return "minimal"
    if magnitude < NOTICEABLE_BELOW_PCT:
        return "noticeable"
    return "significant"


def _entry(factor: SensitivityFactor, p: float) -> SensitivityEntry:
    if factor.symmetric:
        delta = -abs(factor.base_value * factor.elasticity * p)
        relative = -abs(factor.elasticity * p) * 100
    else:
        delta = factor.base_value * factor.elasticity * p
        relative = factor.elasticity * p * 100
    return SensitivityEntry(
        parameter=factor.parameter,
        perturbation=p,
        outcome=factor.outcome,
        base_value=round(factor.base_value, 4),
        delta=round(delta, 4),
        relative_change_pct=round(relative, 2),
        impact=classify_impact(relative),
    )


def analyze_sensitivity(
    factors: Iterable[SensitivityFactor],
    perturbations: tuple[float, ...] = PERTURBATIONS,
) -> SensitivityReport:
    """Build the report: one entry per (factor, perturbation), factor order preserved.

    Parameters
    ----------
    factors : Iterable[SensitivityFactor]
        Factors supplied by the calculator.
    perturbations : tuple[float, ...]
        Fractional perturbations.  Defaults to ``PERTURBATIONS``.

    Returns
    -------
    SensitivityReport
        ``len(factors) × len(perturbations)`` entries.
    """
    entries = [_entry(f, p) for f in factors for p in perturbations]
    return SensitivityReport(perturbations=tuple(perturbations), entries=tuple(entries))
