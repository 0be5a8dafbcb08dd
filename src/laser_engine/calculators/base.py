"""
Abstract base class for all calculators.

Input: raw inputs dict (validated against ``request_model``)
Output: CalculationResult | CalculationFailure, via the shared pipeline
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel

from laser_engine.config.enums import Grade
from laser_engine.config.settings import EngineSettings, get_settings
from laser_engine.engine.contract import Advice, CalculationContext
from laser_engine.engine.pipeline import run_calculation
from laser_engine.engine.schema import InputDescriptor, describe_inputs
from laser_engine.engine.sensitivity import SensitivityFactor
from laser_engine.models.results import (
    CalculationFailure,
    CalculationResult,
    CostAnalysis,
    OutcomeMetrics,
    StepParameters,
    StrategyCandidate,
    TimeAnalysis,
    ValidationIssue,
)
from laser_engine.tables.defaults import DEFAULT_TABLES, PropertyTables

GradeThresholds = tuple[float, float, float]
"""Minimum scores for excellent, good and fair; anything lower is poor."""


class BaseCalculator(ABC):
    """All calculators inherit from this."""

    id: str = ""
    title: str = ""
    description: str = ""
    version: str = "1.0.0"
    request_model: type[BaseModel]

    def __init__(self, tables: PropertyTables | None = None, settings: EngineSettings | None = None):
        self.tables = tables if tables is not None else DEFAULT_TABLES
        self.settings = settings if settings is not None else get_settings()

    # --- Pipeline stages ---

    @abstractmethod
    def estimate(self, request: Any, tables: PropertyTables) -> Any:
        """The calculator's own quick estimate, shared by validation and derivation."""

    @abstractmethod
    def domain_validate(self, ctx: CalculationContext) -> list[ValidationIssue]:
        pass

    @abstractmethod
    def derive(self, ctx: CalculationContext) -> StrategyCandidate:
        pass

    def expand(self, ctx: CalculationContext, strategy: StrategyCandidate) -> tuple[StepParameters, ...]:
        """Single-value calculators have no per-pass steps."""
        return ()

    @abstractmethod
    def predict(
        self, ctx: CalculationContext, strategy: StrategyCandidate, steps: tuple[StepParameters, ...],
    ) -> OutcomeMetrics:
        pass

    @abstractmethod
    def sensitivity_factors(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> list[SensitivityFactor]:
        pass

    @abstractmethod
    def analyze(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> BaseModel:
        pass

    @abstractmethod
    def advise(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics, analysis: Any,
    ) -> Advice:
        pass

    @abstractmethod
    def example_inputs(self) -> dict[str, Any]:
        pass

    # --- Public surface ---

    def calculate(self, inputs: Any) -> CalculationResult | CalculationFailure:
        """Validate and run one calculation.  Never raises."""
        return run_calculation(self, inputs)

    def describe_inputs(self) -> list[InputDescriptor]:
        return describe_inputs(self.request_model)

    def schema(self) -> dict[str, Any]:
        """JSON Schema of the request model."""
        return self.request_model.model_json_schema()

    def default_inputs(self) -> dict[str, Any]:
        """Inputs a form starts from: the example plus every optional field's default."""
        defaults = dict(self.example_inputs())
        for name, field_info in self.request_model.model_fields.items():
            if not field_info.is_required():
                default = field_info.default
                defaults.setdefault(name, default.value if isinstance(default, Enum) else default)
        return defaults

    # --- Helper methods for all calculators ---

    def grade(self, score: float, thresholds: GradeThresholds) -> Grade:
        """Map a quality score to a grade using calculator-local thresholds."""
        excellent, good, fair = thresholds
        if score >= excellent:
            return Grade.EXCELLENT
        if score >= good:
            return Grade.GOOD
        if score >= fair:
            return Grade.FAIR
        return Grade.POOR

    def time_analysis(
        self, step_minutes: Sequence[float], setup_minutes: float, baseline_minutes: float | None = None,
    ) -> TimeAnalysis:
        """Build a TimeAnalysis whose totals are sums of the reported parts.

        Without ``baseline_minutes`` there is no time comparison to report.
        """
        steps = tuple(round(m, 4) for m in step_minutes)
        cutting = round(sum(steps), 4)
        setup = round(setup_minutes, 4)
        total = round(cutting + setup, 4)
        baseline = round(baseline_minutes, 4) if baseline_minutes is not None else None
        improvement = None
        if baseline is not None:
            improvement = round((baseline - total) / baseline * 100, 2) if baseline > 0 else 0.0
        return TimeAnalysis(
            step_minutes=steps,
            cutting_minutes=cutting,
            setup_minutes=setup,
            total_minutes=total,
            throughput_per_hour=round(60 / total, 4) if total > 0 else 0.0,
            baseline_minutes=baseline,
            improvement_pct=improvement,
        )

    def cost_analysis(
        self,
        material: float,
        energy: float,
        gas: float,
        labor: float,
        cutting_length_mm: float,
        baseline_total: float,
    ) -> CostAnalysis:
        """Build a CostAnalysis whose total is the sum of the reported components."""
        material, energy, gas, labor = (round(v, 4) for v in (material, energy, gas, labor))
        total = round(material + energy + gas + labor, 4)
        baseline = round(baseline_total, 4)
        savings = round(baseline - total, 4)
        return CostAnalysis(
            material=material,
            energy=energy,
            gas=gas,
            labor=labor,
            total=total,
            cost_per_mm=round(total / cutting_length_mm, 6),
            baseline_total=baseline,
            savings=savings,
            savings_pct=round(savings / baseline * 100, 2) if baseline > 0 else 0.0,
        )

    def energy_cost(self, power_w: float, minutes: float) -> float:
        """W × min → kWh × rate."""
        return power_w * minutes / 60 / 1000 * self.settings.energy_rate_per_kwh

    def labor_cost(self, minutes: float) -> float:
        return minutes / 60 * self.settings.labor_rate_per_hour

    def gas_cost(self, flow_lpm: float, minutes: float, price_per_m3: float) -> float:
        """L/min × min → m³ × price."""
        return flow_lpm * minutes / 1000 * price_per_m3

    def warning(self, field: str | None, message: str, code: str) -> ValidationIssue:
        return ValidationIssue(field=field, message=message, code=code, severity="warning")

    def error(self, field: str | None, message: str, code: str) -> ValidationIssue:
        return ValidationIssue(field=field, message=message, code=code, severity="error")
