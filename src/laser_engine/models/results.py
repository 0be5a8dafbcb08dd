"""Result types — the contract between the engine and its callers.

Every model is frozen: once the assembler returns a result, nothing in it
can be reassigned.  Sequences are tuples for the same reason.

A calculation returns exactly one of two shapes, discriminated by
``status``:

* ``CalculationResult``  (``status="ok"``)  — complete, internally consistent
* ``CalculationFailure`` (``status="error"``) — structured failure, no derived fields
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from laser_engine.config.enums import Grade

_FROZEN = ConfigDict(frozen=True)

ImpactBand = Literal["minimal", "noticeable", "significant"]
FailureKind = Literal["structural", "domain", "internal"]


# ═══════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════

class ValidationIssue(BaseModel):
    """One blocking error or advisory warning about the inputs."""

    model_config = _FROZEN

    field: str | None
    """Dotted input path the issue refers to; None for whole-request issues."""
    message: str
    code: str
    severity: Literal["error", "warning"] = "error"


# ═══════════════════════════════════════════════════════════════════════════
# Derivation
# ═══════════════════════════════════════════════════════════════════════════

class DerivedParameter(BaseModel):
    """One scalar produced by the derivation stage."""

    model_config = _FROZEN

    name: str
    value: float
    unit: str = ""


class ParameterBand(BaseModel):
    """Recommended operating window around the derived optimum."""

    model_config = _FROZEN

    minimum: float
    optimal: float
    maximum: float
    tolerance: float
    """Nominal ± half-width before clipping to the table envelope."""


class StrategyCandidate(BaseModel):
    """The single strategy selected for a request."""

    model_config = _FROZEN

    name: str
    parameters: tuple[DerivedParameter, ...]
    reasoning: tuple[str, ...] = Field(min_length=1)
    """Why the strategy looks the way it does, in adjustment order."""
    confidence: float = Field(ge=0.0, le=1.0)
    band: ParameterBand | None = None

    def value(self, name: str) -> float:
        """Look up a derived parameter by name."""
        for p in self.parameters:
            if p.name == name:
                return p.value
        raise KeyError(name)


class StepParameters(BaseModel):
    """One pass of a multi-pass cut."""

    model_config = _FROZEN

    index: int
    """1-based pass number."""
    depth: float
    """Depth removed by this pass (mm)."""
    cumulative_depth: float
    """Total depth reached after this pass (mm)."""
    power: float
    """W."""
    power_pct: float
    """Share of the declared maximum power (%)."""
    speed: float
    """mm/min."""
    gas_pressure: float
    """bar."""
    focus_position: float
    """mm relative to the top surface (negative = into the material)."""
    duration_minutes: float
    notes: str = ""


# ═══════════════════════════════════════════════════════════════════════════
# Outcome predictions
# ═══════════════════════════════════════════════════════════════════════════

class QualityPrediction(BaseModel):
    model_config = _FROZEN

    score: float = Field(ge=0.0, le=100.0)
    grade: Grade
    consistency_pct: float
    expected_features: tuple[str, ...] = ()
    potential_issues: tuple[str, ...] = ()


class TimeAnalysis(BaseModel):
    """Minutes for one part.  ``cutting_minutes == sum(step_minutes)``."""

    model_config = _FROZEN

    step_minutes: tuple[float, ...]
    cutting_minutes: float
    setup_minutes: float
    total_minutes: float
    """cutting + setup."""
    throughput_per_hour: float
    """60 / total_minutes."""
    baseline_minutes: float | None = None
    """Naive comparison process for the same part; None when the calculator
    has no process that would run at a different speed."""
    improvement_pct: float | None = None
    """(baseline − total) / baseline × 100; negative when slower."""


class CostAnalysis(BaseModel):
    """USD for one part.  ``total == material + energy + gas + labor``."""

    model_config = _FROZEN

    material: float
    energy: float
    gas: float
    labor: float
    total: float
    cost_per_mm: float
    baseline_total: float
    savings: float
    """baseline_total − total."""
    savings_pct: float


class OutcomeMetrics(BaseModel):
    model_config = _FROZEN

    quality: QualityPrediction
    time: TimeAnalysis
    cost: CostAnalysis


# ═══════════════════════════════════════════════════════════════════════════
# Sensitivity
# ═══════════════════════════════════════════════════════════════════════════

class SensitivityEntry(BaseModel):
    """Outcome impact of one perturbation of one derived parameter."""

    model_config = _FROZEN

    parameter: str
    perturbation: float
    """Fractional change applied, e.g. -0.10 = −10 %."""
    outcome: str
    base_value: float
    delta: float
    relative_change_pct: float
    impact: ImpactBand


class SensitivityReport(BaseModel):
    model_config = _FROZEN

    perturbations: tuple[float, ...]
    entries: tuple[SensitivityEntry, ...]

    def for_parameter(self, parameter: str) -> tuple[SensitivityEntry, ...]:
        return tuple(e for e in self.entries if e.parameter == parameter)

    def most_sensitive(self) -> str | None:
        """Parameter with the largest absolute relative change."""
        if not self.entries:
            return None
        top = max(self.entries, key=lambda e: abs(e.relative_change_pct))
        return top.parameter


# ═══════════════════════════════════════════════════════════════════════════
# Advice
# ═══════════════════════════════════════════════════════════════════════════

class Troubleshooting(BaseModel):
    model_config = _FROZEN

    issue: str
    cause: str
    solution: str


class Recommendations(BaseModel):
    model_config = _FROZEN

    strategy: tuple[str, ...] = ()
    parameters: tuple[str, ...] = ()
    quality: tuple[str, ...] = ()
    cost: tuple[str, ...] = ()
    troubleshooting: tuple[Troubleshooting, ...] = ()


class ResultWarning(BaseModel):
    """A warning surfaced to the caller.

    ``stage="input"`` warnings come from validation, ``stage="result"``
    warnings from inspecting the computed values.
    """

    model_config = _FROZEN

    stage: Literal["input", "result"]
    message: str
    field: str | None = None
    code: str | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Calculator-specific analysis
# ═══════════════════════════════════════════════════════════════════════════

class MultiPassAnalysis(BaseModel):
    model_config = _FROZEN

    kind: Literal["multiple-pass"] = "multiple-pass"
    minimum_passes: int
    """ceil(thickness / single_pass_limit) before strategy adjustments."""
    efficiency_pct: float
    power_curve: Literal["decreasing", "flat", "staged", "ramp"]
    single_pass_possible: bool
    """True if the material table says one pass could sever this thickness."""


class GasFlowAnalysis(BaseModel):
    model_config = _FROZEN

    flow_rate_lpm: float
    velocity_m_s: float
    efficiency_pct: float
    hourly_consumption_l: float
    cost_per_hour: float


class PressureEffects(BaseModel):
    model_config = _FROZEN

    kerf_width_mm: float
    edge_quality: float
    """1–10 scale."""
    dross_risk: Literal["low", "medium", "high"]
    penetration_depth_mm: float
    gas_utilization_pct: float


class AlternativeSetting(BaseModel):
    model_config = _FROZEN

    name: str
    pressure: float
    tradeoff: str
    quality_impact: float
    """1–10 scale."""
    cost_impact_pct: float


class GasPressureAnalysis(BaseModel):
    model_config = _FROZEN

    kind: Literal["gas-pressure"] = "gas-pressure"
    flow: GasFlowAnalysis
    effects: PressureEffects
    alternatives: tuple[AlternativeSetting, ...]


class OpticalAnalysis(BaseModel):
    model_config = _FROZEN

    diffraction_limit_um: float
    focusability: float
    """1 / M², 0–1."""
    near_field_mm: float
    far_field_mrad: float
    waist_position_mm: float


class CuttingPerformance(BaseModel):
    model_config = _FROZEN

    edge_quality: Grade
    speed_class: Literal["very_fast", "fast", "medium", "slow"]
    thickness_capability_mm: float
    precision_level: Literal["ultra", "high", "medium", "standard"]


class LaserCharacteristics(BaseModel):
    model_config = _FROZEN

    coherence_length_mm: float
    brightness: float
    """W/(cm²·sr)."""
    beam_divergence_mrad: float
    numerical_aperture: float


class BeamQualityAnalysis(BaseModel):
    model_config = _FROZEN

    kind: Literal["beam-quality"] = "beam-quality"
    optical: OpticalAnalysis
    performance: CuttingPerformance
    characteristics: LaserCharacteristics


CalculatorAnalysis = Annotated[
    Union[MultiPassAnalysis, GasPressureAnalysis, BeamQualityAnalysis],
    Field(discriminator="kind"),
]


# ═══════════════════════════════════════════════════════════════════════════
# Terminal aggregates
# ═══════════════════════════════════════════════════════════════════════════

class ResultMetadata(BaseModel):
    model_config = _FROZEN

    calculator_id: str
    calculator_version: str
    schema_version: str
    duration_ms: float
    fingerprint: str | None
    """SHA-256 of the normalized request; None when the request never validated."""


class CalculationResult(BaseModel):
    """Successful calculation."""

    model_config = _FROZEN

    status: Literal["ok"] = "ok"
    calculator_id: str
    request: Mapping[str, Any]
    """The validated request, JSON-normalized.  Read-only; matches ``metadata.fingerprint``."""
    strategy: StrategyCandidate
    steps: tuple[StepParameters, ...] = ()
    """Per-pass parameters; empty for single-value calculators."""
    outcome: OutcomeMetrics
    sensitivity: SensitivityReport
    recommendations: Recommendations
    warnings: tuple[ResultWarning, ...] = ()
    analysis: CalculatorAnalysis
    metadata: ResultMetadata

    @field_validator("request")
    @classmethod
    def _read_only_request(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("request")
    def _dump_request(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    @property
    def ok(self) -> bool:
        return True


class CalculationFailure(BaseModel):
    """Validation failure or caught internal fault."""

    model_config = _FROZEN

    status: Literal["error"] = "error"
    calculator_id: str
    kind: FailureKind
    message: str
    issues: tuple[ValidationIssue, ...] = ()
    """Field-scoped errors (and any warnings raised alongside them)."""
    metadata: ResultMetadata

    @property
    def ok(self) -> bool:
        return False

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return tuple(i for i in self.issues if i.severity == "error")


CalculationOutcome = Annotated[
    Union[CalculationResult, CalculationFailure],
    Field(discriminator="status"),
]
