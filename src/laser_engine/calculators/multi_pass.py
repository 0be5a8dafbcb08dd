"""Multiple-pass calculator — pass count and per-pass parameters for thick stock.

Pipeline:
  1. Pass count: ceil(thickness / single_pass_limit), adjusted by strategy
     and quality tier, capped at ``MAX_PASSES``.
  2. Per-pass expansion: power curve, speed, gas pressure, focus, duration.
  3. Outcome prediction: quality score, time per part, cost per part.

Power curves by strategy:
  - progressive_power: 1 − (i−1)/n × 0.4          (strictly decreasing)
  - uniform:           0.8                         (flat)
  - adaptive:          0.9 / 0.8 … / 0.6           (staged: first, middle, last)
  - quality_focused:   0.7 + i/n × 0.2             (ramp)
Adaptive and quality_focused also compensate for work hardening with
× (1 + wh × (i−1) × 0.1).  Every pass is capped at the declared max power.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from laser_engine.calculators.base import BaseCalculator
from laser_engine.config.enums import PassStrategy, QualityTier, assert_never
from laser_engine.config.multi_pass import MultiPassRequest
from laser_engine.engine.assembler import TOTAL_DEPTH
from laser_engine.engine.contract import Advice, CalculationContext
from laser_engine.engine.sensitivity import SensitivityFactor
from laser_engine.models.results import (
    DerivedParameter,
    MultiPassAnalysis,
    OutcomeMetrics,
    QualityPrediction,
    Recommendations,
    StepParameters,
    StrategyCandidate,
    Troubleshooting,
    ValidationIssue,
)
from laser_engine.tables.defaults import PropertyTables

logger = logging.getLogger(__name__)

MAX_PASSES = 8
PROGRESSIVE_MAX_PASSES = 6
MIN_SPEED_MM_MIN = 200.0
MAX_SPEED_MM_MIN = 8_000.0
REFERENCE_DEPTH_MM = 5.0
FINISHING_SPEED_FACTOR = 0.7
FINAL_PASS_PRESSURE_FACTOR = 1.1
PRESSURE_PER_MM = 0.2
POWER_PER_MM_W = 100.0
"""Rough minimum power per mm of thickness; below this the input is flagged."""
LOW_ABSORPTIVITY = 0.1

GRADE_THRESHOLDS = (90.0, 80.0, 70.0)
QUALITY_SCORE_MIN = 60.0
QUALITY_SCORE_MAX = 100.0

QUALITY_PASS_INCREMENT: dict[QualityTier, int] = {
    QualityTier.ROUGH: 0,
    QualityTier.STANDARD: 0,
    QualityTier.PRECISION: 1,
    QualityTier.MIRROR: 2,
}

QUALITY_SPEED_FACTOR: dict[QualityTier, float] = {
    QualityTier.ROUGH: 1.2,
    QualityTier.STANDARD: 1.0,
    QualityTier.PRECISION: 0.8,
    QualityTier.MIRROR: 0.6,
}

QUALITY_TARGET: dict[QualityTier, float] = {
    QualityTier.ROUGH: 70.0,
    QualityTier.STANDARD: 80.0,
    QualityTier.PRECISION: 90.0,
    QualityTier.MIRROR: 95.0,
}

STRATEGY_QUALITY_BONUS: dict[PassStrategy, float] = {
    PassStrategy.PROGRESSIVE_POWER: 5.0,
    PassStrategy.ADAPTIVE: 8.0,
    PassStrategy.UNIFORM: 3.0,
    PassStrategy.QUALITY_FOCUSED: 12.0,
}

STRATEGY_EFFICIENCY: dict[PassStrategy, float] = {
    PassStrategy.PROGRESSIVE_POWER: 90.0,
    PassStrategy.ADAPTIVE: 95.0,
    PassStrategy.UNIFORM: 85.0,
    PassStrategy.QUALITY_FOCUSED: 80.0,
}

POWER_CURVE_SHAPE = {
    PassStrategy.PROGRESSIVE_POWER: "decreasing",
    PassStrategy.UNIFORM: "flat",
    PassStrategy.ADAPTIVE: "staged",
    PassStrategy.QUALITY_FOCUSED: "ramp",
}


@dataclass(frozen=True)
class PassEstimate:
    """Pass count before and after strategy / quality adjustments."""

    minimum: int
    count: int


# ═══════════════════════════════════════════════════════════════════════════
# Pure helpers
# ═══════════════════════════════════════════════════════════════════════════

def estimate_passes(request: MultiPassRequest, tables: PropertyTables) -> PassEstimate:
    """Recommended pass count for a request.

    Parameters
    ----------
    request : MultiPassRequest
        Validated request.
    tables : PropertyTables
        Source of the material's work-hardening coefficient.

    Returns
    -------
    PassEstimate
        ``minimum`` = ceil(thickness / single_pass_limit); ``count`` after
        strategy and quality adjustments, within [1, MAX_PASSES].
    """
    minimum = math.ceil(round(request.thickness / request.single_pass_limit, 9))
    strategy = request.cutting_strategy

    if strategy is PassStrategy.PROGRESSIVE_POWER:
        count = min(minimum + 1, PROGRESSIVE_MAX_PASSES)
    elif strategy is PassStrategy.ADAPTIVE:
        wh = tables.material(request.material_type).work_hardening
        count = math.ceil(round(minimum * (1 + wh), 9))
    elif strategy is PassStrategy.QUALITY_FOCUSED:
        count = min(minimum + 2, MAX_PASSES)
    elif strategy is PassStrategy.UNIFORM:
        count = minimum
    else:
        assert_never(strategy)

    count += QUALITY_PASS_INCREMENT[request.quality_requirement]
    return PassEstimate(minimum=minimum, count=max(1, min(count, MAX_PASSES)))


def power_factors(strategy: PassStrategy, n: int, work_hardening: float) -> np.ndarray:
    """Fraction of max power for passes 1..n."""
    i = np.arange(1, n + 1, dtype=float)

    if strategy is PassStrategy.PROGRESSIVE_POWER:
        return 1.0 - (i - 1) / n * 0.4
    if strategy is PassStrategy.UNIFORM:
        return np.full(n, 0.8)
    if strategy is PassStrategy.ADAPTIVE:
        factors = np.full(n, 0.8)
        factors[-1] = 0.6
        factors[0] = 0.9
    elif strategy is PassStrategy.QUALITY_FOCUSED:
        factors = 0.7 + i / n * 0.2
    else:
        assert_never(strategy)

    # work-hardening compensation
    return factors * (1 + work_hardening * (i - 1) * 0.1)


def strategy_efficiency(estimate: PassEstimate, strategy: PassStrategy) -> float:
    efficiency = 85.0 - (estimate.count - estimate.minimum) * 5.0
    efficiency = (efficiency + STRATEGY_EFFICIENCY[strategy]) / 2
    return max(60.0, min(100.0, efficiency))


def _pass_note(index: int, n: int) -> str:
    if index == 1:
        return "Initial pass - establish cut path and remove bulk material"
    if index == n:
        return "Final pass - focus on quality and edge finish"
    return f"Intermediate pass {index} - progressive material removal"


# ═══════════════════════════════════════════════════════════════════════════
# Calculator
# ═══════════════════════════════════════════════════════════════════════════

class MultiPassCalculator(BaseCalculator):
    """Optimize multi-pass cutting strategy for thick materials."""

    id = "multiple-pass"
    title = "Multiple Pass Calculator"
    description = "Optimize multi-pass cutting strategy for thick materials and complex geometries"
    version = "1.0.0"
    request_model = MultiPassRequest

    def estimate(self, request: MultiPassRequest, tables: PropertyTables) -> PassEstimate:
        return estimate_passes(request, tables)

    # ── Validation ──

    def domain_validate(self, ctx: CalculationContext[MultiPassRequest]) -> list[ValidationIssue]:
        req = ctx.request
        if not ctx.tables.supports(req.material_type, req.assist_gas):
            supported = ", ".join(g.value for g in ctx.tables.supported_gases(req.material_type))
            return [self.error(
                "assist_gas",
                f"{req.assist_gas.value} is not supported for {req.material_type.value} "
                f"(supported: {supported})",
                "UNSUPPORTED_COMBINATION",
            )]

        issues: list[ValidationIssue] = []
        material = ctx.tables.material(req.material_type)

        if req.thickness <= material.single_pass_limit_mm[req.laser_type]:
            issues.append(self.warning(
                "thickness",
                "Material thickness may be achievable in single pass. Consider single-pass cutting first.",
                "SINGLE_PASS_POSSIBLE",
            ))
        if req.single_pass_limit >= req.thickness:
            issues.append(self.warning(
                "single_pass_limit", "Single pass limit exceeds material thickness",
                "EXCESSIVE_SINGLE_PASS_LIMIT",
            ))
        if req.max_laser_power < req.thickness * POWER_PER_MM_W:
            issues.append(self.warning(
                "max_laser_power", "Laser power may be insufficient for this material thickness",
                "INSUFFICIENT_POWER",
            ))
        if (req.cutting_strategy is PassStrategy.PROGRESSIVE_POWER
                and req.quality_requirement is QualityTier.MIRROR):
            issues.append(self.warning(
                "cutting_strategy", "Progressive power strategy may not achieve mirror finish quality",
                "STRATEGY_QUALITY_MISMATCH",
            ))
        if req.current_passes is not None and abs(req.current_passes - ctx.estimate.count) > 2:
            issues.append(self.warning(
                "current_passes",
                f"Current pass count ({req.current_passes}) differs significantly "
                f"from the recommended {ctx.estimate.count}",
                "SUBOPTIMAL_PASS_COUNT",
            ))
        return issues

    # ── Derivation ──

    def derive(self, ctx: CalculationContext[MultiPassRequest]) -> StrategyCandidate:
        req = ctx.request
        material = ctx.tables.material(req.material_type)
        est: PassEstimate = ctx.estimate
        n = est.count

        confidence = 0.8
        if 2 <= n <= 4:
            confidence += 0.1
        if material.work_hardening < 0.2:
            confidence += 0.05
        if req.cutting_strategy is PassStrategy.ADAPTIVE:
            confidence += 0.05

        reasoning = [
            f"Minimum {est.minimum} pass(es): {req.thickness:g} mm at {req.single_pass_limit:g} mm per pass",
            f"{n} passes recommended for {req.thickness:g}mm {req.material_type.value}",
        ]
        if req.cutting_strategy is PassStrategy.PROGRESSIVE_POWER:
            reasoning.append("Progressive power strategy reduces heat accumulation")
        elif req.cutting_strategy is PassStrategy.QUALITY_FOCUSED:
            reasoning.append("Quality-focused approach prioritizes edge finish over speed")
        elif req.cutting_strategy is PassStrategy.ADAPTIVE:
            reasoning.append("Adaptive strategy optimizes for material properties")
        if material.work_hardening > 0.2:
            reasoning.append("Multiple passes help manage work hardening effects")
        if QUALITY_PASS_INCREMENT[req.quality_requirement]:
            reasoning.append("Additional passes ensure high quality requirements are met")
        if n == MAX_PASSES:
            reasoning.append(f"Pass count capped at {MAX_PASSES}")

        return StrategyCandidate(
            name=req.cutting_strategy.value,
            parameters=(
                DerivedParameter(name="pass_count", value=n),
                DerivedParameter(name="minimum_passes", value=est.minimum),
                DerivedParameter(name="depth_per_pass", value=req.thickness / n, unit="mm"),
                DerivedParameter(name=TOTAL_DEPTH, value=req.thickness, unit="mm"),
                DerivedParameter(
                    name="efficiency_pct",
                    value=round(strategy_efficiency(est, req.cutting_strategy), 1),
                    unit="%",
                ),
            ),
            reasoning=tuple(reasoning),
            confidence=min(1.0, round(confidence, 4)),
        )

    # ── Expansion ──

    def expand(
        self, ctx: CalculationContext[MultiPassRequest], strategy: StrategyCandidate,
    ) -> tuple[StepParameters, ...]:
        req = ctx.request
        material = ctx.tables.material(req.material_type)
        gas = ctx.tables.gas(req.assist_gas)
        envelope = ctx.tables.pressure_entry(req.material_type, req.assist_gas)

        n = int(strategy.value("pass_count"))
        depth = req.thickness / n
        is_final = np.arange(1, n + 1) == n

        cumulative = np.cumsum(np.full(n, depth))
        cumulative[-1] = req.thickness

        power = np.minimum(
            req.max_laser_power * power_factors(req.cutting_strategy, n, material.work_hardening),
            req.max_laser_power,
        )

        speed_base = (
            material.base_speed_mm_min[req.laser_type]
            * math.sqrt(REFERENCE_DEPTH_MM / depth)
            * QUALITY_SPEED_FACTOR[req.quality_requirement]
        )
        slow_all = req.cutting_strategy is PassStrategy.QUALITY_FOCUSED
        speed = np.where(is_final | slow_all, speed_base * FINISHING_SPEED_FACTOR, speed_base)
        speed = np.clip(speed, MIN_SPEED_MM_MIN, MAX_SPEED_MM_MIN)

        pressure = gas.multi_pass_base_pressure + depth * PRESSURE_PER_MM
        pressure = np.where(is_final, pressure * FINAL_PASS_PRESSURE_FACTOR, pressure)
        pressure = np.clip(pressure, envelope.min_pressure, envelope.max_pressure)

        focus = -(cumulative - depth / 2)
        minutes = req.cutting_length / speed

        steps = tuple(
            StepParameters(
                index=i + 1,
                depth=round(depth, 6),
                cumulative_depth=req.thickness if i == n - 1 else round(float(cumulative[i]), 6),
                power=round(float(power[i]), 1),
                power_pct=round(float(power[i]) / req.max_laser_power * 100, 1),
                speed=round(float(speed[i]), 1),
                gas_pressure=round(float(pressure[i]), 2),
                focus_position=round(float(focus[i]), 3),
                duration_minutes=round(float(minutes[i]), 4),
                notes=_pass_note(i + 1, n),
            )
            for i in range(n)
        )
        logger.debug("%s: expanded %d passes of %.3f mm", self.id, n, depth)
        return steps

    # ── Prediction ──

    def _quality(
        self, req: MultiPassRequest, steps: tuple[StepParameters, ...], quality_factor: float, work_hardening: float,
    ) -> QualityPrediction:
        n = len(steps)
        score = 75.0 + 15.0
        if n >= 3:
            score += 5
        if n >= 5:
            score += 3
        score += STRATEGY_QUALITY_BONUS[req.cutting_strategy]
        score = min(score, QUALITY_TARGET[req.quality_requirement] + 5)
        score *= quality_factor
        score = max(QUALITY_SCORE_MIN, min(QUALITY_SCORE_MAX, score))

        features: list[str] = []
        if score > 85:
            features += ["Excellent edge quality", "Minimal heat affected zone"]
        if n >= 3:
            features += ["Consistent kerf width", "Controlled heat input"]
        if req.cutting_strategy is PassStrategy.QUALITY_FOCUSED:
            features += ["Superior surface finish", "Precise dimensional accuracy"]
        features += ["Reduced thermal stress", "Improved cut straightness"]

        issues: list[str] = []
        if n > 5:
            issues.append("Multiple passes may cause heat accumulation")
        if req.thickness > 50:
            issues.append("Very thick material may have kerf taper")
        if work_hardening > 0.3:
            issues.append("Material may work-harden between passes")
        powers = [s.power for s in steps]
        if max(powers) - min(powers) > 800:
            issues.append("Large power variation may cause inconsistent results")
        if req.cutting_length > 5000:
            issues.append("Long cutting paths may accumulate thermal effects")

        return QualityPrediction(
            score=round(score, 2),
            grade=self.grade(score, GRADE_THRESHOLDS),
            consistency_pct=round(min(95.0, score - 5 + n * 2), 2),
            expected_features=tuple(features),
            potential_issues=tuple(issues),
        )

    def predict(
        self, ctx: CalculationContext[MultiPassRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...],
    ) -> OutcomeMetrics:
        req = ctx.request
        s = ctx.settings
        material = ctx.tables.material(req.material_type)
        gas = ctx.tables.gas(req.assist_gas)

        quality = self._quality(req, steps, material.quality_factor, material.work_hardening)

        # naive single attempt: one full-depth pass at max power, one setup
        single_cutting = req.cutting_length / s.single_attempt_speed_mm_min
        single_total = single_cutting + s.setup_minutes_per_pass

        time = self.time_analysis(
            [st.duration_minutes for st in steps],
            setup_minutes=s.setup_minutes_per_pass * len(steps),
            baseline_minutes=single_total,
        )

        # kerf volume mm³ × g/cm³ → kg
        material_cost = (
            req.thickness * req.cutting_length * s.kerf_width_mm * material.density_g_cm3 * 1e-6
            * s.base_material_price_per_kg * material.cost_factor
        )
        energy = sum(self.energy_cost(st.power, st.duration_minutes) for st in steps)
        gas_cost = self.gas_cost(gas.nominal_flow_lpm, time.cutting_minutes, gas.price_per_m3)
        labor = self.labor_cost(time.total_minutes)

        single_attempt = (
            material_cost
            + self.energy_cost(req.max_laser_power, single_cutting)
            + self.gas_cost(gas.nominal_flow_lpm, single_cutting, gas.price_per_m3)
            + self.labor_cost(single_total)
        )
        cost = self.cost_analysis(
            material_cost, energy, gas_cost, labor,
            cutting_length_mm=req.cutting_length,
            baseline_total=single_attempt * s.single_attempt_rework_factor,
        )
        return OutcomeMetrics(quality=quality, time=time, cost=cost)

    # ── Sensitivity ──

    def sensitivity_factors(
        self, ctx: CalculationContext[MultiPassRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> list[SensitivityFactor]:
        t = outcome.time
        c = outcome.cost
        # time ∝ n / speed, n ∝ 1/d and speed ∝ d^-½  →  cutting ∝ d^-½, setup ∝ 1/d
        depth_elasticity = -(0.5 * t.cutting_minutes + t.setup_minutes) / t.total_minutes
        return [
            SensitivityFactor("speed", "cutting_minutes", t.cutting_minutes, -1.0),
            SensitivityFactor("power", "total_cost", c.total, c.energy / c.total if c.total else 0.0),
            SensitivityFactor("depth_per_pass", "total_minutes", t.total_minutes, depth_elasticity),
        ]

    # ── Analysis & advice ──

    def analyze(
        self, ctx: CalculationContext[MultiPassRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> MultiPassAnalysis:
        req = ctx.request
        material = ctx.tables.material(req.material_type)
        return MultiPassAnalysis(
            minimum_passes=int(strategy.value("minimum_passes")),
            efficiency_pct=strategy.value("efficiency_pct"),
            power_curve=POWER_CURVE_SHAPE[req.cutting_strategy],
            single_pass_possible=req.thickness <= material.single_pass_limit_mm[req.laser_type],
        )

    def advise(
        self, ctx: CalculationContext[MultiPassRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics, analysis: Any,
    ) -> Advice:
        req = ctx.request
        material = ctx.tables.material(req.material_type)
        n = len(steps)
        high_quality = req.quality_requirement.rank >= QualityTier.PRECISION.rank

        strategy_recs: list[str] = []
        if n > 5:
            strategy_recs.append("Consider reducing passes by increasing single-pass capability")
        strategy_recs += [
            "Monitor heat accumulation between passes",
            "Allow cooling time between passes for thick sections",
        ]

        parameter_recs = [
            "Fine-tune power progression between passes",
            "Adjust focus position for each pass depth",
        ]
        if high_quality:
            parameter_recs.append("Use slower speeds on final pass for quality")

        quality_recs = [
            "Maintain consistent gas flow throughout all passes",
            "Check and clean nozzle between passes if needed",
        ]
        if material.work_hardening > 0.2:
            quality_recs.append("Consider stress relief between passes for work-hardening materials")

        cost_recs: list[str] = []
        if outcome.cost.labor > outcome.cost.total * 0.5:
            cost_recs.append("Labor dominates part cost - batch parts to share setup time")
        if outcome.time.setup_minutes > outcome.time.cutting_minutes:
            cost_recs.append("Setup time exceeds cutting time - nest parts to cut several per setup")

        troubleshooting = [
            Troubleshooting(
                issue="Inconsistent kerf width between passes",
                cause="Power or speed variation between passes",
                solution="Standardize parameters or use adaptive strategy",
            ),
            Troubleshooting(
                issue="Heat accumulation causing warping",
                cause="Insufficient cooling between passes",
                solution="Increase delay between passes or use cooling assistance",
            ),
            Troubleshooting(
                issue="Poor final pass quality",
                cause="Excessive heat buildup or wrong parameters",
                solution="Reduce final pass power and speed, ensure proper focus",
            ),
        ]
        if material.work_hardening > 0.3:
            troubleshooting.append(Troubleshooting(
                issue="Difficulty cutting later passes",
                cause="Material work hardening from previous passes",
                solution="Increase power for later passes or use stress relief",
            ))

        warnings: list[str] = []
        # fewer passes than the minimum only when a pass cap applied
        if n < strategy.value("minimum_passes"):
            warnings.append(
                f"Depth per pass ({req.thickness / n:.2f} mm) exceeds the {req.single_pass_limit:g} mm "
                f"single-pass limit with the pass count capped at {n} - expect incomplete passes"
            )
        if n > 6:
            warnings.append("High number of passes may reduce overall efficiency")
        if req.thickness > 75:
            warnings.append("Extremely thick material - consider alternative cutting methods")
        if material.work_hardening >= 0.4:
            warnings.append("High work-hardening material may require stress relief between passes")
        if req.max_laser_power < req.thickness * 80:
            warnings.append("Laser power may be insufficient for optimal multi-pass cutting")
        if req.cutting_strategy is PassStrategy.UNIFORM and req.quality_requirement is QualityTier.MIRROR:
            warnings.append("Uniform strategy may not achieve mirror finish - consider quality-focused approach")
        if material.absorptivity < LOW_ABSORPTIVITY:
            warnings.append(
                f"Highly reflective material (absorptivity {material.absorptivity:.2f}) - "
                "back-reflection can damage the optics"
            )

        return Advice(
            recommendations=Recommendations(
                strategy=tuple(strategy_recs),
                parameters=tuple(parameter_recs),
                quality=tuple(quality_recs),
                cost=tuple(cost_recs),
                troubleshooting=tuple(troubleshooting),
            ),
            warnings=warnings,
        )

    def example_inputs(self) -> dict[str, Any]:
        return {
            "material_type": "steel",
            "thickness": 15,
            "laser_type": "fiber",
            "max_laser_power": 3000,
            "single_pass_limit": 8,
            "cutting_strategy": "adaptive",
            "quality_requirement": "standard",
            "assist_gas": "oxygen",
            "cutting_length": 1000,
        }
