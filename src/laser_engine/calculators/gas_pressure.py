"""Gas pressure calculator — optimal assist gas pressure for one cut.

Derivation order (clamp last):
  1. base      = entry.base_pressure + thickness × entry.thickness_factor
  2. × quality   rough 0.8, standard 1.0, precision 1.2, mirror 1.4
  3. × nozzle    (1.5 / nozzle_diameter)²
  4. × speed     sqrt(cutting_speed / 3000)
  5. × power     min(sqrt(laser_power / 1000), 1.5)
  6. clamp to [entry.min_pressure, entry.max_pressure]

Recommended window: ± gas.range_tolerance × (1 + thickness / 50), clipped to
the envelope.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from laser_engine.calculators.base import BaseCalculator
from laser_engine.config.enums import AssistGas, Material, QualityTier
from laser_engine.config.gas_pressure import GasPressureRequest
from laser_engine.engine.contract import Advice, CalculationContext
from laser_engine.engine.sensitivity import SensitivityFactor
from laser_engine.models.results import (
    AlternativeSetting,
    DerivedParameter,
    GasFlowAnalysis,
    GasPressureAnalysis,
    OutcomeMetrics,
    ParameterBand,
    PressureEffects,
    QualityPrediction,
    Recommendations,
    StepParameters,
    StrategyCandidate,
    Troubleshooting,
    ValidationIssue,
)
from laser_engine.tables.defaults import PropertyTables
from laser_engine.tables.gas_pressure import GasPressureEntry

logger = logging.getLogger(__name__)

REFERENCE_NOZZLE_MM = 1.5
REFERENCE_SPEED_MM_MIN = 3000.0
REFERENCE_POWER_W = 1000.0
MAX_POWER_FACTOR = 1.5
SMALL_NOZZLE_RATIO = 0.2
"""Nozzle diameters below this fraction of the thickness restrict flow."""
HIGH_SPEED_THICKNESS_RATIO = 2000.0
PRESSURE_DEVIATION_RATIO = 0.5
FLOW_REFERENCE_PRESSURE_BAR = 25.0
PRESSURE_OPTIMALITY_SLOPE = 0.2
"""Edge quality lost per unit of relative departure from the base pressure."""

GRADE_THRESHOLDS = (85.0, 70.0, 55.0)

QUALITY_PRESSURE_FACTOR: dict[QualityTier, float] = {
    QualityTier.ROUGH: 0.8,
    QualityTier.STANDARD: 1.0,
    QualityTier.PRECISION: 1.2,
    QualityTier.MIRROR: 1.4,
}

QUALITY_SCORE_MULTIPLIER: dict[QualityTier, float] = {
    QualityTier.ROUGH: 0.85,
    QualityTier.STANDARD: 0.95,
    QualityTier.PRECISION: 1.0,
    QualityTier.MIRROR: 1.05,
}


@dataclass(frozen=True)
class PressureDerivation:
    """Every intermediate of the pressure derivation, in application order."""

    base: float
    adjustments: tuple[tuple[str, float], ...]
    """(label, factor) pairs applied to the base."""
    unclamped: float
    value: float

    @property
    def clamped(self) -> bool:
        return not math.isclose(self.value, self.unclamped)


# ═══════════════════════════════════════════════════════════════════════════
# Pure helpers
# ═══════════════════════════════════════════════════════════════════════════

def estimate_pressure(request: GasPressureRequest, tables: PropertyTables) -> float:
    """Table estimate before any process adjustment (bar)."""
    entry = tables.pressure_entry(request.material_type, request.assist_gas)
    return entry.base_pressure + request.thickness * entry.thickness_factor


def derive_pressure(request: GasPressureRequest, entry: GasPressureEntry, base: float) -> PressureDerivation:
    """Apply the process factors to ``base`` in fixed order, then clamp."""
    adjustments = (
        ("quality", QUALITY_PRESSURE_FACTOR[request.cut_quality]),
        ("nozzle", (REFERENCE_NOZZLE_MM / request.nozzle_diameter) ** 2),
        ("speed", math.sqrt(request.cutting_speed / REFERENCE_SPEED_MM_MIN)),
        ("power", min(math.sqrt(request.laser_power / REFERENCE_POWER_W), MAX_POWER_FACTOR)),
    )
    pressure = base
    for _, factor in adjustments:
        pressure *= factor
    value = max(entry.min_pressure, min(entry.max_pressure, pressure))
    return PressureDerivation(base=base, adjustments=adjustments, unclamped=pressure, value=value)


def flow_rate_lpm(nozzle_diameter: float, pressure: float, flow_factor: float) -> float:
    nozzle_area = math.pi * (nozzle_diameter / 2) ** 2
    return nozzle_area * pressure * flow_factor * 60


_ADJUSTMENT_TEXT = {
    "quality": "quality requirement",
    "nozzle": "nozzle diameter",
    "speed": "cutting speed",
    "power": "laser power",
}


def _reasoning(request: GasPressureRequest, entry: GasPressureEntry, d: PressureDerivation) -> list[str]:
    reasons = [
        f"Base {d.base:.2f} bar = {entry.base_pressure:g} bar + "
        f"{request.thickness:g} mm × {entry.thickness_factor:g} bar/mm"
    ]
    for label, factor in d.adjustments:
        if not math.isclose(factor, 1.0):
            reasons.append(f"× {factor:.3f} for {_ADJUSTMENT_TEXT[label]}")
    if d.clamped:
        reasons.append(
            f"Clamped from {d.unclamped:.2f} to {d.value:.2f} bar "
            f"(envelope {entry.min_pressure:g}-{entry.max_pressure:g} bar)"
        )

    if request.assist_gas is AssistGas.OXYGEN:
        reasons.append("Oxygen pressure optimized for exothermic cutting reaction")
        if request.thickness > 6:
            reasons.append("Higher pressure needed for thick material melt evacuation")
    elif request.assist_gas is AssistGas.NITROGEN:
        reasons.append("Nitrogen pressure set for inert atmosphere and melt ejection")
    if request.material_type is Material.STAINLESS_STEEL:
        reasons.append("Pressure adjusted for stainless steel thermal properties")
    return reasons


# ═══════════════════════════════════════════════════════════════════════════
# Calculator
# ═══════════════════════════════════════════════════════════════════════════

class GasPressureCalculator(BaseCalculator):
    """Optimize assist gas pressure for a material, gas and nozzle."""

    id = "gas-pressure"
    title = "Gas Pressure Setting Guide"
    description = "Optimal assist gas pressure settings for laser cutting"
    version = "1.0.0"
    request_model = GasPressureRequest

    def estimate(self, request: GasPressureRequest, tables: PropertyTables) -> PressureDerivation:
        entry = tables.pressure_entry(request.material_type, request.assist_gas)
        return derive_pressure(request, entry, estimate_pressure(request, tables))

    # ── Validation ──

    def domain_validate(self, ctx: CalculationContext[GasPressureRequest]) -> list[ValidationIssue]:
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
        if req.nozzle_diameter < req.thickness * SMALL_NOZZLE_RATIO:
            issues.append(self.warning(
                "nozzle_diameter",
                "Small nozzle diameter relative to material thickness may cause flow restrictions",
                "SMALL_NOZZLE_DIAMETER",
            ))
        if req.cutting_speed / req.thickness > HIGH_SPEED_THICKNESS_RATIO:
            issues.append(self.warning(
                "cutting_speed",
                "High cutting speed for material thickness may require higher gas pressure",
                "HIGH_SPEED_THICKNESS_RATIO",
            ))
        if req.current_pressure is not None:
            recommended = round(ctx.estimate.value, 2)
            if abs(req.current_pressure - recommended) > recommended * PRESSURE_DEVIATION_RATIO:
                issues.append(self.warning(
                    "current_pressure",
                    f"Current pressure ({req.current_pressure:g} bar) deviates significantly "
                    f"from the recommended {recommended:.2f} bar",
                    "PRESSURE_DEVIATION",
                ))
        return issues

    # ── Derivation ──

    def derive(self, ctx: CalculationContext[GasPressureRequest]) -> StrategyCandidate:
        req = ctx.request
        entry = ctx.tables.pressure_entry(req.material_type, req.assist_gas)
        gas = ctx.tables.gas(req.assist_gas)

        d: PressureDerivation = ctx.estimate
        pressure = round(d.value, 2)

        tolerance = gas.range_tolerance * (1 + req.thickness / 50)
        band = ParameterBand(
            minimum=round(max(entry.min_pressure, pressure - tolerance), 2),
            optimal=pressure,
            maximum=round(min(entry.max_pressure, pressure + tolerance), 2),
            tolerance=round(tolerance, 3),
        )

        confidence = 0.75
        if ctx.tables.is_common_pair(req.material_type, req.assist_gas):
            confidence += 0.15
        if 1 <= req.thickness <= 20:
            confidence += 0.05
        if req.nozzle_diameter >= req.thickness * SMALL_NOZZLE_RATIO:
            confidence += 0.05

        logger.debug("%s: %.2f bar (unclamped %.2f)", self.id, d.value, d.unclamped)
        return StrategyCandidate(
            name=f"{req.assist_gas.value}-{req.cut_quality.value}",
            parameters=(
                DerivedParameter(name="pressure", value=pressure, unit="bar"),
                DerivedParameter(name="base_pressure", value=round(d.base, 4), unit="bar"),
                DerivedParameter(name="unclamped_pressure", value=round(d.unclamped, 4), unit="bar"),
            ),
            reasoning=tuple(_reasoning(req, entry, d)),
            confidence=min(1.0, round(confidence, 4)),
            band=band,
        )

    # ── Prediction ──

    def _job_cost(
        self, ctx: CalculationContext[GasPressureRequest], pressure: float, cutting_minutes: float, total_minutes: float,
    ) -> tuple[float, float, float, float]:
        req = ctx.request
        s = ctx.settings
        material = ctx.tables.material(req.material_type)
        gas = ctx.tables.gas(req.assist_gas)

        material_cost = (
            req.thickness * req.cutting_length * s.kerf_width_mm * material.density_g_cm3 * 1e-6
            * s.base_material_price_per_kg * material.cost_factor
        )
        energy = self.energy_cost(req.laser_power, cutting_minutes)
        flow = flow_rate_lpm(req.nozzle_diameter, pressure, gas.flow_factor)
        gas_cost = self.gas_cost(flow, cutting_minutes, gas.price_per_m3)
        labor = self.labor_cost(total_minutes)
        return material_cost, energy, gas_cost, labor

    def predict(
        self, ctx: CalculationContext[GasPressureRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...],
    ) -> OutcomeMetrics:
        req = ctx.request
        entry = ctx.tables.pressure_entry(req.material_type, req.assist_gas)
        pressure = strategy.value("pressure")

        nozzle_fit = 1.0 if req.nozzle_diameter >= req.thickness * SMALL_NOZZLE_RATIO else 0.9
        score = entry.quality_factor * 100 * QUALITY_SCORE_MULTIPLIER[req.cut_quality] * nozzle_fit
        score = max(0.0, min(100.0, score))

        features: list[str] = []
        if req.assist_gas is AssistGas.NITROGEN:
            features.append("Oxide-free cut edges")
        elif req.assist_gas is AssistGas.OXYGEN:
            features.append("Fast exothermic cutting with thin oxide layer")
        if score >= GRADE_THRESHOLDS[0]:
            features.append("Clean melt ejection")
        issues: list[str] = []
        if nozzle_fit < 1.0:
            issues.append("Nozzle too small for the thickness - incomplete melt ejection")
        if pressure >= entry.max_pressure:
            issues.append("Pressure at the envelope maximum - turbulence may roughen edges")
        if pressure <= entry.min_pressure:
            issues.append("Pressure at the envelope minimum - dross may form on the bottom edge")

        quality = QualityPrediction(
            score=round(score, 2),
            grade=self.grade(score, GRADE_THRESHOLDS),
            consistency_pct=round(min(95.0, score * nozzle_fit), 2),
            expected_features=tuple(features),
            potential_issues=tuple(issues),
        )

        cutting = req.cutting_length / req.cutting_speed
        setup = ctx.settings.setup_minutes_per_pass
        # speed is an input here, so no time comparison
        time = self.time_analysis([cutting], setup_minutes=setup)

        baseline_pressure = req.current_pressure if req.current_pressure is not None else entry.max_pressure
        cost = self.cost_analysis(
            *self._job_cost(ctx, pressure, time.cutting_minutes, time.total_minutes),
            cutting_length_mm=req.cutting_length,
            baseline_total=sum(self._job_cost(ctx, baseline_pressure, time.cutting_minutes, time.total_minutes)),
        )
        return OutcomeMetrics(quality=quality, time=time, cost=cost)

    # ── Sensitivity ──

    def sensitivity_factors(
        self, ctx: CalculationContext[GasPressureRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> list[SensitivityFactor]:
        c = outcome.cost
        t = outcome.time
        return [
            SensitivityFactor(
                "pressure", "quality_score", outcome.quality.score, PRESSURE_OPTIMALITY_SLOPE, symmetric=True,
            ),
            # gas flow, and so gas cost, is linear in pressure
            SensitivityFactor("pressure", "total_cost", c.total, c.gas / c.total if c.total else 0.0),
            SensitivityFactor("speed", "total_minutes", t.total_minutes, -t.cutting_minutes / t.total_minutes),
        ]

    # ── Analysis & advice ──

    def analyze(
        self, ctx: CalculationContext[GasPressureRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> GasPressureAnalysis:
        req = ctx.request
        entry = ctx.tables.pressure_entry(req.material_type, req.assist_gas)
        gas = ctx.tables.gas(req.assist_gas)
        p = strategy.value("pressure")

        flow = flow_rate_lpm(req.nozzle_diameter, p, gas.flow_factor)
        max_flow = flow_rate_lpm(req.nozzle_diameter, FLOW_REFERENCE_PRESSURE_BAR, gas.flow_factor)
        hourly = flow * 60

        ratio = p / entry.base_pressure
        edge_quality = entry.quality_factor * 10 * (1 - abs(ratio - 1) * PRESSURE_OPTIMALITY_SLOPE)
        if ratio > 1.5:
            dross = "low"
        elif ratio > 0.8:
            dross = "medium"
        else:
            dross = "high"

        def alternative(name: str, factor: float, tradeoff: str, quality: float, cost_pct: float):
            pressure = max(entry.min_pressure, min(entry.max_pressure, p * factor))
            return AlternativeSetting(
                name=name, pressure=round(pressure, 2), tradeoff=tradeoff,
                quality_impact=quality, cost_impact_pct=cost_pct,
            )

        return GasPressureAnalysis(
            flow=GasFlowAnalysis(
                flow_rate_lpm=round(flow, 2),
                velocity_m_s=round(math.sqrt(2 * p * 100_000 / gas.density_kg_m3), 1),
                efficiency_pct=round(min(100.0, flow / max_flow * 100), 1),
                hourly_consumption_l=round(hourly, 1),
                cost_per_hour=round(hourly * gas.price_per_m3 / 1000, 4),
            ),
            effects=PressureEffects(
                kerf_width_mm=round(0.1 + req.thickness * 0.02 + (ratio - 1) * 0.05, 3),
                edge_quality=round(max(1.0, min(10.0, edge_quality)), 2),
                dross_risk=dross,
                penetration_depth_mm=round(req.thickness * ratio * 0.9, 2),
                gas_utilization_pct=round(min(100.0, p / entry.max_pressure * 100), 1),
            ),
            alternatives=(
                alternative("High Pressure", 1.3, "Better melt ejection, higher gas consumption", 8.5, 30.0),
                alternative("Economy Setting", 0.8, "Lower gas costs, may affect cut quality", 7.0, -20.0),
                alternative("Balanced", 0.95, "Good balance of quality and cost", 8.0, -5.0),
            ),
        )

    def advise(
        self, ctx: CalculationContext[GasPressureRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics, analysis: GasPressureAnalysis,
    ) -> Advice:
        req = ctx.request
        entry = ctx.tables.pressure_entry(req.material_type, req.assist_gas)
        p = strategy.value("pressure")
        unclamped = strategy.value("unclamped_pressure")

        strategy_recs: list[str] = []
        if analysis.effects.dross_risk == "high":
            strategy_recs.append(f"Dross risk is high - consider the {analysis.alternatives[0].name} setting")

        parameter_recs: list[str] = []
        if req.current_pressure is not None and abs(req.current_pressure - p) > 0.5:
            direction = "Increase" if req.current_pressure < p else "Decrease"
            parameter_recs.append(f"{direction} pressure from {req.current_pressure:g} to {p:g} bar")
        if p > entry.max_pressure * 0.9:
            parameter_recs.append("Operating near maximum pressure - monitor system stability")

        quality_recs = [
            "Maintain consistent gas pressure for uniform cut quality",
            "Check nozzle condition regularly for optimal gas flow",
        ]
        if req.cut_quality.rank >= QualityTier.PRECISION.rank:
            quality_recs += [
                "Use high-purity gas for best surface finish",
                "Monitor pressure stability within ±5% tolerance",
            ]

        cost_recs: list[str] = []
        if req.assist_gas is AssistGas.NITROGEN and req.material_type is Material.STEEL:
            cost_recs.append("Consider oxygen for cost reduction on carbon steel")
        cost_recs += [
            "Optimize cutting sequence to minimize gas consumption",
            "Regular maintenance ensures efficient gas utilization",
        ]

        troubleshooting = [
            Troubleshooting(
                issue="Excessive kerf width",
                cause="Gas pressure too high",
                solution=f"Reduce pressure by 10-20% from {p:g} bar",
            ),
            Troubleshooting(
                issue="Dross formation",
                cause="Insufficient gas pressure or flow",
                solution=f"Increase pressure to {min(p + 0.5, entry.max_pressure):g} bar or check nozzle condition",
            ),
            Troubleshooting(
                issue="Rough cut edges",
                cause="Gas pressure not optimized",
                solution="Fine-tune pressure within recommended range",
            ),
        ]
        if req.assist_gas is AssistGas.NITROGEN and req.material_type in (Material.STEEL, Material.STAINLESS_STEEL):
            troubleshooting.append(Troubleshooting(
                issue="Oxidation on cut edges",
                cause="Nitrogen pressure too low",
                solution="Increase nitrogen pressure to maintain inert atmosphere",
            ))

        warnings: list[str] = []
        if p > entry.max_pressure * 0.95:
            warnings.append("Operating near maximum pressure limit - monitor system performance")
        if unclamped > entry.max_pressure:
            warnings.append(
                f"Required pressure {unclamped:.1f} bar exceeds the {entry.max_pressure:g} bar envelope - "
                "use a larger nozzle or slower speed"
            )
        if req.thickness > 20 and p < entry.base_pressure * 2:
            warnings.append("Thick material may require higher pressure for complete penetration")
        if req.nozzle_diameter < 1.0 and p > 15:
            warnings.append("Small nozzle with high pressure may cause turbulent flow")

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
            "thickness": 5,
            "assist_gas": "oxygen",
            "nozzle_diameter": 1.5,
            "cutting_speed": 3000,
            "laser_power": 2000,
            "cut_quality": "standard",
        }
