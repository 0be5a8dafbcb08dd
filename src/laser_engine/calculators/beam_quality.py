"""Beam quality calculator — M², beam parameter product, focus and power density.

Optics (w₀ = beam_diameter / 2, λ in mm unless noted):
  M²        = π · w₀ · θ / λ               (measured, when divergence is given)
            = laser type's typical M²       (catalogue, otherwise)
            floored at 1.0
  θ (mrad)  = M² · λ / (π · w₀) × 1000     (when not given)
  BPP       = w₀ · θ                        (mm·mrad)
  z_R       = π · w₀² / (M² · λ)            (mm)
  spot (μm) = 4 · M² · λ[μm] · f / (π · D), floored at λ[μm] / 2
  density   = P[MW] / (π · (spot / 20000)²) (MW/cm²)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from laser_engine.calculators.base import BaseCalculator
from laser_engine.config.beam_quality import BeamQualityRequest
from laser_engine.config.enums import Grade, LaserType
from laser_engine.engine.contract import Advice, CalculationContext
from laser_engine.engine.sensitivity import SensitivityFactor
from laser_engine.models.results import (
    BeamQualityAnalysis,
    CuttingPerformance,
    DerivedParameter,
    LaserCharacteristics,
    OpticalAnalysis,
    OutcomeMetrics,
    ParameterBand,
    QualityPrediction,
    Recommendations,
    StepParameters,
    StrategyCandidate,
    Troubleshooting,
    ValidationIssue,
)
from laser_engine.tables.defaults import PropertyTables

logger = logging.getLogger(__name__)

M_SQUARED_FLOOR = 1.0
MEASURED_BAND_FRACTION = 0.05
WAVELENGTH_TOLERANCE = 0.1
"""Fractional departure from the typical wavelength before it is flagged."""
RAW_DENSITY_LIMIT_W_MM2 = 10_000.0
HIGH_DIVERGENCE_MRAD = 10.0

GRADE_THRESHOLDS = (100 / 1.1, 100 / 1.3, 50.0)

# power density (MW/cm²) lower bounds → speed class, reference speed (mm/min)
SPEED_CLASSES: tuple[tuple[float, str, float], ...] = (
    (20.0, "very_fast", 6000.0),
    (10.0, "fast", 4000.0),
    (5.0, "medium", 2500.0),
    (0.0, "slow", 1200.0),
)


@dataclass(frozen=True)
class BeamEstimate:
    """M² the derivation starts from."""

    m_squared: float
    measured: bool


@dataclass(frozen=True)
class BeamOptics:
    m_squared: float
    divergence_mrad: float
    bpp: float
    rayleigh_length_mm: float
    spot_size_um: float
    power_density_mw_cm2: float


# ═══════════════════════════════════════════════════════════════════════════
# Pure helpers
# ═══════════════════════════════════════════════════════════════════════════

def estimate_m_squared(request: BeamQualityRequest, tables: PropertyTables) -> BeamEstimate:
    """Measured M² when divergence is known, else the catalogue value."""
    if request.divergence_angle is not None:
        waist_radius = request.beam_diameter / 2
        m2 = math.pi * waist_radius * (request.divergence_angle / 1000) / (request.wavelength / 1000)
        return BeamEstimate(m_squared=max(m2, M_SQUARED_FLOOR), measured=True)
    typical = tables.laser(request.laser_type).typical_m_squared
    return BeamEstimate(m_squared=max(typical, M_SQUARED_FLOOR), measured=False)


def beam_optics(request: BeamQualityRequest, m_squared: float) -> BeamOptics:
    """Propagation figures for a beam of quality ``m_squared``."""
    wavelength_mm = request.wavelength / 1000
    waist_radius = request.beam_diameter / 2

    divergence = request.divergence_angle
    if divergence is None:
        divergence = m_squared * wavelength_mm / (math.pi * waist_radius) * 1000

    spot = 4 * m_squared * request.wavelength * request.focal_length / (math.pi * request.beam_diameter)
    spot = max(spot, request.wavelength / 2)
    spot_area_cm2 = math.pi * (spot / 20_000) ** 2

    return BeamOptics(
        m_squared=m_squared,
        divergence_mrad=divergence,
        bpp=waist_radius * divergence,
        rayleigh_length_mm=math.pi * waist_radius ** 2 / (m_squared * wavelength_mm),
        spot_size_um=spot,
        power_density_mw_cm2=(request.power / 1_000_000) / spot_area_cm2,
    )


def speed_class(power_density: float) -> tuple[str, float]:
    """Speed class and reference cutting speed for a focal power density."""
    for threshold, name, speed in SPEED_CLASSES:
        if power_density > threshold:
            return name, speed
    return SPEED_CLASSES[-1][1], SPEED_CLASSES[-1][2]


def edge_quality(m_squared: float, power_density: float) -> Grade:
    if m_squared <= 1.1 and power_density > 10:
        return Grade.EXCELLENT
    if m_squared <= 1.3 and power_density > 5:
        return Grade.GOOD
    if m_squared <= 2.0 and power_density > 2:
        return Grade.FAIR
    return Grade.POOR


def precision_level(m_squared: float) -> str:
    if m_squared <= 1.05:
        return "ultra"
    if m_squared <= 1.2:
        return "high"
    if m_squared <= 1.5:
        return "medium"
    return "standard"


# ═══════════════════════════════════════════════════════════════════════════
# Calculator
# ═══════════════════════════════════════════════════════════════════════════

class BeamQualityCalculator(BaseCalculator):
    """Analyze laser beam quality and its effect on cutting."""

    id = "beam-quality"
    title = "Beam Quality Calculator"
    description = "Analyze laser beam quality parameters including M² factor and beam characteristics"
    version = "1.0.0"
    request_model = BeamQualityRequest

    def estimate(self, request: BeamQualityRequest, tables: PropertyTables) -> BeamEstimate:
        return estimate_m_squared(request, tables)

    # ── Validation ──

    def domain_validate(self, ctx: CalculationContext[BeamQualityRequest]) -> list[ValidationIssue]:
        req = ctx.request
        laser = ctx.tables.laser(req.laser_type)
        issues: list[ValidationIssue] = []

        if abs(req.wavelength - laser.typical_wavelength_um) > laser.typical_wavelength_um * WAVELENGTH_TOLERANCE:
            issues.append(self.warning(
                "wavelength",
                f"Wavelength {req.wavelength:g}μm is unusual for {req.laser_type.value} laser "
                f"(typical: {laser.typical_wavelength_um:g}μm)",
                "UNUSUAL_WAVELENGTH",
            ))

        beam_area = math.pi * (req.beam_diameter / 2) ** 2
        if req.power / beam_area > RAW_DENSITY_LIMIT_W_MM2:
            issues.append(self.warning(
                "beam_diameter",
                "Very high power density may cause optical damage or nonlinear effects",
                "HIGH_POWER_DENSITY",
            ))

        if req.divergence_angle is not None and req.divergence_angle > HIGH_DIVERGENCE_MRAD:
            issues.append(self.warning(
                "divergence_angle", "High divergence angle indicates poor beam quality", "HIGH_DIVERGENCE",
            ))

        est: BeamEstimate = ctx.estimate
        if est.measured and est.m_squared > laser.m_squared_max * 2:
            issues.append(self.warning(
                "divergence_angle",
                f"Measured M² {est.m_squared:.2f} is far above the {req.laser_type.value} "
                f"catalogue maximum {laser.m_squared_max:g}",
                "ATYPICAL_M_SQUARED",
            ))
        return issues

    # ── Derivation ──

    def derive(self, ctx: CalculationContext[BeamQualityRequest]) -> StrategyCandidate:
        req = ctx.request
        laser = ctx.tables.laser(req.laser_type)
        est: BeamEstimate = ctx.estimate
        optics = beam_optics(req, est.m_squared)
        m2 = optics.m_squared

        if est.measured:
            tolerance = m2 * MEASURED_BAND_FRACTION
        else:
            tolerance = (laser.m_squared_max - laser.m_squared_min) / 2
        band = ParameterBand(
            minimum=round(max(M_SQUARED_FLOOR, m2 - tolerance), 4),
            optimal=round(m2, 4),
            maximum=round(m2 + tolerance, 4),
            tolerance=round(tolerance, 4),
        )

        wavelength_typical = (
            abs(req.wavelength - laser.typical_wavelength_um)
            <= laser.typical_wavelength_um * WAVELENGTH_TOLERANCE
        )
        in_range = laser.m_squared_min <= m2 <= laser.m_squared_max

        confidence = 0.7
        if est.measured:
            confidence += 0.15
        if wavelength_typical:
            confidence += 0.1
        if in_range:
            confidence += 0.05

        if est.measured:
            reasoning = [
                f"M² = π·w₀·θ/λ = {m2:.3f} from {req.beam_diameter:g} mm beam and "
                f"{req.divergence_angle:g} mrad divergence"
            ]
        else:
            reasoning = [f"No divergence given - catalogue M² {m2:.3f} for {req.laser_type.value}"]
        if est.measured and math.isclose(m2, M_SQUARED_FLOOR):
            reasoning.append("Measured value below the diffraction limit - floored at M² = 1")
        reasoning.append(
            f"Focused spot {optics.spot_size_um:.1f} μm with f = {req.focal_length:g} mm "
            f"→ {optics.power_density_mw_cm2:.2f} MW/cm²"
        )
        if not in_range:
            reasoning.append(
                f"M² outside the typical {laser.m_squared_min:g}-{laser.m_squared_max:g} range "
                f"for {req.laser_type.value}"
            )

        return StrategyCandidate(
            name="measured" if est.measured else "catalogue",
            parameters=(
                DerivedParameter(name="m_squared", value=round(m2, 4)),
                DerivedParameter(name="divergence", value=round(optics.divergence_mrad, 4), unit="mrad"),
                DerivedParameter(name="bpp", value=round(optics.bpp, 4), unit="mm·mrad"),
                DerivedParameter(name="rayleigh_length", value=round(optics.rayleigh_length_mm, 3), unit="mm"),
                DerivedParameter(name="spot_size", value=round(optics.spot_size_um, 2), unit="μm"),
                DerivedParameter(
                    name="power_density", value=round(optics.power_density_mw_cm2, 4), unit="MW/cm²",
                ),
            ),
            reasoning=tuple(reasoning),
            confidence=min(1.0, round(confidence, 4)),
            band=band,
        )

    # ── Prediction ──

    def _job_cost(
        self, ctx: CalculationContext[BeamQualityRequest], cutting_minutes: float, total_minutes: float,
    ) -> tuple[float, float, float, float]:
        req = ctx.request
        gas = ctx.tables.gas(req.assist_gas)
        energy = self.energy_cost(req.power, cutting_minutes)
        gas_cost = self.gas_cost(gas.nominal_flow_lpm, cutting_minutes, gas.price_per_m3)
        # no workpiece is modelled
        return 0.0, energy, gas_cost, self.labor_cost(total_minutes)

    def predict(
        self, ctx: CalculationContext[BeamQualityRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...],
    ) -> OutcomeMetrics:
        req = ctx.request
        laser = ctx.tables.laser(req.laser_type)
        setup = ctx.settings.setup_minutes_per_pass
        m2 = strategy.value("m_squared")
        density = strategy.value("power_density")

        score = max(0.0, min(100.0, 100 / m2))
        features = [f"{precision_level(m2).capitalize()} precision focusing"]
        if density > 10:
            features.append("High focal power density for fast cutting")
        issues: list[str] = []
        if m2 > 2.0:
            issues.append("Large focused spot widens the kerf")
        if density < 5:
            issues.append("Low power density limits thickness capability")
        quality = QualityPrediction(
            score=round(score, 2),
            grade=self.grade(score, GRADE_THRESHOLDS),
            consistency_pct=round(min(95.0, score), 2),
            expected_features=tuple(features),
            potential_issues=tuple(issues),
        )

        _, speed = speed_class(density)
        baseline_optics = beam_optics(req, max(laser.typical_m_squared, M_SQUARED_FLOOR))
        _, baseline_speed = speed_class(baseline_optics.power_density_mw_cm2)

        # same rounding on both sides so equal speeds give equal costs
        cutting = round(req.cutting_length / speed, 4)
        baseline_cutting = round(req.cutting_length / baseline_speed, 4)
        time = self.time_analysis([cutting], setup_minutes=setup, baseline_minutes=baseline_cutting + setup)

        cost = self.cost_analysis(
            *self._job_cost(ctx, time.cutting_minutes, time.total_minutes),
            cutting_length_mm=req.cutting_length,
            baseline_total=sum(self._job_cost(ctx, baseline_cutting, baseline_cutting + setup)),
        )
        return OutcomeMetrics(quality=quality, time=time, cost=cost)

    # ── Sensitivity ──

    def sensitivity_factors(
        self, ctx: CalculationContext[BeamQualityRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> list[SensitivityFactor]:
        density = strategy.value("power_density")
        spot = strategy.value("spot_size")
        return [
            SensitivityFactor("m_squared", "power_density", density, -2.0),
            SensitivityFactor("focal_length", "spot_size", spot, 1.0),
            SensitivityFactor("power", "power_density", density, 1.0),
            SensitivityFactor("beam_diameter", "spot_size", spot, -1.0),
        ]

    # ── Analysis & advice ──

    def analyze(
        self, ctx: CalculationContext[BeamQualityRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> BeamQualityAnalysis:
        req = ctx.request
        m2 = strategy.value("m_squared")
        density = strategy.value("power_density")
        divergence = strategy.value("divergence")

        beam_area_mm2 = math.pi * (req.beam_diameter / 2) ** 2
        solid_angle_sr = divergence ** 2 / 1_000_000

        return BeamQualityAnalysis(
            optical=OpticalAnalysis(
                diffraction_limit_um=round(req.wavelength / 2, 4),
                focusability=round(1 / m2, 4),
                near_field_mm=round(req.beam_diameter, 4),
                far_field_mrad=round(divergence, 4),
                waist_position_mm=strategy.value("rayleigh_length"),
            ),
            performance=CuttingPerformance(
                edge_quality=edge_quality(m2, density),
                speed_class=speed_class(density)[0],
                thickness_capability_mm=round(math.sqrt(density * 10) / m2, 3),
                precision_level=precision_level(m2),
            ),
            characteristics=LaserCharacteristics(
                coherence_length_mm=round(req.wavelength, 4),
                brightness=round(req.power / (beam_area_mm2 * solid_angle_sr / 100), 1),
                beam_divergence_mrad=round(divergence, 4),
                numerical_aperture=round(divergence / 2000, 6),
            ),
        )

    def advise(
        self, ctx: CalculationContext[BeamQualityRequest], strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics, analysis: BeamQualityAnalysis,
    ) -> Advice:
        req = ctx.request
        m2 = strategy.value("m_squared")
        density = strategy.value("power_density")

        strategy_recs: list[str] = []
        if req.laser_type is LaserType.DIODE and m2 > 3:
            strategy_recs.append("Consider fiber coupling or beam combining for better beam quality")

        parameter_recs: list[str] = []
        if density < 5:
            parameter_recs.append("Increase power or reduce focal spot size for better cutting performance")
        if req.wavelength > 5 and req.laser_type is not LaserType.CO2:
            parameter_recs.append("Long wavelength may require special optics and safety considerations")
        if density > 50:
            parameter_recs.append("Very high power density - ensure adequate cooling and damage prevention")

        quality_recs: list[str] = []
        if m2 > 1.5:
            quality_recs.append("Consider beam shaping optics to improve beam quality")

        cost_recs: list[str] = []
        if outcome.cost.savings < 0:
            cost_recs.append("Beam is below catalogue quality - servicing the resonator would shorten cut time")

        troubleshooting = [
            Troubleshooting(
                issue="Wide or tapered kerf",
                cause="Focused spot larger than expected",
                solution="Check lens cleanliness and verify focal length",
            ),
        ]
        if m2 > 1.5:
            troubleshooting.append(Troubleshooting(
                issue="Inconsistent cut quality across the bed",
                cause="Beam quality degradation",
                solution="Inspect delivery optics and re-measure M²",
            ))

        warnings: list[str] = []
        if m2 > 2.0:
            warnings.append("Poor beam quality may result in reduced cutting performance")
        if density > 100:
            warnings.append("Extremely high power density - risk of optical damage")
        if req.beam_diameter < 0.05:
            warnings.append("Very small beam diameter may be difficult to maintain and measure")
        if req.divergence_angle is not None and req.divergence_angle > 20:
            warnings.append("High beam divergence limits focusing capability")

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
            "laser_type": "fiber",
            "wavelength": 1.064,
            "power": 3000,
            "beam_diameter": 0.2,
            "divergence_angle": 1.0,
            "focal_length": 100,
        }
