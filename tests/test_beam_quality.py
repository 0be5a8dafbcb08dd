"""Beam quality calculator tests — M², propagation, focus, performance."""

from __future__ import annotations

import math

import pytest

from laser_engine.calculators.beam_quality import beam_optics, estimate_m_squared, speed_class
from laser_engine.config import BeamQualityRequest, Grade


# ═══════════════════════════════════════════════════════════════════════════
# Optics
# ═══════════════════════════════════════════════════════════════════════════

class TestOptics:

    def test_catalogue_m_squared(self, tables, beam_inputs):
        est = estimate_m_squared(BeamQualityRequest(**beam_inputs), tables)
        assert est.m_squared == pytest.approx(1.10)
        assert est.measured is False

    def test_measured_m_squared(self, tables, beam_inputs):
        # π × 1.0 mm × 5 mrad / 1.064 μm
        req = BeamQualityRequest(**{**beam_inputs, "beam_diameter": 2.0, "divergence_angle": 5.0})
        est = estimate_m_squared(req, tables)
        assert est.measured is True
        assert est.m_squared == pytest.approx(math.pi * 1.0 * 0.005 / 0.001064)

    def test_measured_floored_at_one(self, tables, beam_inputs):
        # π × 0.1 × 1 / 1.064 ≈ 0.295
        req = BeamQualityRequest(**{**beam_inputs, "divergence_angle": 1.0})
        assert estimate_m_squared(req, tables).m_squared == 1.0

    def test_catalogue_propagation(self, beam_inputs):
        optics = beam_optics(BeamQualityRequest(**beam_inputs), 1.1)
        # θ = M² λ / (π w₀)
        assert optics.divergence_mrad == pytest.approx(1.1 * 0.001064 / (math.pi * 0.1) * 1000)
        assert optics.bpp == pytest.approx(0.1 * optics.divergence_mrad)
        assert optics.rayleigh_length_mm == pytest.approx(math.pi * 0.01 / (1.1 * 0.001064))
        # 4 × 1.1 × 1.064 × 100 / (π × 0.2)
        assert optics.spot_size_um == pytest.approx(745.10, abs=0.01)
        assert optics.power_density_mw_cm2 == pytest.approx(0.003 / (math.pi * (745.10 / 20_000) ** 2), rel=1e-4)

    def test_spot_floored_at_half_wavelength(self, beam_inputs):
        req = BeamQualityRequest(**{**beam_inputs, "beam_diameter": 5.0, "focal_length": 10})
        # 4 × 1.064 × 10 / (π × 5) ≈ 2.7 μm, above the 0.532 μm floor
        assert beam_optics(req, 1.0).spot_size_um == pytest.approx(2.709, abs=1e-3)

    @pytest.mark.parametrize("density,expected", [
        (25.0, ("very_fast", 6000.0)),
        (15.0, ("fast", 4000.0)),
        (7.0, ("medium", 2500.0)),
        (5.0, ("slow", 1200.0)),
        (0.5, ("slow", 1200.0)),
    ])
    def test_speed_class(self, density, expected):
        assert speed_class(density) == expected


# ═══════════════════════════════════════════════════════════════════════════
# End-to-end
# ═══════════════════════════════════════════════════════════════════════════

class TestCatalogueBeam:
    """Fiber laser, no divergence given."""

    @pytest.fixture
    def result(self, beam_quality, beam_inputs):
        r = beam_quality.calculate(beam_inputs)
        assert r.ok, r
        return r

    def test_strategy(self, result):
        s = result.strategy
        assert s.name == "catalogue"
        assert s.value("m_squared") == pytest.approx(1.1)
        assert s.value("spot_size") == pytest.approx(745.1, abs=0.01)
        # 0.7 + 0.1 (typical wavelength) + 0.05 (catalogue range)
        assert s.confidence == pytest.approx(0.85)
        assert s.reasoning[0] == "No divergence given - catalogue M² 1.100 for fiber"

    def test_band(self, result):
        b = result.strategy.band
        # ± (1.30 − 1.05) / 2, floored at 1
        assert b.tolerance == pytest.approx(0.125)
        assert b.minimum == 1.0
        assert b.maximum == pytest.approx(1.225)

    def test_quality(self, result):
        q = result.outcome.quality
        assert q.score == pytest.approx(90.91)
        assert q.grade is Grade.EXCELLENT

    def test_analysis(self, result):
        a = result.analysis
        assert a.kind == "beam-quality"
        assert a.optical.focusability == pytest.approx(1 / 1.1, abs=1e-4)
        assert a.optical.diffraction_limit_um == pytest.approx(0.532)
        assert a.performance.precision_level == "high"
        assert a.performance.speed_class == "slow"

    def test_cost_matches_catalogue_baseline(self, result):
        c = result.outcome.cost
        assert c.material == 0.0
        assert c.savings == 0.0
        assert result.outcome.time.improvement_pct == 0.0

    def test_sensitivity(self, result):
        report = result.sensitivity
        assert len(report.entries) == 24
        # density ∝ 1/M²: +10 % M² → −20 % density
        e = next(e for e in report.for_parameter("m_squared") if e.perturbation == 0.10)
        assert e.outcome == "power_density"
        assert e.relative_change_pct == pytest.approx(-20.0)
        assert report.most_sensitive() == "m_squared"


class TestMeasuredBeam:

    def test_example_floored(self, beam_quality):
        r = beam_quality.calculate(beam_quality.example_inputs())
        assert r.strategy.name == "measured"
        assert r.strategy.value("m_squared") == 1.0
        assert "Measured value below the diffraction limit - floored at M² = 1" in r.strategy.reasoning
        # 1.0 is below the fiber catalogue range, so no range bonus
        assert r.strategy.confidence == pytest.approx(0.95)
        assert r.strategy.band.tolerance == pytest.approx(0.05)
        assert r.outcome.quality.grade is Grade.EXCELLENT

    def test_poor_beam(self, beam_quality, beam_inputs):
        r = beam_quality.calculate({**beam_inputs, "beam_diameter": 2.0, "divergence_angle": 5.0})
        assert r.ok
        assert r.strategy.value("m_squared") == pytest.approx(14.7634, abs=1e-3)
        # spot = 2θf = 1 mm
        assert r.strategy.value("spot_size") == pytest.approx(1000.0, abs=0.1)
        assert r.outcome.quality.grade is Grade.POOR
        assert "ATYPICAL_M_SQUARED" in {w.code for w in r.warnings}
        assert "Poor beam quality may result in reduced cutting performance" in [w.message for w in r.warnings]
        assert "Consider beam shaping optics to improve beam quality" in r.recommendations.quality
        assert r.analysis.performance.precision_level == "standard"

    def test_better_beam_focuses_harder(self, beam_quality, beam_inputs):
        densities = [
            beam_quality.calculate({**beam_inputs, "beam_diameter": 2.0, "divergence_angle": theta})
            .strategy.value("power_density")
            for theta in (1.0, 2.0, 4.0)
        ]
        assert densities[0] > densities[1] > densities[2]


class TestLaserTypes:

    def test_co2_catalogue(self, beam_quality, beam_inputs):
        r = beam_quality.calculate({**beam_inputs, "laser_type": "co2", "wavelength": 10.6})
        assert r.strategy.value("m_squared") == pytest.approx(1.05)
        assert r.strategy.confidence == pytest.approx(0.85)
        assert not any(w.code == "UNUSUAL_WAVELENGTH" for w in r.warnings)
        assert "Long wavelength may require special optics and safety considerations" not in r.recommendations.parameters

    def test_fiber_at_co2_wavelength(self, beam_quality, beam_inputs):
        r = beam_quality.calculate({**beam_inputs, "wavelength": 10.6})
        assert r.strategy.confidence == pytest.approx(0.75)
        assert "Long wavelength may require special optics and safety considerations" in r.recommendations.parameters

    def test_diode_beam_combining_advice(self, beam_quality):
        r = beam_quality.calculate({
            "laser_type": "diode", "wavelength": 0.808, "power": 1000,
            "beam_diameter": 1.0, "divergence_angle": 10.0,
        })
        assert r.strategy.value("m_squared") > 3
        assert r.recommendations.strategy == (
            "Consider fiber coupling or beam combining for better beam quality",
        )

    def test_tiny_beam_warning(self, beam_quality, beam_inputs):
        r = beam_quality.calculate({**beam_inputs, "beam_diameter": 0.04})
        assert any(w.stage == "result" and w.message.startswith("Very small beam diameter") for w in r.warnings)
