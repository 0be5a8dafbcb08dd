"""Multiple-pass calculator tests — pass count, per-pass expansion, outcomes."""

from __future__ import annotations

import pytest

from laser_engine.calculators.multi_pass import (
    MAX_PASSES,
    MAX_SPEED_MM_MIN,
    MIN_SPEED_MM_MIN,
    estimate_passes,
    power_factors,
)
from laser_engine.config import AssistGas, Grade, Material, MultiPassRequest, PassStrategy


# ═══════════════════════════════════════════════════════════════════════════
# Pass count
# ═══════════════════════════════════════════════════════════════════════════

class TestPassEstimate:
    """ceil(thickness / limit), adjusted by strategy and quality tier."""

    def _estimate(self, tables, inputs, **overrides):
        return estimate_passes(MultiPassRequest(**{**inputs, **overrides}), tables)

    def test_adaptive_adds_work_hardening(self, tables, multi_pass_inputs):
        # ceil(15/8) = 2; steel wh 0.1 → ceil(2 × 1.1) = 3
        est = self._estimate(tables, multi_pass_inputs)
        assert est.minimum == 2
        assert est.count == 3

    def test_uniform_uses_minimum(self, tables, multi_pass_inputs):
        assert self._estimate(tables, multi_pass_inputs, cutting_strategy="uniform").count == 2

    def test_progressive_adds_one(self, tables, multi_pass_inputs):
        assert self._estimate(tables, multi_pass_inputs, cutting_strategy="progressive_power").count == 3

    def test_progressive_capped_at_six(self, tables, multi_pass_inputs):
        # ceil(40/5) = 8 → min(9, 6)
        est = self._estimate(
            tables, multi_pass_inputs,
            cutting_strategy="progressive_power", thickness=40, single_pass_limit=5,
        )
        assert est.count == 6

    def test_quality_focused_adds_two(self, tables, multi_pass_inputs):
        assert self._estimate(tables, multi_pass_inputs, cutting_strategy="quality_focused").count == 4

    def test_quality_tier_increment(self, tables, multi_pass_inputs):
        assert self._estimate(tables, multi_pass_inputs, quality_requirement="precision").count == 4
        assert self._estimate(tables, multi_pass_inputs, quality_requirement="mirror").count == 5
        assert self._estimate(tables, multi_pass_inputs, quality_requirement="rough").count == 3

    def test_exact_division(self, tables, multi_pass_inputs):
        # 16 / 8 = 2.0 exactly, no spurious third pass
        est = self._estimate(tables, multi_pass_inputs, thickness=16, cutting_strategy="uniform")
        assert est.minimum == 2
        assert est.count == 2

    def test_capped_at_max_passes(self, tables, multi_pass_inputs):
        est = self._estimate(tables, multi_pass_inputs, thickness=100, single_pass_limit=2)
        assert est.minimum == 50
        assert est.count == MAX_PASSES


class TestPowerFactors:

    def test_progressive_strictly_decreasing(self):
        f = power_factors(PassStrategy.PROGRESSIVE_POWER, 3, 0.4)
        assert f.tolist() == pytest.approx([1.0, 1 - 0.4 / 3, 1 - 0.8 / 3])
        assert all(a > b for a, b in zip(f, f[1:]))

    def test_uniform_flat_ignores_work_hardening(self):
        assert power_factors(PassStrategy.UNIFORM, 4, 0.4).tolist() == [0.8] * 4

    def test_adaptive_staged_with_compensation(self):
        # [0.9, 0.8, 0.6] × [1.00, 1.01, 1.02]
        f = power_factors(PassStrategy.ADAPTIVE, 3, 0.1)
        assert f.tolist() == pytest.approx([0.9, 0.808, 0.612])

    def test_adaptive_single_pass(self):
        # one pass is both first and last; first wins
        assert power_factors(PassStrategy.ADAPTIVE, 1, 0.1).tolist() == pytest.approx([0.9])

    def test_quality_focused_ramp(self):
        # 0.7 + i/4 × 0.2, × (1 + 0.1 × (i−1) × 0.1)
        f = power_factors(PassStrategy.QUALITY_FOCUSED, 4, 0.1)
        assert f.tolist() == pytest.approx([0.75, 0.8 * 1.01, 0.85 * 1.02, 0.9 * 1.03])


# ═══════════════════════════════════════════════════════════════════════════
# End-to-end: 15 mm steel, adaptive
# ═══════════════════════════════════════════════════════════════════════════

class TestExampleCut:
    """Hand-calculated expectations for the calculator's example inputs."""

    @pytest.fixture
    def result(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate(multi_pass_inputs)
        assert r.ok, r
        return r

    def test_strategy(self, result):
        s = result.strategy
        assert s.name == "adaptive"
        assert s.value("pass_count") == 3
        assert s.value("minimum_passes") == 2
        assert s.value("depth_per_pass") == pytest.approx(5.0)
        assert s.value("total_depth") == 15
        # (85 − 1 × 5 + 95) / 2
        assert s.value("efficiency_pct") == pytest.approx(87.5)
        # 0.8 + 0.1 (2–4 passes) + 0.05 (wh < 0.2) + 0.05 (adaptive)
        assert s.confidence == pytest.approx(1.0)
        assert s.reasoning[0] == "Minimum 2 pass(es): 15 mm at 8 mm per pass"
        assert "Adaptive strategy optimizes for material properties" in s.reasoning

    def test_steps(self, result):
        steps = result.steps
        assert [s.index for s in steps] == [1, 2, 3]
        assert [s.cumulative_depth for s in steps] == pytest.approx([5, 10, 15])
        # 3000 W × [0.9, 0.808, 0.612]
        assert [s.power for s in steps] == pytest.approx([2700, 2424, 1836])
        assert [s.power_pct for s in steps] == pytest.approx([90.0, 80.8, 61.2])
        # fiber base 2000 mm/min at 5 mm; final pass × 0.7
        assert [s.speed for s in steps] == pytest.approx([2000, 2000, 1400])
        # O2 1.0 + 5 × 0.2 = 2.0; final × 1.1
        assert [s.gas_pressure for s in steps] == pytest.approx([2.0, 2.0, 2.2])
        assert [s.focus_position for s in steps] == pytest.approx([-2.5, -7.5, -12.5])
        # 1000 mm / speed
        assert [s.duration_minutes for s in steps] == pytest.approx([0.5, 0.5, 0.7143])
        assert steps[0].notes.startswith("Initial pass")
        assert steps[1].notes.startswith("Intermediate pass 2")
        assert steps[2].notes.startswith("Final pass")

    def test_quality(self, result):
        q = result.outcome.quality
        # min(90 + 5 + 8, 80 + 5) × 0.85
        assert q.score == pytest.approx(72.25)
        assert q.grade is Grade.FAIR
        assert q.consistency_pct == pytest.approx(73.25)
        assert "Consistent kerf width" in q.expected_features

    def test_time(self, result):
        t = result.outcome.time
        assert t.step_minutes == pytest.approx((0.5, 0.5, 0.7143))
        assert t.cutting_minutes == pytest.approx(1.7143)
        assert t.setup_minutes == pytest.approx(6.0)  # 3 passes × 2 min
        assert t.total_minutes == pytest.approx(7.7143)
        # single attempt: 1000 / 500 + 2
        assert t.baseline_minutes == pytest.approx(4.0)
        assert t.improvement_pct == pytest.approx(-92.86, abs=0.01)

    def test_cost(self, result):
        c = result.outcome.cost
        # 15 × 1000 × 0.3 mm³ × 7.85 g/cm³ → 0.035325 kg × 2.5 USD
        assert c.material == pytest.approx(0.0883)
        assert c.energy == pytest.approx(0.0077)
        # 20 L/min × 1.7143 min × 0.15 USD/m³
        assert c.gas == pytest.approx(0.0051)
        # 7.7143 min at 25 USD/h
        assert c.labor == pytest.approx(3.2143)
        assert c.total == pytest.approx(3.2354)
        assert c.cost_per_mm == pytest.approx(c.total / 1000, abs=1e-6)

    def test_single_attempt_baseline(self, result):
        c = result.outcome.cost
        # one pass at 500 mm/min: 2.0 min cutting + 2 min setup
        #   material 0.0883 + energy 3000 W × 2 min 0.012 + gas 20 L/min × 2 min 0.006
        #   + labor 4 min 1.6667 = 1.7730, × 1.5 rework
        assert c.baseline_total == pytest.approx(2.6595)
        assert c.savings == pytest.approx(-0.5759)
        assert c.savings_pct == pytest.approx(-21.65, abs=0.01)

    def test_material_cost_scales_with_length(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "cutting_length": 2000})
        assert r.outcome.cost.material == pytest.approx(0.1766)

    def test_analysis(self, result):
        a = result.analysis
        assert a.kind == "multiple-pass"
        assert a.minimum_passes == 2
        assert a.power_curve == "staged"
        assert a.single_pass_possible is True

    def test_recommendations(self, result):
        r = result.recommendations
        assert "Monitor heat accumulation between passes" in r.strategy
        assert len(r.troubleshooting) == 3  # steel does not work-harden
        assert "Labor dominates part cost - batch parts to share setup time" in r.cost


# ═══════════════════════════════════════════════════════════════════════════
# Other scenarios
# ═══════════════════════════════════════════════════════════════════════════

class TestScenarios:

    def test_thick_steel_four_passes(self, multi_pass, thick_steel_inputs):
        # ceil(20/8) = 3 → adaptive ceil(3.3) = 4
        r = multi_pass.calculate(thick_steel_inputs)
        assert r.strategy.value("pass_count") == 4
        assert [s.cumulative_depth for s in r.steps] == pytest.approx([5, 10, 15, 20])
        assert r.steps[-1].cumulative_depth == 20

    def test_uneven_depth_lands_on_thickness(self, multi_pass, multi_pass_inputs):
        # 12.5 mm in 3 passes → 4.1667 mm each
        r = multi_pass.calculate({**multi_pass_inputs, "thickness": 12.5, "cutting_strategy": "progressive_power"})
        assert r.steps[-1].cumulative_depth == 12.5
        assert sum(s.depth for s in r.steps) == pytest.approx(12.5, abs=1e-5)

    def test_quality_focused_slows_every_pass(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "cutting_strategy": "quality_focused"})
        speeds = {s.speed for s in r.steps}
        assert len(speeds) == 1
        # 2000 × sqrt(5 / 3.75) × 0.7
        assert speeds.pop() == pytest.approx(1616.6, abs=0.1)
        assert r.analysis.power_curve == "ramp"

    def test_progressive_power_decreases(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "cutting_strategy": "progressive_power"})
        powers = [s.power for s in r.steps]
        assert powers[0] == 3000
        assert all(a > b for a, b in zip(powers, powers[1:]))

    def test_titanium_work_hardening_extras(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "material_type": "titanium", "assist_gas": "argon"})
        assert "Multiple passes help manage work hardening effects" in r.strategy.reasoning
        assert "Material may work-harden between passes" in r.outcome.quality.potential_issues
        assert len(r.recommendations.troubleshooting) == 4
        result_msgs = [w.message for w in r.warnings if w.stage == "result"]
        assert any("stress relief" in m for m in result_msgs)

    def test_pass_count_cap_noted(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "thickness": 100, "single_pass_limit": 2})
        assert r.strategy.value("pass_count") == MAX_PASSES
        assert f"Pass count capped at {MAX_PASSES}" in r.strategy.reasoning
        assert any(w.message.startswith("Extremely thick material") for w in r.warnings)
        # 100 mm / 8 passes = 12.5 mm against a 2 mm limit
        result_msgs = [w.message for w in r.warnings if w.stage == "result"]
        assert any(
            m.startswith("Depth per pass (12.50 mm) exceeds the 2 mm single-pass limit") for m in result_msgs
        )

    def test_progressive_cap_exceeds_limit(self, multi_pass, multi_pass_inputs):
        # ceil(40/5) = 8 minimum, progressive capped at 6 → 6.67 mm per pass
        r = multi_pass.calculate({
            **multi_pass_inputs, "thickness": 40, "single_pass_limit": 5, "cutting_strategy": "progressive_power",
        })
        assert len(r.steps) == 6
        assert any("Depth per pass (6.67 mm)" in w.message for w in r.warnings if w.stage == "result")

    def test_no_limit_warning_when_uncapped(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate(multi_pass_inputs)
        assert not any(w.message.startswith("Depth per pass") for w in r.warnings)

    def test_uniform_mirror_warning(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate({**multi_pass_inputs, "cutting_strategy": "uniform", "quality_requirement": "mirror"})
        assert any("Uniform strategy may not achieve mirror finish" in w.message for w in r.warnings)

    def test_sensitivity_factors(self, multi_pass, multi_pass_inputs):
        r = multi_pass.calculate(multi_pass_inputs)
        assert {e.parameter for e in r.sensitivity.entries} == {"speed", "power", "depth_per_pass"}
        assert len(r.sensitivity.entries) == 18
        # cutting time ∝ 1/speed: +10 % speed → −10 % cutting time
        speed_up = next(e for e in r.sensitivity.for_parameter("speed") if e.perturbation == 0.10)
        assert speed_up.outcome == "cutting_minutes"
        assert speed_up.relative_change_pct == pytest.approx(-10.0)
        assert speed_up.impact == "significant"


# ═══════════════════════════════════════════════════════════════════════════
# Invariants across the input space
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize("material", ["steel", "stainless_steel", "aluminum", "copper", "titanium", "brass"])
@pytest.mark.parametrize("strategy", ["progressive_power", "adaptive", "uniform", "quality_focused"])
def test_pass_invariants(multi_pass, multi_pass_inputs, tables, material, strategy):
    """Nitrogen is supported for every material, so every combination succeeds."""
    envelope = tables.pressure_entry(Material(material), AssistGas.NITROGEN)
    for thickness, limit, quality in [(5, 2, "rough"), (12.5, 8, "standard"), (40, 6, "precision"), (100, 25, "mirror")]:
        r = multi_pass.calculate({
            **multi_pass_inputs,
            "material_type": material,
            "cutting_strategy": strategy,
            "assist_gas": "nitrogen",
            "thickness": thickness,
            "single_pass_limit": limit,
            "quality_requirement": quality,
            "max_laser_power": 6000,
        })
        assert r.ok, r
        n = len(r.steps)
        assert 1 <= n <= MAX_PASSES
        assert r.strategy.value("pass_count") == n
        assert r.steps[-1].cumulative_depth == thickness
        assert [s.index for s in r.steps] == list(range(1, n + 1))
        assert all(a.cumulative_depth < b.cumulative_depth for a, b in zip(r.steps, r.steps[1:]))
        assert all(s.power <= 6000 for s in r.steps)
        assert all(MIN_SPEED_MM_MIN <= s.speed <= MAX_SPEED_MM_MIN for s in r.steps)
        assert all(envelope.min_pressure <= s.gas_pressure <= envelope.max_pressure for s in r.steps)
        assert 60 <= r.outcome.quality.score <= 100


class TestMonotonicity:

    def test_thicker_needs_more_passes(self, multi_pass, multi_pass_inputs):
        counts = [
            multi_pass.calculate({**multi_pass_inputs, "thickness": t}).strategy.value("pass_count")
            for t in (5, 10, 20, 40, 80)
        ]
        assert counts == sorted(counts)
        assert counts[0] < counts[-1]

    def test_higher_tier_never_scores_lower(self, multi_pass, multi_pass_inputs):
        scores = [
            multi_pass.calculate({**multi_pass_inputs, "quality_requirement": q}).outcome.quality.score
            for q in ("rough", "standard", "precision", "mirror")
        ]
        # caps 75 / 85 / 95 / 100 × steel quality factor 0.85
        assert scores == pytest.approx([63.75, 72.25, 80.75, 85.0])

    def test_cost_scaling_with_length(self, multi_pass, multi_pass_inputs):
        short = multi_pass.calculate(multi_pass_inputs).outcome.cost
        long = multi_pass.calculate({**multi_pass_inputs, "cutting_length": 2000}).outcome.cost
        assert long.material == pytest.approx(2 * short.material, abs=1e-4)
        # setup time does not grow with length
        assert short.total < long.total < 2 * short.total

    def test_savings_fall_with_thickness(self, multi_pass, multi_pass_inputs):
        # 2 / 5 / 8 passes: per-pass setup outgrows the single-attempt baseline
        savings = [
            multi_pass.calculate({**multi_pass_inputs, "thickness": t}).outcome.cost.savings_pct
            for t in (6, 25, 80)
        ]
        assert savings[0] > 0
        assert savings[0] > savings[1] > savings[2]
