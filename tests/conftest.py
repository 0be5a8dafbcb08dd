"""Shared test fixtures — calculators on default tables and representative inputs."""

from __future__ import annotations

from typing import Any

import pytest

from laser_engine.calculators import BeamQualityCalculator, GasPressureCalculator, MultiPassCalculator
from laser_engine.config import EngineSettings
from laser_engine.tables import DEFAULT_TABLES, PropertyTables


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(
        energy_rate_per_kwh=0.12,
        labor_rate_per_hour=25.0,
        base_material_price_per_kg=2.5,
        setup_minutes_per_pass=2.0,
        kerf_width_mm=0.3,
        single_attempt_rework_factor=1.5,
        single_attempt_speed_mm_min=500.0,
    )


@pytest.fixture
def tables() -> PropertyTables:
    return DEFAULT_TABLES


@pytest.fixture
def multi_pass(tables: PropertyTables, settings: EngineSettings) -> MultiPassCalculator:
    return MultiPassCalculator(tables=tables, settings=settings)


@pytest.fixture
def gas_pressure(tables: PropertyTables, settings: EngineSettings) -> GasPressureCalculator:
    return GasPressureCalculator(tables=tables, settings=settings)


@pytest.fixture
def beam_quality(tables: PropertyTables, settings: EngineSettings) -> BeamQualityCalculator:
    return BeamQualityCalculator(tables=tables, settings=settings)


@pytest.fixture
def multi_pass_inputs() -> dict[str, Any]:
    """15 mm mild steel, fiber, adaptive: 3 passes of 5 mm."""
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


@pytest.fixture
def thick_steel_inputs() -> dict[str, Any]:
    """20 mm steel with an 8 mm single-pass limit, adaptive strategy."""
    return {
        "material_type": "steel",
        "thickness": 20,
        "laser_type": "fiber",
        "max_laser_power": 4000,
        "single_pass_limit": 8,
        "cutting_strategy": "adaptive",
        "quality_requirement": "standard",
        "assist_gas": "oxygen",
        "cutting_length": 1000,
    }


@pytest.fixture
def gas_inputs() -> dict[str, Any]:
    """5 mm mild steel with oxygen: only the power factor departs from 1."""
    return {
        "material_type": "steel",
        "thickness": 5,
        "assist_gas": "oxygen",
        "nozzle_diameter": 1.5,
        "cutting_speed": 3000,
        "laser_power": 2000,
        "cut_quality": "standard",
    }


@pytest.fixture
def stainless_nitrogen_inputs() -> dict[str, Any]:
    """8 mm stainless with nitrogen, sized so no quality tier hits the envelope."""
    return {
        "material_type": "stainless_steel",
        "thickness": 8,
        "assist_gas": "nitrogen",
        "nozzle_diameter": 2.0,
        "cutting_speed": 2000,
        "laser_power": 1000,
        "cut_quality": "precision",
    }


@pytest.fixture
def beam_inputs() -> dict[str, Any]:
    """Fiber laser, catalogue M² (no divergence given)."""
    return {
        "laser_type": "fiber",
        "wavelength": 1.064,
        "power": 3000,
        "beam_diameter": 0.2,
        "focal_length": 100,
    }
