"""Engine-wide settings — economic rates and numeric tolerances.

Values can be overridden through ``LASER_ENGINE_*`` environment variables
(e.g. ``LASER_ENGINE_ENERGY_RATE_PER_KWH=0.18``) or by passing an explicit
``EngineSettings`` to a calculator.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Rates and constants every calculator shares."""

    model_config = SettingsConfigDict(env_prefix="LASER_ENGINE_", frozen=True)

    schema_version: str = Field(default="1.0", description="Result schema version stamped into metadata")

    # --- Economic rates ---
    energy_rate_per_kwh: float = Field(default=0.12, ge=0, description="Electricity price (USD/kWh)")
    labor_rate_per_hour: float = Field(default=25.0, ge=0, description="Operator labor rate (USD/h)")
    base_material_price_per_kg: float = Field(
        default=2.5, ge=0,
        description="Reference workpiece price (USD/kg), scaled by each material's cost factor",
    )

    # --- Process constants ---
    setup_minutes_per_pass: float = Field(
        default=2.0, ge=0,
        description="Fixed setup / repositioning overhead per pass (min)",
    )
    kerf_width_mm: float = Field(default=0.3, gt=0, description="Nominal kerf width used for removed volume (mm)")
    single_attempt_rework_factor: float = Field(
        default=1.5, ge=1.0,
        description="Cost multiplier for a naive single-pass attempt on thick stock (rework + scrap)",
    )
    single_attempt_speed_mm_min: float = Field(
        default=500.0, gt=0,
        description="Cutting speed assumed for a naive single-pass attempt (mm/min)",
    )

    # --- Consistency ---
    consistency_tolerance: float = Field(
        default=1e-2, gt=0,
        description="Max allowed gap between a reported total and the sum of its components",
    )


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Process default settings, read from the environment once."""
    return EngineSettings()
