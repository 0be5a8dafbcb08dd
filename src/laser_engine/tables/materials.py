"""Material, gas and laser property records.

Plain frozen records; per-laser lookups are held in ``MappingProxyType`` so a
record can be shared across threads without copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from laser_engine.config.enums import AssistGas, LaserType, Material


@dataclass(frozen=True)
class MaterialProperties:
    """Physical and economic coefficients for one workpiece material."""

    density_g_cm3: float
    thermal_conductivity: float
    """W/(m·K)."""
    absorptivity: float
    """Fraction of ~1 μm radiation absorbed at room temperature."""
    work_hardening: float
    """0–1 tendency to harden between passes."""
    optimal_pass_ratio: float
    quality_factor: float
    """Baseline edge-quality multiplier (0–1)."""
    cost_factor: float
    """Price multiplier relative to the reference material price."""
    single_pass_limit_mm: Mapping[LaserType, float]
    """Thickness a single pass can sever, per laser family."""
    base_speed_mm_min: Mapping[LaserType, float]
    """Reference multi-pass cutting speed at 5 mm depth, per laser family."""


@dataclass(frozen=True)
class GasProperties:
    """Flow and pricing data for one assist gas."""

    density_kg_m3: float
    flow_factor: float
    price_per_m3: float
    multi_pass_base_pressure: float
    """Starting pressure for a 0 mm pass (bar)."""
    nominal_flow_lpm: float
    """Flow assumed when estimating consumption per cutting minute (L/min)."""
    range_tolerance: float
    """Half-width of the recommended pressure window at 0 mm (bar)."""


@dataclass(frozen=True)
class LaserProperties:
    """Catalogue optics for one laser family."""

    typical_wavelength_um: float
    typical_m_squared: float
    m_squared_min: float
    m_squared_max: float
    max_power_density_mw_cm2: float


def _per_laser(fiber: float, co2: float, nd_yag: float, disk: float, diode: float) -> Mapping[LaserType, float]:
    return MappingProxyType({
        LaserType.FIBER: fiber,
        LaserType.CO2: co2,
        LaserType.ND_YAG: nd_yag,
        LaserType.DISK: disk,
        LaserType.DIODE: diode,
    })


MATERIALS: Mapping[Material, MaterialProperties] = MappingProxyType({
    Material.STEEL: MaterialProperties(
        density_g_cm3=7.85, thermal_conductivity=50, absorptivity=0.35,
        work_hardening=0.10, optimal_pass_ratio=0.6, quality_factor=0.85, cost_factor=1.0,
        single_pass_limit_mm=_per_laser(20, 15, 18, 22, 8),
        base_speed_mm_min=_per_laser(2000, 1500, 1800, 2100, 1000),
    ),
    Material.STAINLESS_STEEL: MaterialProperties(
        density_g_cm3=8.0, thermal_conductivity=16, absorptivity=0.33,
        work_hardening=0.30, optimal_pass_ratio=0.5, quality_factor=0.90, cost_factor=1.2,
        single_pass_limit_mm=_per_laser(15, 12, 14, 16, 6),
        base_speed_mm_min=_per_laser(1800, 1200, 1500, 1900, 800),
    ),
    Material.ALUMINUM: MaterialProperties(
        density_g_cm3=2.70, thermal_conductivity=237, absorptivity=0.08,
        work_hardening=0.05, optimal_pass_ratio=0.7, quality_factor=0.80, cost_factor=0.8,
        single_pass_limit_mm=_per_laser(12, 8, 10, 13, 5),
        base_speed_mm_min=_per_laser(3000, 800, 2000, 3100, 1200),
    ),
    Material.COPPER: MaterialProperties(
        density_g_cm3=8.96, thermal_conductivity=401, absorptivity=0.05,
        work_hardening=0.02, optimal_pass_ratio=0.4, quality_factor=0.75, cost_factor=1.5,
        single_pass_limit_mm=_per_laser(8, 6, 7, 9, 4),
        base_speed_mm_min=_per_laser(1500, 600, 1200, 1600, 600),
    ),
    Material.TITANIUM: MaterialProperties(
        density_g_cm3=4.51, thermal_conductivity=22, absorptivity=0.40,
        work_hardening=0.40, optimal_pass_ratio=0.5, quality_factor=0.95, cost_factor=2.0,
        single_pass_limit_mm=_per_laser(10, 8, 9, 11, 5),
        base_speed_mm_min=_per_laser(1200, 800, 1000, 1250, 500),
    ),
    Material.BRASS: MaterialProperties(
        density_g_cm3=8.50, thermal_conductivity=120, absorptivity=0.10,
        work_hardening=0.15, optimal_pass_ratio=0.6, quality_factor=0.80, cost_factor=1.1,
        single_pass_limit_mm=_per_laser(10, 8, 9, 11, 5),
        base_speed_mm_min=_per_laser(2000, 1000, 1500, 2100, 800),
    ),
})


GASES: Mapping[AssistGas, GasProperties] = MappingProxyType({
    AssistGas.OXYGEN: GasProperties(
        density_kg_m3=1.429, flow_factor=0.60, price_per_m3=0.15,
        multi_pass_base_pressure=1.0, nominal_flow_lpm=20.0, range_tolerance=0.2,
    ),
    AssistGas.NITROGEN: GasProperties(
        density_kg_m3=1.251, flow_factor=0.65, price_per_m3=0.12,
        multi_pass_base_pressure=15.0, nominal_flow_lpm=20.0, range_tolerance=2.0,
    ),
    AssistGas.AIR: GasProperties(
        density_kg_m3=1.225, flow_factor=0.62, price_per_m3=0.02,
        multi_pass_base_pressure=8.0, nominal_flow_lpm=20.0, range_tolerance=2.0,
    ),
    AssistGas.ARGON: GasProperties(
        density_kg_m3=1.784, flow_factor=0.58, price_per_m3=0.25,
        multi_pass_base_pressure=12.0, nominal_flow_lpm=20.0, range_tolerance=2.0,
    ),
})


LASERS: Mapping[LaserType, LaserProperties] = MappingProxyType({
    LaserType.FIBER: LaserProperties(
        typical_wavelength_um=1.064, typical_m_squared=1.10,
        m_squared_min=1.05, m_squared_max=1.30, max_power_density_mw_cm2=100,
    ),
    LaserType.CO2: LaserProperties(
        typical_wavelength_um=10.6, typical_m_squared=1.05,
        m_squared_min=1.02, m_squared_max=1.15, max_power_density_mw_cm2=50,
    ),
    LaserType.ND_YAG: LaserProperties(
        typical_wavelength_um=1.064, typical_m_squared=1.20,
        m_squared_min=1.10, m_squared_max=1.50, max_power_density_mw_cm2=80,
    ),
    LaserType.DISK: LaserProperties(
        typical_wavelength_um=1.030, typical_m_squared=1.15,
        m_squared_min=1.08, m_squared_max=1.25, max_power_density_mw_cm2=120,
    ),
    LaserType.DIODE: LaserProperties(
        typical_wavelength_um=0.808, typical_m_squared=2.50,
        m_squared_min=1.80, m_squared_max=4.00, max_power_density_mw_cm2=20,
    ),
})
