"""Material × assist-gas pressure envelopes.

A missing ``(material, gas)`` key means the pair is not supported: the
validator reports it as an error and no calculation runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from laser_engine.config.enums import AssistGas, Material


@dataclass(frozen=True)
class GasPressureEntry:
    """Pressure coefficients for one material/gas pair (bar)."""

    base_pressure: float
    thickness_factor: float
    """Additional bar per mm of thickness."""
    min_pressure: float
    max_pressure: float
    quality_factor: float
    """Edge-quality baseline for this pair (0–1)."""


_O2 = AssistGas.OXYGEN
_N2 = AssistGas.NITROGEN
_AIR = AssistGas.AIR
_AR = AssistGas.ARGON

GAS_PRESSURE: Mapping[tuple[Material, AssistGas], GasPressureEntry] = MappingProxyType({
    (Material.STEEL, _O2): GasPressureEntry(0.8, 0.15, 0.3, 3.0, 0.85),
    (Material.STEEL, _N2): GasPressureEntry(12.0, 2.0, 6.0, 25.0, 0.95),
    (Material.STEEL, _AIR): GasPressureEntry(6.0, 1.0, 3.0, 15.0, 0.75),
    (Material.STEEL, _AR): GasPressureEntry(8.0, 1.5, 5.0, 20.0, 0.90),

    (Material.STAINLESS_STEEL, _O2): GasPressureEntry(0.6, 0.12, 0.3, 2.5, 0.80),
    (Material.STAINLESS_STEEL, _N2): GasPressureEntry(15.0, 2.5, 6.0, 25.0, 0.95),
    (Material.STAINLESS_STEEL, _AIR): GasPressureEntry(8.0, 1.2, 3.0, 18.0, 0.70),
    (Material.STAINLESS_STEEL, _AR): GasPressureEntry(12.0, 2.0, 5.0, 22.0, 0.92),

    (Material.ALUMINUM, _N2): GasPressureEntry(18.0, 3.0, 6.0, 25.0, 0.90),
    (Material.ALUMINUM, _AIR): GasPressureEntry(10.0, 1.5, 3.0, 20.0, 0.75),
    (Material.ALUMINUM, _AR): GasPressureEntry(15.0, 2.5, 5.0, 25.0, 0.88),

    (Material.COPPER, _N2): GasPressureEntry(20.0, 3.5, 6.0, 25.0, 0.85),
    (Material.COPPER, _AIR): GasPressureEntry(12.0, 2.0, 3.0, 22.0, 0.70),
    (Material.COPPER, _AR): GasPressureEntry(18.0, 3.0, 5.0, 25.0, 0.82),

    (Material.TITANIUM, _AR): GasPressureEntry(16.0, 2.8, 5.0, 25.0, 0.95),
    (Material.TITANIUM, _N2): GasPressureEntry(14.0, 2.5, 6.0, 22.0, 0.88),

    (Material.BRASS, _N2): GasPressureEntry(16.0, 2.2, 6.0, 24.0, 0.88),
    (Material.BRASS, _AIR): GasPressureEntry(9.0, 1.3, 3.0, 18.0, 0.75),
    (Material.BRASS, _AR): GasPressureEntry(14.0, 2.0, 5.0, 22.0, 0.85),
})


COMMON_PAIRS: frozenset[tuple[Material, AssistGas]] = frozenset({
    (Material.STEEL, _O2),
    (Material.STAINLESS_STEEL, _N2),
    (Material.ALUMINUM, _N2),
})
"""Pairs with the deepest shop-floor track record."""
