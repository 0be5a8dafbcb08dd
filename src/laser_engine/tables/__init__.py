"""Domain property tables — static coefficients keyed by category."""

from laser_engine.tables.materials import (
    GASES,
    LASERS,
    MATERIALS,
    GasProperties,
    LaserProperties,
    MaterialProperties,
)
from laser_engine.tables.gas_pressure import COMMON_PAIRS, GAS_PRESSURE, GasPressureEntry
from laser_engine.tables.defaults import DEFAULT_TABLES, PropertyTables

__all__ = [
    "GASES",
    "LASERS",
    "MATERIALS",
    "GasProperties",
    "LaserProperties",
    "MaterialProperties",
    "COMMON_PAIRS",
    "GAS_PRESSURE",
    "GasPressureEntry",
    "DEFAULT_TABLES",
    "PropertyTables",
]
