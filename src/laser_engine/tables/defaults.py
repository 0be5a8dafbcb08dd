"""The property-table bundle injected into every calculator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from laser_engine.config.enums import AssistGas, LaserType, Material
from laser_engine.errors import TableLookupError
from laser_engine.tables.gas_pressure import COMMON_PAIRS, GAS_PRESSURE, GasPressureEntry
from laser_engine.tables.materials import (
    GASES,
    LASERS,
    MATERIALS,
    GasProperties,
    LaserProperties,
    MaterialProperties,
)


@dataclass(frozen=True)
class PropertyTables:
    """Read-only coefficient tables.

    Built once and shared by all calculations.  Tests substitute their own
    instance through the calculator constructors.
    """

    materials: Mapping[Material, MaterialProperties]
    gases: Mapping[AssistGas, GasProperties]
    lasers: Mapping[LaserType, LaserProperties]
    gas_pressure: Mapping[tuple[Material, AssistGas], GasPressureEntry]
    common_pairs: frozenset[tuple[Material, AssistGas]] = frozenset()

    def material(self, material: Material) -> MaterialProperties:
        try:
            return self.materials[material]
        except KeyError:
            raise TableLookupError(f"No material properties for {material.value!r}") from None

    def gas(self, gas: AssistGas) -> GasProperties:
        try:
            return self.gases[gas]
        except KeyError:
            raise TableLookupError(f"No gas properties for {gas.value!r}") from None

    def laser(self, laser: LaserType) -> LaserProperties:
        try:
            return self.lasers[laser]
        except KeyError:
            raise TableLookupError(f"No laser properties for {laser.value!r}") from None

    def supports(self, material: Material, gas: AssistGas) -> bool:
        """True if the material/gas pair has a pressure envelope."""
        return (material, gas) in self.gas_pressure

    def pressure_entry(self, material: Material, gas: AssistGas) -> GasPressureEntry:
        try:
            return self.gas_pressure[(material, gas)]
        except KeyError:
            raise TableLookupError(
                f"{gas.value} is not supported for {material.value}"
            ) from None

    def supported_gases(self, material: Material) -> list[AssistGas]:
        return [g for g in AssistGas if (material, g) in self.gas_pressure]

    def is_common_pair(self, material: Material, gas: AssistGas) -> bool:
        return (material, gas) in self.common_pairs


DEFAULT_TABLES = PropertyTables(
    materials=MATERIALS,
    gases=GASES,
    lasers=LASERS,
    gas_pressure=GAS_PRESSURE,
    common_pairs=COMMON_PAIRS,
)
