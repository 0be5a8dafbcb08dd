"""Calculator registry — maps calculator ids to calculator classes."""

from __future__ import annotations

from laser_engine.calculators.beam_quality import BeamQualityCalculator
from laser_engine.calculators.gas_pressure import GasPressureCalculator
from laser_engine.calculators.multi_pass import MultiPassCalculator
from laser_engine.config.settings import EngineSettings
from laser_engine.engine.contract import Calculator
from laser_engine.errors import UnknownCalculatorError
from laser_engine.tables.defaults import PropertyTables

CALCULATOR_REGISTRY: dict[str, type] = {
    MultiPassCalculator.id: MultiPassCalculator,
    GasPressureCalculator.id: GasPressureCalculator,
    BeamQualityCalculator.id: BeamQualityCalculator,
}


def get_calculator(
    calculator_id: str,
    tables: PropertyTables | None = None,
    settings: EngineSettings | None = None,
) -> Calculator:
    """Returns a calculator instance for an id, or raises UnknownCalculatorError."""
    if calculator_id not in CALCULATOR_REGISTRY:
        raise UnknownCalculatorError(calculator_id, list_calculators())
    return CALCULATOR_REGISTRY[calculator_id](tables=tables, settings=settings)


def has_calculator(calculator_id: str) -> bool:
    """Check if a calculator exists for an id."""
    return calculator_id in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator ids."""
    return list(CALCULATOR_REGISTRY.keys())
