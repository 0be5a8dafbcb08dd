"""Laser process engine — derive, predict and explain laser cutting parameters.

    from laser_engine import calculate

    result = calculate("gas-pressure", {"material_type": "steel", ...})
    if result.ok:
        print(result.strategy.value("pressure"))
"""

from __future__ import annotations

from typing import Any

from laser_engine.engine.registry import get_calculator, has_calculator, list_calculators
from laser_engine.errors import (
    ConsistencyError,
    LaserEngineError,
    TableLookupError,
    UnknownCalculatorError,
)
from laser_engine.models.results import CalculationFailure, CalculationResult

__version__ = "1.0.0"


def calculate(calculator_id: str, inputs: Any) -> CalculationResult | CalculationFailure:
    """Run one calculation by id.

    Raises ``UnknownCalculatorError`` for an unregistered id; every other
    problem is returned as a ``CalculationFailure``.
    """
    return get_calculator(calculator_id).calculate(inputs)


__all__ = [
    "calculate",
    "get_calculator",
    "has_calculator",
    "list_calculators",
    "CalculationFailure",
    "CalculationResult",
    "ConsistencyError",
    "LaserEngineError",
    "TableLookupError",
    "UnknownCalculatorError",
]
