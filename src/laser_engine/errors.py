"""Exception hierarchy.

Validation problems are reported as data (``ValidationIssue``), never raised.
These exceptions cover programming and lookup faults; the pipeline converts
any of them into a ``CalculationFailure``.
"""

from __future__ import annotations


class LaserEngineError(Exception):
    """Base class for engine faults."""


class UnknownCalculatorError(LaserEngineError, KeyError):
    """No calculator is registered under the requested id."""

    def __init__(self, calculator_id: str, available: list[str]):
        self.calculator_id = calculator_id
        self.available = available
        super().__init__(
            f"No calculator registered for id: {calculator_id!r}. Available: {available}"
        )

    def __str__(self) -> str:
        return self.args[0]


class TableLookupError(LaserEngineError, LookupError):
    """A property-table key is missing at derivation time."""


class ConsistencyError(LaserEngineError):
    """An assembled result violates an additive or progress invariant."""
