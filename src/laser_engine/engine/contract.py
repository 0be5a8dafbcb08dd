"""The calculator contract.

A calculator is any object with the attributes and stage methods below.
The pipeline drives the stages in a fixed order:

    domain_validate → derive → expand → predict → sensitivity_factors
    → analyze → advise

Every stage is a pure function of the context and the earlier stages'
outputs.  ``CalculationContext`` carries the per-invocation state, including
the calculator's own estimate, which both validation (current-value
comparison) and derivation read so it is computed once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from laser_engine.config.settings import EngineSettings
from laser_engine.engine.sensitivity import SensitivityFactor
from laser_engine.models.results import (
    CalculationFailure,
    CalculationResult,
    OutcomeMetrics,
    Recommendations,
    StepParameters,
    StrategyCandidate,
    ValidationIssue,
)
from laser_engine.tables.defaults import PropertyTables

RequestT = TypeVar("RequestT", bound=BaseModel)


class CalculationContext(Generic[RequestT]):
    """Per-invocation inputs: request, tables, settings, and a lazy estimate."""

    def __init__(
        self,
        request: RequestT,
        tables: PropertyTables,
        settings: EngineSettings,
        estimator: Callable[[RequestT, PropertyTables], Any],
    ):
        self.request = request
        self.tables = tables
        self.settings = settings
        self._estimator = estimator

    @cached_property
    def estimate(self) -> Any:
        """The calculator's own estimate for this request, computed on first use."""
        return self._estimator(self.request, self.tables)


@dataclass(frozen=True)
class Advice:
    """Output of the recommendation & warning stage."""

    recommendations: Recommendations
    warnings: list[str] = field(default_factory=list)


@runtime_checkable
class Calculator(Protocol):
    """Structural interface every calculator implements."""

    id: str
    title: str
    description: str
    version: str
    request_model: type[BaseModel]
    tables: PropertyTables
    settings: EngineSettings

    def estimate(self, request: Any, tables: PropertyTables) -> Any: ...

    def domain_validate(self, ctx: CalculationContext) -> list[ValidationIssue]: ...

    def derive(self, ctx: CalculationContext) -> StrategyCandidate: ...

    def expand(self, ctx: CalculationContext, strategy: StrategyCandidate) -> tuple[StepParameters, ...]: ...

    def predict(
        self, ctx: CalculationContext, strategy: StrategyCandidate, steps: tuple[StepParameters, ...],
    ) -> OutcomeMetrics: ...

    def sensitivity_factors(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> list[SensitivityFactor]: ...

    def analyze(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics,
    ) -> BaseModel: ...

    def advise(
        self, ctx: CalculationContext, strategy: StrategyCandidate,
        steps: tuple[StepParameters, ...], outcome: OutcomeMetrics, analysis: Any,
    ) -> Advice: ...

    def default_inputs(self) -> dict[str, Any]: ...

    def example_inputs(self) -> dict[str, Any]: ...

    def calculate(self, inputs: Any) -> CalculationResult | CalculationFailure: ...
