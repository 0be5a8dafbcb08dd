"""Result models — calculation output contracts."""

from laser_engine.models.results import (
    CalculationFailure,
    CalculationOutcome,
    CalculationResult,
    CostAnalysis,
    DerivedParameter,
    OutcomeMetrics,
    ParameterBand,
    QualityPrediction,
    Recommendations,
    ResultMetadata,
    ResultWarning,
    SensitivityEntry,
    SensitivityReport,
    StepParameters,
    StrategyCandidate,
    TimeAnalysis,
    Troubleshooting,
    ValidationIssue,
)

__all__ = [
    "CalculationFailure",
    "CalculationOutcome",
    "CalculationResult",
    "CostAnalysis",
    "DerivedParameter",
    "OutcomeMetrics",
    "ParameterBand",
    "QualityPrediction",
    "Recommendations",
    "ResultMetadata",
    "ResultWarning",
    "SensitivityEntry",
    "SensitivityReport",
    "StepParameters",
    "StrategyCandidate",
    "TimeAnalysis",
    "Troubleshooting",
    "ValidationIssue",
]
