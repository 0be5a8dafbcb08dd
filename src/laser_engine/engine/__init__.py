"""Calculation engine — the shared pipeline every calculator runs through."""

from laser_engine.engine.contract import Advice, CalculationContext, Calculator
from laser_engine.engine.sensitivity import PERTURBATIONS, SensitivityFactor, analyze_sensitivity
from laser_engine.engine.fingerprint import fingerprint
from laser_engine.engine.validation import ValidationReport, validate_inputs
from laser_engine.engine.assembler import check_consistency
from laser_engine.engine.pipeline import run_calculation
from laser_engine.engine.schema import InputDescriptor, describe_inputs

__all__ = [
    "Advice",
    "CalculationContext",
    "Calculator",
    "PERTURBATIONS",
    "SensitivityFactor",
    "analyze_sensitivity",
    "fingerprint",
    "ValidationReport",
    "validate_inputs",
    "check_consistency",
    "run_calculation",
    "InputDescriptor",
    "describe_inputs",
]
