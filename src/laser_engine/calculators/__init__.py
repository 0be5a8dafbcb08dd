"""Concrete calculators — one class per calculator id."""

from laser_engine.calculators.base import BaseCalculator
from laser_engine.calculators.multi_pass import MultiPassCalculator
from laser_engine.calculators.gas_pressure import GasPressureCalculator
from laser_engine.calculators.beam_quality import BeamQualityCalculator

__all__ = [
    "BaseCalculator",
    "MultiPassCalculator",
    "GasPressureCalculator",
    "BeamQualityCalculator",
]
