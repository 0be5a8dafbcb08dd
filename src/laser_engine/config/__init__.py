"""Configuration models — typed calculator requests and engine settings."""

from laser_engine.config.enums import (
    AssistGas,
    Grade,
    LaserType,
    Material,
    PassStrategy,
    QualityTier,
)
from laser_engine.config.settings import EngineSettings, get_settings
from laser_engine.config.multi_pass import MultiPassRequest
from laser_engine.config.gas_pressure import GasPressureRequest
from laser_engine.config.beam_quality import BeamQualityRequest

__all__ = [
    "AssistGas",
    "Grade",
    "LaserType",
    "Material",
    "PassStrategy",
    "QualityTier",
    "EngineSettings",
    "get_settings",
    "MultiPassRequest",
    "GasPressureRequest",
    "BeamQualityRequest",
]
