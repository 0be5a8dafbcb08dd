"""Closed categorical inputs shared by every calculator.

Each enum is the complete set of values a request may carry.  Property
tables are keyed by these members, and every decision point that branches
on them ends in ``assert_never`` so an unhandled member fails loudly.
"""

from __future__ import annotations

from enum import Enum
from typing import NoReturn


class Material(str, Enum):
    """Workpiece material."""

    STEEL = "steel"
    STAINLESS_STEEL = "stainless_steel"
    ALUMINUM = "aluminum"
    COPPER = "copper"
    TITANIUM = "titanium"
    BRASS = "brass"


class LaserType(str, Enum):
    """Laser source family."""

    FIBER = "fiber"
    CO2 = "co2"
    ND_YAG = "nd_yag"
    DISK = "disk"
    DIODE = "diode"


class AssistGas(str, Enum):
    """Assist gas fed through the cutting nozzle."""

    OXYGEN = "oxygen"
    NITROGEN = "nitrogen"
    AIR = "air"
    ARGON = "argon"


class QualityTier(str, Enum):
    """Required cut quality, ordered from least to most demanding."""

    ROUGH = "rough"
    STANDARD = "standard"
    PRECISION = "precision"
    MIRROR = "mirror"

    @property
    def rank(self) -> int:
        return _QUALITY_ORDER.index(self)


_QUALITY_ORDER = (
    QualityTier.ROUGH,
    QualityTier.STANDARD,
    QualityTier.PRECISION,
    QualityTier.MIRROR,
)


class PassStrategy(str, Enum):
    """Multi-pass cutting approach."""

    PROGRESSIVE_POWER = "progressive_power"
    ADAPTIVE = "adaptive"
    UNIFORM = "uniform"
    QUALITY_FOCUSED = "quality_focused"


class Grade(str, Enum):
    """Categorical quality grade attached to a quality score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def assert_never(value: NoReturn) -> NoReturn:
    """Fail on an enum member that a branch does not handle."""
    raise AssertionError(f"Unhandled value: {value!r}")
