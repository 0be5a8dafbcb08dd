"""Beam quality request — optical characterisation of a laser source."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from laser_engine.config.enums import AssistGas, LaserType


class BeamQualityRequest(BaseModel):
    """Inputs for the beam quality analyzer.

    ``divergence_angle`` is optional: when given, M² is measured from beam
    propagation; when omitted, the laser type's catalogue M² is used.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    laser_type: LaserType = Field(description="Laser source family")
    wavelength: float = Field(
        ge=0.8, le=12, description="Emission wavelength (μm)",
        json_schema_extra={"unit": "μm"},
    )
    power: float = Field(
        ge=100, le=50_000, description="Laser output power (W)",
        json_schema_extra={"unit": "W"},
    )
    beam_diameter: float = Field(
        ge=0.01, le=5.0, description="Raw beam diameter at 1/e² intensity (mm)",
        json_schema_extra={"unit": "mm"},
    )
    divergence_angle: float | None = Field(
        default=None, ge=0.1, le=50,
        description="Full-angle beam divergence (mrad)",
        json_schema_extra={"unit": "mrad"},
    )
    focal_length: float = Field(
        default=100.0, ge=10, le=500,
        description="Focusing lens focal length (mm)",
        json_schema_extra={"unit": "mm"},
    )
    assist_gas: AssistGas = Field(
        default=AssistGas.NITROGEN,
        description="Assist gas assumed for the reference cut",
    )
    cutting_length: float = Field(
        default=1_000.0, ge=10, le=10_000,
        description="Reference cut path length for time and cost prediction (mm)",
        json_schema_extra={"unit": "mm"},
    )
