"""Gas pressure request — assist gas pressure for one cut."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from laser_engine.config.enums import AssistGas, Material, QualityTier


class GasPressureRequest(BaseModel):
    """Inputs for the assist gas pressure optimizer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    material_type: Material = Field(description="Workpiece material")
    thickness: float = Field(
        ge=0.1, le=50, description="Material thickness (mm)",
        json_schema_extra={"unit": "mm"},
    )
    assist_gas: AssistGas = Field(description="Assist gas type")
    nozzle_diameter: float = Field(
        ge=0.5, le=5.0, description="Cutting nozzle bore diameter (mm)",
        json_schema_extra={"unit": "mm"},
    )
    cutting_speed: float = Field(
        ge=100, le=15_000, description="Cutting speed (mm/min)",
        json_schema_extra={"unit": "mm/min"},
    )
    laser_power: float = Field(
        ge=50, le=20_000, description="Laser power setting (W)",
        json_schema_extra={"unit": "W"},
    )
    cut_quality: QualityTier = Field(description="Required cut quality level")
    cutting_length: float = Field(
        default=1_000.0, ge=10, le=10_000,
        description="Cut path length used for time and cost prediction (mm)",
        json_schema_extra={"unit": "mm"},
    )
    current_pressure: float | None = Field(
        default=None, ge=0, le=30,
        description="Pressure currently set on the machine, for comparison (bar)",
        json_schema_extra={"unit": "bar"},
    )
