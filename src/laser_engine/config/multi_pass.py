"""Multiple-pass cutting request — thick stock cut in successive depth passes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from laser_engine.config.enums import AssistGas, LaserType, Material, PassStrategy, QualityTier


class MultiPassRequest(BaseModel):
    """Inputs for the multiple-pass optimizer."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    material_type: Material = Field(description="Workpiece material")
    thickness: float = Field(
        ge=5, le=100, description="Material thickness requiring multi-pass cutting (mm)",
        json_schema_extra={"unit": "mm"},
    )
    laser_type: LaserType = Field(description="Laser source family")
    max_laser_power: float = Field(
        ge=500, le=20_000, description="Maximum available laser power (W)",
        json_schema_extra={"unit": "W"},
    )
    single_pass_limit: float = Field(
        ge=2, le=25, description="Maximum depth achievable in one pass (mm)",
        json_schema_extra={"unit": "mm"},
    )
    cutting_strategy: PassStrategy = Field(description="Multi-pass cutting approach")
    quality_requirement: QualityTier = Field(description="Required cut quality level")
    assist_gas: AssistGas = Field(description="Assist gas type")
    cutting_length: float = Field(
        ge=10, le=10_000, description="Total length of the cut path (mm)",
        json_schema_extra={"unit": "mm"},
    )
    current_passes: int | None = Field(
        default=None, ge=1, le=10,
        description="Pass count currently used on the shop floor, for comparison",
    )
