"""
Input limits for city generation requests.

The front end clamps user input before a run: neighborhoods are never
smaller than 3x3 and district names are short enough to label a cell.
"""

from pydantic import BaseModel, Field


class DistrictListSettings(BaseModel):
    """Constraints on the editable district list."""

    max_districts: int = Field(default=64, description="Maximum districts per city")
    max_name_length: int = Field(default=50, description="Maximum district name length")


class NeighborhoodSizeSettings(BaseModel):
    """Constraints on neighborhood dimensions."""

    min_rows: int = Field(default=3, description="Minimum neighborhood rows")
    min_cols: int = Field(default=3, description="Minimum neighborhood columns")
    max_rows: int = Field(default=100, description="Maximum neighborhood rows")
    max_cols: int = Field(default=100, description="Maximum neighborhood columns")


class GenerationSettings(BaseModel):
    """Main generation limits configuration."""

    districts: DistrictListSettings = Field(default_factory=DistrictListSettings)
    neighborhoods: NeighborhoodSizeSettings = Field(default_factory=NeighborhoodSizeSettings)

    # district_rows * district_cols * neighborhood_rows * neighborhood_cols
    max_total_buildings: int = Field(default=2_000_000, description="Maximum buildings per generated city")


generation_settings = GenerationSettings()
