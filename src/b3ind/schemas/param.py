"""ParamConfig: Expert defaults for the indicator pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from b3ind.schemas.base import B3BaseModel


SpatialLevel = Literal["country", "continent", "world"]


# =============================================================================
# Nested Configuration Models
# =============================================================================

class GridConfig(B3BaseModel):
    """Grid generation defaults (cell sizes in kilometers)."""
    country_cell_size_km: int = Field(10, ge=1)
    continent_cell_size_km: int = Field(100, ge=1)
    world_cell_size_km: int = Field(100, ge=1)
    min_cell_area_fraction: Optional[float] = Field(
        None, gt=0, lt=1,
        description="Drop cells at or below this fraction of the largest cell area",
    )


class SpatialConfig(B3BaseModel):
    """Reference system and coordinate handling."""
    default_crs: str = "EPSG:3035"
    coordinate_scale: float = Field(1000.0, gt=0, description="Cube units to grid units (km -> m)")
    default_level: SpatialLevel = "continent"
    default_region: Optional[str] = "Europe"

    @field_validator("default_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Normalize spatial level names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class IndicatorOptionsConfig(B3BaseModel):
    """Calculator options."""
    taxonomic_ranks: list[str] = Field(
        default_factory=lambda: [
            "kingdom",
            "phylum",
            "class",
            "order",
            "family",
            "genus",
        ]
    )
    warn_on_empty: bool = True


class LoggingConfig(B3BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(B3BaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg)

    Runtime code only sees InternalConfig.
    """

    grid: GridConfig = Field(default_factory=GridConfig)
    spatial: SpatialConfig = Field(default_factory=SpatialConfig)
    indicators: IndicatorOptionsConfig = Field(default_factory=IndicatorOptionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
