"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from b3ind.schemas.base import B3BaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalGridConfig(B3BaseModel):
    """Runtime grid configuration."""
    country_cell_size_km: int
    continent_cell_size_km: int
    world_cell_size_km: int
    min_cell_area_fraction: Optional[float] = Field(gt=0, lt=1)  # None disables the small-cell filter


class InternalSpatialConfig(B3BaseModel):
    """Runtime spatial configuration."""
    default_crs: str
    coordinate_scale: float = Field(gt=0)
    default_level: Literal["country", "continent", "world"]
    default_region: Optional[str]


class InternalIndicatorOptionsConfig(B3BaseModel):
    """Runtime calculator options."""
    taxonomic_ranks: list[str]
    warn_on_empty: bool


class InternalLoggingConfig(B3BaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(B3BaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.default_crs = config.spatial.default_crs  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO type checking
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    grid: InternalGridConfig
    spatial: InternalSpatialConfig
    indicators: InternalIndicatorOptionsConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
