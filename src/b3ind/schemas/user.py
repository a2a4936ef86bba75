"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., CRS → spatial.default_crs,
LEVEL → spatial.default_level).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Optional
from pydantic import Field, field_validator
from b3ind.schemas.base import B3BaseModel


class UserGridConfig(B3BaseModel):
    """User-facing grid config."""
    country_cell_size_km: Optional[int] = None
    continent_cell_size_km: Optional[int] = None
    world_cell_size_km: Optional[int] = None
    min_cell_area_fraction: Optional[float] = None


class UserSpatialConfig(B3BaseModel):
    """User-facing spatial config."""
    default_crs: Optional[str] = None
    coordinate_scale: Optional[float] = None
    default_level: Optional[str] = None
    default_region: Optional[str] = None

    @field_validator("default_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Normalize level names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserIndicatorOptionsConfig(B3BaseModel):
    """User-facing calculator options."""
    taxonomic_ranks: Optional[list[str]] = None
    warn_on_empty: Optional[bool] = None


class UserConfig(B3BaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            CRS="EPSG:3035",
            LEVEL="country",
            REGION="Denmark",
            CELL_SIZE_COUNTRY=5,
        )

        internal = resolve_config(param_cfg, user_cfg)
    """

    # Grid settings (flat aliases)
    country_cell_size_km: Optional[int] = Field(None, alias="CELL_SIZE_COUNTRY")
    continent_cell_size_km: Optional[int] = Field(None, alias="CELL_SIZE_CONTINENT")
    world_cell_size_km: Optional[int] = Field(None, alias="CELL_SIZE_WORLD")
    min_cell_area_fraction: Optional[float] = Field(None, alias="MIN_CELL_AREA_FRACTION")

    # Spatial settings (flat aliases)
    crs: Optional[str] = Field(None, alias="CRS")
    coordinate_scale: Optional[float] = Field(None, alias="COORDINATE_SCALE")
    level: Optional[str] = Field(None, alias="LEVEL")
    region: Optional[str] = Field(None, alias="REGION")

    # Indicator settings (flat aliases)
    taxonomic_ranks: Optional[list[str]] = Field(None, alias="TAXONOMIC_RANKS")
    log_level: Optional[str] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    grid: Optional[UserGridConfig] = None
    spatial: Optional[UserSpatialConfig] = None
    indicators: Optional[UserIndicatorOptionsConfig] = None

    model_config = B3BaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("coordinate_scale", "min_cell_area_fraction", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Normalize level names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Normalize log levels to uppercase."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Grid section
        grid = {}
        if self.country_cell_size_km is not None:
            grid["country_cell_size_km"] = self.country_cell_size_km
        if self.continent_cell_size_km is not None:
            grid["continent_cell_size_km"] = self.continent_cell_size_km
        if self.world_cell_size_km is not None:
            grid["world_cell_size_km"] = self.world_cell_size_km
        if self.min_cell_area_fraction is not None:
            grid["min_cell_area_fraction"] = self.min_cell_area_fraction

        # Merge with explicit grid config
        if self.grid is not None:
            grid.update(self.grid.model_dump(exclude_none=True))

        if grid:
            overrides["grid"] = grid

        # Spatial section
        spatial = {}
        if self.crs is not None:
            spatial["default_crs"] = self.crs
        if self.coordinate_scale is not None:
            spatial["coordinate_scale"] = self.coordinate_scale
        if self.level is not None:
            spatial["default_level"] = self.level
        if self.region is not None:
            spatial["default_region"] = self.region

        # Merge with explicit spatial config
        if self.spatial is not None:
            spatial.update(self.spatial.model_dump(exclude_none=True))

        if spatial:
            overrides["spatial"] = spatial

        # Indicators section
        indicators = {}
        if self.taxonomic_ranks is not None:
            indicators["taxonomic_ranks"] = self.taxonomic_ranks

        if self.indicators is not None:
            indicators.update(self.indicators.model_dump(exclude_none=True))

        if indicators:
            overrides["indicators"] = indicators

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
