"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor; the executable checks live in the sibling contract modules.
"""

PIPELINE_INVARIANTS = {
    "filter": [
        "first_year <= last_year",
        "Both bounds lie inside the cube's own year range",
    ],

    "grid": [
        "cell_id is dense, unique and runs 1..N in row-major order",
        "area_km2 is computed from the clipped geometry",
        "Grid is built per invocation and never cached",
    ],

    "join": [
        "Every row has at most one cell_id",
        "Rows outside all cells are dropped",
        "Rows are sorted by cell_id (stable)",
    ],

    "indicator": [
        "One row per cell (map) or year (ts)",
        "Value column named after the indicator",
    ],

    "result": [
        "Map results contain every grid cell, empty cells hold the neutral value",
        "Time series contain every year of the clamped window",
    ],
}

STAGE_REQUIREMENTS = {
    "filter": "REQUIRED",
    "grid": "SPATIAL_ONLY",    # map requests, or ts requests naming a level
    "join": "SPATIAL_ONLY",
    "indicator": "REQUIRED",
    "result": "REQUIRED",
}
