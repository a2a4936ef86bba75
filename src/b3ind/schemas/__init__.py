"""Pydantic configuration schemas for the b3ind pipeline.

This module provides strictly typed configuration models for the indicator
workflow. All configuration validation, coercion, and normalization happens
at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
"""

from b3ind.schemas.resolve import resolve_config
from b3ind.schemas.internal import InternalConfig
from b3ind.schemas.param import ParamConfig
from b3ind.schemas.user import UserConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
]
