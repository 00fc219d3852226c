"""
Services layer for Riviere.

Internal services:
    config_models: Pydantic models for extraction configs and runtime settings
    config: Loading, $ref expansion, validation and the extends loader
    resolution: Resolving authored modules into complete modules
    extraction: Extraction run orchestration (imported on demand)

Usage:
    from riviere.services import config, resolution

    cfg = config.load_extraction_config("riviere.config.yaml")
    resolved = resolution.resolve_config(cfg, config.create_config_loader("."))
"""

from __future__ import annotations

from . import config, config_models, resolution
from .config_models import RiviereSettings

__all__ = [
    "RiviereSettings",
    "config",
    "config_models",
    "resolution",
]
