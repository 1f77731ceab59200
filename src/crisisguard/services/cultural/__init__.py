"""Cultural context services package."""

from crisisguard.services.cultural.cultural_adjuster import (
    BiasAdjustment,
    CulturalAdjustment,
    CulturalContextAdjuster,
    CulturalInterventions,
)
from crisisguard.services.cultural.cultural_profiles import resolve_region

__all__ = [
    "BiasAdjustment",
    "CulturalAdjustment",
    "CulturalContextAdjuster",
    "CulturalInterventions",
    "resolve_region",
]
