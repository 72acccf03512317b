"""Transport module: Step limitation and material effects engine."""

from matfx.transport.engine import MaterialEffects
from matfx.transport.interfaces import (HomogeneousMedium, LayeredMedium,
                                        StraightLinePropagator)
from matfx.transport.step_limits import StepLimits, StepLimitType

__all__ = [
    "MaterialEffects",
    "HomogeneousMedium",
    "LayeredMedium",
    "StraightLinePropagator",
    "StepLimits",
    "StepLimitType",
]
