"""
Candidate step lengths for the next propagation step.

Each limit is stored as a magnitude; the direction of propagation is kept
separately as the step sign. The most restrictive limit wins.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

# Value reported when no limit is set
NO_LIMIT = 99999999.


class StepLimitType(Enum):
    """Reasons for limiting a step."""
    FIELD_CURVATURE = 'field_curvature'
    MOMENTUM_LOSS = 'momentum_loss'
    S_MAX = 's_max'
    S_MAX_ARG = 's_max_arg'
    BOUNDARY = 'boundary'
    PLANE = 'plane'


class StepLimits:
    """
    Set of named step limits.

    Example:
        limits = StepLimits(step_sign=-1.)
        limits.set_limit(StepLimitType.S_MAX, 25.0)
        limits.lowest_limit_signed_value()  # -25.0
    """

    def __init__(self, step_sign: float = 1.):
        self._limits: Dict[StepLimitType, float] = {}
        self.step_sign = 1.
        self.set_step_sign(step_sign)

    def set_step_sign(self, sign: float):
        self.step_sign = -1. if sign < 0 else 1.

    def set_limit(self, kind: StepLimitType, value: float):
        """Install (or overwrite) a limit; the sign of ``value`` is ignored."""
        self._limits[kind] = abs(value)

    def get_limit(self, kind: StepLimitType) -> float:
        return self._limits.get(kind, NO_LIMIT)

    def remove_limit(self, kind: StepLimitType):
        self._limits.pop(kind, None)

    def reset(self):
        """Remove all limits and reset the step sign."""
        self._limits.clear()
        self.step_sign = 1.

    def lowest_limit(self) -> Tuple[Optional[StepLimitType], float]:
        """Most restrictive limit as (type, magnitude); (None, NO_LIMIT) if unset."""
        if not self._limits:
            return None, NO_LIMIT
        kind = min(self._limits, key=self._limits.get)
        return kind, self._limits[kind]

    def lowest_limit_value(self) -> float:
        return self.lowest_limit()[1]

    def lowest_limit_signed_value(self) -> float:
        return self.step_sign * self.lowest_limit_value()

    def __contains__(self, kind: StepLimitType) -> bool:
        return kind in self._limits

    def __repr__(self) -> str:
        items = ", ".join(f"{k.value}={v:.6g}" for k, v in self._limits.items())
        return f"StepLimits(sign={self.step_sign:+.0f}, {items})"
