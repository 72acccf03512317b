"""
Collaborators of the material effects: material oracle and track propagator.

The protocols describe what :class:`~matfx.transport.engine.MaterialEffects`
needs from the geometry and the track model. Simple implementations for
field-free straight tracks through homogeneous or planar layered media are
provided for standalone use.
"""

import logging
from typing import Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

from matfx.core.material import VACUUM, MaterialProperties
from matfx.core.state import DIRECTION, POSITION

logger = logging.getLogger(__name__)


@runtime_checkable
class MaterialOracle(Protocol):
    """Reports material properties and distances to material boundaries."""

    def properties(self, position: np.ndarray) -> MaterialProperties:
        """Material at ``position`` [cm]."""
        ...

    def find_next_boundary(self, state7: np.ndarray, max_distance: float,
                           var_field: bool) -> float:
        """
        Signed distance along the track to the next boundary.

        The magnitude never exceeds ``|max_distance|`` and the sign follows
        ``max_distance`` (negative for backward propagation).
        """
        ...

    def set_debug_level(self, level: int) -> None:
        ...


@runtime_checkable
class TrajectoryPropagator(Protocol):
    """Pure geometric propagation of a state vector."""

    def advance(self, state7: np.ndarray, distance: float,
                var_field: bool) -> np.ndarray:
        """Return the state after a signed path length ``distance`` [cm]."""
        ...


class StraightLinePropagator:
    """Propagation along straight lines (no magnetic field)."""

    def advance(self, state7: np.ndarray, distance: float,
                var_field: bool = False) -> np.ndarray:
        new_state = np.array(state7, dtype=np.float64)
        new_state[POSITION] += distance * new_state[DIRECTION]
        return new_state


class HomogeneousMedium:
    """
    Infinite medium of a single material.

    There are no boundaries: the full requested distance is always returned.
    """

    def __init__(self, material: MaterialProperties):
        self.material = material
        self.debug_level = 0

    def properties(self, position: np.ndarray) -> MaterialProperties:
        return self.material

    def find_next_boundary(self, state7: np.ndarray, max_distance: float,
                           var_field: bool = False) -> float:
        return max_distance

    def set_debug_level(self, level: int) -> None:
        self.debug_level = level


class LayeredMedium:
    """
    Planar slabs perpendicular to the z axis.

    Boundaries are found for straight tracks; the ``var_field`` flag is
    ignored.

    Example:
        medium = LayeredMedium([(0.0, 0.03, from_name('silicon')),
                                (10.0, 10.03, from_name('silicon'))])
    """

    def __init__(self, layers: Sequence[Tuple[float, float, MaterialProperties]],
                 outside: MaterialProperties = VACUUM):
        """
        Parameters:
            layers: (z_min, z_max, material) of each slab [cm], non-overlapping
            outside: Material filling everything between and around the slabs
        """
        self.layers = sorted(layers, key=lambda layer: layer[0])
        for (lo1, hi1, _), (lo2, _, _) in zip(self.layers, self.layers[1:]):
            if lo2 < hi1:
                raise ValueError(f"Overlapping layers at z = {lo2} cm")
        for lo, hi, _ in self.layers:
            if hi <= lo:
                raise ValueError(f"Empty layer [{lo}, {hi}] cm")

        self.outside = outside
        self.boundaries = np.unique([z for lo, hi, _ in self.layers for z in (lo, hi)])
        self.debug_level = 0

    def properties(self, position: np.ndarray) -> MaterialProperties:
        z = position[2]
        for lo, hi, material in self.layers:
            if lo <= z < hi:
                return material
        return self.outside

    def find_next_boundary(self, state7: np.ndarray, max_distance: float,
                           var_field: bool = False) -> float:
        sign = -1. if max_distance < 0 else 1.
        z = state7[2]
        dz = sign * state7[5]  # z-component of the direction of travel

        if abs(dz) < 1.E-12:
            return max_distance

        if dz > 0:
            ahead = self.boundaries[self.boundaries > z]
            if ahead.size == 0:
                return max_distance
            distance = (ahead[0] - z) / dz
        else:
            behind = self.boundaries[self.boundaries < z]
            if behind.size == 0:
                return max_distance
            distance = (behind[-1] - z) / dz

        if self.debug_level > 0:
            logger.debug("next boundary at a distance of %g cm", distance)

        return sign * min(distance, abs(max_distance))

    def set_debug_level(self, level: int) -> None:
        self.debug_level = level
