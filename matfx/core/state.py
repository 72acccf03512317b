"""
Track state vector, propagation sub-steps and the process noise matrix.

The 7-component global state is laid out as
    [x, y, z, a_x, a_y, a_z, q/p]
with position in cm, a unit direction vector, and charge over momentum in
e/(GeV/c). The process noise matrix uses the same indexing, row-major.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from matfx.core.material import MaterialProperties

STATE_DIM = 7

# Index slices into the 7-vector
POSITION = slice(0, 3)
DIRECTION = slice(3, 6)
QOP = 6


@dataclass(frozen=True)
class StepRecord:
    """
    One propagation sub-step that has already been taken.

    Attributes:
        state7: State vector at the start of the sub-step
        step_size: Signed path length [cm]
        material: Material in effect during the sub-step
    """
    state7: np.ndarray
    step_size: float
    material: MaterialProperties

    @property
    def direction(self) -> np.ndarray:
        return self.state7[DIRECTION]


@dataclass
class StepContext:
    """
    Per-step scratch values threaded through stepper → momentum loss → noise.

    ``dedx`` and ``energy`` are only meaningful after a momentum-loss
    evaluation for the same step.

    Attributes:
        material: Material for the current step
        step_size: Unsigned step length used by momentum loss and noise [cm]
        dedx: Mean energy-loss rate over the step [GeV/cm]
        energy: Total energy at the middle of the step [GeV]
        rel_mom_loss: Accumulated relative momentum loss
    """
    material: Optional[MaterialProperties] = None
    step_size: float = 0.0
    dedx: float = 0.0
    energy: float = 0.0
    rel_mom_loss: float = 0.0


def make_state(position, direction, qop: float) -> np.ndarray:
    """
    Build a 7-component state vector.

    Parameters:
        position: (x, y, z) [cm]
        direction: (dx, dy, dz) direction (normalized internally)
        qop: Charge over momentum [e/(GeV/c)]

    Returns:
        State vector [x, y, z, a_x, a_y, a_z, q/p]
    """
    state7 = np.zeros(STATE_DIM, dtype=np.float64)
    state7[POSITION] = position

    dir_array = np.asarray(direction, dtype=np.float64)
    state7[DIRECTION] = dir_array / np.linalg.norm(dir_array)

    state7[QOP] = qop
    return state7


def zero_noise() -> np.ndarray:
    """Empty 7×7 process noise matrix."""
    return np.zeros((STATE_DIM, STATE_DIM), dtype=np.float64)


def check_noise(noise: np.ndarray) -> np.ndarray:
    """Validate that ``noise`` can be updated in place."""
    if not isinstance(noise, np.ndarray) or noise.shape != (STATE_DIM, STATE_DIM):
        raise ValueError(f"noise must be a {STATE_DIM}x{STATE_DIM} numpy array")
    return noise
