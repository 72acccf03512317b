"""Custom exceptions for the :mod:`matfx` package.

Every error raised here is fatal for the propagation that triggered it: the
enclosing track fit is expected to discard the in-progress candidate.
"""


class MatFXError(Exception):
    """Base exception for material-effects errors."""

    fatal = True


class PhysicsError(MatFXError, ValueError):
    """Particle left the validity range of the energy-loss models."""


class ConfigurationError(MatFXError, ValueError):
    """Invalid configuration or use of an uninitialized instance."""


class NumericalError(MatFXError, RuntimeError):
    """Iterative search did not converge."""


__all__ = [
    "MatFXError",
    "PhysicsError",
    "ConfigurationError",
    "NumericalError",
]
