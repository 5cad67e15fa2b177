import numpy as np
from enum import Enum


class Precision(Enum):
    SINGLE = 0
    DOUBLE = 1

    @property
    def dtype(self) -> np.dtype:
        return _PRECISION_TO_DTYPE[self]

    @property
    def singular_threshold(self) -> float:
        """Determinant magnitude below which a matrix is treated as singular."""
        return _SINGULAR_THRESHOLD[self]

    @property
    def axis_epsilon(self) -> float:
        """Axis length below which an axis-angle axis is treated as undefined."""
        return _AXIS_EPSILON[self]

    @property
    def slerp_epsilon(self) -> float:
        """Below this (1 - cos) distance slerp falls back to a normalized lerp."""
        return _SLERP_EPSILON[self]

    @property
    def unit_tolerance(self) -> float:
        """Squared-norm distance from 1 under which a quaternion counts as unit."""
        return _UNIT_TOLERANCE[self]


# map each Precision to its numpy scalar type
_PRECISION_TO_DTYPE = {
    Precision.SINGLE: np.dtype(np.float32),
    Precision.DOUBLE: np.dtype(np.float64),
}

_SINGULAR_THRESHOLD = {
    Precision.SINGLE: 1e-6,
    Precision.DOUBLE: 1e-12,
}

_AXIS_EPSILON = {
    Precision.SINGLE: 1e-6,
    Precision.DOUBLE: 1e-12,
}

_SLERP_EPSILON = {
    Precision.SINGLE: 1e-6,
    Precision.DOUBLE: 1e-12,
}

_UNIT_TOLERANCE = {
    Precision.SINGLE: 8 * float(np.finfo(np.float32).eps),
    Precision.DOUBLE: 8 * float(np.finfo(np.float64).eps),
}


def precision_of(dtype) -> Precision:
    """Return the Precision matching a numpy dtype (float32 or float64)."""
    dtype = np.dtype(dtype)
    if dtype == np.float32:
        return Precision.SINGLE
    if dtype == np.float64:
        return Precision.DOUBLE
    raise ValueError(f"Unsupported dtype: {dtype}")
