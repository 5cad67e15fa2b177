import logging
import math
import numpy as np
from numpy import asarray as np_asarray
from numpy import ndarray
from typing import Union, TYPE_CHECKING

from vecmath.tuples import Components, Tuple, Tuple3, Tuple4
from vecmath.precision import precision_of
from vecmath.kernels import (
    quaternion_multiply,
    quaternion_inverse,
    quaternion_normalize,
    quaternion_slerp,
    quaternion_rotate,
    quaternion_to_rotation,
    rotation_to_quaternion,
    axis_angle_to_quaternion,
    quaternion_to_axis_angle,
)

if TYPE_CHECKING:
    from vecmath.axis_angle import AxisAngle4
    from vecmath.matrix import Matrix3, Matrix4

_LOGGER: logging.Logger = logging.getLogger(__name__)

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)


class Quat4(Tuple4):
    """
    A quaternion (x, y, z, w) with w the scalar part.

    Rotation quaternions are unit length. Multiplication, conjugation and the
    tuple arithmetic do not enforce that; `normalize` does. `q` and `-q`
    represent the same rotation but compare unequal; compare `canonical()`
    forms when rotational equality is wanted.

    Composition follows the Hamilton product: `q1 * q2` rotates by `q2` first
    and then by `q1`, matching `q1.to_matrix() @ q2.to_matrix()`.

    A single axis-angle argument is converted as by `from_axis_angle`.
    """
    __slots__ = ()

    def __init__(self, *args):
        from vecmath.axis_angle import AxisAngle4
        if len(args) == 1 and isinstance(args[0], AxisAngle4):
            self.data = np.empty(4, dtype=self._dtype)
            self.set_from_axis_angle(args[0])
            return
        super().__init__(*args)
        if not args:
            self.data[3] = 1.0

    @classmethod
    def identity(cls) -> "Quat4":
        return cls()

    @classmethod
    def from_axis_angle(cls, axis_angle: Union["AxisAngle4", Tuple, ndarray]) -> "Quat4":
        """
        Create a quaternion from an axis-angle (x, y, z, angle).

        The axis is normalized; an axis shorter than the precision's epsilon
        gives the identity.
        """
        return cls().set_from_axis_angle(axis_angle)

    @classmethod
    def from_matrix(cls, matrix: Union["Matrix3", "Matrix4", ndarray]) -> "Quat4":
        """
        Create a quaternion from a 3x3 rotation matrix or the upper-left 3x3 of
        a 4x4. The matrix is assumed orthonormal; use `Matrix3.to_quaternion`
        to strip scale first.
        """
        return cls().set_from_matrix(matrix)

    @property
    def _precision(self):
        return precision_of(self._dtype)

    #########
    # Setters
    #

    def set_from_axis_angle(self, axis_angle) -> "Quat4":
        """Overwrite this quaternion with the rotation of an axis-angle."""
        aa = _as_array(axis_angle, self._dtype)
        if aa.shape != (4,):
            raise ValueError(f"axis-angle must have 4 components, got {aa.shape}")
        self.data[:] = axis_angle_to_quaternion(aa, self._precision.axis_epsilon)
        return self

    def set_from_matrix(self, matrix) -> "Quat4":
        """Overwrite this quaternion with the rotation of an orthonormal matrix."""
        m = _as_array(matrix, self._dtype)
        if m.shape not in ((3, 3), (4, 4)):
            raise ValueError(f"matrix must be 3x3 or 4x4, got {m.shape}")
        self.data[:] = rotation_to_quaternion(m)
        return self

    #########
    # Quaternion algebra
    #

    def multiply(self, other: "Quat4", *, inplace: bool = False) -> "Quat4":
        """Hamilton product self * other (apply other, then self)."""
        return self._result(quaternion_multiply(self.data, self._coerce(other)), inplace)

    def mul_inverse(self, other: "Quat4", *, inplace: bool = False) -> "Quat4":
        """self * other⁻¹"""
        inv = quaternion_inverse(self._coerce(other))
        return self._result(quaternion_multiply(self.data, inv), inplace)

    def conjugate(self, *, inplace: bool = False) -> "Quat4":
        values = self.data.copy()
        values[:3] = -values[:3]
        return self._result(values, inplace)

    def inverse(self, *, inplace: bool = False) -> "Quat4":
        """Conjugate divided by the squared norm. A zero quaternion gives non-finite components."""
        return self._result(quaternion_inverse(self.data), inplace)

    def norm_squared(self) -> float:
        return float(self.data @ self.data)

    def norm(self) -> float:
        return math.sqrt(self.norm_squared())

    def normalize(self, *, inplace: bool = False) -> "Quat4":
        """
        Divide by the norm. A zero quaternion becomes the identity (0, 0, 0, 1).
        A quaternion already of unit norm (within the precision's tolerance)
        is returned unchanged, so normalizing is idempotent bit for bit.
        """
        values, degenerate = quaternion_normalize(self.data, self._precision.unit_tolerance)
        if degenerate:
            _LOGGER.debug("zero-norm quaternion normalized to identity")
        return self._result(values, inplace)

    def interpolate(self, other: "Quat4", alpha: float, *, inplace: bool = False) -> "Quat4":
        """
        Spherical linear interpolation along the shortest arc from self
        (alpha=0) to other (alpha=1). Both are expected to be unit length.
        """
        values = quaternion_slerp(self.data, self._coerce(other), float(alpha),
                                  self._precision.slerp_epsilon)
        return self._result(values, inplace)

    def canonical(self, *, inplace: bool = False) -> "Quat4":
        """The equivalent quaternion on the w >= 0 hemisphere."""
        if self.data[3] < 0.0:
            return self._result(-self.data, inplace)
        return self._result(self.data.copy(), inplace)

    def angle_to(self, other: "Quat4") -> float:
        """Rotation angle in radians, in [0, pi], taking self to other."""
        a = quaternion_normalize(self.data, self._precision.unit_tolerance)[0]
        b = quaternion_normalize(self._coerce(other), self._precision.unit_tolerance)[0]
        d = min(1.0, abs(float(a @ b)))
        return 2.0 * math.acos(d)

    def rotate(self, vector: Union[Tuple3, ndarray]) -> Union[Tuple3, ndarray]:
        """
        Rotate a 3-vector: the vector part of self · (0, v) · self⁻¹.

        A Tuple3 comes back as a new instance of its own class and precision;
        anything else comes back as an ndarray of this quaternion's precision.
        """
        if isinstance(vector, Tuple3):
            q = np_asarray(self.data, dtype=vector._dtype)
            return vector.from_unchecked(quaternion_rotate(q, vector.data))
        v = np_asarray(vector, dtype=self._dtype)
        if v.shape != (3,):
            raise ValueError(f"vector must have 3 components, got {v.shape}")
        return quaternion_rotate(self.data, v)

    #########
    # Conversions
    #

    def to_matrix(self) -> "Matrix3":
        """The 3x3 rotation matrix of this (unit) quaternion, same precision."""
        from vecmath.matrix import Matrix3f, Matrix3d
        matrix3 = Matrix3f if self._dtype == _F else Matrix3d
        return matrix3.from_unchecked(quaternion_to_rotation(self.data))

    def to_axis_angle(self) -> "AxisAngle4":
        """
        The axis-angle of this quaternion, same precision. The axis is the
        unnormalized vector part; the angle is in [0, 2*pi].
        """
        from vecmath.axis_angle import AxisAngle4f, AxisAngle4d
        axis_angle = AxisAngle4f if self._dtype == _F else AxisAngle4d
        return axis_angle.from_quaternion(self)

    #########
    # Dunder methods
    #

    def __mul__(self, other):
        """Hamilton product with another quaternion, or scaling by a number."""
        if isinstance(other, Quat4):
            return self.multiply(other)
        return super().__mul__(other)

    def __rmul__(self, other):
        if isinstance(other, Quat4):
            return NotImplemented
        return super().__mul__(other)


class Quat4f(Quat4):
    __slots__ = ()
    _dtype = _F


class Quat4d(Quat4):
    __slots__ = ()
    _dtype = _D


def _as_array(value, dtype) -> ndarray:
    """Pull the storage out of a vecmath value (or accept an array) at `dtype`."""
    if isinstance(value, Components):
        value = value.data
    else:
        value = getattr(value, "matrix", value)
    return np_asarray(value, dtype=dtype)
