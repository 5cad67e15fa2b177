import logging
import math
import numpy as np
from numpy import ndarray
from typing import Union, TYPE_CHECKING

from vecmath.tuples import Components, Tuple3, _component
from vecmath.precision import precision_of
from vecmath.quaternion import _as_array
from vecmath.kernels import (
    axis_angle_to_rotation,
    axis_angle_to_quaternion,
    rotation_to_axis_angle,
    quaternion_to_axis_angle,
)

if TYPE_CHECKING:
    from vecmath.quaternion import Quat4
    from vecmath.matrix import Matrix3, Matrix4
    from vecmath.vectors import Vector3

_LOGGER: logging.Logger = logging.getLogger(__name__)

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)


class AxisAngle4(Components):
    """
    A rotation of `angle` radians (right-hand rule) about the axis (x, y, z).

    The axis is stored as given and need not be unit length; every operation
    that interprets it normalizes it on read. Conversions from a matrix or a
    quaternion leave the axis unnormalized, so two axis-angles describing the
    same rotation may compare unequal. Use `normalize` or `canonical` before
    comparing.

    The default value (0, 0, 1, 0) is the zero rotation about +Z. A single
    quaternion argument is converted as by `from_quaternion`.

    Axis-angles carry no arithmetic; convert to a quaternion or matrix to
    compose rotations.
    """
    __slots__ = ()
    _size = 4
    x = _component(0, "axis x component")
    y = _component(1, "axis y component")
    z = _component(2, "axis z component")
    angle = _component(3, "rotation angle in radians")

    def __init__(self, *args):
        if len(args) == 2:
            # (axis, angle)
            axis, angle = args
            axis = _as_array(axis, self._dtype)
            if axis.shape != (3,):
                raise ValueError(f"axis must have 3 components, got {axis.shape}")
            self.data = np.empty(4, dtype=self._dtype)
            self.data[:3] = axis
            self.data[3] = angle
            return
        from vecmath.quaternion import Quat4
        if len(args) == 1 and isinstance(args[0], Quat4):
            self.data = np.empty(4, dtype=self._dtype)
            self.set_from_quaternion(args[0])
            return
        super().__init__(*args)
        if not args:
            self.data[2] = 1.0

    @classmethod
    def from_matrix(cls, matrix: Union["Matrix3", "Matrix4", ndarray]) -> "AxisAngle4":
        """
        Create an axis-angle from a 3x3 rotation matrix or the upper-left of a
        4x4, assumed orthonormal. The axis is left unnormalized.
        """
        return cls().set_from_matrix(matrix)

    @classmethod
    def from_quaternion(cls, quaternion: Union["Quat4", ndarray]) -> "AxisAngle4":
        """
        Create an axis-angle from a quaternion. The axis is the quaternion's
        vector part (unnormalized), angle = 2 atan2(|v|, w).
        """
        return cls().set_from_quaternion(quaternion)

    @property
    def _precision(self):
        return precision_of(self._dtype)

    #########
    # Setters and getters
    #

    def set_from_matrix(self, matrix) -> "AxisAngle4":
        m = _as_array(matrix, self._dtype)
        if m.shape not in ((3, 3), (4, 4)):
            raise ValueError(f"matrix must be 3x3 or 4x4, got {m.shape}")
        values, degenerate = rotation_to_axis_angle(m, self._precision.axis_epsilon)
        if degenerate:
            _LOGGER.debug("rotation axis undefined (sin ~ 0), synthesized axis %s",
                          values[:3].tolist())
        self.data[:] = values
        return self

    def set_from_quaternion(self, quaternion) -> "AxisAngle4":
        q = _as_array(quaternion, self._dtype)
        if q.shape != (4,):
            raise ValueError(f"quaternion must have 4 components, got {q.shape}")
        values, degenerate = quaternion_to_axis_angle(q, self._precision.axis_epsilon)
        if degenerate:
            _LOGGER.debug("quaternion has no vector part, using the +Z axis")
        self.data[:] = values
        return self

    def set_axis_angle(self, axis: Union[Tuple3, ndarray], angle: float) -> "AxisAngle4":
        axis = _as_array(axis, self._dtype)
        if axis.shape != (3,):
            raise ValueError(f"axis must have 3 components, got {axis.shape}")
        self.data[:3] = axis
        self.data[3] = angle
        return self

    def get_axis(self) -> "Vector3":
        """The stored axis as a Vector3 of the same precision (not normalized)."""
        from vecmath.vectors import Vector3f, Vector3d
        vector3 = Vector3f if self._dtype == _F else Vector3d
        return vector3(self.data[:3])

    #########
    # Normalization
    #

    def normalize(self, *, inplace: bool = False) -> "AxisAngle4":
        """
        Rescale the axis to unit length; the angle is untouched. An axis too
        short to have a direction becomes (0, 0, 1).
        """
        values = self.data.copy()
        n = math.sqrt(float(values[:3] @ values[:3]))
        if n < self._precision.axis_epsilon:
            _LOGGER.debug("axis too short to normalize, using the +Z axis")
            values[:3] = (0.0, 0.0, 1.0)
        else:
            values[:3] = values[:3] / n
        return self._result(values, inplace)

    def canonical(self, *, inplace: bool = False) -> "AxisAngle4":
        """
        Unit axis and angle reduced to [0, pi], flipping the axis when the
        reduced angle is negative.
        """
        result = self.normalize()
        angle = math.remainder(float(result.data[3]), 2.0 * math.pi)
        if angle < 0.0:
            result.data[:3] = -result.data[:3]
            angle = -angle
        result.data[3] = angle
        return self._result(result.data, inplace)

    #########
    # Conversions
    #

    def to_matrix(self) -> "Matrix3":
        """Rodrigues' rotation matrix of this axis-angle, same precision."""
        from vecmath.matrix import Matrix3f, Matrix3d
        matrix3 = Matrix3f if self._dtype == _F else Matrix3d
        return matrix3.from_unchecked(
            axis_angle_to_rotation(self.data, self._precision.axis_epsilon))

    def to_quaternion(self) -> "Quat4":
        """The unit quaternion of this axis-angle, same precision."""
        from vecmath.quaternion import Quat4f, Quat4d
        quat4 = Quat4f if self._dtype == _F else Quat4d
        return quat4.from_unchecked(
            axis_angle_to_quaternion(self.data, self._precision.axis_epsilon))


class AxisAngle4f(AxisAngle4):
    __slots__ = ()
    _dtype = _F


class AxisAngle4d(AxisAngle4):
    __slots__ = ()
    _dtype = _D
