import math
import numpy as np

from vecmath.tuples import Tuple2, Tuple3, Tuple4

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)


class Vector:
    """Dot product, length and normalization shared by the vector types."""
    __slots__ = ()

    def dot(self, other) -> float:
        return float(self.data @ self._coerce(other))

    def length_squared(self) -> float:
        return float(self.data @ self.data)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalize(self, *, inplace: bool = False):
        """
        Scale to unit length. A zero vector has no direction and is returned
        unchanged (still zero).
        """
        n = self.length()
        if n == 0.0:
            return self._result(self.data.copy(), inplace)
        return self._result(self.data / n, inplace)

    def angle(self, other) -> float:
        """Angle in radians between this vector and `other`, in [0, pi]. NaN if either is zero."""
        other = self._coerce(other)
        denom = self.length() * math.sqrt(float(other @ other))
        if denom == 0.0:
            return math.nan
        c = float(self.data @ other) / denom
        return math.acos(min(1.0, max(-1.0, c)))


class Vector2(Vector, Tuple2):
    __slots__ = ()


class Vector3(Vector, Tuple3):
    __slots__ = ()

    def cross(self, other, *, inplace: bool = False) -> "Vector3":
        """Right-handed cross product self x other."""
        return self._result(np.cross(self.data, self._coerce(other)), inplace)


class Vector4(Vector, Tuple4):
    __slots__ = ()


class Vector2f(Vector2):
    __slots__ = ()
    _dtype = _F


class Vector2d(Vector2):
    __slots__ = ()
    _dtype = _D


class Vector3f(Vector3):
    __slots__ = ()
    _dtype = _F


class Vector3d(Vector3):
    __slots__ = ()
    _dtype = _D


class Vector4f(Vector4):
    __slots__ = ()
    _dtype = _F


class Vector4d(Vector4):
    __slots__ = ()
    _dtype = _D
