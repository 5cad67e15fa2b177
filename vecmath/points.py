import numpy as np

from vecmath.tuples import Tuple, Tuple2, Tuple3, Tuple4

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)


class Point:
    """Distance norms shared by the point types."""
    __slots__ = ()

    def distance_squared(self, other) -> float:
        d = self.data.astype(np.float64) - self._coerce(other).astype(np.float64)
        return float(d @ d)

    def distance(self, other) -> float:
        """Euclidean distance."""
        return float(np.sqrt(self.distance_squared(other)))

    def distance_l1(self, other) -> float:
        """Manhattan distance: sum of the absolute component differences."""
        return float(np.sum(np.abs(self.data - self._coerce(other))))

    def distance_linf(self, other) -> float:
        """Chebyshev distance: the largest absolute component difference."""
        return float(np.max(np.abs(self.data - self._coerce(other))))


class Point2(Point, Tuple2):
    __slots__ = ()


class Point3(Point, Tuple3):
    __slots__ = ()


class Point4(Point, Tuple4):
    __slots__ = ()

    def project(self) -> "Point3":
        """Divide x, y, z by w, giving the Cartesian point of this homogeneous one."""
        point3 = Point3f if self._dtype == _F else Point3d
        return point3(self.data[:3] / self.data[3])


class Point2f(Point2):
    __slots__ = ()
    _dtype = _F


class Point2d(Point2):
    __slots__ = ()
    _dtype = _D


class Point3f(Point3):
    __slots__ = ()
    _dtype = _F


class Point3d(Point3):
    __slots__ = ()
    _dtype = _D


class Point4f(Point4):
    __slots__ = ()
    _dtype = _F


class Point4d(Point4):
    __slots__ = ()
    _dtype = _D
