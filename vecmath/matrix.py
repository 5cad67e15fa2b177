import logging
import numpy as np
from numpy import asarray as np_asarray
from numpy import ndarray
from typing import Union, Optional, List

from vecmath.exceptions import SingularMatrixError
from vecmath.precision import precision_of
from vecmath.tuples import Tuple, Tuple3, Tuple4
from vecmath.points import Point3
from vecmath.vectors import Vector3f, Vector3d
from vecmath.quaternion import Quat4, Quat4f, Quat4d
from vecmath.axis_angle import AxisAngle4, AxisAngle4f, AxisAngle4d
from vecmath.utils import compose_matrix, hash_components, format_components
from vecmath.kernels import (
    det3,
    det4,
    inv3,
    is_affine,
    inv4_affine,
    inv4_general,
    polar_decompose,
    orthonormalize_cp,
    quaternion_to_rotation,
    rotation_to_quaternion,
    axis_angle_to_rotation,
    rotation_to_axis_angle,
    rotation_x,
    rotation_y,
    rotation_z,
)

_LOGGER: logging.Logger = logging.getLogger(__name__)

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)

ROTATION = Union[Quat4, AxisAngle4, "Matrix3", ndarray]


def _rotation_block(rotation: ROTATION, dtype: np.dtype) -> ndarray:
    """The 3x3 rotation matrix of any rotation representation, at `dtype`."""
    eps = precision_of(dtype).axis_epsilon
    if isinstance(rotation, Quat4):
        return quaternion_to_rotation(np_asarray(rotation.data, dtype=dtype))
    if isinstance(rotation, AxisAngle4):
        return axis_angle_to_rotation(np_asarray(rotation.data, dtype=dtype), eps)
    if isinstance(rotation, Matrix):
        return np_asarray(rotation.matrix[:3, :3], dtype=dtype)
    R = np_asarray(rotation, dtype=dtype)
    if R.shape != (3, 3):
        raise ValueError(f"Rotation must be a 3x3 matrix, got {R.shape}")
    return R


def _element(i: int, j: int) -> property:
    def getter(self): return self.matrix[i, j]
    def setter(self, value): self.matrix[i, j] = value
    return property(getter, setter, doc=f"element at row {i}, column {j}")


class Matrix:
    """
    A dense square matrix of fixed size (`_size`) and precision (`_dtype`).

    Elements are exposed as `m00`, `m01`, ... (row, column) and through the
    `matrix` ndarray. Every operation returns a new matrix unless
    `inplace=True`, in which case the receiver is overwritten and returned.
    Results are computed into a temporary first, so an operand may be the
    receiver itself.

    Attributes:
        matrix (ndarray): the (n, n) element array.
    """
    __slots__ = ("matrix",)
    _size: int = 0
    _dtype: np.dtype = _D

    def __init__(self, *args):
        n = self._size
        if not args:
            self.matrix = np.eye(n, dtype=self._dtype)
            return
        if len(args) == n * n:
            values = np.array(args, dtype=self._dtype)
        elif len(args) == 1:
            values = args[0]
            if isinstance(values, Matrix):
                values = values.matrix
            values = np_asarray(values, dtype=self._dtype)
        else:
            raise ValueError(
                f"{self.__class__.__name__} takes {n * n} elements, got {len(args)}")
        if values.shape == (n * n,):
            values = values.reshape(n, n)
        if values.shape != (n, n):
            raise ValueError(f"Invalid matrix shape: {values.shape}")
        self.matrix = values.copy()

    @classmethod
    def identity(cls) -> "Matrix":
        return cls()

    @classmethod
    def zeros(cls) -> "Matrix":
        return cls.from_unchecked(np.zeros((cls._size, cls._size), dtype=cls._dtype))

    @classmethod
    def from_unchecked(cls, matrix: ndarray) -> "Matrix":
        """Wrap an array without copying or checking it. Useful when the shape and dtype are known to be right."""
        instance = object.__new__(cls)
        instance.matrix = np_asarray(matrix, dtype=cls._dtype)
        return instance

    @classmethod
    def from_rows(cls, *rows) -> "Matrix":
        return cls(np_asarray(rows, dtype=cls._dtype))

    @classmethod
    def from_columns(cls, *columns) -> "Matrix":
        return cls(np_asarray(columns, dtype=cls._dtype).T)

    @classmethod
    def rot_x(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about +X."""
        return cls._from_rotation_block(rotation_x(angle, np.empty(0, dtype=cls._dtype)))

    @classmethod
    def rot_y(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about +Y."""
        return cls._from_rotation_block(rotation_y(angle, np.empty(0, dtype=cls._dtype)))

    @classmethod
    def rot_z(cls, angle: float) -> "Matrix":
        """Rotation by angle (radians) about +Z."""
        return cls._from_rotation_block(rotation_z(angle, np.empty(0, dtype=cls._dtype)))

    @classmethod
    def _from_rotation_block(cls, R: ndarray) -> "Matrix":
        instance = cls()
        instance.matrix[:3, :3] = R
        return instance

    @property
    def _precision(self):
        return precision_of(self._dtype)

    def _coerce(self, other: Union["Matrix", ndarray]) -> ndarray:
        if isinstance(other, Matrix):
            other = other.matrix
        other = np_asarray(other, dtype=self._dtype)
        if other.shape != self.matrix.shape:
            raise ValueError(f"Invalid matrix shape: {other.shape}")
        return other

    def _result(self, values: ndarray, inplace: bool) -> "Matrix":
        if inplace:
            self.matrix[:] = values
            return self
        return self.from_unchecked(values)

    #########
    # Element access
    #

    def get_row(self, i: int) -> ndarray:
        return self.matrix[i, :].copy()

    def get_column(self, j: int) -> ndarray:
        return self.matrix[:, j].copy()

    def set_row(self, i: int, values) -> "Matrix":
        self.matrix[i, :] = values
        return self

    def set_column(self, j: int, values) -> "Matrix":
        self.matrix[:, j] = values
        return self

    def set_identity(self) -> "Matrix":
        self.matrix[:] = np.eye(self._size, dtype=self._dtype)
        return self

    def set_zero(self) -> "Matrix":
        self.matrix[:] = 0.0
        return self

    def to_list(self) -> List[float]:
        """Elements in row-major order as a list of floats."""
        return self.matrix.flatten().tolist()

    def copy(self) -> "Matrix":
        return self.from_unchecked(self.matrix.copy())

    #########
    # Arithmetic
    #

    def add(self, other: Union["Matrix", float], *, inplace: bool = False) -> "Matrix":
        """Element-wise sum with another matrix, or add a scalar to every element."""
        if isinstance(other, (int, float, np.number)):
            return self._result(self.matrix + other, inplace)
        return self._result(self.matrix + self._coerce(other), inplace)

    def sub(self, other: "Matrix", *, inplace: bool = False) -> "Matrix":
        return self._result(self.matrix - self._coerce(other), inplace)

    def negate(self, *, inplace: bool = False) -> "Matrix":
        return self._result(-self.matrix, inplace)

    def mul(self, other: Union["Matrix", float], *, inplace: bool = False) -> "Matrix":
        """
        Matrix product self @ other (apply other, then self), or scale every
        element when `other` is a number.
        """
        if isinstance(other, (int, float, np.number)):
            return self._result(self.matrix * other, inplace)
        return self._result(self.matrix @ self._coerce(other), inplace)

    def transpose(self, *, inplace: bool = False) -> "Matrix":
        return self._result(self.matrix.T.copy(), inplace)

    def epsilon_equals(self, other: "Matrix", epsilon: float) -> bool:
        """True if every element differs from `other` by at most epsilon."""
        return bool(np.all(np.abs(self.matrix - self._coerce(other)) <= epsilon))

    #########
    # Rotation and scale via polar decomposition
    #

    def _polar(self):
        R, scale, reflected = polar_decompose(self.matrix, self._precision.singular_threshold)
        if reflected:
            _LOGGER.debug("reflection folded into the last scale factor of %s",
                          self.__class__.__name__)
        return R, scale

    def get_scale(self) -> float:
        """
        The uniform scale of the rotational part: its largest singular value.

        Raises:
            SingularMatrixError: if the rotational part is singular.
        """
        _, scale = self._polar()
        return float(np.max(np.abs(scale)))

    def get_scale_vector(self) -> ndarray:
        """
        The singular values of the rotational part (a reflection shows up as a
        negative last value).

        Raises:
            SingularMatrixError: if the rotational part is singular.
        """
        _, scale = self._polar()
        return scale

    def set_scale(self, scale: float) -> "Matrix":
        """
        Replace the scale of the rotational part with a uniform `scale`,
        keeping its rotation.

        Raises:
            SingularMatrixError: if the rotational part is singular.
        """
        R, _ = self._polar()
        self.matrix[:3, :3] = R * scale
        return self

    def set_rotation(self, rotation: ROTATION) -> "Matrix":
        """
        Replace the rotation of the rotational part, keeping its per-axis scale
        (and, for a 4x4, its translation and bottom row).

        Raises:
            SingularMatrixError: if the current rotational part is singular.
        """
        _, scale = self._polar()
        self.matrix[:3, :3] = _rotation_block(rotation, self._dtype) * scale
        return self

    def to_quaternion(self) -> "Quat4":
        """
        The quaternion of the pure rotation in this matrix. Scale is removed by
        polar decomposition first.

        Raises:
            SingularMatrixError: if the rotational part is singular.
        """
        R, _ = self._polar()
        quat4 = Quat4f if self._dtype == _F else Quat4d
        return quat4.from_unchecked(rotation_to_quaternion(R))

    def to_axis_angle(self) -> "AxisAngle4":
        """
        The axis-angle of the pure rotation in this matrix (axis unnormalized).
        Scale is removed by polar decomposition first.

        Raises:
            SingularMatrixError: if the rotational part is singular.
        """
        R, _ = self._polar()
        axis_angle = AxisAngle4f if self._dtype == _F else AxisAngle4d
        return axis_angle.from_matrix(R)

    #########
    # Dunder methods
    #

    def __matmul__(self, other):
        """
        Compose with another matrix (other is applied first) or transform a
        tuple or array.
        """
        if isinstance(other, Matrix):
            return self.mul(other)
        if isinstance(other, (Tuple, ndarray, list, tuple)):
            return self.transform(other)
        return NotImplemented

    def __mul__(self, other):
        """
        Alias for the @ operator, or element scaling by a number.
        """
        if isinstance(other, (int, float, np.number)):
            return self.mul(other)
        return self.__matmul__(other)

    def __rmul__(self, other):
        if isinstance(other, (int, float, np.number)):
            return self.mul(other)
        return NotImplemented

    def __add__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.sub(other)

    def __neg__(self):
        return self.negate()

    def __eq__(self, other: object) -> bool:
        """
        True if `other` is the same class and the elements are bitwise equal.
        """
        if other.__class__ is not self.__class__:
            return False
        return self.matrix.tobytes() == other.matrix.tobytes()

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash_components(self.matrix)

    def __str__(self) -> str:
        """One parenthesized row per line."""
        return "\n".join(format_components(row) for row in self.matrix)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        rows = ", ".join(format_components(row) for row in self.matrix)
        return f"{cls}({rows})"

    def __copy__(self) -> "Matrix":
        return self.copy()

    def __deepcopy__(self, memo) -> "Matrix":
        # matrices are numeric, so shallow vs deep is effectively the same here
        return self.copy()

    def __reduce__(self):
        return (self.__class__, (self.matrix.copy(),))


class Matrix3(Matrix):
    """A 3x3 matrix. Default value is the identity."""
    __slots__ = ()
    _size = 3

    @classmethod
    def from_rotation(cls, rotation: ROTATION, scale: float = 1.0) -> "Matrix3":
        """R * scale for a quaternion, axis-angle or 3x3 rotation."""
        return cls.from_unchecked(_rotation_block(rotation, cls._dtype) * scale)

    def set(self, rotation: ROTATION) -> "Matrix3":
        """Overwrite with the rotation matrix of a quaternion, axis-angle or 3x3."""
        self.matrix[:] = _rotation_block(rotation, self._dtype)
        return self

    def determinant(self) -> float:
        return float(det3(self.matrix))

    def invert(self, *, inplace: bool = False) -> "Matrix3":
        """
        Inverse by cofactors over the determinant.

        Raises:
            SingularMatrixError: if |det| is below the precision's threshold.
        """
        try:
            inv = inv3(self.matrix, self._precision.singular_threshold)
        except SingularMatrixError:
            _LOGGER.debug("cannot invert singular %s", self.__class__.__name__)
            raise
        return self._result(inv, inplace)

    def normalize(self, *, inplace: bool = False) -> "Matrix3":
        """
        Replace with the nearest proper rotation (R = U Vᵀ of the SVD),
        dropping scale.

        Raises:
            SingularMatrixError: if the matrix is singular.
        """
        R, _ = self._polar()
        return self._result(R, inplace)

    def normalize_cp(self, *, inplace: bool = False) -> "Matrix3":
        """
        Orthonormalize by cross products: unit first column, second column
        made orthogonal to it, third column their cross product.
        """
        return self._result(orthonormalize_cp(self.matrix), inplace)

    def transform(self, t: Union[Tuple3, ndarray]) -> Union[Tuple3, ndarray]:
        """M @ t. A Tuple3 comes back as a new instance of its own class."""
        if isinstance(t, Tuple3):
            values = np_asarray(self.matrix, dtype=t._dtype) @ t.data
            return t.from_unchecked(values)
        v = np_asarray(t, dtype=self._dtype)
        if v.shape != (3,):
            raise ValueError(f"Invalid vector shape: {v.shape}")
        return self.matrix @ v


class Matrix4(Matrix):
    """
    A 4x4 matrix, conceptually [R*s t; 0 0 0 1]. Default value is the identity.
    """
    __slots__ = ()
    _size = 4

    @classmethod
    def from_rotation(
        cls,
        rotation: ROTATION,
        translation: Optional[Union[Tuple3, ndarray, List]] = None,
        scale: float = 1.0,
    ) -> "Matrix4":
        """
        Assemble [R*scale t; 0 0 0 1] from a quaternion, axis-angle or 3x3
        rotation, a translation (default zero) and a uniform scale.
        """
        if translation is None:
            t = np.zeros(3, dtype=cls._dtype)
        else:
            t = _vector3(translation, cls._dtype)
        return cls.from_unchecked(compose_matrix(_rotation_block(rotation, cls._dtype), t, scale))

    def set(self, rotation: ROTATION) -> "Matrix4":
        """
        Overwrite with the rotation of a quaternion, axis-angle or 3x3, zero
        translation and unit scale.
        """
        self.matrix[:] = compose_matrix(_rotation_block(rotation, self._dtype),
                                        np.zeros(3, dtype=self._dtype), 1.0)
        return self

    def determinant(self) -> float:
        return float(det4(self.matrix))

    def invert(self, *, inplace: bool = False) -> "Matrix4":
        """
        Inverse of this matrix. An affine matrix (bottom row exactly 0 0 0 1)
        inverts its 3x3 part and maps the translation through it; any other
        matrix goes through Gauss-Jordan elimination with partial pivoting.

        Raises:
            SingularMatrixError: if |det| is below the precision's threshold.
        """
        tol = self._precision.singular_threshold
        try:
            if is_affine(self.matrix):
                inv = inv4_affine(self.matrix, tol)
            else:
                inv = inv4_general(self.matrix, tol)
        except SingularMatrixError:
            _LOGGER.debug("cannot invert singular %s", self.__class__.__name__)
            raise
        return self._result(inv, inplace)

    #########
    # Translation and rotational part
    #

    def get_translation(self) -> "Tuple3":
        vector3 = Vector3f if self._dtype == _F else Vector3d
        return vector3(self.matrix[:3, 3])

    def set_translation(self, translation: Union[Tuple3, ndarray, List]) -> "Matrix4":
        self.matrix[:3, 3] = _vector3(translation, self._dtype)
        return self

    def get_rotation(self) -> "Matrix3":
        """
        The pure rotation of the upper-left 3x3 (scale removed by polar
        decomposition).

        Raises:
            SingularMatrixError: if the upper-left 3x3 is singular.
        """
        R, _ = self._polar()
        matrix3 = Matrix3f if self._dtype == _F else Matrix3d
        return matrix3.from_unchecked(R)

    def get_rotation_scale(self) -> "Matrix3":
        """The raw upper-left 3x3 (rotation times scale)."""
        matrix3 = Matrix3f if self._dtype == _F else Matrix3d
        return matrix3(self.matrix[:3, :3])

    def set_rotation_scale(self, m: Union["Matrix3", ndarray]) -> "Matrix4":
        """Overwrite the upper-left 3x3, leaving translation and bottom row alone."""
        block = m.matrix if isinstance(m, Matrix) else m
        block = np_asarray(block, dtype=self._dtype)
        if block.shape != (3, 3):
            raise ValueError(f"Invalid matrix shape: {block.shape}")
        self.matrix[:3, :3] = block
        return self

    def transform(self, t: Union[Tuple, ndarray]) -> Union[Tuple, ndarray]:
        """
        Transform a tuple or array:

        * Point3 (or a length-3 array): R*s @ p + t, the bottom row ignored.
        * other Tuple3 (vectors, normals): R*s @ v, no translation.
        * Tuple4 (or a length-4 array): the full 4x4 product.

        Tuples come back as new instances of their own class.
        """
        if isinstance(t, Tuple):
            M = np_asarray(self.matrix, dtype=t._dtype)
            if isinstance(t, Point3):
                return t.from_unchecked(M[:3, :3] @ t.data + M[:3, 3])
            if isinstance(t, Tuple3):
                return t.from_unchecked(M[:3, :3] @ t.data)
            if isinstance(t, Tuple4):
                return t.from_unchecked(M @ t.data)
            raise ValueError(f"Cannot transform a {t.__class__.__name__}")
        v = np_asarray(t, dtype=self._dtype)
        if v.shape == (3,):
            return self.matrix[:3, :3] @ v + self.matrix[:3, 3]
        if v.shape == (4,):
            return self.matrix @ v
        raise ValueError(f"Invalid vector shape: {v.shape}")


class Matrix3f(Matrix3):
    __slots__ = ()
    _dtype = _F


class Matrix3d(Matrix3):
    __slots__ = ()
    _dtype = _D


class Matrix4f(Matrix4):
    __slots__ = ()
    _dtype = _F


class Matrix4d(Matrix4):
    __slots__ = ()
    _dtype = _D


for _i in range(3):
    for _j in range(3):
        setattr(Matrix3, f"m{_i}{_j}", _element(_i, _j))
for _i in range(4):
    for _j in range(4):
        setattr(Matrix4, f"m{_i}{_j}", _element(_i, _j))
del _i, _j


def _vector3(value, dtype) -> ndarray:
    if isinstance(value, Tuple):
        value = value.data
    value = np_asarray(value, dtype=dtype)
    if value.shape != (3,):
        raise ValueError(f"Translation must be a 3D vector, got {value.shape}")
    return value
