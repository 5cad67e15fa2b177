"""
vecmath: fixed-size 3D graphics math (tuples, points, vectors, colors,
quaternions, axis-angles and 3x3 / 4x4 matrices) in single and double
precision, backed by numpy arrays and numba kernels.
"""

__version__ = version = "0.1.0"

# exposing the public API of the package
from vecmath.exceptions import SingularMatrixError
from vecmath.precision import Precision, precision_of
from vecmath.tuples import Tuple, Tuple2, Tuple3, Tuple4
from vecmath.points import (
    Point2f, Point2d,
    Point3f, Point3d,
    Point4f, Point4d,
)
from vecmath.vectors import (
    Vector2f, Vector2d,
    Vector3f, Vector3d,
    Vector4f, Vector4d,
)
from vecmath.colors import (
    Color3f, Color3d,
    Color4f, Color4d,
    TexCoord2f, TexCoord2d,
    TexCoord3f, TexCoord3d,
)
from vecmath.quaternion import Quat4, Quat4f, Quat4d
from vecmath.axis_angle import AxisAngle4, AxisAngle4f, AxisAngle4d
from vecmath.matrix import (
    Matrix,
    Matrix3, Matrix3f, Matrix3d,
    Matrix4, Matrix4f, Matrix4d,
)

__all__ = [
    "SingularMatrixError",
    "Precision",
    "precision_of",
    "Tuple",
    "Tuple2",
    "Tuple3",
    "Tuple4",
    "Point2f",
    "Point2d",
    "Point3f",
    "Point3d",
    "Point4f",
    "Point4d",
    "Vector2f",
    "Vector2d",
    "Vector3f",
    "Vector3d",
    "Vector4f",
    "Vector4d",
    "Color3f",
    "Color3d",
    "Color4f",
    "Color4d",
    "TexCoord2f",
    "TexCoord2d",
    "TexCoord3f",
    "TexCoord3d",
    "Quat4",
    "Quat4f",
    "Quat4d",
    "AxisAngle4",
    "AxisAngle4f",
    "AxisAngle4d",
    "Matrix",
    "Matrix3",
    "Matrix3f",
    "Matrix3d",
    "Matrix4",
    "Matrix4f",
    "Matrix4d",
]
