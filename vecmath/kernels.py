# kernels.py
import math
import numpy as np
from numpy import ndarray
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings

from vecmath.exceptions import SingularMatrixError

warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


# -------------------------------------------------------------------------
# determinants and inverses
# -------------------------------------------------------------------------
@njit(fastmath=True, inline='always', cache=True)
def det3(M):
    """Determinant of a 3 x 3 (faster than np.linalg.det for tiny mats)."""
    return (
        M[0, 0] * (M[1, 1] * M[2, 2] - M[1, 2] * M[2, 1])
        - M[0, 1] * (M[1, 0] * M[2, 2] - M[1, 2] * M[2, 0])
        + M[0, 2] * (M[1, 0] * M[2, 1] - M[1, 1] * M[2, 0])
    )


@njit(fastmath=True, cache=True)
def det4(m):
    """
    Determinant of a 4x4 matrix using the 12-subfactor scheme
    (fewer multiplies than Laplace expansion; zero temporaries).

    Parameters
    ----------
    m : (4,4) float array

    Returns
    -------
    float
        det(m)
    """
    # sub-factors from the first two rows
    s0 = m[0, 0] * m[1, 1] - m[1, 0] * m[0, 1]
    s1 = m[0, 0] * m[1, 2] - m[1, 0] * m[0, 2]
    s2 = m[0, 0] * m[1, 3] - m[1, 0] * m[0, 3]
    s3 = m[0, 1] * m[1, 2] - m[1, 1] * m[0, 2]
    s4 = m[0, 1] * m[1, 3] - m[1, 1] * m[0, 3]
    s5 = m[0, 2] * m[1, 3] - m[1, 2] * m[0, 3]

    # complementary sub-factors from the last two rows
    c5 = m[2, 2] * m[3, 3] - m[3, 2] * m[2, 3]
    c4 = m[2, 1] * m[3, 3] - m[3, 1] * m[2, 3]
    c3 = m[2, 1] * m[3, 2] - m[3, 1] * m[2, 2]
    c2 = m[2, 0] * m[3, 3] - m[3, 0] * m[2, 3]
    c1 = m[2, 0] * m[3, 2] - m[3, 0] * m[2, 2]
    c0 = m[2, 0] * m[3, 1] - m[3, 0] * m[2, 1]

    return (
        s0 * c5 - s1 * c4 + s2 * c3
        + s3 * c2 - s4 * c1 + s5 * c0
    )


@njit(cache=True)
def inv3(M, tol):
    """
    Analytic inverse of a 3 x 3 by cofactors.
    Raises SingularMatrixError if |det| < tol.
    """
    d = det3(M)
    if abs(d) < tol:
        raise SingularMatrixError("Matrix is singular and cannot be inverted")
    invd = 1.0 / d
    out = np.empty((3, 3), dtype=M.dtype)
    out[0, 0] = (M[1, 1] * M[2, 2] - M[1, 2] * M[2, 1]) * invd
    out[0, 1] = -(M[0, 1] * M[2, 2] - M[0, 2] * M[2, 1]) * invd
    out[0, 2] = (M[0, 1] * M[1, 2] - M[0, 2] * M[1, 1]) * invd
    out[1, 0] = -(M[1, 0] * M[2, 2] - M[1, 2] * M[2, 0]) * invd
    out[1, 1] = (M[0, 0] * M[2, 2] - M[0, 2] * M[2, 0]) * invd
    out[1, 2] = -(M[0, 0] * M[1, 2] - M[0, 2] * M[1, 0]) * invd
    out[2, 0] = (M[1, 0] * M[2, 1] - M[1, 1] * M[2, 0]) * invd
    out[2, 1] = -(M[0, 0] * M[2, 1] - M[0, 1] * M[2, 0]) * invd
    out[2, 2] = (M[0, 0] * M[1, 1] - M[0, 1] * M[1, 0]) * invd
    # clear signed zeros
    out += 0.0
    return out


@njit(cache=True)
def is_affine(m):
    """True when the bottom row of a 4x4 is exactly [0, 0, 0, 1]."""
    return m[3, 0] == 0.0 and m[3, 1] == 0.0 and m[3, 2] == 0.0 and m[3, 3] == 1.0


@njit(cache=True)
def inv4_affine(m, tol):
    """
    Inverse of an affine 4x4 [A t; 0 1] as [A⁻¹  -A⁻¹t; 0 1].
    Raises SingularMatrixError if |det(A)| < tol.
    """
    Ai = inv3(m, tol)
    tx, ty, tz = m[0, 3], m[1, 3], m[2, 3]

    out = np.zeros((4, 4), dtype=m.dtype)
    for i in range(3):
        out[i, 0] = Ai[i, 0]
        out[i, 1] = Ai[i, 1]
        out[i, 2] = Ai[i, 2]
        out[i, 3] = -(Ai[i, 0] * tx + Ai[i, 1] * ty + Ai[i, 2] * tz) + 0.0
    out[3, 3] = 1.0
    return out


@njit(cache=True)
def inv4_general(m, tol):
    """
    Inverse of an arbitrary 4x4 by Gauss-Jordan elimination with partial
    pivoting. The determinant is accumulated from the pivots; if its
    magnitude is below tol a SingularMatrixError is raised.
    """
    a = m.copy()
    out = np.zeros((4, 4), dtype=m.dtype)
    for i in range(4):
        out[i, i] = 1.0

    det = 1.0
    for col in range(4):
        # pick the row with the largest magnitude in this column
        pivot = col
        best = abs(a[col, col])
        for r in range(col + 1, 4):
            v = abs(a[r, col])
            if v > best:
                best = v
                pivot = r
        if best == 0.0:
            raise SingularMatrixError("Matrix is singular and cannot be inverted")

        if pivot != col:
            for k in range(4):
                tmp = a[col, k]
                a[col, k] = a[pivot, k]
                a[pivot, k] = tmp
                tmp = out[col, k]
                out[col, k] = out[pivot, k]
                out[pivot, k] = tmp
            det = -det

        p = a[col, col]
        det *= p
        for k in range(4):
            a[col, k] /= p
            out[col, k] /= p

        for r in range(4):
            if r != col:
                f = a[r, col]
                if f != 0.0:
                    for k in range(4):
                        a[r, k] -= f * a[col, k]
                        out[r, k] -= f * out[col, k]

    if abs(det) < tol:
        raise SingularMatrixError("Matrix is singular and cannot be inverted")
    out += 0.0
    return out


# -------------------------------------------------------------------------
# polar decomposition
# -------------------------------------------------------------------------
@njit(cache=True)
def polar_decompose(matrix, tol):
    """
    Right polar decomposition of the upper-left 3x3 of `matrix`:

        M = U Σ Vᵀ,   R = U Vᵀ,   scale = diag(Σ)

    A reflection in M is folded into the last singular value so that
    det(R) = +1.

    Parameters
    ----------
    matrix : (3, 3) or (4, 4) float array
    tol : float
        Smallest-to-largest singular value ratio at or below which M is
        treated as rank deficient.

    Returns
    -------
    R : (3, 3) array
        Nearest proper rotation.
    scale : (3,) array
        Singular values (the last one negated if M was a reflection).
    reflected : bool
        True when a reflection had to be folded out.
    """
    M = np.ascontiguousarray(matrix[:3, :3])
    U, scale, Vt = np.linalg.svd(M)
    # singular values come back sorted, largest first
    if scale[2] <= tol * scale[0]:
        raise SingularMatrixError("Matrix is singular and has no polar decomposition")

    R = U @ Vt

    reflected = False
    if det3(R) < 0.0:
        # flip last column of U (equivalent to Σ33 → −Σ33)
        U[:, 2] = -U[:, 2]
        scale[2] = -scale[2]
        R = U @ Vt
        reflected = True

    return R, scale, reflected


@njit(cache=True, error_model="numpy")
def orthonormalize_cp(M):
    """
    Cross-product orthonormalization of a 3x3: the first column is
    normalized, the second is made orthogonal to it and normalized, and the
    third becomes their cross product.
    """
    out = np.empty((3, 3), dtype=M.dtype)

    n0 = math.sqrt(M[0, 0]*M[0, 0] + M[1, 0]*M[1, 0] + M[2, 0]*M[2, 0])
    ax, ay, az = M[0, 0] / n0, M[1, 0] / n0, M[2, 0] / n0

    d = ax*M[0, 1] + ay*M[1, 1] + az*M[2, 1]
    bx, by, bz = M[0, 1] - d*ax, M[1, 1] - d*ay, M[2, 1] - d*az
    n1 = math.sqrt(bx*bx + by*by + bz*bz)
    bx, by, bz = bx / n1, by / n1, bz / n1

    out[0, 0], out[1, 0], out[2, 0] = ax, ay, az
    out[0, 1], out[1, 1], out[2, 1] = bx, by, bz
    out[0, 2] = ay*bz - az*by
    out[1, 2] = az*bx - ax*bz
    out[2, 2] = ax*by - ay*bx
    return out


# -------------------------------------------------------------------------
# quaternion algebra, all quaternions are [x, y, z, w]
# -------------------------------------------------------------------------
@njit(cache=True)
def quaternion_multiply(q1: ndarray, q2: ndarray) -> ndarray:
    """
    Hamilton product q1 · q2 (apply q2, then q1).
    """
    x1, y1, z1, w1 = q1[0], q1[1], q1[2], q1[3]
    x2, y2, z2, w2 = q2[0], q2[1], q2[2], q2[3]

    out = np.empty(4, dtype=q1.dtype)
    out[0] = w1*x2 + x1*w2 + y1*z2 - z1*y2
    out[1] = w1*y2 - x1*z2 + y1*w2 + z1*x2
    out[2] = w1*z2 + x1*y2 - y1*x2 + z1*w2
    out[3] = w1*w2 - x1*x2 - y1*y2 - z1*z2
    return out


@njit(cache=True, error_model="numpy")
def quaternion_inverse(q: ndarray) -> ndarray:
    """Conjugate divided by the squared norm. A zero quaternion gives non-finite components."""
    n2 = q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3]
    out = np.empty(4, dtype=q.dtype)
    out[0] = -q[0] / n2
    out[1] = -q[1] / n2
    out[2] = -q[2] / n2
    out[3] = q[3] / n2
    return out


@njit(cache=True)
def quaternion_normalize(q: ndarray, unit_tol):
    """
    Divide a quaternion by its norm.

    Returns
    -------
    out : (4,) array
        The normalized quaternion. Identity [0, 0, 0, 1] when the norm is zero.
        Left untouched when the squared norm is already within unit_tol of 1,
        so normalizing twice is bitwise identical to normalizing once.
    degenerate : bool
        True when the identity was substituted.
    """
    x, y, z, w = q[0], q[1], q[2], q[3]
    n2 = x*x + y*y + z*z + w*w

    out = np.empty(4, dtype=q.dtype)
    if n2 == 0.0:
        out[0] = 0.0
        out[1] = 0.0
        out[2] = 0.0
        out[3] = 1.0
        return out, True

    if abs(n2 - 1.0) <= unit_tol:
        out[0], out[1], out[2], out[3] = x, y, z, w
        return out, False

    n = math.sqrt(n2)
    out[0] = x / n
    out[1] = y / n
    out[2] = z / n
    out[3] = w / n
    return out, False


@njit(cache=True, error_model="numpy")
def quaternion_slerp(q1: ndarray, q2: ndarray, alpha, eps) -> ndarray:
    """
    Spherical linear interpolation from q1 (alpha=0) to q2 (alpha=1) along
    the shortest arc. When the quaternions are closer than eps (in 1 - cos)
    a normalized linear interpolation is used instead.
    """
    dot = q1[0]*q2[0] + q1[1]*q2[1] + q1[2]*q2[2] + q1[3]*q2[3]

    # take the shortest arc
    sign = 1.0
    if dot < 0.0:
        dot = -dot
        sign = -1.0

    out = np.empty(4, dtype=q1.dtype)
    if 1.0 - dot > eps:
        omega = math.acos(dot)
        sin_omega = math.sin(omega)
        s1 = math.sin((1.0 - alpha) * omega) / sin_omega
        s2 = sign * math.sin(alpha * omega) / sin_omega
        for i in range(4):
            out[i] = s1 * q1[i] + s2 * q2[i]
        return out

    s1 = 1.0 - alpha
    s2 = sign * alpha
    for i in range(4):
        out[i] = s1 * q1[i] + s2 * q2[i]
    n = math.sqrt(out[0]*out[0] + out[1]*out[1] + out[2]*out[2] + out[3]*out[3])
    if n > 0.0:
        for i in range(4):
            out[i] = out[i] / n
    return out


@njit(cache=True, error_model="numpy")
def quaternion_rotate(q: ndarray, v: ndarray) -> ndarray:
    """
    Vector part of q · (0, v) · q⁻¹, expanded so no Hamilton product is formed:

        v' = ((w² - u·u) v + 2 (u·v) u + 2 w (u × v)) / |q|²
    """
    ux, uy, uz, w = q[0], q[1], q[2], q[3]
    vx, vy, vz = v[0], v[1], v[2]

    uu = ux*ux + uy*uy + uz*uz
    n2 = uu + w*w
    uv = ux*vx + uy*vy + uz*vz
    a = w*w - uu

    cx = uy*vz - uz*vy
    cy = uz*vx - ux*vz
    cz = ux*vy - uy*vx

    out = np.empty(3, dtype=v.dtype)
    out[0] = (a*vx + 2.0*uv*ux + 2.0*w*cx) / n2
    out[1] = (a*vy + 2.0*uv*uy + 2.0*w*cy) / n2
    out[2] = (a*vz + 2.0*uv*uz + 2.0*w*cz) / n2
    return out


# -------------------------------------------------------------------------
# conversions among quaternion, rotation matrix and axis-angle
# -------------------------------------------------------------------------
@njit(cache=True)
def quaternion_to_rotation(quaternion: ndarray) -> ndarray:
    """
    Convert a quaternion [x, y, z, w] to a 3x3 rotation matrix.

    The quaternion is expected to be of unit length; no normalization is done.
    """
    x, y, z, w = quaternion[0], quaternion[1], quaternion[2], quaternion[3]

    # precompute products
    xx = x*x
    yy = y*y
    zz = z*z
    xy = x*y
    xz = x*z
    yz = y*z
    wx = w*x
    wy = w*y
    wz = w*z

    R = np.empty((3, 3), dtype=quaternion.dtype)
    R[0, 0] = 1 - 2*(yy + zz)
    R[0, 1] = 2*(xy - wz)
    R[0, 2] = 2*(xz + wy)

    R[1, 0] = 2*(xy + wz)
    R[1, 1] = 1 - 2*(xx + zz)
    R[1, 2] = 2*(yz - wx)

    R[2, 0] = 2*(xz - wy)
    R[2, 1] = 2*(yz + wx)
    R[2, 2] = 1 - 2*(xx + yy)
    return R


@njit(cache=True, error_model="numpy")
def rotation_to_quaternion(rotation):
    """
    Converts a 3x3 rotation matrix (or the upper-left of a 4x4) to a
    normalized quaternion [x, y, z, w] using Shepperd's method.

    Depending on the value of the trace of the rotation matrix, the algorithm
    selects the branch that avoids cancellation: the trace branch when the
    trace is positive, otherwise the branch of the largest diagonal element.

    Parameters:
        rotation (array_like): A 3x3 (or 4x4) matrix, assumed orthonormal.

    Returns:
        numpy.ndarray: A 1D array of 4 floats representing the quaternion.

    Notes:
        - The rotation matrix is not checked for orthonormality.
        - The result is normalized to guard against numerical drift.

    Example:
        >>> import numpy as np
        >>> q = rotation_to_quaternion(np.eye(3))
        >>> print(q)  # [0.0, 0.0, 0.0, 1.0]
    """
    # unpack to locals (avoids repeated indexing)
    a00, a01, a02 = rotation[0, 0], rotation[0, 1], rotation[0, 2]
    a10, a11, a12 = rotation[1, 0], rotation[1, 1], rotation[1, 2]
    a20, a21, a22 = rotation[2, 0], rotation[2, 1], rotation[2, 2]

    tr = a00 + a11 + a22

    if tr > 0.0:
        S = math.sqrt(tr + 1.0) * 2.0
        qw = 0.25 * S
        qx = (a21 - a12) / S
        qy = (a02 - a20) / S
        qz = (a10 - a01) / S
    else:
        # pick largest diagonal element
        if a00 > a11 and a00 > a22:
            S = math.sqrt(1.0 + a00 - a11 - a22) * 2.0
            qw = (a21 - a12) / S
            qx = 0.25 * S
            qy = (a01 + a10) / S
            qz = (a02 + a20) / S
        elif a11 > a22:
            S = math.sqrt(1.0 + a11 - a00 - a22) * 2.0
            qw = (a02 - a20) / S
            qx = (a01 + a10) / S
            qy = 0.25 * S
            qz = (a12 + a21) / S
        else:
            S = math.sqrt(1.0 + a22 - a00 - a11) * 2.0
            qw = (a10 - a01) / S
            qx = (a02 + a20) / S
            qy = (a12 + a21) / S
            qz = 0.25 * S

    # normalize (guards against numerical drift)
    norm = math.sqrt(qx*qx + qy*qy + qz*qz + qw*qw)
    out = np.empty(4, dtype=rotation.dtype)
    out[0] = qx / norm
    out[1] = qy / norm
    out[2] = qz / norm
    out[3] = qw / norm
    return out


@njit(cache=True)
def rotation_to_axis_angle(rotation, eps):
    """
    Convert an orthonormal 3x3 (or upper-left of a 4x4) to [x, y, z, angle].

        cos = (m00 + m11 + m22 - 1) / 2
        (x, y, z) = (m21 - m12, m02 - m20, m10 - m01)
        sin = |(x, y, z)| / 2
        angle = atan2(sin, cos)

    The axis is returned unnormalized (its length is 2 sin(angle)).

    When sin < eps the axis cannot be read from the skew part: near zero
    rotation the axis (0, 0, 1) is returned; near a half turn a unit axis is
    recovered from the symmetric part R = 2 a aᵀ - I.

    Returns
    -------
    out : (4,) array
    degenerate : bool
        True when the axis was synthesized.
    """
    m00, m01, m02 = rotation[0, 0], rotation[0, 1], rotation[0, 2]
    m10, m11, m12 = rotation[1, 0], rotation[1, 1], rotation[1, 2]
    m20, m21, m22 = rotation[2, 0], rotation[2, 1], rotation[2, 2]

    cos = (m00 + m11 + m22 - 1.0) * 0.5
    x = m21 - m12
    y = m02 - m20
    z = m10 - m01
    sin = 0.5 * math.sqrt(x*x + y*y + z*z)
    angle = math.atan2(sin, cos)

    degenerate = False
    if sin < eps:
        degenerate = True
        if cos > 0.0:
            x, y, z = 0.0, 0.0, 1.0
        else:
            xx = max((m00 + 1.0) * 0.5, 0.0)
            yy = max((m11 + 1.0) * 0.5, 0.0)
            zz = max((m22 + 1.0) * 0.5, 0.0)
            if xx >= yy and xx >= zz:
                x = math.sqrt(xx)
                y = (m01 + m10) / (4.0 * x)
                z = (m02 + m20) / (4.0 * x)
            elif yy >= zz:
                y = math.sqrt(yy)
                x = (m01 + m10) / (4.0 * y)
                z = (m12 + m21) / (4.0 * y)
            else:
                z = math.sqrt(zz)
                x = (m02 + m20) / (4.0 * z)
                y = (m12 + m21) / (4.0 * z)

    out = np.empty(4, dtype=rotation.dtype)
    out[0] = x
    out[1] = y
    out[2] = z
    out[3] = angle
    return out, degenerate


@njit(cache=True)
def axis_angle_to_rotation(axis_angle: ndarray, eps) -> ndarray:
    """
    Rodrigues' formula for [x, y, z, angle]. The axis is normalized first;
    an axis shorter than eps gives the identity.
    """
    R = np.zeros((3, 3), dtype=axis_angle.dtype)
    ax, ay, az, angle = axis_angle[0], axis_angle[1], axis_angle[2], axis_angle[3]

    n = math.sqrt(ax*ax + ay*ay + az*az)
    if n < eps:
        R[0, 0] = 1.0
        R[1, 1] = 1.0
        R[2, 2] = 1.0
        return R

    ux, uy, uz = ax / n, ay / n, az / n
    c = math.cos(angle)
    s = math.sin(angle)
    one_c = 1.0 - c

    R[0, 0] = one_c*ux*ux + c
    R[0, 1] = one_c*ux*uy - s*uz
    R[0, 2] = one_c*ux*uz + s*uy

    R[1, 0] = one_c*ux*uy + s*uz
    R[1, 1] = one_c*uy*uy + c
    R[1, 2] = one_c*uy*uz - s*ux

    R[2, 0] = one_c*ux*uz - s*uy
    R[2, 1] = one_c*uy*uz + s*ux
    R[2, 2] = one_c*uz*uz + c
    return R


@njit(cache=True)
def axis_angle_to_quaternion(axis_angle: ndarray, eps) -> ndarray:
    """
    h = angle / 2,  w = cos h,  (x, y, z) = axis sin h / |axis|.
    An axis shorter than eps gives the identity quaternion.
    """
    out = np.zeros(4, dtype=axis_angle.dtype)
    ax, ay, az, angle = axis_angle[0], axis_angle[1], axis_angle[2], axis_angle[3]

    n = math.sqrt(ax*ax + ay*ay + az*az)
    if n < eps:
        out[3] = 1.0
        return out

    h = 0.5 * angle
    s = math.sin(h) / n
    out[0] = ax * s
    out[1] = ay * s
    out[2] = az * s
    out[3] = math.cos(h)
    return out


@njit(cache=True)
def quaternion_to_axis_angle(quaternion: ndarray, eps):
    """
    angle = 2 atan2(|(x, y, z)|, w), with the vector part kept as the
    (unnormalized) axis. The direction of (x, y, z) and the sign of w cancel,
    so the angle is right without normalizing the quaternion first.

    Returns
    -------
    out : (4,) array
    degenerate : bool
        True when the vector part was shorter than eps and (0, 0, 1) was used.
    """
    x, y, z, w = quaternion[0], quaternion[1], quaternion[2], quaternion[3]
    sin_half = math.sqrt(x*x + y*y + z*z)

    out = np.empty(4, dtype=quaternion.dtype)
    out[3] = 2.0 * math.atan2(sin_half, w)
    if sin_half < eps:
        out[0] = 0.0
        out[1] = 0.0
        out[2] = 1.0
        return out, True

    out[0] = x
    out[1] = y
    out[2] = z
    return out, False


@njit(cache=True)
def rotation_x(angle, dtype_like):
    """Rotation by angle (radians) about +X."""
    c = math.cos(angle)
    s = math.sin(angle)
    R = np.zeros((3, 3), dtype=dtype_like.dtype)
    R[0, 0] = 1.0
    R[1, 1] = c
    R[1, 2] = -s
    R[2, 1] = s
    R[2, 2] = c
    return R


@njit(cache=True)
def rotation_y(angle, dtype_like):
    """Rotation by angle (radians) about +Y."""
    c = math.cos(angle)
    s = math.sin(angle)
    R = np.zeros((3, 3), dtype=dtype_like.dtype)
    R[0, 0] = c
    R[0, 2] = s
    R[1, 1] = 1.0
    R[2, 0] = -s
    R[2, 2] = c
    return R


@njit(cache=True)
def rotation_z(angle, dtype_like):
    """Rotation by angle (radians) about +Z."""
    c = math.cos(angle)
    s = math.sin(angle)
    R = np.zeros((3, 3), dtype=dtype_like.dtype)
    R[0, 0] = c
    R[0, 1] = -s
    R[1, 0] = s
    R[1, 1] = c
    R[2, 2] = 1.0
    return R
