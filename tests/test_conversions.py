# tests/test_conversions.py

import unittest
import numpy as np
from scipy.spatial.transform import Rotation
from vecmath import (
    Quat4d,
    Quat4f,
    AxisAngle4d,
    AxisAngle4f,
    Matrix3d,
    Matrix3f,
    Matrix4d,
)


def random_rotations(n, seed=0):
    q = np.random.default_rng(seed).normal(size=(n, 4))
    q /= np.linalg.norm(q, axis=1)[:, None]
    return [Rotation.from_quat(row) for row in q]


def same_rotation(q1, q2, atol):
    """Quaternions agree up to sign."""
    q1 = np.asarray(q1, dtype=np.float64)
    q2 = np.asarray(q2, dtype=np.float64)
    return np.allclose(q1, q2, atol=atol) or np.allclose(q1, -q2, atol=atol)


class TestQuaternionMatrixRoundTrip(unittest.TestCase):
    def setUp(self):
        self.rotations = random_rotations(50, seed=11)

    def test_to_matrix_matches_scipy(self):
        for r in self.rotations:
            ours = Quat4d(r.as_quat()).to_matrix().matrix
            np.testing.assert_allclose(ours, r.as_matrix(), atol=1e-12)

    def test_from_matrix_matches_scipy(self):
        for r in self.rotations:
            q = Quat4d.from_matrix(r.as_matrix())
            self.assertTrue(same_rotation(q.data, r.as_quat(), 1e-10))

    def test_round_trip_double(self):
        for r in self.rotations:
            q = Quat4d(r.as_quat())
            back = Quat4d.from_matrix(q.to_matrix())
            self.assertTrue(same_rotation(back.data, q.data, 1e-10))

    def test_round_trip_single(self):
        for r in self.rotations:
            q = Quat4f(r.as_quat())
            back = Quat4f.from_matrix(q.to_matrix())
            self.assertEqual(back.data.dtype, np.float32)
            self.assertTrue(same_rotation(back.data, q.data, 1e-5))

    def test_shepperd_branches(self):
        # half turns about each axis exercise every non-trace branch
        for rotvec in ([np.pi, 0, 0], [0, np.pi, 0], [0, 0, np.pi], [0.1, 0.2, 0.3]):
            r = Rotation.from_rotvec(rotvec)
            q = Quat4d.from_matrix(Matrix3d(r.as_matrix()))
            self.assertTrue(same_rotation(q.data, r.as_quat(), 1e-10))
            self.assertAlmostEqual(q.norm(), 1.0)

    def test_from_upper_left_of_4x4(self):
        r = self.rotations[0]
        m = Matrix4d.from_rotation(Matrix3d(r.as_matrix()), [5, 6, 7])
        q = Quat4d.from_matrix(m)
        self.assertTrue(same_rotation(q.data, r.as_quat(), 1e-10))

    def test_set_from_matrix_inplace(self):
        r = self.rotations[1]
        q = Quat4d()
        self.assertIs(q.set_from_matrix(Matrix3d(r.as_matrix())), q)
        self.assertTrue(same_rotation(q.data, r.as_quat(), 1e-10))

    def test_bad_matrix_shape(self):
        with self.assertRaises(ValueError):
            Quat4d.from_matrix(np.eye(2))


class TestAxisAngleRoundTrips(unittest.TestCase):
    def setUp(self):
        self.rotations = random_rotations(30, seed=12)

    def test_quaternion_axis_angle_round_trip(self):
        for r in self.rotations:
            q = Quat4d(r.as_quat())
            back = Quat4d.from_axis_angle(q.to_axis_angle())
            self.assertTrue(same_rotation(back.data, q.data, 1e-12))

    def test_quaternion_axis_angle_round_trip_single(self):
        for r in self.rotations:
            q = Quat4f(r.as_quat())
            back = Quat4f.from_axis_angle(AxisAngle4f.from_quaternion(q))
            self.assertTrue(same_rotation(back.data, q.data, 1e-5))

    def test_axis_angle_matches_scipy_rotvec(self):
        for r in self.rotations:
            aa = AxisAngle4d.from_matrix(r.as_matrix()).normalize()
            rotvec = r.as_rotvec()
            np.testing.assert_allclose(aa.data[:3] * aa.angle, rotvec, atol=1e-10)

    def test_matrix_axis_angle_quaternion_agree(self):
        for r in self.rotations:
            m = Matrix3d(r.as_matrix())
            via_aa = m.to_axis_angle().to_quaternion()
            direct = m.to_quaternion()
            self.assertTrue(same_rotation(via_aa.data, direct.data, 1e-10))

    def test_single_precision_matrix(self):
        for r in self.rotations:
            m = Matrix3f(r.as_matrix())
            aa = m.to_axis_angle()
            self.assertIsInstance(aa, AxisAngle4f)
            np.testing.assert_allclose(aa.to_matrix().matrix, r.as_matrix(), atol=1e-5)


class TestCrossPrecision(unittest.TestCase):
    def test_quaternion(self):
        q = Quat4d(0.1, 0.2, 0.3, 0.9)
        f = Quat4f(q)
        self.assertEqual(f.data.dtype, np.float32)
        np.testing.assert_allclose(f.data, q.data, atol=1e-7)

    def test_axis_angle(self):
        aa = AxisAngle4f(AxisAngle4d(0, 0, 1, 0.5))
        self.assertEqual(aa.data.dtype, np.float32)

    def test_matrix_to_quaternion_precision(self):
        self.assertIsInstance(Matrix3f().to_quaternion(), Quat4f)
        self.assertIsInstance(Matrix3d().to_quaternion(), Quat4d)


if __name__ == "__main__":
    unittest.main()
