# tests/test_axis_angle.py

import math
import unittest
import numpy as np
from scipy.spatial.transform import Rotation
from vecmath import AxisAngle4d, AxisAngle4f, Quat4d, Matrix3d, Matrix4d, Vector3d, Tuple


def random_axis_angles(n, seed=0):
    """Unit axes with angles in (0, pi)."""
    rng = np.random.default_rng(seed)
    axes = rng.normal(size=(n, 3))
    axes /= np.linalg.norm(axes, axis=1)[:, None]
    angles = rng.uniform(0.05, math.pi - 0.05, size=n)
    return axes, angles


class TestAxisAngleCreation(unittest.TestCase):
    def test_default_is_zero_rotation_about_z(self):
        aa = AxisAngle4d()
        np.testing.assert_array_equal(aa.data, [0, 0, 1, 0])
        np.testing.assert_allclose(aa.to_matrix().matrix, np.eye(3), atol=0)

    def test_axis_and_angle_pair(self):
        aa = AxisAngle4d(Vector3d(0, 1, 0), 0.5)
        self.assertEqual((aa.x, aa.y, aa.z, aa.angle), (0.0, 1.0, 0.0, 0.5))
        aa2 = AxisAngle4d([0, 1, 0], 0.5)
        self.assertEqual(aa, aa2)

    def test_set_axis_angle(self):
        aa = AxisAngle4f()
        aa.set_axis_angle([1, 0, 0], 2.0)
        np.testing.assert_array_equal(aa.data, [1, 0, 0, 2])
        axis = aa.get_axis()
        np.testing.assert_array_equal(axis.data, [1, 0, 0])

    def test_str(self):
        self.assertEqual(str(AxisAngle4d(1, 0, 0, 0.5)), "(1.0, 0.0, 0.0, 0.5)")

    def test_no_elementwise_arithmetic(self):
        a = AxisAngle4d(1, 0, 0, 0.5)
        b = AxisAngle4d(0, 1, 0, 0.25)
        self.assertNotIsInstance(a, Tuple)
        for name in ("add", "sub", "scale", "negate", "interpolate"):
            self.assertFalse(hasattr(a, name), name)
        with self.assertRaises(TypeError):
            a + b
        with self.assertRaises(TypeError):
            a - b
        with self.assertRaises(TypeError):
            2.0 * a
        with self.assertRaises(TypeError):
            -a

    def test_component_access_kept(self):
        a = AxisAngle4d(1, 0, 0, 0.5)
        self.assertEqual(len(a), 4)
        self.assertEqual(list(a), [1.0, 0.0, 0.0, 0.5])
        a[3] = 0.75
        self.assertEqual(a.angle, 0.75)
        self.assertTrue(a.epsilon_equals([1, 0, 0, 0.75], 0.0))
        self.assertEqual(hash(a), hash(AxisAngle4d(1, 0, 0, 0.75)))


class TestAxisAngleToMatrix(unittest.TestCase):
    def test_quarter_turn_about_x(self):
        m = AxisAngle4d(1, 0, 0, math.pi / 2).to_matrix()
        expected = [[1, 0, 0], [0, 0, -1], [0, 1, 0]]
        np.testing.assert_allclose(m.matrix, expected, atol=1e-15)

    def test_unnormalized_axis(self):
        a = AxisAngle4d(0, 0, 5, 0.3).to_matrix()
        b = AxisAngle4d(0, 0, 1, 0.3).to_matrix()
        np.testing.assert_allclose(a.matrix, b.matrix, atol=1e-15)

    def test_zero_axis_is_identity(self):
        m = AxisAngle4d(0, 0, 0, 1.0).to_matrix()
        np.testing.assert_array_equal(m.matrix, np.eye(3))

    def test_matches_scipy(self):
        axes, angles = random_axis_angles(10, seed=1)
        for axis, angle in zip(axes, angles):
            ours = AxisAngle4d(axis, angle).to_matrix().matrix
            ref = Rotation.from_rotvec(axis * angle).as_matrix()
            np.testing.assert_allclose(ours, ref, atol=1e-12)


class TestMatrixToAxisAngle(unittest.TestCase):
    def test_quarter_turn_about_z(self):
        m = Matrix3d.from_rows([0, -1, 0], [1, 0, 0], [0, 0, 1])
        aa = AxisAngle4d.from_matrix(m)
        # the axis is left unnormalized (length 2 sin(angle))
        np.testing.assert_allclose(aa.data, [0, 0, 2, math.pi / 2], atol=1e-15)
        np.testing.assert_allclose(aa.normalize().data, [0, 0, 1, math.pi / 2], atol=1e-15)

    def test_from_upper_left_of_4x4(self):
        m = Matrix4d.from_rotation(AxisAngle4d(0, 1, 0, 0.7), [1, 2, 3])
        aa = AxisAngle4d.from_matrix(m).normalize()
        np.testing.assert_allclose(aa.data, [0, 1, 0, 0.7], atol=1e-12)

    def test_round_trip(self):
        axes, angles = random_axis_angles(20, seed=2)
        for axis, angle in zip(axes, angles):
            m = AxisAngle4d(axis, angle).to_matrix()
            back = AxisAngle4d.from_matrix(m).normalize()
            np.testing.assert_allclose(back.data[:3], axis, atol=1e-10)
            self.assertAlmostEqual(back.angle, angle, places=10)

    def test_round_trip_single_precision(self):
        axes, angles = random_axis_angles(10, seed=3)
        for axis, angle in zip(axes, angles):
            m = AxisAngle4f(axis, angle).to_matrix()
            back = AxisAngle4f.from_matrix(m).normalize()
            np.testing.assert_allclose(back.data[:3], axis, atol=1e-4)
            self.assertAlmostEqual(float(back.angle), angle, places=4)

    def test_identity_gives_z_axis(self):
        with self.assertLogs("vecmath.axis_angle", level="DEBUG"):
            aa = AxisAngle4d.from_matrix(np.eye(3))
        np.testing.assert_array_equal(aa.data, [0, 0, 1, 0])

    def test_half_turn_axis_is_recovered(self):
        for axis in ([1, 0, 0], [0, 1, 0], [0, 0, 1], [1 / math.sqrt(2), 1 / math.sqrt(2), 0]):
            axis = np.asarray(axis)
            m = AxisAngle4d(axis, math.pi).to_matrix()
            aa = AxisAngle4d.from_matrix(m).normalize()
            self.assertAlmostEqual(aa.angle, math.pi, places=7)
            # the sign of the axis is arbitrary at a half turn
            np.testing.assert_allclose(np.abs(aa.data[:3]), np.abs(axis), atol=1e-7)
            np.testing.assert_allclose(aa.to_matrix().matrix, m.matrix, atol=1e-12)


class TestAxisAngleQuaternion(unittest.TestCase):
    def test_construct_from_quaternion_converts(self):
        s = math.sin(math.pi / 4)
        q = Quat4d(0, s, 0, s)
        aa = AxisAngle4d(q)
        self.assertEqual(aa, AxisAngle4d.from_quaternion(q))
        np.testing.assert_allclose(aa.data, [0, s, 0, math.pi / 2], atol=1e-15)

    def test_to_quaternion(self):
        q = AxisAngle4d(0, 0, 1, math.pi / 2).to_quaternion()
        s = math.sin(math.pi / 4)
        np.testing.assert_allclose(q.data, [0, 0, s, s], atol=1e-15)

    def test_from_quaternion_keeps_vector_part(self):
        s = math.sin(math.pi / 4)
        aa = AxisAngle4d.from_quaternion(Quat4d(0, 0, s, s))
        np.testing.assert_allclose(aa.data, [0, 0, s, math.pi / 2], atol=1e-15)

    def test_identity_quaternion(self):
        aa = Quat4d().to_axis_angle()
        np.testing.assert_array_equal(aa.data, [0, 0, 1, 0])

    def test_round_trip(self):
        axes, angles = random_axis_angles(10, seed=4)
        for axis, angle in zip(axes, angles):
            q = Quat4d.from_axis_angle(AxisAngle4d(axis, angle))
            back = AxisAngle4d.from_quaternion(q).to_quaternion()
            np.testing.assert_allclose(back.canonical().data, q.canonical().data, atol=1e-12)

    def test_quaternion_matches_scipy(self):
        axes, angles = random_axis_angles(5, seed=5)
        for axis, angle in zip(axes, angles):
            ours = AxisAngle4d(axis, angle).to_quaternion()
            ref = Rotation.from_rotvec(axis * angle).as_quat()
            if ref[3] < 0:
                ref = -ref
            np.testing.assert_allclose(ours.canonical().data, ref, atol=1e-12)


class TestAxisAngleNormalization(unittest.TestCase):
    def test_normalize_short_axis(self):
        aa = AxisAngle4d(0, 0, 0, 1.0).normalize()
        np.testing.assert_array_equal(aa.data, [0, 0, 1, 1])

    def test_normalize_inplace(self):
        aa = AxisAngle4d(3, 0, 4, 1.0)
        aa.normalize(inplace=True)
        np.testing.assert_allclose(aa.data, [0.6, 0, 0.8, 1.0])

    def test_canonical(self):
        np.testing.assert_allclose(AxisAngle4d(0, 0, 2, -math.pi / 2).canonical().data,
                                   [0, 0, -1, math.pi / 2], atol=1e-15)
        np.testing.assert_allclose(AxisAngle4d(0, 0, 1, 3 * math.pi / 2).canonical().data,
                                   [0, 0, -1, math.pi / 2], atol=1e-15)
        np.testing.assert_allclose(AxisAngle4d(1, 0, 0, 2 * math.pi + 0.5).canonical().data,
                                   [1, 0, 0, 0.5], atol=1e-12)

    def test_same_rotation_compares_equal_after_canonical(self):
        a = AxisAngle4d(0, 0, 1, math.pi / 2)
        b = AxisAngle4d(0, 0, -2, -math.pi / 2)
        self.assertNotEqual(a, b)
        np.testing.assert_allclose(a.canonical().data, b.canonical().data, atol=1e-15)


if __name__ == "__main__":
    unittest.main()
