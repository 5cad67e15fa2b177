# tests/test_dunders.py

import copy
import pickle
import unittest
import numpy as np
from vecmath import (
    Point3d,
    Vector3d,
    Vector3f,
    Color4f,
    Quat4d,
    AxisAngle4f,
    Matrix3f,
    Matrix4d,
)


class TestEquality(unittest.TestCase):
    def test_equal_components(self):
        self.assertEqual(Vector3d(1, 2, 3), Vector3d(1, 2, 3))
        self.assertNotEqual(Vector3d(1, 2, 3), Vector3d(1, 2, 4))

    def test_class_must_match(self):
        # same components, different meaning
        self.assertNotEqual(Vector3d(1, 2, 3), Point3d(1, 2, 3))
        self.assertNotEqual(Vector3d(1, 2, 3), Vector3f(1, 2, 3))
        self.assertNotEqual(Vector3d(1, 2, 3), [1, 2, 3])

    def test_signed_zero(self):
        a = Vector3d(0.0, 0.0, 0.0)
        b = Vector3d(-0.0, 0.0, 0.0)
        self.assertNotEqual(a, b)
        self.assertNotEqual(hash(a), hash(b))

    def test_nan_equals_itself(self):
        a = Vector3d(np.nan, 1, 2)
        self.assertEqual(a, a.copy())

    def test_hash_matches_equality(self):
        a = Quat4d(0.1, 0.2, 0.3, 0.4)
        b = Quat4d([0.1, 0.2, 0.3, 0.4])
        self.assertEqual(hash(a), hash(b))
        self.assertEqual(len({a, b}), 1)

    def test_usable_as_dict_key(self):
        d = {Matrix4d(): "identity"}
        self.assertEqual(d[Matrix4d.identity()], "identity")


class TestStrRepr(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(Vector3d(1, 2, 3)), "(1.0, 2.0, 3.0)")
        self.assertEqual(str(Quat4d()), "(0.0, 0.0, 0.0, 1.0)")

    def test_repr(self):
        self.assertEqual(repr(Point3d(1, 2, 3)), "Point3d(1.0, 2.0, 3.0)")
        self.assertEqual(repr(AxisAngle4f()), "AxisAngle4f(0.0, 0.0, 1.0, 0.0)")

    def test_matrix_str(self):
        m = Matrix3f(1, 2, 3, 4, 5, 6, 7, 8, 9)
        self.assertEqual(str(m), "(1.0, 2.0, 3.0)\n(4.0, 5.0, 6.0)\n(7.0, 8.0, 9.0)")


class TestCopyPickle(unittest.TestCase):
    def setUp(self):
        self.values = [
            Vector3d(1, 2, 3),
            Color4f(0.1, 0.2, 0.3, 1.0),
            Quat4d(0.5, 0.5, 0.5, 0.5),
            AxisAngle4f(0, 1, 0, 0.25),
            Matrix3f.rot_x(0.5),
            Matrix4d.from_rotation(Quat4d(), [1, 2, 3]),
        ]

    def test_copy(self):
        for v in self.values:
            c = copy.copy(v)
            self.assertEqual(c, v)
            self.assertIsNot(c, v)

    def test_deepcopy_is_independent(self):
        v = Vector3d(1, 2, 3)
        c = copy.deepcopy(v)
        c.x = 10.0
        self.assertEqual(v.x, 1.0)

    def test_pickle(self):
        for v in self.values:
            restored = pickle.loads(pickle.dumps(v))
            self.assertIs(type(restored), type(v))
            self.assertEqual(restored, v)

    def test_slots(self):
        v = Vector3d()
        with self.assertRaises(AttributeError):
            v.foo = 1.0


if __name__ == "__main__":
    unittest.main()
