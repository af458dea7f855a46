import unittest

import numpy

from robreg.array_ops import (
    apply_transform,
    euler_to_rotation_matrix,
    inverse_transform,
    is_rotation_matrix,
    random_sample_rotation,
    random_sample_transform,
    rotation_matrix_to_euler,
)


class TestTransforms(unittest.TestCase):

    def setUp(self):
        numpy.random.seed(11)

    def test_inverse_transform(self):
        for _ in range(5):
            transform = random_sample_transform(rotation_magnitude=45.0, translation_magnitude=2.0)
            inv_transform = inverse_transform(transform)
            numpy.testing.assert_allclose(transform @ inv_transform, numpy.eye(4), atol=1e-12)
            points = numpy.random.uniform(-1.0, 1.0, size=(8, 3))
            restored_points = apply_transform(apply_transform(points, transform), inv_transform)
            numpy.testing.assert_allclose(restored_points, points, atol=1e-12)

    def test_random_sample_transform_is_rigid(self):
        transform = random_sample_transform(rotation_magnitude=180.0, translation_magnitude=0.5)
        self.assertTrue(is_rotation_matrix(transform[:3, :3]))
        self.assertTrue(numpy.all(numpy.abs(transform[:3, 3]) <= 0.5))
        numpy.testing.assert_array_equal(transform[3], [0.0, 0.0, 0.0, 1.0])

    def test_random_sample_rotation(self):
        for rotation_factor in (1.0, 4.0):
            self.assertTrue(is_rotation_matrix(random_sample_rotation(rotation_factor)))

    def test_euler_round_trip(self):
        euler = numpy.array([30.0, -20.0, 10.0])
        rotation = euler_to_rotation_matrix(euler, "zyx", use_degree=True)
        numpy.testing.assert_allclose(rotation_matrix_to_euler(rotation, "zyx", use_degree=True), euler, atol=1e-10)

    def test_is_rotation_matrix_rejects_reflection(self):
        self.assertFalse(is_rotation_matrix(numpy.diag([1.0, 1.0, -1.0])))
        self.assertFalse(is_rotation_matrix(2.0 * numpy.eye(3)))
        self.assertFalse(is_rotation_matrix(numpy.eye(4)))


if __name__ == "__main__":
    unittest.main()
