import unittest

import numpy
import torch

from robreg.array_ops import apply_transform, euler_to_rotation_matrix, get_transform_from_rotation_translation
from robreg.estimators import RobustPointToPointEstimator
from robreg.layers import RobustProcrustes
from robreg.ops import robust_weighted_procrustes, welsch_weights
from robreg.utils.exceptions import DegenerateInputError


def make_transform(euler_degrees, translation) -> numpy.ndarray:
    rotation = euler_to_rotation_matrix(numpy.asarray(euler_degrees), "zyx", use_degree=True)
    return get_transform_from_rotation_translation(rotation, numpy.asarray(translation))


class TestRobustWeightedProcrustesTorch(unittest.TestCase):

    def setUp(self):
        rng = numpy.random.default_rng(5)
        self.src_points = rng.uniform(-1.0, 1.0, size=(40, 3))
        self.gt_transform = make_transform([15.0, -10.0, 5.0], [0.2, 0.0, -0.1])
        self.tgt_points = apply_transform(self.src_points, self.gt_transform)
        self.tgt_points[0] += 3.0
        self.tgt_points[1:] += rng.normal(scale=0.01, size=(39, 3))

    def test_welsch_weights(self):
        residuals = torch.tensor([0.0, 1.0, 2.0], dtype=torch.float64)
        numpy.testing.assert_allclose(
            welsch_weights(residuals, 1.0).numpy(), [1.0, numpy.exp(-0.5), numpy.exp(-2.0)]
        )
        numpy.testing.assert_array_equal(welsch_weights(residuals, -1.0).numpy(), [1.0, 1.0, 1.0])

    def test_agrees_with_estimator(self):
        for sigma in (-1.0, 0.3, 1.0):
            expected = RobustPointToPointEstimator(sigma=sigma).estimate_rigid_transform(
                self.src_points, self.tgt_points
            )
            transform = robust_weighted_procrustes(
                torch.from_numpy(self.src_points), torch.from_numpy(self.tgt_points), sigma=sigma
            )
            self.assertEqual(tuple(transform.shape), (4, 4))
            numpy.testing.assert_allclose(transform.numpy(), expected, atol=1e-8)

    def test_batch(self):
        src_points = torch.from_numpy(numpy.stack([self.src_points, self.src_points[::-1].copy()], axis=0))
        tgt_points = torch.from_numpy(numpy.stack([self.tgt_points, -self.src_points[::-1].copy()], axis=0))
        transforms = robust_weighted_procrustes(src_points, tgt_points, sigma=0.3)
        self.assertEqual(tuple(transforms.shape), (2, 4, 4))
        single = robust_weighted_procrustes(src_points[0], tgt_points[0], sigma=0.3)
        numpy.testing.assert_allclose(transforms[0].numpy(), single.numpy(), atol=1e-10)
        for transform in transforms:
            rotation = transform[:3, :3]
            self.assertAlmostEqual(float(torch.det(rotation)), 1.0, places=6)
            numpy.testing.assert_allclose((rotation.T @ rotation).numpy(), numpy.eye(3), atol=1e-6)

    def test_non_finite_pairs_are_ignored(self):
        src_points = self.src_points.copy()
        src_points[5] = numpy.nan
        transform = robust_weighted_procrustes(torch.from_numpy(src_points), torch.from_numpy(self.tgt_points), 0.3)
        masks = numpy.arange(40) != 5
        expected = robust_weighted_procrustes(
            torch.from_numpy(self.src_points[masks]), torch.from_numpy(self.tgt_points[masks]), 0.3
        )
        self.assertTrue(bool(torch.isfinite(transform).all()))
        numpy.testing.assert_allclose(transform.numpy(), expected.numpy(), atol=1e-10)

    def test_degenerate_input(self):
        src_points = torch.full((5, 3), float("nan"), dtype=torch.float64)
        tgt_points = torch.zeros((5, 3), dtype=torch.float64)
        with self.assertRaises(DegenerateInputError):
            robust_weighted_procrustes(src_points, tgt_points, sigma=0.5)

        src_points = torch.from_numpy(self.src_points)
        tgt_points = torch.from_numpy(self.tgt_points)
        with self.assertRaises(DegenerateInputError):
            robust_weighted_procrustes(src_points, tgt_points, weights=torch.zeros(40, dtype=torch.float64))

        # one degenerate batch item fails the whole batch
        batch_src_points = torch.stack([src_points, torch.full_like(src_points, float("nan"))], dim=0)
        batch_tgt_points = torch.stack([tgt_points, tgt_points], dim=0)
        with self.assertRaises(DegenerateInputError):
            robust_weighted_procrustes(batch_src_points, batch_tgt_points, sigma=0.3)

    def test_layer(self):
        layer = RobustProcrustes(sigma=0.3)
        self.assertIn("sigma=0.3", layer.extra_repr())
        src_points = torch.from_numpy(self.src_points)
        tgt_points = torch.from_numpy(self.tgt_points)
        transform = layer(src_points, tgt_points)
        expected = robust_weighted_procrustes(src_points, tgt_points, sigma=0.3)
        numpy.testing.assert_allclose(transform.numpy(), expected.numpy(), atol=1e-12)
        layer.set_sigma(-1.0)
        self.assertEqual(layer.sigma, -1.0)


if __name__ == "__main__":
    unittest.main()
