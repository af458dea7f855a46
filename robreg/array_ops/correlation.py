import numpy as np
from numpy import ndarray

from .centroid import get_valid_mask


def demean_points(points: ndarray, centroid: ndarray) -> ndarray:
    """Subtract the centroid from the valid points. Invalid points become all-zero rows.

    Args:
        points (array<float>): (N, D)
        centroid (array<float>): (D,) or homogeneous (D + 1,)

    Returns:
        points_centered (array<float>): (N, D)
    """
    num_dims = points.shape[1]
    masks = get_valid_mask(points)
    points_centered = np.zeros(shape=points.shape, dtype=np.float64)
    points_centered[masks] = points[masks] - centroid[None, :num_dims]
    return points_centered


def build_weighted_correlation(src_points_centered: ndarray, tgt_points_centered: ndarray, weights: ndarray) -> ndarray:
    """Build the weighted correlation matrix H = sum_i w_i (p_i - p_mean) (q_i - q_mean)^T.

    Args:
        src_points_centered (array<float>): (N, D)
        tgt_points_centered (array<float>): (N, D)
        weights (array<float>): (N,)

    Returns:
        correlation (array<float>): (D, D)
    """
    assert src_points_centered.shape == tgt_points_centered.shape, "Demeaned point sets must have the same shape."
    correlation = np.matmul(src_points_centered.T, weights[:, None] * tgt_points_centered)
    return correlation
