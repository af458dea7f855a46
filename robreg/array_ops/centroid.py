from typing import Optional, Tuple

import numpy as np
from numpy import ndarray


def get_valid_mask(points: ndarray) -> ndarray:
    """A point is valid if all of its coordinates are finite."""
    return np.all(np.isfinite(points), axis=-1)


def compute_weighted_centroid(
    points: ndarray, weights: ndarray, centroid: Optional[ndarray] = None
) -> Tuple[Optional[ndarray], int]:
    """Compute the weighted 3D centroid of a point set.

    Invalid (non-finite) points are skipped and do not count as valid. Finite points with zero weight count as valid
    but do not move the centroid.

    Args:
        points (array<float>): the points in the shape of (N, 3).
        weights (array<float>): the weights of the points in the shape of (N,).
        centroid (array<float>, optional): returned unchanged if the centroid cannot be computed.

    Returns:
        centroid (array<float>): the centroid in the shape of (4,), the last component is 1 so that it can be
            transformed by a 4x4 matrix.
        num_valid (int): the number of valid points. If it is 0, the returned centroid is the input one.
    """
    assert points.shape[0] == weights.shape[0], "The numbers of points and weights must be the same."
    masks = get_valid_mask(points)
    num_valid = int(masks.sum())
    if num_valid == 0:
        return centroid, 0
    valid_points = points[masks]
    valid_weights = weights[masks]
    total_weight = valid_weights.sum()
    if not total_weight > 0:
        return centroid, num_valid
    new_centroid = np.ones(shape=(4,), dtype=np.float64)
    new_centroid[:3] = np.sum(valid_points * valid_weights[:, None], axis=0) / total_weight
    return new_centroid, num_valid
