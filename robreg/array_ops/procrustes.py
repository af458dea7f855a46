from typing import Optional

import numpy as np
from numpy import ndarray

from .centroid import compute_weighted_centroid, get_valid_mask
from .correlation import build_weighted_correlation, demean_points
from .se3 import get_transform_from_rotation_translation


def get_transform_from_correlation(correlation: ndarray, src_centroid: ndarray, tgt_centroid: ndarray) -> ndarray:
    """Recover the rigid transform from the correlation matrix with SVD.

    H = U S V^T, R = V diag(1, 1, sign(det(V U^T))) U^T, t = c_tgt - R c_src.

    If V U^T is a reflection, the last column of V is negated so that the rotation is always proper. A rank-deficient
    H (less than 3 non-collinear correspondences) is not rejected: the rotation is whatever the SVD yields and is not
    uniquely determined.

    Args:
        correlation (array<float>): the correlation matrix H in the shape of (3, 3).
        src_centroid (array<float>): the source centroid, (3,) or homogeneous (4,).
        tgt_centroid (array<float>): the target centroid, (3,) or homogeneous (4,).

    Returns:
        transform (array<float>): (4, 4)
    """
    U, _, Vt = np.linalg.svd(correlation)  # H = USV^T
    Ut = U.T
    V = Vt.T
    rotation = V @ Ut
    if np.linalg.det(rotation) < 0:
        V[:, -1] = -V[:, -1]
        rotation = V @ Ut

    translation = tgt_centroid[:3] - rotation @ src_centroid[:3]

    transform = get_transform_from_rotation_translation(rotation, translation)

    return transform


def weighted_procrustes(
    src_points: ndarray,
    tgt_points: ndarray,
    weights: Optional[ndarray] = None,
    weight_threshold: float = 0.0,
    eps: float = 1e-6,
) -> ndarray:
    """Estimate the alignment transformation with weighted SVD.

    Pairs with a non-finite point are ignored.

    Args:
        src_points (array<float>): The correspondence points in the source point cloud in the shape of (N, 3).
        tgt_points (array<float>): The correspondence points in the target point cloud in the shape of (N, 3).
        weights (array<float>, optional): The weights of the correspondences in the shape of (N,).
        weight_threshold (float): The weights below the threshold are set to zero. Default: 0.
        eps (float): The safe number for division. Default: 1e-6.

    Returns:
        A ndarray of the estimated transformation in the shape of (4, 4).
    """
    if weights is None:
        weights = np.ones(shape=(src_points.shape[0],))  # (N,)
    else:
        weights = np.array(weights, dtype=np.float64)
    weights[weights < weight_threshold] = 0.0
    masks = get_valid_mask(src_points) & get_valid_mask(tgt_points)
    weights[~masks] = 0.0
    weights = weights / (weights.sum() + eps)

    # invalid pairs are masked out of both sets so that the centroids are computed over the same pairs
    src_points = np.where(masks[:, None], src_points, np.nan)
    tgt_points = np.where(masks[:, None], tgt_points, np.nan)
    src_centroid, _ = compute_weighted_centroid(src_points, weights, centroid=np.array([0.0, 0.0, 0.0, 1.0]))
    tgt_centroid, _ = compute_weighted_centroid(tgt_points, weights, centroid=np.array([0.0, 0.0, 0.0, 1.0]))

    src_points_centered = demean_points(src_points, src_centroid)  # (N, 3)
    tgt_points_centered = demean_points(tgt_points, tgt_centroid)  # (N, 3)

    H = build_weighted_correlation(src_points_centered, tgt_points_centered, weights)
    transform = get_transform_from_correlation(H, src_centroid, tgt_centroid)

    return transform
