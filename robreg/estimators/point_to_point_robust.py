from typing import Optional

import numpy as np
from loguru import logger
from numpy import ndarray

from robreg.array_ops.centroid import compute_weighted_centroid
from robreg.array_ops.correlation import build_weighted_correlation, demean_points
from robreg.array_ops.point_pairs import PointPairs
from robreg.array_ops.procrustes import get_transform_from_correlation
from robreg.array_ops.robust_kernels import estimate_welsch_sigma, welsch_weights
from robreg.array_ops.se3 import apply_transform
from robreg.utils.exceptions import DegenerateInputError, InvalidArgumentError

from .base import TransformationEstimator, get_valid_pairs

RESIDUAL_MODES = ["pairwise", "correspondence", "zero"]


class RobustPointToPointEstimator(TransformationEstimator):
    """Point-to-point alignment minimizing the Welsch function instead of the L2 norm.

    Each call weights the pairs with w_i = exp(-d_i^2 / (2 sigma^2)) and solves the weighted SVD problem once, which
    is one step of the IRLS scheme in "Fast and Robust Iterative Closest Point" (Zhang et al., 2022). The registration
    loop is expected to update `sigma` between the calls.

    Args:
        sigma (float): the scale of the Welsch function. A non-positive value disables the robust weighting.
            Default: -1.
        residual_mode (str): how the residual d_i of a pair is measured. Default: "pairwise".
            "pairwise": the distance between the target point and the source point moved by `init_transform`
                (identity if not given).
            "correspondence": the distance stored in the correspondence, "pairwise" for the pairs without one.
            "zero": all residuals are zero, so all weights are 1.
        auto_sigma (bool): if sigma is non-positive, derive it from the residuals so that the largest residual lies at
            three sigma. Default: False.
        dtype: the scalar type of the output transform. Default: float64.
    """

    def __init__(
        self, sigma: float = -1.0, residual_mode: str = "pairwise", auto_sigma: bool = False, dtype=np.float64
    ):
        if residual_mode not in RESIDUAL_MODES:
            raise InvalidArgumentError(
                f"Unsupported residual_mode: {residual_mode}. Supported modes: {RESIDUAL_MODES}."
            )
        self._sigma = float(sigma)
        self.residual_mode = residual_mode
        self.auto_sigma = auto_sigma
        self.dtype = dtype

    @property
    def sigma(self) -> float:
        return self._sigma

    def set_sigma(self, sigma: float):
        self._sigma = float(sigma)

    def compute_residuals(
        self,
        src_corr_points: ndarray,
        tgt_corr_points: ndarray,
        corr_distances: Optional[ndarray] = None,
        init_transform: Optional[ndarray] = None,
    ) -> ndarray:
        if self.residual_mode == "zero":
            return np.zeros(shape=(src_corr_points.shape[0],))
        if init_transform is not None:
            src_corr_points = apply_transform(src_corr_points, np.asarray(init_transform, dtype=np.float64))
        residuals = np.linalg.norm(tgt_corr_points - src_corr_points, axis=1)
        if self.residual_mode == "correspondence" and corr_distances is not None:
            residuals = np.where(np.isfinite(corr_distances), corr_distances, residuals)
        return residuals

    def estimate_from_pairs(self, pairs: PointPairs, init_transform: Optional[ndarray] = None) -> ndarray:
        src_corr_points, tgt_corr_points, corr_distances = get_valid_pairs(pairs)

        residuals = self.compute_residuals(
            src_corr_points, tgt_corr_points, corr_distances=corr_distances, init_transform=init_transform
        )
        sigma = self._sigma
        if sigma <= 0 and self.auto_sigma:
            sigma = estimate_welsch_sigma(residuals)
        # only the relative weights matter, the largest one is shifted to 1
        weights = welsch_weights(residuals, sigma, shift_min=True)

        src_centroid, num_valid = compute_weighted_centroid(src_corr_points, weights)
        tgt_centroid, _ = compute_weighted_centroid(tgt_corr_points, weights)
        if num_valid == 0 or src_centroid is None or tgt_centroid is None:
            raise DegenerateInputError(f"Failed to compute the weighted centroids from {len(pairs)} correspondences.")
        logger.debug(
            f"Robust point-to-point: {num_valid}/{len(pairs)} valid pairs, sigma: {sigma:g}, "
            f"weight mass: {weights.sum():.3f}."
        )
        if num_valid < 3:
            logger.warning(f"Only {num_valid} valid pairs, the rotation is not uniquely determined.")

        src_points_centered = demean_points(src_corr_points, src_centroid)
        tgt_points_centered = demean_points(tgt_corr_points, tgt_centroid)
        correlation = build_weighted_correlation(src_points_centered, tgt_points_centered, weights)
        transform = get_transform_from_correlation(correlation, src_centroid, tgt_centroid)

        return transform.astype(self.dtype)

    def __repr__(self):
        param_strings = [
            f"sigma={self._sigma:g}",
            f"residual_mode={self.residual_mode}",
            f"auto_sigma={self.auto_sigma}",
            f"dtype={np.dtype(self.dtype).name}",
        ]
        return f"{self.__class__.__name__}(" + ", ".join(param_strings) + ")"
