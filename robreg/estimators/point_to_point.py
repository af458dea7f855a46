from typing import Optional

import numpy as np
from numpy import ndarray

from robreg.array_ops.point_pairs import PointPairs
from robreg.array_ops.procrustes import weighted_procrustes

from .base import TransformationEstimator, get_valid_pairs


class PointToPointEstimator(TransformationEstimator):
    """Least-squares point-to-point alignment with SVD (all pairs weighted equally)."""

    def __init__(self, dtype=np.float64):
        self.dtype = dtype

    def estimate_from_pairs(self, pairs: PointPairs, init_transform: Optional[ndarray] = None) -> ndarray:
        src_corr_points, tgt_corr_points, _ = get_valid_pairs(pairs)
        transform = weighted_procrustes(src_corr_points, tgt_corr_points)
        return transform.astype(self.dtype)

    def __repr__(self):
        return f"{self.__class__.__name__}(dtype={np.dtype(self.dtype).name})"
