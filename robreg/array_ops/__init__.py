from .centroid import compute_weighted_centroid, get_valid_mask
from .correlation import build_weighted_correlation, demean_points
from .metrics import (
    isotropic_registration_error,
    registration_rmse,
    relative_rotation_error,
    relative_translation_error,
)
from .point_pairs import Correspondence, PointPairs, as_points
from .procrustes import get_transform_from_correlation, weighted_procrustes
from .robust_kernels import estimate_welsch_sigma, welsch_weights
from .se3 import (
    apply_transform,
    get_rotation_translation_from_transform,
    get_transform_from_rotation_translation,
    inverse_transform,
    random_sample_transform,
)
from .so3 import euler_to_rotation_matrix, is_rotation_matrix, random_sample_rotation, rotation_matrix_to_euler
