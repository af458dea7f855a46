import numpy as np
from numpy import ndarray

from .se3 import apply_transform, get_rotation_translation_from_transform


def relative_rotation_error(gt_rotation: ndarray, est_rotation: ndarray) -> float:
    """Compute the isotropic Relative Rotation Error in degrees.

    RRE = acos((trace(R^T R_gt) - 1) / 2)

    Args:
        gt_rotation (array): ground truth rotation matrix (3, 3)
        est_rotation (array): estimated rotation matrix (3, 3)

    Returns:
        rre (float): relative rotation error.
    """
    x = 0.5 * (np.trace(np.matmul(est_rotation.T, gt_rotation)) - 1.0)
    x = np.clip(x, -1.0, 1.0)
    x = np.arccos(x)
    rre = 180.0 * x / np.pi
    return float(rre)


def relative_translation_error(gt_translation: ndarray, est_translation: ndarray) -> float:
    """Compute the isotropic Relative Translation Error, the L2 distance between the translations."""
    return float(np.linalg.norm(gt_translation - est_translation))


def isotropic_registration_error(gt_transform: ndarray, est_transform: ndarray):
    """Compute the isotropic Relative Rotation Error and Relative Translation Error.

    Args:
        gt_transform (array): ground truth transformation matrix (4, 4)
        est_transform (array): estimated transformation matrix (4, 4)

    Returns:
        rre (float): relative rotation error in degrees.
        rte (float): relative translation error.
    """
    gt_rotation, gt_translation = get_rotation_translation_from_transform(gt_transform)
    est_rotation, est_translation = get_rotation_translation_from_transform(est_transform)
    rre = relative_rotation_error(gt_rotation, est_rotation)
    rte = relative_translation_error(gt_translation, est_translation)
    return rre, rte


def registration_rmse(src_points: ndarray, gt_transform: ndarray, est_transform: ndarray) -> float:
    """Root mean square distance between the source points moved by the two transforms."""
    gt_points = apply_transform(src_points, gt_transform)
    est_points = apply_transform(src_points, est_transform)
    rmse = np.sqrt(np.sum((gt_points - est_points) ** 2, axis=1).mean())
    return float(rmse)
