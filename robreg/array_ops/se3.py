from typing import Optional, Tuple

import numpy as np
from numpy import ndarray

from .so3 import euler_to_rotation_matrix


def apply_transform(points: ndarray, transform: ndarray) -> ndarray:
    """Apply a rigid transform to points stored in rows.

    Args:
        points (array): (N, 3)
        transform (array): (4, 4)

    Returns:
        points (array): (N, 3)
    """
    rotation, translation = get_rotation_translation_from_transform(transform)
    points = np.matmul(points, rotation.T) + translation
    return points


def get_transform_from_rotation_translation(
    rotation: Optional[ndarray], translation: Optional[ndarray], dtype=np.float64
) -> ndarray:
    """Compose a homogeneous transform. The bottom row is always [0, 0, 0, 1].

    Args:
        rotation (array, optional): (3, 3), identity if None.
        translation (array, optional): (3,), zero if None.
        dtype: the scalar type of the output matrix. Default: float64.

    Returns:
        transform (array): (4, 4)
    """
    transform = np.eye(4, dtype=dtype)
    if rotation is not None:
        transform[:3, :3] = rotation
    if translation is not None:
        transform[:3, 3] = translation
    return transform


def get_rotation_translation_from_transform(transform: ndarray) -> Tuple[ndarray, ndarray]:
    """Split a homogeneous transform into rotation (3, 3) and translation (3,)."""
    rotation = transform[:3, :3]
    translation = transform[:3, 3]
    return rotation, translation


def inverse_transform(transform: ndarray) -> ndarray:
    rotation, translation = get_rotation_translation_from_transform(transform)
    inv_rotation = rotation.T
    inv_translation = -np.matmul(inv_rotation, translation)
    return get_transform_from_rotation_translation(inv_rotation, inv_translation, dtype=transform.dtype)


def random_sample_transform(rotation_magnitude: float, translation_magnitude: float) -> ndarray:
    """Sample a rigid transform with euler angles in [0, rotation_magnitude] degrees."""
    euler = np.random.rand(3) * np.pi * rotation_magnitude / 180.0
    rotation = euler_to_rotation_matrix(euler, "zyx")
    translation = np.random.uniform(-translation_magnitude, translation_magnitude, 3)
    return get_transform_from_rotation_translation(rotation, translation)
