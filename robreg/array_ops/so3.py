import numpy as np
from numpy import ndarray
from scipy.spatial.transform import Rotation


def euler_to_rotation_matrix(euler: ndarray, order: str, use_degree: bool = False) -> ndarray:
    rotation = Rotation.from_euler(order, euler, degrees=use_degree).as_matrix()
    return rotation


def rotation_matrix_to_euler(rotation: ndarray, order: str, use_degree: bool = False) -> ndarray:
    euler = Rotation.from_matrix(rotation).as_euler(order, degrees=use_degree)
    return euler


def random_sample_rotation(rotation_factor: float = 1.0) -> ndarray:
    """Sample a rotation matrix from three euler angles in [0, 2pi / rotation_factor]."""
    # angle_z, angle_y, angle_x
    euler = np.random.rand(3) * np.pi * 2 / rotation_factor
    rotation = euler_to_rotation_matrix(euler, "zyx")
    return rotation


def is_rotation_matrix(rotation: ndarray, atol: float = 1e-6) -> bool:
    """Check that a (3, 3) matrix is a proper rotation: R^T R = I and det(R) = +1."""
    if rotation.shape != (3, 3) or not np.all(np.isfinite(rotation)):
        return False
    orthonormal = np.allclose(np.matmul(rotation.T, rotation), np.eye(3), atol=atol)
    proper = abs(np.linalg.det(rotation) - 1.0) < atol
    return bool(orthonormal and proper)
