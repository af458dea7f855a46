from typing import Tuple

import torch
from torch import Tensor


def apply_transform(points: Tensor, transform: Tensor) -> Tensor:
    """Rigid transform to points stored in rows.

    Two cases are supported:
    1. points are (*, 3), transform is (4, 4), the transform is applied to all points.
    2. points are (B, N, 3), transform is (B, 4, 4), the transform is applied batch-wise.

    Args:
        points (Tensor): (*, 3) or (B, N, 3)
        transform (Tensor): (4, 4) or (B, 4, 4)

    Returns:
        points (Tensor): same shape as points.
    """
    rotation, translation = get_rotation_translation_from_transform(transform)
    if transform.dim() == 2:
        input_shape = points.shape
        points = points.reshape(-1, 3)
        points = torch.matmul(points, rotation.transpose(-1, -2)) + translation
        points = points.reshape(*input_shape)
    else:
        assert points.dim() == 3, f"Incompatible shapes {tuple(points.shape)} and {tuple(transform.shape)}."
        points = torch.matmul(points, rotation.transpose(-1, -2)) + translation.unsqueeze(1)
    return points


def get_rotation_translation_from_transform(transform: Tensor) -> Tuple[Tensor, Tensor]:
    """Decompose transformation matrix (*, 4, 4) into rotation matrix (*, 3, 3) and translation vector (*, 3)."""
    rotation = transform[..., :3, :3]
    translation = transform[..., :3, 3]
    return rotation, translation


def get_transform_from_rotation_translation(rotation: Tensor, translation: Tensor) -> Tensor:
    """Compose transformation matrix from rotation matrix and translation vector.

    Args:
        rotation (Tensor): (*, 3, 3)
        translation (Tensor): (*, 3)

    Returns:
        transform (Tensor): (*, 4, 4)
    """
    input_shape = rotation.shape
    rotation = rotation.reshape(-1, 3, 3)
    translation = translation.reshape(-1, 3)
    transform = torch.eye(4).to(rotation).unsqueeze(0).repeat(rotation.shape[0], 1, 1)
    transform[:, :3, :3] = rotation
    transform[:, :3, 3] = translation
    output_shape = input_shape[:-2] + (4, 4)
    transform = transform.view(*output_shape)
    return transform
