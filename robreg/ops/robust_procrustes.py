from typing import Optional

import torch
from torch import Tensor

from robreg.utils.exceptions import DegenerateInputError

from .se3 import get_transform_from_rotation_translation


def welsch_weights(residuals: Tensor, sigma: float) -> Tensor:
    """Welsch weights exp(-d^2 / (2 sigma^2)), all ones if sigma is non-positive."""
    if sigma <= 0:
        return torch.ones_like(residuals)
    return torch.exp(-residuals.pow(2) / (2.0 * sigma ** 2))


def robust_weighted_procrustes(
    src_points: Tensor,
    tgt_points: Tensor,
    sigma: float = -1.0,
    weights: Optional[Tensor] = None,
    eps: float = 1e-6,
) -> Tensor:
    """Compute rigid transformation from `src_points` to `tgt_points` using Welsch-weighted SVD.

    The residual of a pair is the distance between the two points, so the source points should already be moved by
    the current estimate. Pairs containing a non-finite point get zero weight.

    Args:
        src_points (Tensor): (B, N, 3) or (N, 3)
        tgt_points (Tensor): (B, N, 3) or (N, 3)
        sigma (float): the scale of the Welsch function, non-positive to disable. Default: -1.
        weights (Tensor, optional): extra weights multiplied to the robust weights, (B, N) or (N,).
        eps (float): Default: 1e-6.

    Returns:
        transform: Tensor (B, 4, 4) or (4, 4)

    Raises:
        DegenerateInputError: if a batch item has no valid pair or zero weight mass.
    """
    if src_points.dim() == 2:
        src_points = src_points.unsqueeze(0)
        tgt_points = tgt_points.unsqueeze(0)
        if weights is not None:
            weights = weights.unsqueeze(0)
        squeeze_first = True
    else:
        squeeze_first = False

    batch_size = src_points.shape[0]
    masks = torch.isfinite(src_points).all(dim=-1) & torch.isfinite(tgt_points).all(dim=-1)  # (B, N)
    src_points = torch.where(masks.unsqueeze(-1), src_points, torch.zeros_like(src_points))
    tgt_points = torch.where(masks.unsqueeze(-1), tgt_points, torch.zeros_like(tgt_points))

    residuals = torch.linalg.norm(tgt_points - src_points, dim=-1)  # (B, N)
    if sigma > 0:
        # shift by the smallest valid residual so that the weights cannot all underflow
        sq_residuals = torch.where(masks, residuals.pow(2), torch.full_like(residuals, float("inf")))
        min_sq_residuals = sq_residuals.amin(dim=1, keepdim=True)
        min_sq_residuals = torch.where(
            torch.isfinite(min_sq_residuals), min_sq_residuals, torch.zeros_like(min_sq_residuals)
        )
        residuals = torch.sqrt(torch.clamp(residuals.pow(2) - min_sq_residuals, min=0.0))
    robust_weights = welsch_weights(residuals, sigma)
    if weights is None:
        weights = torch.ones_like(robust_weights)
    weights = weights * robust_weights * masks.to(robust_weights)
    weight_sums = weights.sum(dim=1, keepdim=True)  # (B, 1)
    degenerate_masks = ~masks.any(dim=1) | ~(weight_sums.squeeze(1) > 0)
    if degenerate_masks.any():
        batch_indices = torch.nonzero(degenerate_masks).squeeze(1).tolist()
        raise DegenerateInputError(f"No valid weighted correspondence in batch items {batch_indices}.")
    weights = weights / torch.clamp(weight_sums, min=eps)
    weights = weights.unsqueeze(2)  # (B, N, 1)

    src_centroid = torch.sum(src_points * weights, dim=1, keepdim=True)  # (B, 1, 3)
    tgt_centroid = torch.sum(tgt_points * weights, dim=1, keepdim=True)  # (B, 1, 3)
    src_points_centered = src_points - src_centroid  # (B, N, 3)
    tgt_points_centered = tgt_points - tgt_centroid  # (B, N, 3)

    H = src_points_centered.transpose(1, 2) @ (weights * tgt_points_centered)  # (B, 3, 3)

    U, _, Vh = torch.linalg.svd(H)  # H = USV^T
    Ut = U.transpose(1, 2)
    V = Vh.transpose(1, 2)
    eye = torch.eye(3).to(H).unsqueeze(0).repeat(batch_size, 1, 1)
    det = torch.det(V @ Ut)
    eye[:, -1, -1] = torch.where(det < 0, -torch.ones_like(det), torch.ones_like(det))
    rotation = V @ eye @ Ut

    translation = tgt_centroid.transpose(1, 2) - rotation @ src_centroid.transpose(1, 2)
    translation = translation.squeeze(2)

    transform = get_transform_from_rotation_translation(rotation, translation)
    if squeeze_first:
        transform = transform.squeeze(0)
    return transform
