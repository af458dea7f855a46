from typing import Optional

import torch.nn as nn
from torch import Tensor

from robreg.ops.robust_procrustes import robust_weighted_procrustes


class RobustProcrustes(nn.Module):
    def __init__(self, sigma: float = -1.0, eps: float = 1e-6):
        super().__init__()
        self.sigma = sigma
        self.eps = eps

    def set_sigma(self, sigma: float):
        self.sigma = sigma

    def forward(self, src_points: Tensor, tgt_points: Tensor, weights: Optional[Tensor] = None) -> Tensor:
        return robust_weighted_procrustes(src_points, tgt_points, sigma=self.sigma, weights=weights, eps=self.eps)

    def extra_repr(self) -> str:
        param_strings = [f"sigma={self.sigma:g}", f"eps={self.eps:g}"]
        format_string = ", ".join(param_strings)
        return format_string
