import numpy as np
from numpy import ndarray


def welsch_weights(residuals: ndarray, sigma: float, shift_min: bool = False) -> ndarray:
    """Compute the IRLS weights of the Welsch function.

    w_i = exp(-d_i^2 / (2 sigma^2))

    A non-positive sigma disables the robust weighting and all weights are 1.

    Args:
        residuals (array<float>): the residual distances in the shape of (N,).
        sigma (float): the scale of the Welsch function.
        shift_min (bool): subtract the smallest squared residual before exponentiating, so the largest weight is
            exactly 1 and the weights cannot all underflow. Default: False.

    Returns:
        weights (array<float>): the weights in [0, 1] in the shape of (N,). Non-finite residuals get zero weight.
    """
    residuals = np.asarray(residuals, dtype=np.float64)
    masks = np.isfinite(residuals)
    weights = np.zeros_like(residuals)
    if sigma <= 0:
        weights[masks] = 1.0
        return weights
    sq_residuals = residuals[masks] ** 2
    if shift_min and sq_residuals.shape[0] > 0:
        sq_residuals = sq_residuals - sq_residuals.min()
    weights[masks] = np.exp(-sq_residuals / (2.0 * sigma ** 2))
    return weights


def estimate_welsch_sigma(residuals: ndarray) -> float:
    """Pick a Welsch scale from the residuals so that the largest residual lies at three sigma.

    Returns 0 (robust weighting disabled) if there is no finite non-zero residual.
    """
    residuals = np.asarray(residuals, dtype=np.float64)
    residuals = residuals[np.isfinite(residuals)]
    if residuals.shape[0] == 0:
        return 0.0
    max_sq_residual = np.max(residuals ** 2)
    return float(np.sqrt(max_sq_residual / 9.0))
