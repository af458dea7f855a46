from typing import Tuple, Union

from .base import TransformationEstimator
from .point_to_point import PointToPointEstimator
from .point_to_point_robust import RobustPointToPointEstimator

ESTIMATORS = {
    "PointToPoint": PointToPointEstimator,
    "PointToPointRobust": RobustPointToPointEstimator,
}


def parse_cfg(cfg: Union[str, dict]) -> Tuple[str, dict]:
    if isinstance(cfg, str):
        return cfg, {}
    assert isinstance(cfg, dict), "Illegal cfg type: {}.".format(type(cfg))
    estimator = cfg["type"]
    kwargs = {key: value for key, value in cfg.items() if key != "type"}
    return estimator, kwargs


def build_transformation_estimator(cfg: Union[str, dict]) -> TransformationEstimator:
    """Factory function for transformation estimators.

    Example:
        build_transformation_estimator({"type": "PointToPointRobust", "sigma": 0.05})
    """
    estimator, kwargs = parse_cfg(cfg)
    if estimator not in ESTIMATORS:
        raise ValueError(f"Unsupported estimator: {estimator}. Supported estimators: {list(ESTIMATORS.keys())}.")
    return ESTIMATORS[estimator](**kwargs)
