from .base import TransformationEstimator
from .builder import build_transformation_estimator
from .point_to_point import PointToPointEstimator
from .point_to_point_robust import RobustPointToPointEstimator
