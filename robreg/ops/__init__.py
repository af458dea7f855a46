from .robust_procrustes import robust_weighted_procrustes, welsch_weights
from .se3 import apply_transform, get_rotation_translation_from_transform, get_transform_from_rotation_translation
