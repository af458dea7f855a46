import abc
from typing import Optional, Tuple

from numpy import ndarray

from robreg.array_ops.point_pairs import CorrespondencesLike, PointPairs
from robreg.utils.exceptions import DegenerateInputError


class TransformationEstimator(abc.ABC):
    """Estimate the rigid transform aligning a source point cloud onto a target point cloud.

    The four entry points only differ in how the pairs of points are selected. They all build a `PointPairs` and
    hand it over to `estimate_from_pairs`.

    `init_transform` is the current estimate of the registration loop. It is only used to measure the residuals of
    the pairs and never composed into the result.
    """

    def estimate_rigid_transform(self, src_cloud, tgt_cloud, init_transform: Optional[ndarray] = None) -> ndarray:
        """Align the i-th source point to the i-th target point. The clouds must have the same size."""
        pairs = PointPairs.from_clouds(src_cloud, tgt_cloud)
        return self.estimate_from_pairs(pairs, init_transform=init_transform)

    def estimate_rigid_transform_with_src_indices(
        self, src_cloud, src_indices, tgt_cloud, init_transform: Optional[ndarray] = None
    ) -> ndarray:
        """Align the selected source points, in order, to all target points."""
        pairs = PointPairs.from_src_indices(src_cloud, src_indices, tgt_cloud)
        return self.estimate_from_pairs(pairs, init_transform=init_transform)

    def estimate_rigid_transform_with_indices(
        self, src_cloud, src_indices, tgt_cloud, tgt_indices, init_transform: Optional[ndarray] = None
    ) -> ndarray:
        """Align `src_cloud[src_indices[i]]` to `tgt_cloud[tgt_indices[i]]`."""
        pairs = PointPairs.from_indices(src_cloud, src_indices, tgt_cloud, tgt_indices)
        return self.estimate_from_pairs(pairs, init_transform=init_transform)

    def estimate_rigid_transform_with_correspondences(
        self, src_cloud, tgt_cloud, correspondences: CorrespondencesLike, init_transform: Optional[ndarray] = None
    ) -> ndarray:
        """Align the pairs given by the correspondences (src_index, tgt_index[, distance])."""
        pairs = PointPairs.from_correspondences(src_cloud, tgt_cloud, correspondences)
        return self.estimate_from_pairs(pairs, init_transform=init_transform)

    @abc.abstractmethod
    def estimate_from_pairs(self, pairs: PointPairs, init_transform: Optional[ndarray] = None) -> ndarray:
        raise NotImplementedError


def get_valid_pairs(pairs: PointPairs) -> Tuple[ndarray, ndarray, Optional[ndarray]]:
    """Gather the valid pairs, failing if there is none."""
    if len(pairs) == 0:
        raise DegenerateInputError("No correspondences are given.")
    src_corr_points, tgt_corr_points, corr_distances = pairs.get_valid_points()
    if src_corr_points.shape[0] == 0:
        raise DegenerateInputError(f"All {len(pairs)} correspondences contain invalid points.")
    return src_corr_points, tgt_corr_points, corr_distances
