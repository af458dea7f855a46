from typing import Iterator, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from numpy import ndarray

from robreg.utils.exceptions import InvalidArgumentError

from .centroid import get_valid_mask


class Correspondence(NamedTuple):
    src_index: int
    tgt_index: int
    distance: Optional[float] = None


CorrespondencesLike = Union[ndarray, Sequence[Correspondence], Sequence[Tuple]]


def as_points(cloud) -> ndarray:
    """View a point cloud as an array of xyz coordinates in the shape of (N, 3).

    Accepts array-likes in the shape of (N, C) with C >= 3 (the columns after xyz, e.g., normals or colors, are
    ignored) and objects with a `points` attribute such as `open3d.geometry.PointCloud`.
    """
    if hasattr(cloud, "points"):
        cloud = cloud.points
    points = np.asarray(cloud)
    if points.ndim != 2 or points.shape[1] < 3:
        raise InvalidArgumentError(f"Point clouds must be in the shape of (N, 3), got {tuple(points.shape)}.")
    if not np.issubdtype(points.dtype, np.number):
        raise InvalidArgumentError(f"Point clouds must be numeric, got dtype {points.dtype}.")
    return points[:, :3]


def _as_indices(indices, num_points: int, name: str) -> ndarray:
    indices = np.asarray(indices)
    if indices.ndim != 1:
        raise InvalidArgumentError(f'"{name}" must be 1-dimensional, got shape {tuple(indices.shape)}.')
    if indices.shape[0] == 0:
        return np.zeros(shape=(0,), dtype=np.int64)
    if not np.issubdtype(indices.dtype, np.integer):
        raise InvalidArgumentError(f'"{name}" must be integers, got dtype {indices.dtype}.')
    indices = indices.astype(np.int64)
    out_of_bounds = (indices < 0) | (indices >= num_points)
    if np.any(out_of_bounds):
        bad_index = int(indices[out_of_bounds][0])
        raise InvalidArgumentError(f'"{name}" contains index {bad_index} out of range [0, {num_points}).')
    return indices


def _parse_correspondences(correspondences: CorrespondencesLike) -> Tuple[ndarray, ndarray, Optional[ndarray]]:
    """Split correspondences into source indices, target indices and distances (NaN if absent)."""
    if isinstance(correspondences, ndarray):
        if (correspondences.ndim == 1 and correspondences.size == 0) or (
            correspondences.ndim == 2 and correspondences.shape[0] == 0
        ):
            return np.zeros(shape=(0,), dtype=np.int64), np.zeros(shape=(0,), dtype=np.int64), None
        if correspondences.ndim != 2 or correspondences.shape[1] not in (2, 3):
            raise InvalidArgumentError(
                f"Correspondences must be in the shape of (C, 2) or (C, 3), got {tuple(correspondences.shape)}."
            )
        corr_indices = correspondences[:, :2]
        if not np.issubdtype(corr_indices.dtype, np.integer):
            if not np.all(np.isfinite(corr_indices)) or np.any(corr_indices != np.round(corr_indices)):
                raise InvalidArgumentError("Correspondence indices must be integers.")
        corr_indices = corr_indices.astype(np.int64)
        distances = correspondences[:, 2].astype(np.float64) if correspondences.shape[1] == 3 else None
        return corr_indices[:, 0], corr_indices[:, 1], distances

    src_indices = []
    tgt_indices = []
    distances = []
    for correspondence in correspondences:
        if len(correspondence) not in (2, 3):
            raise InvalidArgumentError(f"Malformed correspondence: {correspondence}.")
        src_index, tgt_index = correspondence[0], correspondence[1]
        if not isinstance(src_index, (int, np.integer)) or not isinstance(tgt_index, (int, np.integer)):
            raise InvalidArgumentError(f"Correspondence indices must be integers: {correspondence}.")
        distance = correspondence[2] if len(correspondence) == 3 else None
        src_indices.append(int(src_index))
        tgt_indices.append(int(tgt_index))
        distances.append(np.nan if distance is None else float(distance))
    src_indices = np.asarray(src_indices, dtype=np.int64)
    tgt_indices = np.asarray(tgt_indices, dtype=np.int64)
    distances = np.asarray(distances, dtype=np.float64)
    if not np.any(np.isfinite(distances)):
        distances = None
    return src_indices, tgt_indices, distances


class PointPairs:
    """Pairs of source and target points selected from two borrowed point clouds.

    The clouds are never copied or modified. Iterating yields the `(src_point, tgt_point)` pairs in which both points
    are finite; the pairs can be iterated any number of times.
    """

    def __init__(
        self,
        src_points: ndarray,
        tgt_points: ndarray,
        src_indices: Optional[ndarray] = None,
        tgt_indices: Optional[ndarray] = None,
        distances: Optional[ndarray] = None,
    ):
        self._src_points = as_points(src_points)
        self._tgt_points = as_points(tgt_points)
        if src_indices is None:
            src_indices = np.arange(self._src_points.shape[0])
        if tgt_indices is None:
            tgt_indices = np.arange(self._tgt_points.shape[0])
        self._src_indices = _as_indices(src_indices, self._src_points.shape[0], "src_indices")
        self._tgt_indices = _as_indices(tgt_indices, self._tgt_points.shape[0], "tgt_indices")
        if self._src_indices.shape[0] != self._tgt_indices.shape[0]:
            raise InvalidArgumentError(
                f"The numbers of source ({self._src_indices.shape[0]}) and "
                f"target ({self._tgt_indices.shape[0]}) points must be the same."
            )
        if distances is not None:
            distances = np.asarray(distances, dtype=np.float64)
            if distances.shape != self._src_indices.shape:
                raise InvalidArgumentError("The number of distances must match the number of pairs.")
        self._distances = distances

    @classmethod
    def from_clouds(cls, src_cloud, tgt_cloud) -> "PointPairs":
        """Pair the i-th source point with the i-th target point."""
        return cls(src_cloud, tgt_cloud)

    @classmethod
    def from_src_indices(cls, src_cloud, src_indices, tgt_cloud) -> "PointPairs":
        """Pair the selected source points, in order, with all target points."""
        return cls(src_cloud, tgt_cloud, src_indices=src_indices)

    @classmethod
    def from_indices(cls, src_cloud, src_indices, tgt_cloud, tgt_indices) -> "PointPairs":
        return cls(src_cloud, tgt_cloud, src_indices=src_indices, tgt_indices=tgt_indices)

    @classmethod
    def from_correspondences(cls, src_cloud, tgt_cloud, correspondences: CorrespondencesLike) -> "PointPairs":
        src_indices, tgt_indices, distances = _parse_correspondences(correspondences)
        return cls(src_cloud, tgt_cloud, src_indices=src_indices, tgt_indices=tgt_indices, distances=distances)

    @property
    def src_indices(self) -> ndarray:
        return self._src_indices

    @property
    def tgt_indices(self) -> ndarray:
        return self._tgt_indices

    @property
    def distances(self) -> Optional[ndarray]:
        return self._distances

    @property
    def valid_masks(self) -> ndarray:
        src_masks = get_valid_mask(self._src_points[self._src_indices])
        tgt_masks = get_valid_mask(self._tgt_points[self._tgt_indices])
        return src_masks & tgt_masks

    @property
    def num_valid(self) -> int:
        return int(self.valid_masks.sum())

    def __len__(self) -> int:
        return self._src_indices.shape[0]

    def __iter__(self) -> Iterator[Tuple[ndarray, ndarray]]:
        """Per-pair view of the valid pairs, in the same order as the rows of `get_valid_points`."""
        for src_index, tgt_index in zip(self._src_indices, self._tgt_indices):
            src_point = self._src_points[src_index]
            tgt_point = self._tgt_points[tgt_index]
            if np.all(np.isfinite(src_point)) and np.all(np.isfinite(tgt_point)):
                yield src_point, tgt_point

    def get_valid_points(self) -> Tuple[ndarray, ndarray, Optional[ndarray]]:
        """Gather the valid pairs into arrays, the vectorized counterpart of iterating over the pairs.

        Returns:
            src_corr_points (array<float>): (M, 3)
            tgt_corr_points (array<float>): (M, 3)
            corr_distances (array<float>, optional): (M,), NaN where no distance was given.
        """
        masks = self.valid_masks
        src_corr_points = self._src_points[self._src_indices[masks]].astype(np.float64)
        tgt_corr_points = self._tgt_points[self._tgt_indices[masks]].astype(np.float64)
        corr_distances = self._distances[masks] if self._distances is not None else None
        return src_corr_points, tgt_corr_points, corr_distances
