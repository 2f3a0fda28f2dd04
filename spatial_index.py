import numpy as np
from scipy.spatial import KDTree


def as_point_matrix(X, name="points"):
    """Validate `X` as a finite 2-D matrix, keeping floating dtypes as they are."""
    X = np.asarray(X)
    if X.ndim != 2:
        raise ValueError(f"{name} must be a 2-D array, got {X.ndim}-D")
    if not np.issubdtype(X.dtype, np.floating):
        X = X.astype(np.float64)
    if not np.isfinite(X).all():
        raise ValueError(f"{name} contains NaN or infinite coordinates")
    return X


def _squared_distances(points, point):
    return ((points - point) ** 2).sum(axis=1)


class _Index:
    """Immutable radius-query index over the rows of a point matrix."""

    def __init__(self, points):
        self.points = points
        self.n_dims = points.shape[1]

    def _check_point(self, point):
        point = np.asarray(point, dtype=self.points.dtype)
        if point.shape != (self.n_dims,):
            raise ValueError(
                f"query point has shape {point.shape}, index expects ({self.n_dims},)"
            )
        return point

    def within(self, point, radius_sq):
        raise NotImplementedError


class BruteForceIndex(_Index):
    """Linear scan over every indexed row."""

    def within(self, point, radius_sq):
        point = self._check_point(point)
        return np.flatnonzero(_squared_distances(self.points, point) <= radius_sq)


class KDTreeIndex(_Index):
    """k-d tree backed index (scipy.spatial.KDTree).

    The tree only narrows the candidates; membership is decided with the same
    squared-distance test as BruteForceIndex, so both give identical results.
    """

    def __init__(self, points):
        super().__init__(points)
        self.tree = KDTree(points) if len(points) else None

    def within(self, point, radius_sq):
        point = self._check_point(point)
        if self.tree is None:
            return np.empty(0, dtype=np.intp)
        # the tree measures in float64 while the filter below runs in the matrix
        # dtype; widen by the coarser precision so no rounded-in point is missed
        precision = max(np.finfo(self.points.dtype).eps, np.finfo(np.float64).eps)
        slack = 4 * (self.n_dims + 2) * float(precision)
        radius = np.nextafter(np.sqrt(float(radius_sq) * (1 + slack)), np.inf)
        candidates = np.asarray(self.tree.query_ball_point(point, radius), dtype=np.intp)
        if candidates.size == 0:
            return candidates
        dists = _squared_distances(self.points[candidates], point)
        return candidates[dists <= radius_sq]


INDEX_KINDS = {
    "kdtree": KDTreeIndex,
    "brute": BruteForceIndex,
}


def build_index(points, kind="kdtree"):
    """Build a fresh index of the given kind over `points`."""
    try:
        cls = INDEX_KINDS[kind]
    except KeyError:
        raise ValueError(
            f"unknown index kind {kind!r}, expected one of {sorted(INDEX_KINDS)}"
        ) from None
    return cls(points)


def region_query(point, eps, index):
    """Indices within `eps` of `point`, de-duplicated and sorted ascending."""
    found = index.within(point, eps * eps)
    return sorted({int(i) for i in found})
