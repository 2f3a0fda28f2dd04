import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from spatial_index import as_point_matrix, build_index, region_query

logger = logging.getLogger(__name__)


class PredictionKind(enum.Enum):
    CORE = "core"
    BORDER = "border"
    NOISE = "noise"


@dataclass(frozen=True)
class ClusterPrediction:
    """Classification of one unseen point against a fitted DBSCAN model."""

    kind: PredictionKind
    clusters: Tuple[Optional[int], ...] = field(default_factory=tuple)
    """Distinct labels of the training neighbours, first-occurrence order (may hold None)."""

    @classmethod
    def core(cls, clusters):
        return cls(PredictionKind.CORE, tuple(clusters))

    @classmethod
    def border(cls, clusters):
        return cls(PredictionKind.BORDER, tuple(clusters))

    @classmethod
    def noise(cls):
        return cls(PredictionKind.NOISE)


class DBSCAN:
    """DBSCAN clustering implemented from scratch on top of a radius-query index.

    Labels are ``None`` for noise and dense ids from 0 in discovery order.
    With ``include_borders`` every point popped while growing a cluster is
    labelled with it, so a border point shared by two clusters keeps the id of
    the cluster that reached it last.
    """

    def __init__(self, eps=0.5, min_points=5, include_borders=False, index="kdtree"):
        if not np.isfinite(eps) or eps < 0:
            raise ValueError(f"eps must be a finite non-negative number, got {eps!r}")
        if min_points < 0 or int(min_points) != min_points:
            raise ValueError(f"min_points must be a non-negative integer, got {min_points!r}")
        self.eps = eps
        self.min_points = int(min_points)
        self.include_borders = include_borders
        self.index = index
        self.labels: Optional[List[Optional[int]]] = None
        self.core_sample_indices = None
        self.n_clusters = 0

    def fit(self, X):
        X = as_point_matrix(X)
        eps = X.dtype.type(self.eps)
        n_samples = X.shape[0]
        visited = np.zeros(n_samples, dtype=bool)
        labels = [None] * n_samples
        core = []
        kdt = build_index(X, self.index)

        cluster_id = 0
        for i in range(n_samples):
            if visited[i]:
                continue
            visited[i] = True

            neighbors = region_query(X[i], eps, kdt)
            if len(neighbors) < self.min_points:
                continue

            core.append(i)
            labels[i] = cluster_id
            # sorted, de-duplicated; always expand the largest pending index
            frontier = neighbors
            while frontier:
                q = frontier.pop()
                if self.include_borders:
                    labels[q] = cluster_id
                if visited[q]:
                    continue
                visited[q] = True

                sub_neighbors = region_query(X[q], eps, kdt)
                if len(sub_neighbors) >= self.min_points:
                    core.append(q)
                    if not self.include_borders:
                        labels[q] = cluster_id
                    frontier = sorted(set(frontier).union(sub_neighbors))

            logger.debug("Cluster %d grown from point %d", cluster_id, i)
            cluster_id += 1

        self.labels = labels
        self.core_sample_indices = np.array(sorted(core), dtype=np.intp)
        self.n_clusters = cluster_id
        logger.info(
            "DBSCAN fit %d points: %d clusters, %d core points, %d noise",
            n_samples, cluster_id, len(core), labels.count(None),
        )
        return self

    @property
    def labels_array(self):
        """Labels as an int array with -1 for noise."""
        self._check_fitted()
        return np.array([-1 if c is None else c for c in self.labels], dtype=int)

    def predict(self, X_train, X_new):
        """Classify rows of `X_new` against the matrix this model was fitted on.

        `X_train` must be the training matrix itself; only its row count is
        checked.
        """
        self._check_fitted()
        X_train = as_point_matrix(X_train, "training points")
        X_new = as_point_matrix(X_new, "query points")
        if X_train.shape[0] != len(self.labels):
            raise ValueError(
                f"model was fitted on {len(self.labels)} points, got {X_train.shape[0]} training points"
            )
        if X_new.shape[1] != X_train.shape[1]:
            raise ValueError(
                f"query points have {X_new.shape[1]} columns, training points have {X_train.shape[1]}"
            )

        eps = X_train.dtype.type(self.eps)
        # the query point is not in the index, so it cannot count itself
        threshold = max(self.min_points - 1, 0)
        kdt = build_index(X_train, self.index)

        predictions = []
        for row in X_new:
            neighbors = region_query(row, eps, kdt)
            clusters = list(dict.fromkeys(self.labels[i] for i in neighbors))
            if len(neighbors) >= threshold:
                predictions.append(ClusterPrediction.core(clusters))
            elif any(c is not None for c in clusters):
                predictions.append(ClusterPrediction.border(clusters))
            else:
                predictions.append(ClusterPrediction.noise())
        return predictions

    def _check_fitted(self):
        if self.labels is None:
            raise RuntimeError("DBSCAN model is not fitted yet; call fit() first")


def fit(points, eps, min_points, include_borders=False, index="kdtree"):
    return DBSCAN(eps, min_points, include_borders, index).fit(points)


def predict(model, training_points, query_points):
    return model.predict(training_points, query_points)
