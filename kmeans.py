import logging

import numpy as np

from spatial_index import as_point_matrix

logger = logging.getLogger(__name__)


class KMeans:
    """K-Means clustering, best of `n_seeds` independently seeded runs."""

    def __init__(self, k=3, iterations=100, n_seeds=10, tol=0.0, random_state=None):
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k!r}")
        if iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {iterations!r}")
        if n_seeds < 1:
            raise ValueError(f"n_seeds must be at least 1, got {n_seeds!r}")
        self.k = k
        self.iterations = iterations
        self.n_seeds = n_seeds
        self.tol = tol
        self.random_state = random_state
        self.centers = None
        self.labels = None
        self.withinss = None
        self.inertia = None
        self.n_iter = 0

    def _squared_distances(self, X, centers):
        """(n, d) x (k, d) -> (n, k) squared distance matrix."""
        return ((X[:, np.newaxis, :] - centers[np.newaxis, :, :]) ** 2).sum(axis=2)

    def _single_run(self, X, rng):
        n = X.shape[0]
        centers = X[rng.choice(n, self.k, replace=False)].copy()

        for iteration in range(self.iterations):
            labels = np.argmin(self._squared_distances(X, centers), axis=1)

            new_centers = np.empty_like(centers)
            for j in range(self.k):
                pts = X[labels == j]
                # an emptied cluster restarts from a random row
                new_centers[j] = pts.mean(axis=0) if len(pts) > 0 else X[rng.integers(n)]

            shift = np.sqrt(((new_centers - centers) ** 2).sum(axis=1)).max()
            centers = new_centers
            if shift <= self.tol:
                break

        dists = self._squared_distances(X, centers)
        labels = np.argmin(dists, axis=1)
        withinss = np.bincount(
            labels, weights=dists[np.arange(n), labels], minlength=self.k
        ).astype(X.dtype)
        return centers, labels, withinss, iteration + 1

    def fit(self, X):
        X = as_point_matrix(X)
        if self.k > X.shape[0]:
            raise ValueError(f"k={self.k} exceeds the number of points ({X.shape[0]})")

        seeds = np.random.SeedSequence(self.random_state).spawn(self.n_seeds)
        trials = [self._single_run(X, np.random.default_rng(s)) for s in seeds]
        for t, (_, _, withinss, n_iter) in enumerate(trials):
            logger.debug("K-Means trial %d: withinss=%.6g after %d iterations", t, withinss.sum(), n_iter)

        best = min(range(len(trials)), key=lambda t: trials[t][2].sum())
        self.centers, self.labels, self.withinss, self.n_iter = trials[best]
        self.inertia = self.withinss.sum()
        logger.info("K-Means k=%d: best of %d trials is %d (inertia=%.6g)", self.k, self.n_seeds, best, self.inertia)
        return self

    def predict(self, X):
        if self.centers is None:
            raise RuntimeError("KMeans model is not fitted yet; call fit() first")
        X = as_point_matrix(X)
        if X.shape[1] != self.centers.shape[1]:
            raise ValueError(
                f"points have {X.shape[1]} columns, centers have {self.centers.shape[1]}"
            )
        return np.argmin(self._squared_distances(X, self.centers), axis=1)


def fit(points, k, iterations, n_seeds, random_state=None):
    return KMeans(k, iterations, n_seeds, random_state=random_state).fit(points)
