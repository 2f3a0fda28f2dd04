"""
Unit tests for the K-Means collaborator.
"""

import numpy as np
import pytest

import kmeans
from kmeans import KMeans


class TestKMeans:
    """Best-of-N Lloyd iterations."""

    def test_separates_two_groups(self, separated_kmeans_data):
        model = KMeans(k=2, iterations=100, n_seeds=10, random_state=0).fit(separated_kmeans_data)
        assert model.centers.shape == (2, 2)

        classes = model.predict(separated_kmeans_data)
        class_a = classes[0]
        assert all(c == class_a for c in classes[:3])
        assert all(c != class_a for c in classes[3:])
        np.testing.assert_array_equal(classes, model.labels)

    def test_withinss_per_cluster(self, separated_kmeans_data):
        model = kmeans.fit(separated_kmeans_data, 2, 100, 5, random_state=1)
        assert model.withinss.shape == (2,)
        assert model.inertia == pytest.approx(model.withinss.sum())
        for j in range(2):
            pts = separated_kmeans_data[model.labels == j]
            expected = ((pts - pts.mean(axis=0)) ** 2).sum()
            assert model.withinss[j] == pytest.approx(expected)

    def test_reproducible_with_random_state(self, random_blobs):
        a = KMeans(k=3, n_seeds=4, random_state=3).fit(random_blobs)
        b = KMeans(k=3, n_seeds=4, random_state=3).fit(random_blobs)
        np.testing.assert_array_equal(a.labels, b.labels)
        np.testing.assert_allclose(a.centers, b.centers)

    def test_keeps_trial_with_lowest_withinss(self, random_blobs):
        model = KMeans(k=3, n_seeds=8, random_state=5).fit(random_blobs)
        children = np.random.SeedSequence(5).spawn(8)
        totals = [
            model._single_run(random_blobs, np.random.default_rng(s))[2].sum()
            for s in children
        ]
        assert model.inertia == pytest.approx(min(totals))

    def test_k_equals_n(self, two_blobs):
        model = KMeans(k=len(two_blobs), n_seeds=1, random_state=0).fit(two_blobs)
        assert model.inertia == pytest.approx(0.0)
        assert sorted(model.labels.tolist()) == list(range(len(two_blobs)))

    def test_keeps_float32(self, separated_kmeans_data):
        model = KMeans(k=2, random_state=0).fit(separated_kmeans_data.astype(np.float32))
        assert model.centers.dtype == np.float32


class TestKMeansValidation:

    @pytest.mark.parametrize("kwargs", [{"k": 0}, {"iterations": 0}, {"n_seeds": 0}])
    def test_bad_parameters(self, kwargs):
        with pytest.raises(ValueError):
            KMeans(**kwargs)

    def test_k_larger_than_points(self, two_blobs):
        with pytest.raises(ValueError, match="exceeds"):
            KMeans(k=7).fit(two_blobs)

    def test_nan_points(self):
        with pytest.raises(ValueError, match="NaN"):
            KMeans(k=1).fit(np.array([[np.nan, 0.0]]))

    def test_predict_unfitted(self, two_blobs):
        with pytest.raises(RuntimeError, match="not fitted"):
            KMeans(k=2).predict(two_blobs)

    def test_predict_width_mismatch(self, two_blobs):
        model = KMeans(k=2, random_state=0).fit(two_blobs)
        with pytest.raises(ValueError, match="columns"):
            model.predict(np.ones((1, 3)))
