import numpy as np


def labels_to_array(labels):
    """Nullable labels (None = noise) or a -1 coded array -> int array, -1 for noise."""
    return np.array([-1 if c is None else c for c in labels], dtype=int)


def cluster_sizes(labels):
    """Points per cluster id, ids 0..max in order."""
    lbl = labels_to_array(labels)
    lbl = lbl[lbl >= 0]
    return np.bincount(lbl).tolist() if len(lbl) else []


def noise_count(labels):
    return int((labels_to_array(labels) == -1).sum())


def silhouette_score(X, labels, sample_size=3000, random_state=42):
    """Mean Silhouette Coefficient over clustered points (subsampled for efficiency)."""
    X = np.asarray(X, dtype=float)
    lbl = labels_to_array(labels)
    mask = lbl >= 0
    X_v, lbl_v = X[mask], lbl[mask]
    n = len(X_v)
    if n > sample_size:
        rng = np.random.default_rng(random_state)
        idx = rng.choice(n, sample_size, replace=False)
        X_v, lbl_v = X_v[idx], lbl_v[idx]
        n = sample_size

    unique = np.unique(lbl_v)
    if len(unique) < 2:
        return 0.0

    sils = np.zeros(n)
    for i in range(n):
        dists = np.sqrt(((X_v - X_v[i]) ** 2).sum(axis=1))
        mean_by_label = {lab: dists[lbl_v == lab].mean() for lab in unique}
        same = lbl_v == lbl_v[i]
        if same.sum() < 2:
            continue
        # own point contributes a zero distance
        a_i = dists[same].sum() / (same.sum() - 1)
        b_i = min(v for lab, v in mean_by_label.items() if lab != lbl_v[i])
        denom = max(a_i, b_i)
        sils[i] = (b_i - a_i) / denom if denom > 0 else 0.0

    return float(sils.mean())


def calinski_harabasz_score(X, labels):
    """Between- to within-cluster variance ratio over clustered points."""
    X = np.asarray(X, dtype=float)
    lbl = labels_to_array(labels)
    clustered = lbl >= 0
    _, member_of, counts = np.unique(lbl[clustered], return_inverse=True, return_counts=True)
    X_v = X[clustered]
    n, k = len(X_v), len(counts)
    if k < 2 or n <= k:
        return 0.0

    centroids = np.stack([X_v[member_of == j].mean(axis=0) for j in range(k)])
    spread = ((centroids - X_v.mean(axis=0)) ** 2).sum(axis=1)
    dispersion_between = float(counts @ spread)
    dispersion_within = float(((X_v - centroids[member_of]) ** 2).sum())
    if dispersion_within == 0:
        return 0.0
    return (dispersion_between / (k - 1)) / (dispersion_within / (n - k))
