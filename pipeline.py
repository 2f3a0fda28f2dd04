"""
Clustering pipeline: DBSCAN (plus optional K-Means) over a CSV of points.

Usage:
    clustering-pipeline --data points.csv --eps 0.5 --min-points 5 --k 3
"""

import argparse
import logging
import os

import pandas as pd
import matplotlib
matplotlib.use("Agg")  # non-interactive backend, figures go to disk
import matplotlib.pyplot as plt
import seaborn as sns

from dbscan import DBSCAN
from kmeans import KMeans
from metrics import calinski_harabasz_score, cluster_sizes, noise_count, silhouette_score
from spatial_index import INDEX_KINDS
from visualization import plot_cluster_sizes, plot_clusters, plot_predictions

logger = logging.getLogger(__name__)


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="DBSCAN / K-Means clustering of a CSV point set")
    p.add_argument("--data", required=True, help="CSV file with one point per row")
    p.add_argument("--columns", nargs="+", default=None, help="Coordinate columns (default: all numeric)")
    p.add_argument("--eps", type=float, required=True, help="DBSCAN neighbourhood radius")
    p.add_argument("--min-points", type=int, required=True, help="Neighbours (self included) for a core point")
    p.add_argument("--include-borders", action="store_true", help="Label border points with their cluster")
    p.add_argument("--index", choices=sorted(INDEX_KINDS), default="kdtree")
    p.add_argument("--k", type=int, default=None, help="Also run K-Means with this many clusters")
    p.add_argument("--iterations", type=int, default=100)
    p.add_argument("--seeds", type=int, default=10, help="K-Means restarts, best one kept")
    p.add_argument("--random-state", type=int, default=None)
    p.add_argument("--predict", default=None, help="CSV of query points to classify against the DBSCAN model")
    p.add_argument("--figures-dir", default=None, help="Save figures here")
    p.add_argument("--verbose", action="store_true")
    return p.parse_args(argv)


def load_points(path, columns=None):
    df = pd.read_csv(path)
    if columns:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"{path}: no such column(s) {', '.join(missing)}")
        df = df[columns]
    else:
        df = df.select_dtypes("number")
    return df.to_numpy(dtype=float), list(df.columns)


def summarize(name, data, labels):
    return {
        "Algorithm": name,
        "Clusters": len(cluster_sizes(labels)),
        "Noise Points": noise_count(labels),
        "Silhouette Score": f"{silhouette_score(data, labels):.4f}",
        "Calinski-Harabasz Index": f"{calinski_harabasz_score(data, labels):.2f}",
    }


def save_figures(figures_dir, data, dbscan, kmeans=None, queries=None, predictions=None):
    os.makedirs(figures_dir, exist_ok=True)
    sns.set_style("whitegrid")
    saved = []

    fig, axes = plt.subplots(1, 2 if kmeans is not None else 1, figsize=(14 if kmeans is not None else 9, 6), squeeze=False)
    plot_clusters(axes[0, 0], data, dbscan.labels, f"DBSCAN (eps={dbscan.eps}, min_points={dbscan.min_points})")
    if kmeans is not None:
        plot_clusters(axes[0, 1], data, kmeans.labels, f"K-Means (k={kmeans.k})", centers=kmeans.centers)
    plt.tight_layout()
    saved.append(os.path.join(figures_dir, "clusters.png"))
    plt.savefig(saved[-1], dpi=150, bbox_inches="tight")
    plt.close()

    fig, ax = plt.subplots(figsize=(9, 5))
    plot_cluster_sizes(ax, dbscan.labels, "DBSCAN cluster sizes", "#FF9800")
    plt.tight_layout()
    saved.append(os.path.join(figures_dir, "cluster_sizes.png"))
    plt.savefig(saved[-1], dpi=150, bbox_inches="tight")
    plt.close()

    if predictions is not None:
        fig, ax = plt.subplots(figsize=(9, 6))
        plot_predictions(ax, data, dbscan.labels, queries, predictions, "DBSCAN predictions")
        plt.tight_layout()
        saved.append(os.path.join(figures_dir, "predictions.png"))
        plt.savefig(saved[-1], dpi=150, bbox_inches="tight")
        plt.close()

    return saved


def run(args):
    steps = 2 + (args.k is not None) + (args.predict is not None)
    step = 1

    print(f"[{step}/{steps}] Loading data...")
    data, columns = load_points(args.data, args.columns)
    print(f"  Shape: {data.shape} | Columns: {', '.join(columns)}")

    step += 1
    print(f"[{step}/{steps}] Running DBSCAN (eps={args.eps}, min_points={args.min_points})...")
    dbscan = DBSCAN(args.eps, args.min_points, args.include_borders, args.index).fit(data)
    print(f"  Found {dbscan.n_clusters} clusters, {len(dbscan.core_sample_indices)} core points.")
    rows = [summarize("DBSCAN", data, dbscan.labels)]

    kmeans = None
    if args.k is not None:
        step += 1
        print(f"[{step}/{steps}] Running K-Means (k={args.k}, {args.seeds} seeds)...")
        kmeans = KMeans(args.k, args.iterations, args.seeds, random_state=args.random_state).fit(data)
        print(f"  Inertia: {kmeans.inertia:,.2f}")
        rows.append(summarize("K-Means", data, kmeans.labels))

    queries, predictions = None, None
    if args.predict is not None:
        step += 1
        print(f"[{step}/{steps}] Classifying query points...")
        queries, _ = load_points(args.predict, args.columns)
        predictions = dbscan.predict(data, queries)
        for row, pred in zip(queries, predictions):
            clusters = ", ".join("noise" if c is None else str(c) for c in pred.clusters)
            print(f"  {tuple(row.tolist())} -> {pred.kind.value} [{clusters}]")

    print("\n" + "=" * 70 + "\n  SUMMARY\n" + "=" * 70)
    print(pd.DataFrame(rows).to_string(index=False))

    if args.figures_dir:
        for path in save_figures(args.figures_dir, data, dbscan, kmeans, queries, predictions):
            logger.info("Saved %s", path)
        print(f"Figures saved to {args.figures_dir}/")

    return dbscan, kmeans, predictions


def main(argv=None):
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except ValueError as exc:
        print(f"error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
