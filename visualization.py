import numpy as np

from dbscan import PredictionKind
from metrics import cluster_sizes, labels_to_array, noise_count

CLUSTER_COLORS = [
    "#E63946", "#457B9D", "#2A9D8F", "#E9C46A", "#F4A261",
    "#264653", "#6A0572", "#AB83A1", "#1D3557", "#A8DADC",
]

PREDICTION_MARKERS = {
    PredictionKind.CORE: ("*", "black"),
    PredictionKind.BORDER: ("^", "dimgray"),
    PredictionKind.NOISE: ("x", "red"),
}


def _xy(data):
    """First two columns; 1-D data is drawn along y=0."""
    data = np.asarray(data)
    if data.shape[1] == 1:
        return data[:, 0], np.zeros(len(data))
    return data[:, 0], data[:, 1]


def plot_clusters(ax, data, labels, title, centers=None):
    """Scatter each cluster in its own color, noise in grey."""
    x, y = _xy(data)
    lbl = labels_to_array(labels)

    noise = lbl == -1
    if noise.any():
        ax.scatter(
            x[noise], y[noise], s=8, alpha=0.3, c="#CCCCCC", marker=".",
            label=f"Noise ({noise.sum()})", zorder=1,
        )

    for ci, cid in enumerate(np.unique(lbl[~noise])):
        m = lbl == cid
        ax.scatter(
            x[m], y[m], s=12, alpha=0.6, color=CLUSTER_COLORS[ci % len(CLUSTER_COLORS)],
            edgecolors="none", label=f"C{cid} ({m.sum()} pts)", zorder=2,
        )

    if centers is not None:
        cx, cy = _xy(centers)
        ax.scatter(
            cx, cy, s=250, c="black", marker="X", edgecolors="white",
            linewidths=2, label="Centers", zorder=4,
        )

    ax.set_title(title, fontsize=14, fontweight="bold", pad=12)
    ax.set_xlabel("x", fontsize=12)
    ax.set_ylabel("y", fontsize=12)
    ax.legend(fontsize=7, markerscale=2.5, loc="best", framealpha=0.9)
    ax.grid(True, alpha=0.15, linestyle="--")


def plot_predictions(ax, training_points, labels, query_points, predictions, title):
    """Training clusters with query points overlaid, marked by prediction kind."""
    plot_clusters(ax, training_points, labels, title)
    qx, qy = _xy(query_points)
    kinds = np.array([p.kind for p in predictions], dtype=object)
    for kind, (marker, color) in PREDICTION_MARKERS.items():
        m = kinds == kind
        if m.any():
            ax.scatter(
                qx[m], qy[m], s=120, c=color, marker=marker,
                label=f"{kind.value} ({m.sum()})", zorder=5,
            )
    ax.legend(fontsize=7, markerscale=1.5, loc="best", framealpha=0.9)


def plot_cluster_sizes(ax, labels, title, color):
    """Bar chart of cluster sizes, noise as a trailing grey bar."""
    counts = dict(enumerate(cluster_sizes(labels)))
    counts = {f"C{cid}": size for cid, size in counts.items() if size}
    colors = [color] * len(counts)
    n_noise = noise_count(labels)
    if n_noise:
        counts["Noise"] = n_noise
        colors.append("lightgray")
    if not counts:
        return

    bars = ax.bar(list(counts), list(counts.values()), color=colors, edgecolor="white", linewidth=1.5)
    ax.bar_label(bars, padding=2, fontsize=10)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_ylabel("Number of Points")
