from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

SEGMENT_COLORS = [
    "#0f766e",
    "#b91c1c",
    "#1d4ed8",
    "#7c3aed",
    "#b45309",
    "#0e7490",
    "#166534",
    "#9f1239",
    "#4338ca",
    "#92400e",
]

AXIS_LABELS = {
    "annual_income": "Annual income (k$)",
    "spending_score": "Spending score (1-100)",
    "age": "Age",
    "gender_male": "Male (1) / Female (0)",
}


def _axis_label(column: str) -> str:
    return AXIS_LABELS.get(column, column.replace("_", " ").capitalize())


def plot_elbow(curve: pd.DataFrame, elbow_k: int | None, output_path: str) -> Path:
    ordered = curve.sort_values("k")

    fig, ax = plt.subplots(figsize=(8, 4.5))
    ax.plot(ordered["k"], ordered["sse"], "o-", color="#0f766e", linewidth=2)
    if elbow_k is not None and elbow_k in set(ordered["k"].astype(int)):
        elbow_sse = float(ordered.loc[ordered["k"] == elbow_k, "sse"].iloc[0])
        ax.axvline(elbow_k, color="#b91c1c", linestyle="--", linewidth=1)
        ax.annotate(
            f"elbow (k={elbow_k})",
            xy=(elbow_k, elbow_sse),
            xytext=(10, 20),
            textcoords="offset points",
            color="#b91c1c",
        )
    ax.set_xticks(ordered["k"].astype(int).tolist())
    ax.set_xlabel("Number of clusters (k)")
    ax.set_ylabel("SSE")
    ax.set_title("Elbow Method")
    ax.grid(alpha=0.3)
    fig.tight_layout()

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=110)
    plt.close(fig)
    return path


def plot_segments(
    segmented: pd.DataFrame,
    centers: pd.DataFrame,
    features: Sequence[str],
    output_path: str,
) -> Path:
    if len(features) < 2:
        raise ValueError("A segment scatter needs at least two features")
    x_col, y_col = features[0], features[1]

    fig, ax = plt.subplots(figsize=(8, 5.5))
    for idx, (segment, group) in enumerate(segmented.groupby("segment", sort=True)):
        ax.scatter(
            group[x_col],
            group[y_col],
            s=24,
            alpha=0.75,
            color=SEGMENT_COLORS[idx % len(SEGMENT_COLORS)],
            label=f"Segment {int(segment)}",
        )
    ax.scatter(
        centers[x_col],
        centers[y_col],
        s=180,
        marker="X",
        color="#0f172a",
        label="Centroids",
    )
    ax.set_xlabel(_axis_label(x_col))
    ax.set_ylabel(_axis_label(y_col))
    ax.set_title("Customer segments")
    ax.legend(loc="best", fontsize=8)
    ax.grid(alpha=0.3)
    fig.tight_layout()

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=110)
    plt.close(fig)
    return path
