from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

logger = logging.getLogger(__name__)


def compute_sse(X: np.ndarray, labels: np.ndarray, centers: np.ndarray) -> float:
    """Sum of squared Euclidean distances from each point to its assigned center."""
    X = np.asarray(X, dtype=float)
    labels = np.asarray(labels, dtype=int)
    if X.shape[0] != labels.shape[0]:
        raise ValueError(f"Got {X.shape[0]} points but {labels.shape[0]} labels")
    if X.shape[0] == 0:
        return 0.0
    diffs = X - np.asarray(centers, dtype=float)[labels]
    return float(np.sum(diffs * diffs))


def fit_kmeans(X: np.ndarray, k: int, random_state: int = 42, n_init: int = 10) -> KMeans:
    n_samples = X.shape[0]
    if k < 1:
        raise ValueError(f"Number of clusters must be at least 1, got {k}")
    if k > n_samples:
        raise ValueError(f"Cannot fit {k} clusters to {n_samples} samples")

    model = KMeans(n_clusters=k, init="k-means++", n_init=n_init, random_state=random_state)
    model.fit(X)
    return model


def _validate_k_values(k_values: Sequence[int], n_samples: int) -> list[int]:
    ks = [int(k) for k in k_values]
    if not ks:
        raise ValueError("k_values must not be empty")
    if ks[0] < 1:
        raise ValueError("k_values must be positive")
    if any(b <= a for a, b in zip(ks, ks[1:])):
        raise ValueError(f"k_values must be strictly increasing, got {ks}")
    if ks[-1] > n_samples:
        raise ValueError(f"Largest k ({ks[-1]}) exceeds the number of samples ({n_samples})")
    return ks


def elbow_curve(
    X: np.ndarray,
    k_values: Iterable[int],
    random_state: int = 42,
    n_init: int = 10,
) -> pd.DataFrame:
    ks = _validate_k_values(list(k_values), X.shape[0])

    rows: list[dict[str, object]] = []
    for k in ks:
        model = fit_kmeans(X, k, random_state=random_state, n_init=n_init)
        sse = compute_sse(X, model.labels_, model.cluster_centers_)
        logger.debug("k=%d sse=%.2f iterations=%d", k, sse, model.n_iter_)
        rows.append({"k": k, "sse": sse, "n_iter": int(model.n_iter_)})

    curve = pd.DataFrame(rows)
    curve["sse_drop"] = -curve["sse"].diff()
    previous = curve["sse"].shift(1)
    curve["sse_drop_pct"] = np.where(previous > 0, 100.0 * curve["sse_drop"] / previous, np.nan)
    return curve


def find_elbow(curve: pd.DataFrame) -> int:
    """
    Return the k farthest from the straight line joining the curve's end points.

    Both axes are min-max normalized first so the answer does not depend on the
    scale of the SSE values.
    """
    if curve.empty:
        raise ValueError("Cannot locate an elbow on an empty curve")

    ordered = curve.sort_values("k")
    ks = ordered["k"].to_numpy(dtype=float)
    sse = ordered["sse"].to_numpy(dtype=float)
    if len(ks) < 3:
        return int(ks[0])

    sse_range = sse.max() - sse.min()
    if sse_range <= 0:
        return int(ks[0])

    x = (ks - ks[0]) / (ks[-1] - ks[0])
    y = (sse - sse.min()) / sse_range

    dx = x[-1] - x[0]
    dy = y[-1] - y[0]
    distances = np.abs(dx * (y[0] - y) - (x[0] - x) * dy) / np.hypot(dx, dy)
    return int(ks[int(np.argmax(distances))])


def assign_segments(
    df: pd.DataFrame,
    X: np.ndarray,
    k: int,
    features: Sequence[str],
    scaler: StandardScaler | None = None,
    random_state: int = 42,
    n_init: int = 10,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Fit the chosen k and label every customer with a 1-based segment.

    Segments are numbered by their center along the first feature (then the
    second, and so on), so reruns with another seed keep the same numbering
    whenever the partition itself is unchanged.
    """
    if len(df) != X.shape[0]:
        raise ValueError(f"Frame has {len(df)} rows but feature matrix has {X.shape[0]}")

    model = fit_kmeans(X, k, random_state=random_state, n_init=n_init)
    centers = model.cluster_centers_
    if scaler is not None:
        centers = scaler.inverse_transform(centers)

    order = np.lexsort(centers[:, ::-1].T)
    remap = {int(old): new for new, old in enumerate(order, start=1)}

    segmented = df.copy()
    segmented["segment"] = np.array([remap[int(label)] for label in model.labels_], dtype=np.int64)

    centers_df = pd.DataFrame(centers[order], columns=list(features))
    centers_df.insert(0, "segment", np.arange(1, k + 1, dtype=np.int64))

    logger.info("Assigned %d customers to %d segments (sse=%.2f)", len(segmented), k, float(model.inertia_))
    return segmented.reset_index(drop=True), centers_df


def summarize_segments(segmented: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    if "segment" not in segmented.columns:
        raise ValueError("Frame has no 'segment' column; run assign_segments first")

    grouped = segmented.groupby("segment", sort=True)
    summary = grouped.size().rename("customers").to_frame()
    summary["share"] = summary["customers"] / float(len(segmented))
    for column in features:
        summary[f"mean_{column}"] = grouped[column].mean()
    return summary.reset_index()
