"""Deterministic stand-in for the public mall customers dataset.

The real CSV has to be downloaded by hand, so offline runs and tests use a
synthetic frame with the same columns and the same five income/spending groups.
"""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from kmeans_article.io import to_public_headers

# (annual income k$, spending score, share of customers)
SEGMENT_PROFILES = [
    (22.0, 16.0, 0.115),
    (22.0, 84.0, 0.110),
    (56.0, 50.0, 0.405),
    (92.0, 16.0, 0.195),
    (92.0, 84.0, 0.175),
]


def _segment_sizes(n_customers: int) -> list[int]:
    shares = np.array([share for _, _, share in SEGMENT_PROFILES])
    sizes = np.floor(shares * n_customers).astype(int)
    sizes[2] += n_customers - int(sizes.sum())
    return sizes.tolist()


def make_sample_customers(n_customers: int = 200, random_state: int = 42) -> pd.DataFrame:
    if n_customers < 10:
        raise ValueError("n_customers must be at least 10 to populate every segment.")

    rng = np.random.default_rng(random_state)
    incomes: list[np.ndarray] = []
    scores: list[np.ndarray] = []
    for (income_mu, score_mu, _), size in zip(SEGMENT_PROFILES, _segment_sizes(n_customers)):
        incomes.append(rng.normal(income_mu, 4.5, size=size))
        scores.append(rng.normal(score_mu, 4.5, size=size))

    income = np.clip(np.round(np.concatenate(incomes)), 15, 140).astype(int)
    score = np.clip(np.round(np.concatenate(scores)), 1, 100).astype(int)

    order = np.argsort(income, kind="stable")
    df = pd.DataFrame(
        {
            "customer_id": np.arange(1, n_customers + 1, dtype=np.int64),
            "gender": rng.choice(["Female", "Male"], size=n_customers, p=[0.56, 0.44]),
            "age": rng.integers(18, 71, size=n_customers),
            "annual_income": income[order],
            "spending_score": score[order],
        }
    )
    return df


def write_sample_csv(output_path: str, n_customers: int = 200, random_state: int = 42) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    customers = make_sample_customers(n_customers=n_customers, random_state=random_state)
    to_public_headers(customers).to_csv(path, index=False)
    return path
