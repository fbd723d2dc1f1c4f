"""Checks that the rendered numbers agree with what the article's prose claims."""
from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from kmeans_article.clustering import find_elbow


@dataclass
class FidelityCheck:
    name: str
    passed: bool
    detail: str


def check_sse_non_increasing(curve: pd.DataFrame, rtol: float = 1e-6) -> FidelityCheck:
    ordered = curve.sort_values("k").reset_index(drop=True)
    increases: list[str] = []
    for prev, cur in zip(ordered.itertuples(index=False), ordered.iloc[1:].itertuples(index=False)):
        allowed = float(prev.sse) * (1.0 + rtol)
        if float(cur.sse) > allowed:
            increases.append(f"k={int(cur.k)} ({float(prev.sse):,.2f} -> {float(cur.sse):,.2f})")

    if increases:
        return FidelityCheck(
            name="sse_non_increasing",
            passed=False,
            detail="SSE rose at " + ", ".join(increases),
        )
    return FidelityCheck(
        name="sse_non_increasing",
        passed=True,
        detail=f"SSE never increases across k={int(ordered['k'].min())}..{int(ordered['k'].max())}",
    )


def check_elbow_near(curve: pd.DataFrame, stated_elbow: int, tolerance: int = 1) -> FidelityCheck:
    detected = find_elbow(curve)
    gap = abs(detected - stated_elbow)
    return FidelityCheck(
        name="elbow_near_stated",
        passed=gap <= tolerance,
        detail=f"Detected elbow at k={detected}; prose states k={stated_elbow} (tolerance {tolerance})",
    )


def run_fidelity_checks(curve: pd.DataFrame, stated_elbow: int, tolerance: int = 1) -> list[FidelityCheck]:
    return [
        check_sse_non_increasing(curve),
        check_elbow_near(curve, stated_elbow, tolerance=tolerance),
    ]


def failed_checks(checks: list[FidelityCheck]) -> list[FidelityCheck]:
    return [check for check in checks if not check.passed]
