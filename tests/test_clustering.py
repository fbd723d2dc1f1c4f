import numpy as np
import pandas as pd
import pytest

from kmeans_article.clustering import (
    assign_segments,
    compute_sse,
    elbow_curve,
    find_elbow,
    fit_kmeans,
    summarize_segments,
)
from kmeans_article.preprocessing import build_feature_matrix

FEATURES = ["annual_income", "spending_score"]


def test_compute_sse_by_hand():
    X = np.array([[0.0, 0.0], [2.0, 0.0], [10.0, 10.0]])
    labels = np.array([0, 0, 1])
    centers = np.array([[1.0, 0.0], [10.0, 11.0]])
    assert compute_sse(X, labels, centers) == pytest.approx(1.0 + 1.0 + 1.0)


def test_compute_sse_matches_inertia(income_spending):
    _, X = income_spending
    model = fit_kmeans(X, 3)
    assert compute_sse(X, model.labels_, model.cluster_centers_) == pytest.approx(model.inertia_, rel=1e-6)


def test_fit_kmeans_rejects_bad_k():
    X = np.zeros((3, 2))
    with pytest.raises(ValueError):
        fit_kmeans(X, 0)
    with pytest.raises(ValueError):
        fit_kmeans(X, 4)


def test_elbow_curve_is_non_increasing(income_spending):
    _, X = income_spending
    curve = elbow_curve(X, range(1, 11))
    assert curve["k"].tolist() == list(range(1, 11))
    assert list(curve.columns) == ["k", "sse", "n_iter", "sse_drop", "sse_drop_pct"]
    assert np.isnan(curve.loc[0, "sse_drop"])
    assert (np.diff(curve["sse"].to_numpy()) <= 1e-6 * curve["sse"].max()).all()


@pytest.mark.parametrize("k_values", [[], [0, 1], [3, 2], [1, 1], [1, 500]])
def test_elbow_curve_rejects_bad_k_values(income_spending, k_values):
    _, X = income_spending
    with pytest.raises(ValueError):
        elbow_curve(X, k_values)


def test_find_elbow_on_known_curve():
    curve = pd.DataFrame({"k": [1, 2, 3, 4, 5, 6], "sse": [100.0, 40.0, 12.0, 10.0, 9.0, 8.0]})
    assert find_elbow(curve) == 3


def test_find_elbow_edge_cases():
    assert find_elbow(pd.DataFrame({"k": [2, 3], "sse": [10.0, 5.0]})) == 2
    assert find_elbow(pd.DataFrame({"k": [1, 2, 3, 4], "sse": [7.0, 7.0, 7.0, 7.0]})) == 1
    with pytest.raises(ValueError):
        find_elbow(pd.DataFrame({"k": [], "sse": []}))


def test_sample_data_elbow_is_five(income_spending):
    _, X = income_spending
    assert find_elbow(elbow_curve(X, range(1, 11))) == 5


def test_assign_segments_orders_by_first_feature(income_spending):
    encoded, X = income_spending
    segmented, centers = assign_segments(encoded, X, 5, features=FEATURES)

    assert sorted(segmented["segment"].unique().tolist()) == [1, 2, 3, 4, 5]
    assert centers["segment"].tolist() == [1, 2, 3, 4, 5]
    assert centers["annual_income"].is_monotonic_increasing
    assert len(segmented) == len(encoded)

    # the middle income band is the largest group in the sample data
    sizes = segmented["segment"].value_counts()
    assert sizes.idxmax() == 3


def test_assign_segments_reports_centers_in_original_units(customers):
    X, scaler = build_feature_matrix(customers, FEATURES, scale=True)
    _, centers = assign_segments(customers, X, 5, features=FEATURES, scaler=scaler)
    assert centers["annual_income"].min() > 10
    assert centers["spending_score"].max() <= 100


def test_assign_segments_length_mismatch(income_spending):
    encoded, X = income_spending
    with pytest.raises(ValueError):
        assign_segments(encoded.head(10), X, 3, features=FEATURES)


def test_summarize_segments(income_spending):
    encoded, X = income_spending
    segmented, _ = assign_segments(encoded, X, 5, features=FEATURES)
    summary = summarize_segments(segmented, FEATURES)

    assert summary["segment"].tolist() == [1, 2, 3, 4, 5]
    assert summary["customers"].sum() == len(segmented)
    assert summary["share"].sum() == pytest.approx(1.0)
    assert {"mean_annual_income", "mean_spending_score"} <= set(summary.columns)

    with pytest.raises(ValueError):
        summarize_segments(encoded, FEATURES)
