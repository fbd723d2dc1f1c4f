import pytest

from kmeans_article.clustering import assign_segments, elbow_curve
from kmeans_article.plotting import plot_elbow, plot_segments

FEATURES = ["annual_income", "spending_score"]
PNG_MAGIC = b"\x89PNG"


def test_plot_elbow_writes_png(income_spending, tmp_path):
    _, X = income_spending
    curve = elbow_curve(X, range(1, 7))
    path = plot_elbow(curve, 5, str(tmp_path / "figures" / "elbow.png"))
    assert path.exists()
    assert path.read_bytes()[:4] == PNG_MAGIC


def test_plot_elbow_without_marker(income_spending, tmp_path):
    _, X = income_spending
    curve = elbow_curve(X, range(1, 4))
    assert plot_elbow(curve, None, str(tmp_path / "elbow.png")).exists()


def test_plot_segments(income_spending, tmp_path):
    encoded, X = income_spending
    segmented, centers = assign_segments(encoded, X, 5, features=FEATURES)
    path = plot_segments(segmented, centers, FEATURES, str(tmp_path / "segments.png"))
    assert path.read_bytes()[:4] == PNG_MAGIC


def test_plot_segments_needs_two_features(income_spending, tmp_path):
    encoded, X = income_spending
    segmented, centers = assign_segments(encoded, X, 3, features=FEATURES)
    with pytest.raises(ValueError):
        plot_segments(segmented, centers, ["annual_income"], str(tmp_path / "segments.png"))
