import pandas as pd

from kmeans_article.checks import (
    check_elbow_near,
    check_sse_non_increasing,
    failed_checks,
    run_fidelity_checks,
)

CURVE = pd.DataFrame({"k": [1, 2, 3, 4, 5, 6], "sse": [100.0, 40.0, 12.0, 10.0, 9.0, 8.0]})


def test_non_increasing_passes():
    check = check_sse_non_increasing(CURVE)
    assert check.passed
    assert "k=1..6" in check.detail


def test_non_increasing_flags_each_rise():
    curve = pd.DataFrame({"k": [1, 2, 3, 4], "sse": [100.0, 40.0, 45.0, 50.0]})
    check = check_sse_non_increasing(curve)
    assert not check.passed
    assert "k=3" in check.detail
    assert "k=4" in check.detail


def test_non_increasing_tolerates_float_noise():
    curve = pd.DataFrame({"k": [1, 2], "sse": [100.0, 100.0 + 1e-9]})
    assert check_sse_non_increasing(curve).passed


def test_elbow_near_stated():
    assert check_elbow_near(CURVE, stated_elbow=3).passed
    assert check_elbow_near(CURVE, stated_elbow=4, tolerance=1).passed
    near_miss = check_elbow_near(CURVE, stated_elbow=5, tolerance=1)
    assert not near_miss.passed
    assert "k=3" in near_miss.detail


def test_run_and_filter():
    checks = run_fidelity_checks(CURVE, stated_elbow=6, tolerance=0)
    assert [c.name for c in checks] == ["sse_non_increasing", "elbow_near_stated"]
    assert [c.name for c in failed_checks(checks)] == ["elbow_near_stated"]
