import numpy as np
import pandas as pd
import pytest

from kmeans_article.preprocessing import build_feature_matrix, describe_features, encode_categoricals


def test_encode_gender():
    df = pd.DataFrame({"gender": ["Male", "Female", " male "]})
    encoded = encode_categoricals(df)
    assert encoded["gender_male"].tolist() == [1, 0, 1]
    assert "gender_male" not in df.columns


def test_feature_matrix_unscaled(income_spending):
    encoded, X = income_spending
    assert X.shape == (len(encoded), 2)
    assert X.dtype == float
    np.testing.assert_array_equal(X[:, 0], encoded["annual_income"].to_numpy(dtype=float))


def test_feature_matrix_scaled(customers):
    X, scaler = build_feature_matrix(customers, ["annual_income", "spending_score", "age"], scale=True)
    assert scaler is not None
    np.testing.assert_allclose(X.mean(axis=0), 0.0, atol=1e-9)
    np.testing.assert_allclose(X.std(axis=0), 1.0, atol=1e-9)


def test_unknown_feature(customers):
    with pytest.raises(ValueError, match="Unknown feature"):
        build_feature_matrix(customers, ["income"])


def test_non_numeric_feature(customers):
    with pytest.raises(ValueError, match="non-numeric"):
        build_feature_matrix(customers, ["gender"])


def test_describe_features(customers):
    stats = describe_features(customers, ["annual_income", "spending_score"])
    assert list(stats.index) == ["annual_income", "spending_score"]
    assert list(stats.columns) == ["count", "mean", "std", "min", "25%", "50%", "75%", "max"]
    assert stats.loc["annual_income", "count"] == len(customers)
