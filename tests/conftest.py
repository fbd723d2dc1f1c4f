import pandas as pd
import pytest

from kmeans_article.preprocessing import build_feature_matrix, encode_categoricals
from kmeans_article.sample_data import make_sample_customers

ENV_VARS = [
    "KMEANS_ARTICLE_DATA_PATH",
    "KMEANS_ARTICLE_OUTPUT_DIR",
    "KMEANS_ARTICLE_K_MIN",
    "KMEANS_ARTICLE_K_MAX",
    "KMEANS_ARTICLE_STATED_ELBOW",
    "KMEANS_ARTICLE_ELBOW_TOLERANCE",
    "KMEANS_ARTICLE_FEATURES",
    "KMEANS_ARTICLE_SCALE",
    "KMEANS_ARTICLE_RANDOM_STATE",
    "KMEANS_ARTICLE_N_INIT",
    "KMEANS_ARTICLE_SAMPLE_DATA",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # Empty values read as unset; setenv makes monkeypatch remove them again afterwards.
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def customers():
    return make_sample_customers(n_customers=200, random_state=42)


@pytest.fixture
def income_spending(customers):
    encoded = encode_categoricals(customers)
    X, _ = build_feature_matrix(encoded, ["annual_income", "spending_score"])
    return encoded, X


@pytest.fixture
def mall_csv(tmp_path):
    rows = [
        {"CustomerID": 1, "Gender": "Male", "Age": 19, "Annual Income (k$)": 15, "Spending Score (1-100)": 39},
        {"CustomerID": 2, "Gender": "Male", "Age": 21, "Annual Income (k$)": 15, "Spending Score (1-100)": 81},
        {"CustomerID": 3, "Gender": "Female", "Age": 20, "Annual Income (k$)": 16, "Spending Score (1-100)": 6},
        {"CustomerID": 4, "Gender": "Female", "Age": 23, "Annual Income (k$)": 16, "Spending Score (1-100)": 77},
        {"CustomerID": 5, "Gender": "Female", "Age": 31, "Annual Income (k$)": 17, "Spending Score (1-100)": 40},
    ]
    path = tmp_path / "Mall_Customers.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path
