from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler


def encode_categoricals(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add numeric encodings of the categorical customer fields.

    ``gender_male`` is 1 for male customers and 0 otherwise, so gender can be
    selected as a clustering feature like any numeric column.
    """
    out = df.copy()
    if "gender" in out.columns:
        out["gender_male"] = (out["gender"].astype(str).str.strip().str.lower() == "male").astype(int)
    return out


def build_feature_matrix(
    df: pd.DataFrame,
    features: Iterable[str],
    scale: bool = False,
) -> tuple[np.ndarray, StandardScaler | None]:
    features = list(features)
    if not features:
        raise ValueError("At least one feature column is required.")

    unknown = [column for column in features if column not in df.columns]
    if unknown:
        raise ValueError(f"Unknown feature columns: {unknown}. Available: {sorted(df.columns)}")

    frame = df[features].apply(pd.to_numeric, errors="coerce")
    if frame.isna().any().any():
        bad = frame.columns[frame.isna().any()].tolist()
        raise ValueError(f"Feature columns contain missing or non-numeric values: {bad}")

    X = frame.to_numpy(dtype=float)
    if not scale:
        return X, None

    scaler = StandardScaler()
    return scaler.fit_transform(X), scaler


def describe_features(df: pd.DataFrame, features: Iterable[str]) -> pd.DataFrame:
    columns = [column for column in features if column in df.columns]
    return df[columns].describe().T
