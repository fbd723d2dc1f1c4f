from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

COLUMN_ALIASES = {
    "CustomerID": "customer_id",
    "Customer ID": "customer_id",
    "Gender": "gender",
    "Genre": "gender",
    "Age": "age",
    "Annual Income (k$)": "annual_income",
    "Annual Income": "annual_income",
    "Spending Score (1-100)": "spending_score",
    "Spending Score": "spending_score",
}

# Headers of the public dataset, used when writing CSVs readers can open next to the original.
PUBLIC_HEADERS = {
    "customer_id": "CustomerID",
    "gender": "Gender",
    "age": "Age",
    "annual_income": "Annual Income (k$)",
    "spending_score": "Spending Score (1-100)",
}

REQUIRED_COLUMNS = {"customer_id", "gender", "age", "annual_income", "spending_score"}
NUMERIC_COLUMNS = ["age", "annual_income", "spending_score"]


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for column in df.columns:
        stripped = str(column).strip()
        if stripped in COLUMN_ALIASES:
            renamed[column] = COLUMN_ALIASES[stripped]
        else:
            renamed[column] = stripped.lower().replace(" ", "_")
    return df.rename(columns=renamed)


def clean_customers(df: pd.DataFrame) -> pd.DataFrame:
    customers = normalize_columns(df)
    missing = sorted(REQUIRED_COLUMNS - set(customers.columns))
    if missing:
        raise ValueError(f"CSV is missing required columns: {missing}")

    ids = pd.to_numeric(customers["customer_id"], errors="coerce")
    # fractional ids are dropped with the other unusable rows rather than truncated
    customers["customer_id"] = ids.where(ids % 1 == 0)
    for column in NUMERIC_COLUMNS:
        customers[column] = pd.to_numeric(customers[column], errors="coerce")

    customers["gender"] = customers["gender"].astype("string").str.strip().str.title()
    customers["gender"] = customers["gender"].replace("", pd.NA)

    customers = customers.dropna(subset=sorted(REQUIRED_COLUMNS)).copy()
    customers["customer_id"] = customers["customer_id"].astype(np.int64)
    customers["gender"] = customers["gender"].astype(str)
    customers = customers.drop_duplicates(subset=["customer_id"], keep="first")

    if customers.empty:
        raise ValueError("No valid customer rows remain after cleaning.")

    if (customers["age"] < 0).any() or (customers["annual_income"] < 0).any():
        raise ValueError("Age and annual income must be non-negative.")

    out_of_range = customers[(customers["spending_score"] < 1) | (customers["spending_score"] > 100)]
    if not out_of_range.empty:
        preview = out_of_range["customer_id"].head(10).tolist()
        raise ValueError(
            f"Spending score must be within 1-100; {len(out_of_range)} rows violate it. "
            f"Sample customer ids: {preview}"
        )

    return customers.reset_index(drop=True)


def load_customers_csv(input_path: str) -> pd.DataFrame:
    csv_path = Path(input_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    return clean_customers(pd.read_csv(csv_path))


def to_public_headers(df: pd.DataFrame) -> pd.DataFrame:
    return df.rename(columns=PUBLIC_HEADERS)


def prepare_segments_for_csv(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    if "customer_id" in out.columns:
        out = out.sort_values("customer_id")
    return out.reset_index(drop=True)
