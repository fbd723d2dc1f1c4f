from __future__ import annotations

from datetime import datetime, timezone
import html
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from kmeans_article.checks import FidelityCheck

GLOSSARY = [
    (
        "K-means clustering",
        "An unsupervised partitioning technique that assigns points to the nearest of K centers "
        "and iteratively recomputes each center as the mean of the points assigned to it.",
    ),
    (
        "Elbow Method",
        "A heuristic for choosing K by locating the point of diminishing returns in a plot of "
        "clustering error versus K.",
    ),
    (
        "SSE (Sum of Squared Errors)",
        "The total squared distance between each point and its assigned cluster center. "
        "scikit-learn exposes it as inertia_.",
    ),
]


def _fmt_number(value: float | int) -> str:
    if isinstance(value, int):
        return f"{value:,}"
    return f"{value:,.2f}"


def _fmt_cell(value: object) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return _fmt_number(value)
    if isinstance(value, float):
        if pd.isna(value):
            return "–"
        if float(value).is_integer() and abs(value) < 1e15:
            return _fmt_number(int(value))
        return _fmt_number(value)
    return str(value)


def _table(df: pd.DataFrame, index: bool = False) -> str:
    frame = df.reset_index() if index else df
    if frame.empty:
        return "<p>No rows available.</p>"

    head = "".join(f"<th>{html.escape(str(col))}</th>" for col in frame.columns)
    rows = []
    for record in frame.itertuples(index=False):
        cells = "".join(f"<td>{html.escape(_fmt_cell(_to_python(v)))}</td>" for v in record)
        rows.append(f"<tr>{cells}</tr>")
    return f"<table><thead><tr>{head}</tr></thead><tbody>{''.join(rows)}</tbody></table>"


def _to_python(value: object) -> object:
    if isinstance(value, np.generic):
        return value.item()
    return value


def _code_cell(source: str) -> str:
    return f"<pre class='code'><code>{html.escape(source.strip())}</code></pre>"


def _output_cell(markup: str) -> str:
    return f"<div class='output'><div class='output-label'>Output</div>{markup}</div>"


def _figure(src: str | None, caption: str) -> str:
    if not src:
        return ""
    return (
        "<figure>"
        f"<img src='{html.escape(src)}' alt='{html.escape(caption)}' />"
        f"<figcaption>{html.escape(caption)}</figcaption>"
        "</figure>"
    )


def _build_elbow_svg(curve: pd.DataFrame, elbow_k: int | None) -> str:
    if curve.empty:
        return "<p>No SSE data available.</p>"

    ordered = curve.sort_values("k")
    ks = [int(k) for k in ordered["k"]]
    sses = [float(s) for s in ordered["sse"]]

    width, height = 760, 340
    margin_left, margin_right, margin_top, margin_bottom = 90, 20, 20, 50
    inner_w = width - margin_left - margin_right
    inner_h = height - margin_top - margin_bottom

    max_y = max(sses) if max(sses) > 0 else 1.0
    x_div = max(len(ks) - 1, 1)

    def x_pos(idx: int) -> float:
        return margin_left + inner_w * (idx / x_div)

    def y_pos(value: float) -> float:
        return margin_top + inner_h * (1 - (value / max_y))

    parts = []

    # axes
    parts.append(
        f'<line x1="{margin_left}" y1="{margin_top + inner_h}" x2="{margin_left + inner_w}" y2="{margin_top + inner_h}" stroke="#334155" stroke-width="1" />'
    )
    parts.append(
        f'<line x1="{margin_left}" y1="{margin_top}" x2="{margin_left}" y2="{margin_top + inner_h}" stroke="#334155" stroke-width="1" />'
    )

    for i in range(5):
        tick_value = max_y * i / 4
        y = y_pos(tick_value)
        parts.append(
            f'<line x1="{margin_left}" y1="{y:.2f}" x2="{margin_left + inner_w}" y2="{y:.2f}" stroke="#e2e8f0" stroke-width="1" />'
        )
        parts.append(
            f'<text x="{margin_left - 8}" y="{y + 4:.2f}" text-anchor="end" fill="#334155" font-size="11">{tick_value:,.0f}</text>'
        )

    for idx, k in enumerate(ks):
        parts.append(
            f'<text x="{x_pos(idx):.2f}" y="{height - 24}" text-anchor="middle" fill="#334155" font-size="11">{k}</text>'
        )
    parts.append(
        f'<text x="{margin_left + inner_w / 2:.2f}" y="{height - 6}" text-anchor="middle" fill="#334155" font-size="12">Number of clusters (k)</text>'
    )

    if elbow_k is not None and elbow_k in ks:
        ex = x_pos(ks.index(elbow_k))
        parts.append(
            f'<line x1="{ex:.2f}" y1="{margin_top}" x2="{ex:.2f}" y2="{margin_top + inner_h}" stroke="#b91c1c" stroke-width="1" stroke-dasharray="5,4" />'
        )

    poly_points = " ".join(f"{x_pos(i):.2f},{y_pos(s):.2f}" for i, s in enumerate(sses))
    parts.append(f'<polyline fill="none" stroke="#0f766e" stroke-width="2" points="{poly_points}" />')
    for i, s in enumerate(sses):
        color = "#b91c1c" if ks[i] == elbow_k else "#0f766e"
        parts.append(f'<circle cx="{x_pos(i):.2f}" cy="{y_pos(s):.2f}" r="4" fill="{color}" />')

    svg = (
        f'<svg viewBox="0 0 {width} {height}" role="img" aria-label="SSE versus number of clusters">'
        + "".join(parts)
        + "</svg>"
    )
    return "<div class=\"chart-wrap\">" + svg + "</div>"


def _checks_markup(checks: Sequence[FidelityCheck]) -> str:
    if not checks:
        return "<p>No checks were run.</p>"
    items = []
    for check in checks:
        status = "pass" if check.passed else "fail"
        items.append(
            f"<li class='check {status}'><strong>{html.escape(check.name)}</strong> "
            f"[{status.upper()}] {html.escape(check.detail)}</li>"
        )
    return "<ul class='checks'>" + "".join(items) + "</ul>"


def render_article(
    output_path: str,
    summary_stats: dict,
    customers_preview: pd.DataFrame,
    feature_stats: pd.DataFrame,
    curve: pd.DataFrame,
    segment_summary: pd.DataFrame,
    checks: Sequence[FidelityCheck],
    figures: dict[str, str] | None = None,
) -> None:
    figures = figures or {}
    features = list(summary_stats.get("features", []))
    feature_list = ", ".join(repr(f) for f in features)
    k_min = int(summary_stats.get("k_min", 1))
    k_max = int(summary_stats.get("k_max", 10))
    stated_elbow = int(summary_stats.get("stated_elbow", 0))
    detected_elbow = summary_stats.get("detected_elbow")
    chosen_k = int(summary_stats.get("chosen_k", stated_elbow))
    scale = bool(summary_stats.get("scale_features", False))
    random_state = int(summary_stats.get("random_state", 42))
    n_init = int(summary_stats.get("n_init", 10))
    source = str(summary_stats.get("data_source", ""))

    glossary_cards = "".join(
        f"<div class='card'><strong>{html.escape(term)}</strong><p>{html.escape(text)}</p></div>"
        for term, text in GLOSSARY
    )

    load_code = """
import pandas as pd

df = pd.read_csv("Mall_Customers.csv")
df.head()
"""

    scale_lines = (
        "\n\nfrom sklearn.preprocessing import StandardScaler\n\nscaler = StandardScaler()\nX = scaler.fit_transform(X)"
        if scale
        else ""
    )
    preprocess_code = f"""
df = df.rename(columns={{"Age": "age", "Annual Income (k$)": "annual_income", "Spending Score (1-100)": "spending_score"}})
df["gender_male"] = (df["Gender"] == "Male").astype(int)

X = df[[{feature_list}]].to_numpy(dtype=float){scale_lines}
df[[{feature_list}]].describe().T
"""

    elbow_code = f"""
from sklearn.cluster import KMeans
import matplotlib.pyplot as plt

sse = []
k_values = range({k_min}, {k_max + 1})
for k in k_values:
    model = KMeans(n_clusters=k, init="k-means++", n_init={n_init}, random_state={random_state})
    model.fit(X)
    sse.append(model.inertia_)

plt.plot(k_values, sse, "o-")
plt.xlabel("Number of clusters (k)")
plt.ylabel("SSE")
plt.show()
"""

    centers_line = "scaler.inverse_transform(model.cluster_centers_)" if scale else "model.cluster_centers_"
    segment_code = f"""
import numpy as np

model = KMeans(n_clusters={chosen_k}, init="k-means++", n_init={n_init}, random_state={random_state})
labels = model.fit_predict(X)

# number segments by where their centers sit along the first feature
centers = {centers_line}
order = np.lexsort(centers[:, ::-1].T)
segment_of = {{old: new for new, old in enumerate(order, start=1)}}
df["segment"] = [segment_of[label] for label in labels]

grouped = df.groupby("segment", sort=True)
summary = grouped.size().rename("customers").to_frame()
summary["share"] = summary["customers"] / len(df)
for column in [{feature_list}]:
    summary[f"mean_{{column}}"] = grouped[column].mean()
summary = summary.reset_index()
summary
"""

    if detected_elbow is None:
        elbow_sentence = "No elbow could be located on this curve."
    else:
        elbow_sentence = (
            f"The curve bends most sharply at k={int(detected_elbow)}: beyond that point each extra "
            "cluster buys only a small reduction in SSE."
        )

    generated_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    html_doc = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>K-means Clustering and the Elbow Method</title>
  <style>
    :root {{
      --bg: #f8fafc;
      --card: #ffffff;
      --ink: #0f172a;
      --muted: #475569;
      --line: #cbd5e1;
      --accent: #0f766e;
    }}
    body {{ margin: 0; font-family: "Avenir Next", "Segoe UI", sans-serif; color: var(--ink); background: var(--bg); line-height: 1.55; }}
    main {{ max-width: 900px; margin: 0 auto; padding: 28px 18px 48px; }}
    h1 {{ margin: 0 0 8px; font-size: 2rem; }}
    h2 {{ margin: 32px 0 12px; font-size: 1.35rem; color: var(--accent); }}
    .sub {{ margin: 0; color: var(--muted); }}
    .grid {{ display: grid; grid-template-columns: repeat(auto-fit,minmax(220px,1fr)); gap: 12px; margin-top: 14px; }}
    .card {{ background: var(--card); border: 1px solid var(--line); border-radius: 12px; padding: 14px; }}
    .card p {{ margin: 6px 0 0; color: var(--muted); font-size: 0.92rem; }}
    pre.code {{ background: #0f172a; color: #e2e8f0; padding: 14px; border-radius: 10px; overflow-x: auto; font-size: 0.88rem; }}
    .output {{ background: var(--card); border: 1px solid var(--line); border-radius: 10px; padding: 12px; margin: 8px 0 18px; overflow-x: auto; }}
    .output-label {{ color: var(--muted); font-size: 0.8rem; text-transform: uppercase; margin-bottom: 6px; }}
    table {{ width: 100%; border-collapse: collapse; }}
    th, td {{ padding: 7px 9px; border-bottom: 1px solid #e2e8f0; text-align: right; font-size: 0.9rem; }}
    th {{ background: #f1f5f9; }}
    figure {{ margin: 12px 0; }}
    figure img {{ max-width: 100%; border: 1px solid var(--line); border-radius: 8px; }}
    figcaption {{ color: var(--muted); font-size: 0.85rem; }}
    .checks {{ list-style: none; padding: 0; }}
    .check {{ padding: 8px 10px; border-radius: 8px; margin-bottom: 6px; }}
    .check.pass {{ background: #ecfdf5; }}
    .check.fail {{ background: #fef2f2; }}
  </style>
</head>
<body>
  <main>
    <h1>K-means Clustering and the Elbow Method</h1>
    <p class="sub">Generated {generated_at} · Data: {html.escape(source)}</p>

    <section>
      <h2>What K-means does</h2>
      <p>K-means splits a dataset into K groups. It starts from K candidate centers, assigns every
      point to the nearest one, moves each center to the mean of the points it owns, and repeats
      until the assignments stop changing. The catch is that you have to pick K before you start.</p>
      <div class="grid">{glossary_cards}</div>
    </section>

    <section>
      <h2>Loading the customer data</h2>
      <p>The dataset lists {_fmt_number(int(summary_stats.get('customers_total', 0)))} mall customers, each with a
      gender, an age, an annual income and a spending score assigned by the mall.</p>
      {_code_cell(load_code)}
      {_output_cell(_table(customers_preview))}
    </section>

    <section>
      <h2>Preparing the features</h2>
      <p>K-means only understands numbers, so the categorical gender column is encoded as 0/1. We cluster on
      {html.escape(', '.join(features))}{' after standardizing each column' if scale else ''}.</p>
      {_code_cell(preprocess_code)}
      {_output_cell(_table(feature_stats.round(2).rename_axis("feature"), index=True))}
    </section>

    <section>
      <h2>Choosing K with the Elbow Method</h2>
      <p>We fit one model per K from {k_min} to {k_max} and record the SSE of each. Adding clusters can only
      lower the SSE, so the interesting question is where the improvement stops being worth it.</p>
      {_code_cell(elbow_code)}
      {_output_cell(_build_elbow_svg(curve, detected_elbow) + _table(curve[["k", "sse", "sse_drop", "sse_drop_pct"]].round(2)))}
      {_figure(figures.get("elbow"), "SSE versus number of clusters")}
      <p>{html.escape(elbow_sentence)} We go with k={chosen_k}.</p>
    </section>

    <section>
      <h2>Fitting the final model</h2>
      {_code_cell(segment_code)}
      {_output_cell(_table(segment_summary.round(2)))}
      {_figure(figures.get("segments"), "Customers coloured by segment with centroids")}
    </section>

    <section>
      <h2>Checking the claims</h2>
      <p>The statements above are checked against the numbers the page was rendered with.</p>
      {_checks_markup(checks)}
    </section>
  </main>
</body>
</html>
"""

    Path(output_path).write_text(html_doc, encoding="utf-8")
