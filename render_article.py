from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys

from kmeans_article.article import render_article
from kmeans_article.checks import FidelityCheck, failed_checks, run_fidelity_checks
from kmeans_article.clustering import assign_segments, elbow_curve, find_elbow, summarize_segments
from kmeans_article.config import load_config
from kmeans_article.io import load_customers_csv, prepare_segments_for_csv, to_public_headers
from kmeans_article.plotting import plot_elbow, plot_segments
from kmeans_article.preprocessing import build_feature_matrix, describe_features, encode_categoricals
from kmeans_article.sample_data import make_sample_customers, write_sample_csv

logger = logging.getLogger("render_article")


def setup_logging(log_level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def run_article(args: argparse.Namespace) -> tuple[dict[str, Path], list[FidelityCheck]]:
    config = load_config(
        env_file=args.env_file,
        data_path=args.input,
        output_dir=args.output_dir,
        k_min=args.k_min,
        k_max=args.k_max,
        stated_elbow=args.stated_elbow,
        elbow_tolerance=args.elbow_tolerance,
        features=args.features,
        scale_features=args.scale,
        random_state=args.random_state,
        use_sample_data=args.sample_data,
    )

    if config.use_sample_data:
        customers = make_sample_customers(random_state=config.random_state)
        data_source = f"synthetic sample ({len(customers)} customers)"
    else:
        customers = load_customers_csv(config.data_path)
        data_source = Path(config.data_path).name
    logger.info("Loaded %d customers from %s", len(customers), data_source)

    encoded = encode_categoricals(customers)
    X, scaler = build_feature_matrix(encoded, config.features, scale=config.scale_features)

    curve = elbow_curve(X, config.k_values, random_state=config.random_state, n_init=config.n_init)
    detected_elbow = find_elbow(curve)
    logger.info("Detected elbow at k=%d (prose states k=%d)", detected_elbow, config.stated_elbow)

    chosen_k = config.stated_elbow
    segmented, centers = assign_segments(
        encoded,
        X,
        chosen_k,
        features=config.features,
        scaler=scaler,
        random_state=config.random_state,
        n_init=config.n_init,
    )
    segment_summary = summarize_segments(segmented, config.features)

    checks = run_fidelity_checks(curve, config.stated_elbow, tolerance=config.elbow_tolerance)
    for check in checks:
        log = logger.info if check.passed else logger.warning
        log("Check %s: %s", check.name, check.detail)

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    segments_csv_path = output_dir / "customers_segmented.csv"
    curve_csv_path = output_dir / "sse_curve.csv"
    summary_csv_path = output_dir / "segment_summary.csv"
    summary_json_path = output_dir / "summary_stats.json"
    elbow_png_path = output_dir / "elbow.png"
    segments_png_path = output_dir / "segments.png"
    article_html_path = output_dir / "article.html"

    prepare_segments_for_csv(segmented).to_csv(segments_csv_path, index=False)
    curve.to_csv(curve_csv_path, index=False)
    segment_summary.to_csv(summary_csv_path, index=False)

    figures = {"elbow": plot_elbow(curve, detected_elbow, str(elbow_png_path)).name}
    if len(config.features) >= 2:
        figures["segments"] = plot_segments(segmented, centers, config.features, str(segments_png_path)).name

    summary_stats = {
        "data_source": data_source,
        "customers_total": int(len(customers)),
        "features": list(config.features),
        "scale_features": bool(config.scale_features),
        "k_min": int(config.k_min),
        "k_max": int(config.k_max),
        "random_state": int(config.random_state),
        "n_init": int(config.n_init),
        "stated_elbow": int(config.stated_elbow),
        "detected_elbow": int(detected_elbow),
        "chosen_k": int(chosen_k),
        "sse_by_k": {str(int(row.k)): round(float(row.sse), 4) for row in curve.itertuples(index=False)},
        "checks": [asdict(check) for check in checks],
    }
    summary_json_path.write_text(json.dumps(summary_stats, indent=2), encoding="utf-8")

    render_article(
        output_path=str(article_html_path),
        summary_stats=summary_stats,
        customers_preview=to_public_headers(customers.head()),
        feature_stats=describe_features(encoded, config.features),
        curve=curve,
        segment_summary=segment_summary,
        checks=checks,
        figures=figures,
    )

    outputs = {
        "customers_segmented": segments_csv_path,
        "sse_curve": curve_csv_path,
        "segment_summary": summary_csv_path,
        "summary_stats": summary_json_path,
        "elbow_plot": elbow_png_path,
        "article_html": article_html_path,
    }
    if "segments" in figures:
        outputs["segments_plot"] = segments_png_path
    return outputs, checks


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render the K-means / Elbow Method customer segmentation article.")
    parser.add_argument("--input", default=None, help="Path to the mall customers CSV.")
    parser.add_argument("--output-dir", default=None, help="Directory for generated artifacts (default: outputs).")
    parser.add_argument("--k-min", type=int, default=None, help="Smallest number of clusters to fit (default: 1).")
    parser.add_argument("--k-max", type=int, default=None, help="Largest number of clusters to fit (default: 10).")
    parser.add_argument(
        "--stated-elbow",
        type=int,
        default=None,
        help="The K the article's prose names as the elbow; also the K of the final model (default: 5).",
    )
    parser.add_argument(
        "--elbow-tolerance",
        type=int,
        default=None,
        help="How far the detected elbow may sit from --stated-elbow before the check fails (default: 1).",
    )
    parser.add_argument(
        "--features",
        default=None,
        help="Comma separated feature columns (default: annual_income,spending_score).",
    )
    parser.add_argument(
        "--scale",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Standardize features before clustering (--no-scale overrides KMEANS_ARTICLE_SCALE).",
    )
    parser.add_argument("--random-state", type=int, default=None, help="Seed for K-means initialization.")
    parser.add_argument(
        "--sample-data",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use the deterministic synthetic customer dataset instead of a downloaded CSV.",
    )
    parser.add_argument(
        "--write-sample",
        default=None,
        metavar="PATH",
        help="Write the synthetic customer dataset to PATH as CSV and exit.",
    )
    parser.add_argument(
        "--strict-checks",
        action="store_true",
        help="Exit with status 1 when the rendered numbers contradict the article's claims.",
    )
    parser.add_argument("--env-file", default=None, help="Optional path to .env file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.write_sample:
        path = write_sample_csv(args.write_sample)
        print(f"Sample customers written to {path}")
        return 0

    outputs, checks = run_article(args)
    print("Article rendered successfully.")
    for name, path in outputs.items():
        print(f"- {name}: {path}")

    failures = failed_checks(checks)
    if failures and args.strict_checks:
        for check in failures:
            print(f"Check failed: {check.name}: {check.detail}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
