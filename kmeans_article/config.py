from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_FEATURES = ("annual_income", "spending_score")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class ArticleConfig:
    data_path: str | None = None
    output_dir: str = "outputs"
    k_min: int = 1
    k_max: int = 10
    stated_elbow: int = 5
    elbow_tolerance: int = 1
    features: tuple[str, ...] = DEFAULT_FEATURES
    scale_features: bool = False
    random_state: int = 42
    n_init: int = 10
    use_sample_data: bool = False

    @property
    def k_values(self) -> list[int]:
        return list(range(self.k_min, self.k_max + 1))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return raw.lower() in _TRUE_VALUES


def _parse_features(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(item.strip() for item in items if item and item.strip())


def validate_config(config: ArticleConfig) -> ArticleConfig:
    if config.k_min < 1:
        raise ValueError(f"k_min must be at least 1, got {config.k_min}")
    if config.k_max <= config.k_min:
        raise ValueError(f"k_max ({config.k_max}) must be greater than k_min ({config.k_min})")
    if not config.k_min <= config.stated_elbow <= config.k_max:
        raise ValueError(
            f"stated_elbow ({config.stated_elbow}) must lie within [{config.k_min}, {config.k_max}]"
        )
    if config.elbow_tolerance < 0:
        raise ValueError("elbow_tolerance cannot be negative")
    if config.n_init < 1:
        raise ValueError("n_init must be at least 1")
    if not config.features:
        raise ValueError("At least one feature column is required for clustering.")
    if not config.use_sample_data and not config.data_path:
        raise ValueError(
            "A customer CSV is required. Set KMEANS_ARTICLE_DATA_PATH, pass --input, "
            "or use --sample-data for local/demo runs."
        )
    return config


def load_config(env_file: str | None = None, **overrides: object) -> ArticleConfig:
    if env_file:
        load_dotenv(env_file)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env)

    config = ArticleConfig(
        data_path=os.getenv("KMEANS_ARTICLE_DATA_PATH", "").strip() or None,
        output_dir=os.getenv("KMEANS_ARTICLE_OUTPUT_DIR", "").strip() or "outputs",
        k_min=_env_int("KMEANS_ARTICLE_K_MIN", 1),
        k_max=_env_int("KMEANS_ARTICLE_K_MAX", 10),
        stated_elbow=_env_int("KMEANS_ARTICLE_STATED_ELBOW", 5),
        elbow_tolerance=_env_int("KMEANS_ARTICLE_ELBOW_TOLERANCE", 1),
        features=_parse_features(os.getenv("KMEANS_ARTICLE_FEATURES", "").strip() or DEFAULT_FEATURES),
        scale_features=_env_bool("KMEANS_ARTICLE_SCALE", False),
        random_state=_env_int("KMEANS_ARTICLE_RANDOM_STATE", 42),
        n_init=_env_int("KMEANS_ARTICLE_N_INIT", 10),
        use_sample_data=_env_bool("KMEANS_ARTICLE_SAMPLE_DATA", False),
    )

    updates = {key: value for key, value in overrides.items() if value is not None}
    if "features" in updates:
        updates["features"] = _parse_features(updates["features"])  # type: ignore[arg-type]
    if updates:
        config = replace(config, **updates)

    return validate_config(config)
