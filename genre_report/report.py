"""End-to-end genre report: load, clean, split, tune, fit and evaluate."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import joblib
import pandas as pd

from .cleaning import clean_tracks
from .config import (
    KNN,
    METRICS_FILENAME,
    MODEL_FILENAME_TEMPLATE,
    RANDOM_FOREST,
    TARGET_COLUMN,
    ReportConfig,
)
from .evaluation import Evaluation, evaluate_model
from .exploration import (
    correlation_matrix,
    genre_counts,
    genre_decade_table,
    popularity_by_decade,
    popularity_summary,
    sample_rows,
)
from .loading import load_dataset
from .models import GenreModel, fit_model
from .sampling import Split, bootstraps, stratified_split
from .tuning import TuningResult, tune_model

logger = logging.getLogger(__name__)

REPORT_FAMILIES = (RANDOM_FOREST, KNN)


@dataclass(frozen=True)
class GenreReport:
    config: ReportConfig
    tracks: pd.DataFrame
    split: Split
    tuning: dict[str, TuningResult]
    models: dict[str, GenreModel]
    evaluations: dict[str, Evaluation]

    def comparison(self) -> pd.DataFrame:
        rows = []
        for family, evaluation in self.evaluations.items():
            rows.append({"model": family, **evaluation.metrics(), **self.tuning[family].best_params})
        return pd.DataFrame(rows).set_index("model")

    def exploration(self) -> dict[str, pd.DataFrame]:
        return {
            "genre_counts": genre_counts(self.tracks).to_frame("tracks"),
            "popularity_by_genre": popularity_summary(self.tracks),
            "popularity_by_decade": popularity_by_decade(self.tracks),
            "genre_by_decade": genre_decade_table(self.tracks),
            "correlation": correlation_matrix(self.tracks),
            "sample_rows": sample_rows(self.tracks, seed=self.config.seed),
        }


def run_models(tracks: pd.DataFrame, config: ReportConfig, *, label: str = TARGET_COLUMN) -> tuple[Split, dict, dict, dict]:
    split = stratified_split(tracks, label=label, train_fraction=config.train_fraction, seed=config.seed)
    resamples = bootstraps(split.train, label=label, times=config.bootstrap_times, seed=config.seed)

    tuning: dict[str, TuningResult] = {}
    models: dict[str, GenreModel] = {}
    evaluations: dict[str, Evaluation] = {}
    for family in REPORT_FAMILIES:
        tuning[family] = tune_model(
            family,
            split.train,
            resamples,
            grid=config.grid_for(family),
            seed=config.seed,
            label=label,
            corr_threshold=config.corr_threshold,
            n_trees=config.n_trees,
            n_jobs=config.n_jobs,
        )
        models[family] = fit_model(
            family,
            split.train,
            params=tuning[family].best_params,
            seed=config.seed,
            label=label,
            corr_threshold=config.corr_threshold,
            n_trees=config.n_trees,
        )
        evaluations[family] = evaluate_model(
            models[family],
            split.test,
            label=label,
            seed=config.seed,
            importance_repeats=config.importance_repeats,
        )
    return split, tuning, models, evaluations


def build_report(config: ReportConfig, raw: pd.DataFrame | None = None) -> GenreReport:
    raw = load_dataset(config.dataset_path) if raw is None else raw
    tracks = clean_tracks(raw, config)
    split, tuning, models, evaluations = run_models(tracks, config)
    return GenreReport(
        config=config,
        tracks=tracks,
        split=split,
        tuning=tuning,
        models=models,
        evaluations=evaluations,
    )


def _evaluation_payload(evaluation: Evaluation) -> dict:
    return {
        **evaluation.metrics(),
        "recall": evaluation.recall.to_dict(),
        "confusion": evaluation.confusion.to_dict(orient="index"),
        "confidence": {
            "median": evaluation.confidence.median,
            "std": evaluation.confidence.std,
            "quartiles": list(evaluation.confidence.quartiles),
            "histogram": evaluation.confidence.histogram.to_dict(),
        },
        "importance": evaluation.importance["importance"].to_dict(),
    }


def save_artifacts(report: GenreReport, artifact_dir: Path | str) -> None:
    artifact_path = Path(artifact_dir)
    artifact_path.mkdir(parents=True, exist_ok=True)

    for family, model in report.models.items():
        joblib.dump(model, artifact_path / MODEL_FILENAME_TEMPLATE.format(family=family))

    payload = {
        "seed": report.config.seed,
        "tracks": len(report.tracks),
        "train_rows": len(report.split.train),
        "test_rows": len(report.split.test),
        "models": {
            family: {
                "params": report.tuning[family].best_params,
                "dropped_columns": list(report.models[family].recipe.dropped),
                **_evaluation_payload(evaluation),
            }
            for family, evaluation in report.evaluations.items()
        },
    }
    with (artifact_path / METRICS_FILENAME).open("w", encoding="utf-8") as fp:
        json.dump(payload, fp, indent=2, default=float)
    logger.info("Artifacts saved to %s", artifact_path)
