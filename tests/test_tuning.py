from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from genre_report.cleaning import clean_tracks
from genre_report.config import ReportConfig
from genre_report.errors import InsufficientDataError
from genre_report.sampling import Resample, bootstraps
from genre_report.tuning import expand_grid, tune_model


@pytest.fixture
def train(raw_tracks, tmp_path) -> pd.DataFrame:
    return clean_tracks(raw_tracks, ReportConfig(dataset_path=tmp_path / "songs.csv", seed=42))


def test_expand_grid_is_a_cartesian_product() -> None:
    points = expand_grid({"mtry": (2, 4), "min_n": (2, 10, 20)})
    assert len(points) == 6
    assert points[0] == {"mtry": 2, "min_n": 2}
    assert points[-1] == {"mtry": 4, "min_n": 20}


def test_tune_random_forest_selects_most_accurate_grid_point(train) -> None:
    resamples = bootstraps(train, times=3, seed=42)
    result = tune_model(
        "random_forest",
        train,
        resamples,
        grid={"mtry": (1, 3), "min_n": (2, 8)},
        seed=42,
        n_trees=15,
    )

    assert result.family == "random_forest"
    assert len(result.summary) == 4
    assert (result.summary["n"] == 3).all()
    assert len(result.scores) == 12
    assert result.scores["accuracy"].between(0, 1).all()
    best = result.summary.loc[result.summary["accuracy"].idxmax()]
    assert result.best_params == {"mtry": int(best["mtry"]), "min_n": int(best["min_n"])}
    assert result.summary["accuracy"].max() == pytest.approx(best["accuracy"])


def test_tune_knn_is_independent_of_parallelism(train) -> None:
    resamples = bootstraps(train, times=2, seed=5)
    grid = {"neighbors": (3, 7)}
    serial = tune_model("knn", train, resamples, grid=grid, seed=5, n_jobs=1)
    parallel = tune_model("knn", train, resamples, grid=grid, seed=5, n_jobs=2)
    pd.testing.assert_frame_equal(serial.summary, parallel.summary)
    assert serial.best_params == parallel.best_params


def test_tune_uses_out_of_bag_rows_only(train) -> None:
    everything = np.arange(len(train))
    no_oob = [Resample(id="Bootstrap01", analysis=everything, assessment=np.array([], dtype=int))]
    with pytest.raises(InsufficientDataError):
        tune_model("knn", train, no_oob, grid={"neighbors": (3,)}, seed=1)


def test_tune_rejects_labels_too_small_to_stratify(toy_tracks) -> None:
    data = pd.concat([toy_tracks[toy_tracks["genre"] != "r&b"], toy_tracks[toy_tracks["genre"] == "r&b"].head(1)])
    positions = np.arange(len(data))
    resamples = [Resample(id="Bootstrap01", analysis=positions, assessment=positions[:2])]
    with pytest.raises(InsufficientDataError, match="r&b"):
        tune_model("knn", data, resamples, grid={"neighbors": (3,)}, seed=1)
