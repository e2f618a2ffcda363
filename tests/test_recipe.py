from __future__ import annotations

import dataclasses

import numpy as np
import pandas as pd
import pytest

from genre_report.cleaning import clean_tracks
from genre_report.config import ReportConfig
from genre_report.errors import SchemaError
from genre_report.recipe import apply_recipe, correlated_columns, fit_recipe


@pytest.fixture
def tracks(raw_tracks, tmp_path) -> pd.DataFrame:
    return clean_tracks(raw_tracks, ReportConfig(dataset_path=tmp_path / "songs.csv", seed=42))


@pytest.fixture
def train_test(tracks) -> tuple[pd.DataFrame, pd.DataFrame]:
    train = tracks.iloc[::2].copy()
    test = tracks.iloc[1::2].copy()
    return train, test


def test_fit_drops_identifiers_popularity_year_and_correlated_energy(train_test) -> None:
    train, _ = train_test
    recipe = fit_recipe(train, threshold=0.6)

    assert recipe.outcome == "genre"
    assert "popularity" not in recipe.inputs
    assert "year" not in recipe.inputs
    assert "id" not in recipe.inputs
    assert recipe.dropped == ("energy",)
    assert "loudness" in recipe.predictors
    assert "energy" in recipe.inputs and "energy" not in recipe.predictors


def test_threshold_and_column_order_are_configurable(train_test) -> None:
    train, _ = train_test
    assert fit_recipe(train, threshold=0.999).dropped == ()

    energy_first = ["energy", "loudness"]
    recipe = fit_recipe(train, threshold=0.6, column_order=energy_first)
    assert recipe.dropped == ("loudness",)


def test_correlated_columns_walks_canonical_order() -> None:
    x = np.linspace(0, 1, 20)
    df = pd.DataFrame({"a": x, "b": x * 2 + 1, "c": x[::-1], "d": np.tile([0.0, 1.0], 10)})
    assert correlated_columns(df, ["a", "b", "c", "d"], threshold=0.6, column_order=["a", "b", "c", "d"]) == ["b", "c"]
    assert correlated_columns(df, ["a", "b", "c", "d"], threshold=0.6, column_order=["c", "a", "b", "d"]) == ["a", "b"]


def test_apply_centers_and_scales_with_training_constants(train_test) -> None:
    train, test = train_test
    recipe = fit_recipe(train)
    baked = apply_recipe(recipe, test)

    expected = (test["danceability"] - train["danceability"].mean()) / train["danceability"].std(ddof=1)
    pd.testing.assert_series_equal(baked["danceability"], expected, check_names=False)
    baked_train = apply_recipe(recipe, train)
    assert baked_train["tempo"].mean() == pytest.approx(0.0, abs=1e-9)
    assert baked_train["tempo"].std(ddof=1) == pytest.approx(1.0)
    assert list(baked.columns) == [*recipe.predictors, "genre"]


def test_apply_is_idempotent(train_test) -> None:
    train, test = train_test
    recipe = fit_recipe(train)
    before = recipe.constants()
    first = apply_recipe(recipe, test)
    second = apply_recipe(recipe, test)
    pd.testing.assert_frame_equal(first, second)
    pd.testing.assert_frame_equal(before, recipe.constants())


def test_recipe_is_leak_free(train_test) -> None:
    train, test = train_test
    recipe = fit_recipe(train)
    constants = recipe.constants()

    shifted = test.copy()
    shifted["tempo"] = shifted["tempo"] + 50.0
    baked = apply_recipe(recipe, shifted)

    pd.testing.assert_frame_equal(constants, recipe.constants())
    assert baked["tempo"].mean() > 1.0


def test_recipe_is_frozen(train_test) -> None:
    recipe = fit_recipe(train_test[0])
    with pytest.raises(dataclasses.FrozenInstanceError):
        recipe.threshold = 0.9


def test_apply_requires_every_input_column(train_test) -> None:
    train, test = train_test
    recipe = fit_recipe(train)
    with pytest.raises(SchemaError, match="tempo"):
        apply_recipe(recipe, test.drop(columns=["tempo"]))
    # dropped columns are still required inputs
    with pytest.raises(SchemaError, match="energy"):
        apply_recipe(recipe, test.drop(columns=["energy"]))


def test_apply_single_row_without_outcome(train_test) -> None:
    train, test = train_test
    recipe = fit_recipe(train)
    row = test.drop(columns=["genre"]).iloc[[0]]
    baked = apply_recipe(recipe, row)
    assert baked.shape == (1, len(recipe.predictors))
    pd.testing.assert_frame_equal(baked, apply_recipe(recipe, test).iloc[[0]][list(recipe.predictors)])


def test_constant_column_centres_to_zero() -> None:
    df = pd.DataFrame({"genre": ["rap", "pop"] * 5, "signal": np.arange(10.0), "flat": 3.0})
    recipe = fit_recipe(df)
    assert dict(zip(recipe.predictors, recipe.stds))["flat"] == 1.0
    assert (apply_recipe(recipe, df)["flat"] == 0.0).all()


def test_fit_requires_outcome() -> None:
    with pytest.raises(SchemaError):
        fit_recipe(pd.DataFrame({"a": [1.0, 2.0]}))


def test_numeric_id_is_never_a_predictor(toy_tracks) -> None:
    df = toy_tracks.copy()
    df["id"] = range(len(df))
    recipe = fit_recipe(df)

    assert "id" not in recipe.inputs
    assert recipe.inputs == ("a", "b", "c", "d")
    assert "a" in recipe.predictors


def test_explicit_columns_select_predictors(toy_tracks) -> None:
    df = toy_tracks.assign(extra=1.0)
    recipe = fit_recipe(df, columns=["a", "c"])
    assert recipe.inputs == ("a", "c")
    with pytest.raises(SchemaError, match="missing predictor"):
        fit_recipe(df, columns=["a", "zzz"])
