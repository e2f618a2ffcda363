"""Model families and the fitted genre model."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import pandas as pd
from sklearn.base import ClassifierMixin
from sklearn.ensemble import RandomForestClassifier
from sklearn.neighbors import KNeighborsClassifier

from .config import KNN, N_TREES, RANDOM_FOREST, TARGET_COLUMN
from .errors import SchemaError, require_seed
from .recipe import FeatureRecipe, apply_recipe, fit_recipe
from .sampling import check_stratifiable

logger = logging.getLogger(__name__)

FAMILIES = (RANDOM_FOREST, KNN)
DEFAULT_PARAMS: Mapping[str, Mapping[str, int]] = {
    RANDOM_FOREST: {"mtry": 3, "min_n": 2},
    KNN: {"neighbors": 5},
}


def check_family(family: str) -> str:
    if family not in FAMILIES:
        raise ValueError(f"Unknown model family '{family}'; expected one of {', '.join(FAMILIES)}")
    return family


def _build_estimator(
    family: str,
    params: Mapping[str, Any],
    *,
    n_features: int,
    n_rows: int,
    seed: int,
    n_trees: int,
) -> ClassifierMixin:
    if family == RANDOM_FOREST:
        return RandomForestClassifier(
            n_estimators=n_trees,
            max_features=max(1, min(int(params["mtry"]), n_features)),
            min_samples_split=max(2, int(params["min_n"])),
            random_state=seed,
            n_jobs=1,
        )
    # KNN cannot ask for more neighbours than it has training rows
    return KNeighborsClassifier(n_neighbors=max(1, min(int(params["neighbors"]), n_rows)))


@dataclass(frozen=True, eq=False)
class GenreModel:
    """A fitted recipe plus estimator; accepts raw track rows."""

    family: str
    params: Mapping[str, Any]
    recipe: FeatureRecipe
    estimator: ClassifierMixin = field(repr=False)
    classes: tuple[str, ...]

    def features(self, rows: pd.DataFrame) -> pd.DataFrame:
        baked = apply_recipe(self.recipe, rows)
        return baked[list(self.recipe.predictors)]

    def predict(self, rows: pd.DataFrame) -> pd.Series:
        labels = self.estimator.predict(self.features(rows))
        return pd.Series(labels, index=rows.index, name="prediction")

    def predict_proba(self, rows: pd.DataFrame) -> pd.DataFrame:
        proba = self.estimator.predict_proba(self.features(rows))
        return pd.DataFrame(proba, index=rows.index, columns=list(self.classes))

    def _feature_frame(self, feature_map: Mapping[str, float]) -> pd.DataFrame:
        row: dict[str, float] = {}
        for name in self.recipe.inputs:
            if name not in feature_map:
                raise SchemaError(f"Missing feature '{name}' for inference")
            row[name] = float(feature_map[name])
        return pd.DataFrame([row])

    def predict_one(self, feature_map: Mapping[str, float]) -> str:
        return str(self.predict(self._feature_frame(feature_map)).iloc[0])

    def top_k(self, feature_map: Mapping[str, float], *, k: int = 3) -> list[dict[str, float]]:
        probs = self.predict_proba(self._feature_frame(feature_map)).iloc[0]
        probs = probs.sort_values(ascending=False).head(k)
        return [{"genre": label, "probability": float(prob)} for label, prob in probs.items()]


def fit_model(
    family: str,
    training_data: pd.DataFrame,
    *,
    params: Mapping[str, Any] | None = None,
    seed: int,
    label: str = TARGET_COLUMN,
    corr_threshold: float = 0.6,
    n_trees: int = N_TREES,
    columns: Sequence[str] | None = None,
) -> GenreModel:
    """Fit a recipe on ``training_data`` and a ``family`` classifier on its output."""
    check_family(family)
    seed = require_seed(seed)
    check_stratifiable(training_data[label].astype(object))
    params = dict(DEFAULT_PARAMS[family] if params is None else params)

    recipe = fit_recipe(training_data, outcome=label, threshold=corr_threshold, columns=columns)
    X = apply_recipe(recipe, training_data)[list(recipe.predictors)]
    y = training_data[label].astype(str)

    estimator = _build_estimator(
        family,
        params,
        n_features=X.shape[1],
        n_rows=len(X),
        seed=seed,
        n_trees=n_trees,
    )
    estimator.fit(X, y)
    logger.debug("Fit %s with %s on %d rows", family, params, len(X))
    return GenreModel(
        family=family,
        params=params,
        recipe=recipe,
        estimator=estimator,
        classes=tuple(str(label) for label in estimator.classes_),
    )


def predict(model: GenreModel, rows: pd.DataFrame) -> pd.Series:
    return model.predict(rows)


def predict_proba(model: GenreModel, rows: pd.DataFrame) -> pd.DataFrame:
    return model.predict_proba(rows)
