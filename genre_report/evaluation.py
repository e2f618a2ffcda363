"""Metrics for fitted genre models."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance
from sklearn.metrics import accuracy_score, confusion_matrix, roc_auc_score

from .config import TARGET_COLUMN
from .errors import require_seed
from .models import GenreModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfidenceSummary:
    mean: float
    median: float
    std: float
    quartiles: tuple[float, float, float]
    histogram: pd.Series


@dataclass(frozen=True)
class Evaluation:
    family: str
    accuracy: float
    roc_auc: float
    confusion: pd.DataFrame
    recall: pd.Series
    confidence: ConfidenceSummary
    importance: pd.DataFrame

    def metrics(self) -> dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "roc_auc": self.roc_auc,
            "mean_confidence": self.confidence.mean,
        }


def accuracy(truth: Sequence[str], predicted: Sequence[str]) -> float:
    return float(accuracy_score(np.asarray(truth, dtype=str), np.asarray(predicted, dtype=str)))


def roc_auc(truth: Sequence[str], proba: pd.DataFrame) -> float:
    """One-vs-rest ROC-AUC averaged over classes.

    A class needs both positive and negative rows to be scored; if none does
    the result is NaN.
    """
    truth = np.asarray(truth, dtype=str)
    scores = []
    for label in proba.columns:
        positives = truth == str(label)
        if positives.all() or not positives.any():
            continue
        scores.append(roc_auc_score(positives, proba[label].to_numpy()))
    return float(np.mean(scores)) if scores else float("nan")


def confusion_table(truth: Sequence[str], predicted: Sequence[str], labels: Sequence[str]) -> pd.DataFrame:
    labels = [str(label) for label in labels]
    counts = confusion_matrix(np.asarray(truth, dtype=str), np.asarray(predicted, dtype=str), labels=labels)
    return pd.DataFrame(
        counts,
        index=pd.Index(labels, name="truth"),
        columns=pd.Index(labels, name="prediction"),
    )


def per_class_recall(confusion: pd.DataFrame) -> pd.Series:
    totals = confusion.sum(axis=1)
    hits = pd.Series(np.diag(confusion.to_numpy()), index=confusion.index)
    # labels absent from the evaluation set have no recall
    recall = (hits / totals)[totals > 0]
    return recall.rename("recall")


def confidence_summary(proba: pd.DataFrame, bins: int = 10) -> ConfidenceSummary:
    confidence = proba.max(axis=1)
    counts, edges = np.histogram(confidence, bins=bins, range=(0.0, 1.0))
    labels = [f"{low:.1f}-{high:.1f}" for low, high in zip(edges[:-1], edges[1:])]
    q1, q2, q3 = confidence.quantile([0.25, 0.5, 0.75])
    return ConfidenceSummary(
        mean=float(confidence.mean()),
        median=float(q2),
        std=float(confidence.std(ddof=1)) if len(confidence) > 1 else 0.0,
        quartiles=(float(q1), float(q2), float(q3)),
        histogram=pd.Series(counts, index=labels, name="rows"),
    )


def variable_importance(
    model: GenreModel,
    rows: pd.DataFrame,
    *,
    label: str = TARGET_COLUMN,
    seed: int,
    n_repeats: int = 10,
) -> pd.DataFrame:
    """Permutation importance: mean accuracy drop when one feature is shuffled."""
    seed = require_seed(seed)
    X = model.features(rows)
    y = rows[label].astype(str)
    result = permutation_importance(
        model.estimator,
        X,
        y,
        scoring="accuracy",
        n_repeats=n_repeats,
        random_state=seed,
        n_jobs=1,
    )
    importance = pd.DataFrame(
        {"importance": result.importances_mean, "std": result.importances_std},
        index=pd.Index(X.columns, name="feature"),
    )
    return importance.sort_values("importance", ascending=False, kind="mergesort")


def evaluate_model(
    model: GenreModel,
    rows: pd.DataFrame,
    *,
    label: str = TARGET_COLUMN,
    seed: int,
    importance_repeats: int = 10,
) -> Evaluation:
    truth = rows[label].astype(str)
    predicted = model.predict(rows)
    proba = model.predict_proba(rows)
    labels = sorted(set(model.classes) | set(truth))
    confusion = confusion_table(truth, predicted, labels)
    evaluation = Evaluation(
        family=model.family,
        accuracy=accuracy(truth, predicted),
        roc_auc=roc_auc(truth, proba),
        confusion=confusion,
        recall=per_class_recall(confusion),
        confidence=confidence_summary(proba),
        importance=variable_importance(model, rows, label=label, seed=seed, n_repeats=importance_repeats),
    )
    logger.info(
        "%s on %d rows: accuracy=%.3f roc_auc=%.3f",
        model.family,
        len(rows),
        evaluation.accuracy,
        evaluation.roc_auc,
    )
    return evaluation
