"""Reloading persisted genre models for prediction."""
from __future__ import annotations

from pathlib import Path

import joblib

from .config import MODEL_FILENAME_TEMPLATE, RANDOM_FOREST
from .models import GenreModel, check_family


def load_model(artifact_dir: Path | str = Path("genre_report/artifacts"), family: str = RANDOM_FOREST) -> GenreModel:
    path = Path(artifact_dir) / MODEL_FILENAME_TEMPLATE.format(family=check_family(family))
    model = joblib.load(path)
    if not isinstance(model, GenreModel):
        raise TypeError(f"{path} does not hold a GenreModel")
    return model
