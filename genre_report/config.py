"""Configuration and constants for the song genre report."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

DEFAULT_DATASET_URL = (
    "https://raw.githubusercontent.com/rfordatascience/tidytuesday/master/"
    "data/2020/2020-01-21/spotify_songs.csv"
)

ID_COLUMN = "id"
ARTIST_COLUMN = "artist"
NAME_COLUMN = "name"
TARGET_COLUMN = "genre"
RELEASE_DATE_COLUMN = "release_date"
POPULARITY_COLUMN = "popularity"
DURATION_MS_COLUMN = "duration_ms"
DURATION_COLUMN = "duration"
YEAR_COLUMN = "year"
DECADE_COLUMN = "decade"

# TidyTuesday spotify_songs.csv -> canonical names
COLUMN_ALIASES: Mapping[str, str] = {
    "track_id": ID_COLUMN,
    "track_artist": ARTIST_COLUMN,
    "track_name": NAME_COLUMN,
    "playlist_genre": TARGET_COLUMN,
    "track_album_release_date": RELEASE_DATE_COLUMN,
    "track_popularity": POPULARITY_COLUMN,
}

FEATURE_RANGES: Mapping[str, tuple[float, float]] = {
    "danceability": (0.0, 1.0),
    "energy": (0.0, 1.0),
    "key": (0.0, 11.0),
    "loudness": (-60.0, 5.0),
    "mode": (0.0, 1.0),
    "speechiness": (0.0, 1.0),
    "acousticness": (0.0, 1.0),
    "instrumentalness": (0.0, 1.0),
    "liveness": (0.0, 1.0),
    "valence": (0.0, 1.0),
    "tempo": (0.0, 250.0),
}
ACOUSTIC_FEATURES: Sequence[str] = tuple(FEATURE_RANGES)
POPULARITY_RANGE = (0, 100)

REQUIRED_COLUMNS: Sequence[str] = (
    ID_COLUMN,
    ARTIST_COLUMN,
    NAME_COLUMN,
    TARGET_COLUMN,
    RELEASE_DATE_COLUMN,
    DURATION_MS_COLUMN,
    POPULARITY_COLUMN,
    *ACOUSTIC_FEATURES,
)

# Canonical order used to break correlation ties: the later column of a
# correlated pair is the one dropped.
NUMERIC_FEATURES: Sequence[str] = (
    "danceability",
    "loudness",
    "energy",
    "key",
    "mode",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
    DURATION_COLUMN,
)

GENRES: Sequence[str] = ("rap", "pop", "r&b")

# (upper bound inclusive, label); years above the last bound are dropped
DECADE_BINS: Sequence[tuple[int, str]] = (
    (1979, "Pre-1980s"),
    (1989, "1980s"),
    (1999, "1990s"),
    (2009, "2000s"),
    (2020, "2010s"),
)

RECIPE_EXCLUDE: Sequence[str] = (ID_COLUMN, POPULARITY_COLUMN, YEAR_COLUMN)

RANDOM_FOREST = "random_forest"
KNN = "knn"
N_TREES = 300

DEFAULT_GRIDS: Mapping[str, Mapping[str, Sequence[int]]] = {
    RANDOM_FOREST: {"mtry": (2, 4, 6), "min_n": (2, 10, 20)},
    KNN: {"neighbors": (5, 10, 15, 20)},
}

METRICS_FILENAME = "metrics.json"
MODEL_FILENAME_TEMPLATE = "{family}.joblib"


@dataclass(frozen=True)
class ReportConfig:
    dataset_path: Path | str
    seed: int
    artifact_dir: Path = Path("genre_report/artifacts")
    genres: Sequence[str] = GENRES
    train_fraction: float = 0.75
    bootstrap_times: int = 25
    corr_threshold: float = 0.6
    duration_quantiles: tuple[float, float] = (0.1, 0.9)
    min_popularity: int = 1
    n_trees: int = N_TREES
    rf_grid: Mapping[str, Sequence[int]] = field(default_factory=lambda: dict(DEFAULT_GRIDS[RANDOM_FOREST]))
    knn_grid: Mapping[str, Sequence[int]] = field(default_factory=lambda: dict(DEFAULT_GRIDS[KNN]))
    importance_repeats: int = 10
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.seed is None:
            raise ValueError("ReportConfig requires an explicit seed")
        # URLs are handed to pandas as-is
        if not str(self.dataset_path).startswith(("http://", "https://")):
            object.__setattr__(self, "dataset_path", Path(self.dataset_path))
        object.__setattr__(self, "artifact_dir", Path(self.artifact_dir))
        object.__setattr__(self, "genres", tuple(g.lower() for g in self.genres))
        low, high = self.duration_quantiles
        if not 0.0 <= low < high <= 1.0:
            raise ValueError(f"Invalid duration quantiles {self.duration_quantiles}")
        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")

    def grid_for(self, family: str) -> Mapping[str, Sequence[int]]:
        grids = {RANDOM_FOREST: self.rf_grid, KNN: self.knn_grid}
        if family not in grids:
            raise ValueError(f"Unknown model family '{family}'")
        return grids[family]
