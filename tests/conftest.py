from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

GENRE_PROFILES = {
    # genre: (danceability, speechiness, valence)
    "rap": (0.75, 0.30, 0.50),
    "pop": (0.70, 0.06, 0.65),
    "r&b": (0.60, 0.12, 0.40),
}


def build_raw_tracks(rows_per_genre: int = 40, seed: int = 0) -> pd.DataFrame:
    """Synthetic song table in canonical column names with genre-dependent features."""
    rng = np.random.RandomState(seed)
    rows = []
    for genre, (dance, speech, valence) in GENRE_PROFILES.items():
        for idx in range(rows_per_genre):
            energy = float(rng.uniform(0.2, 0.95))
            rows.append(
                {
                    "id": f"{genre}-{idx:03d}",
                    "artist": f"{genre} artist {idx % 7}",
                    "name": f"{genre} song {idx}",
                    "genre": genre,
                    "release_date": f"{rng.randint(1975, 2020)}-0{rng.randint(1, 10)}-15",
                    "duration_ms": int(rng.uniform(150_000, 260_000)),
                    "popularity": int(rng.randint(5, 95)),
                    "danceability": float(np.clip(rng.normal(dance, 0.08), 0, 1)),
                    "energy": energy,
                    "key": int(rng.randint(0, 12)),
                    "loudness": float(-12 + 8 * energy + rng.normal(0, 0.5)),
                    "mode": int(rng.randint(0, 2)),
                    "speechiness": float(np.clip(rng.normal(speech, 0.03), 0, 1)),
                    "acousticness": float(rng.uniform(0, 0.5)),
                    "instrumentalness": float(rng.uniform(0, 0.05)),
                    "liveness": float(rng.uniform(0.05, 0.4)),
                    "valence": float(np.clip(rng.normal(valence, 0.1), 0, 1)),
                    "tempo": float(rng.uniform(80, 160)),
                }
            )
    return pd.DataFrame(rows)


def build_toy_tracks() -> pd.DataFrame:
    """Twelve tracks, three labels, four numeric attributes."""
    rng = np.random.RandomState(7)
    rows = []
    for offset, genre in enumerate(["rap", "pop", "r&b"]):
        for idx in range(4):
            rows.append(
                {
                    "id": f"{genre}-{idx}",
                    "genre": genre,
                    "a": offset + rng.normal(0, 0.3),
                    "b": -offset + rng.normal(0, 0.3),
                    "c": rng.uniform(0, 1),
                    "d": rng.uniform(0, 1),
                }
            )
    return pd.DataFrame(rows)


@pytest.fixture
def raw_tracks() -> pd.DataFrame:
    return build_raw_tracks()


@pytest.fixture
def toy_tracks() -> pd.DataFrame:
    return build_toy_tracks()
