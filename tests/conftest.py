"""
Pytest configuration and shared fixtures.
"""
import os
from typing import Any, Dict, List, Optional

import pytest

# Set environment variables BEFORE any imports (for CI without .env)
os.environ.setdefault("TMDB_API_KEY", "test_api_key_for_ci_testing_only")  # pragma: allowlist secret

from movie_api.errors import UpstreamNotFound
from movie_api.services.favorites_store import FavoritesStore
from movie_api.services.movie_details_cache import MovieDetailsCache


def make_raw_movie(movie_id: int, title: str = "The Matrix", release_date: str = "1999-03-31") -> Dict[str, Any]:
    return {
        "id": movie_id,
        "title": title,
        "release_date": release_date,
        "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
        "poster_path": f"/poster{movie_id}.jpg",
    }


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTMDBClient:
    """Records calls and serves canned payloads instead of hitting TMDb."""

    def __init__(self):
        self.movies: Dict[int, Any] = {}
        self.search_pages: List[Any] = []
        self.detail_calls: List[int] = []
        self.search_calls: List[tuple] = []

    def get_movie_details(self, movie_id: int) -> Any:
        self.detail_calls.append(movie_id)
        if movie_id not in self.movies:
            raise UpstreamNotFound("The resource you requested could not be found.", status=404)
        return self.movies[movie_id]

    def search_movies(self, text: str, year: Optional[int] = None, page: int = 1) -> Any:
        self.search_calls.append((text, year, page))
        if page - 1 < len(self.search_pages):
            return self.search_pages[page - 1]
        return {"results": [], "total_pages": len(self.search_pages)}


@pytest.fixture
def fake_tmdb() -> FakeTMDBClient:
    client = FakeTMDBClient()
    client.movies[603] = make_raw_movie(603)
    client.movies[550] = make_raw_movie(550, title="Fight Club", release_date="1999-10-15")
    return client


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def details_cache(fake_tmdb: FakeTMDBClient, clock: FakeClock) -> MovieDetailsCache:
    return MovieDetailsCache(fake_tmdb, ttl_seconds=3600, clock=clock)


@pytest.fixture
def favorites_path(tmp_path) -> str:
    return str(tmp_path / "data" / "favorites.json")


@pytest.fixture
def favorites_store(favorites_path: str) -> FavoritesStore:
    return FavoritesStore(favorites_path)
