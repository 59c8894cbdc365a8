"""Tests for the time-bounded movie detail cache."""
import threading

import pytest

from movie_api.errors import BadRequest, UpstreamBadResponse, UpstreamNotFound
from movie_api.services.movie_details_cache import MovieDetail, MovieDetailsCache, map_tmdb_movie_details


class TestMapTMDBMovieDetails:
    def test_maps_all_fields(self):
        mapped = map_tmdb_movie_details({
            "id": 603,
            "title": "The Matrix",
            "release_date": "1999-03-31",
            "genres": [{"name": " Action "}, {"name": ""}, {"id": 1}, None, {"name": "Science Fiction"}],
            "poster_path": "/matrix.jpg",
        })

        assert mapped == {
            "id": 603,
            "name": "The Matrix",
            "year": 1999,
            "genre": ["Action", "Science Fiction"],
            "imagePath": "/matrix.jpg",
        }

    def test_missing_fields_fall_back_to_defaults(self):
        mapped = map_tmdb_movie_details({"id": 7})

        assert mapped == {"id": 7, "name": "", "year": None, "genre": [], "imagePath": None}

    def test_short_or_non_numeric_release_date_has_no_year(self):
        assert map_tmdb_movie_details({"id": 1, "release_date": "199"})["year"] is None
        assert map_tmdb_movie_details({"id": 1, "release_date": "abcd-01-01"})["year"] is None
        assert map_tmdb_movie_details({"id": 1, "release_date": ""})["year"] is None

    @pytest.mark.parametrize("raw_id", [None, "603", True, 1.5])
    def test_invalid_id_maps_to_none(self, raw_id):
        assert map_tmdb_movie_details({"id": raw_id, "title": "x"})["id"] is None


class TestMovieDetailsCache:
    def test_first_resolve_fetches_then_second_hits_cache(self, details_cache, fake_tmdb):
        first = details_cache.resolve(603)
        second = details_cache.resolve(603)

        assert fake_tmdb.detail_calls == [603]
        assert first == second
        assert first == MovieDetail(
            id=603,
            name="The Matrix",
            year=1999,
            genre=("Action", "Science Fiction"),
            imagePath="/poster603.jpg",
        )

    def test_string_id_is_accepted(self, details_cache, fake_tmdb):
        details_cache.resolve(" 603 ")
        details_cache.resolve(603)

        assert fake_tmdb.detail_calls == [603]

    def test_expired_entry_is_refetched(self, details_cache, fake_tmdb, clock):
        details_cache.resolve(603)
        clock.advance(3599)
        details_cache.resolve(603)
        assert fake_tmdb.detail_calls == [603]

        fake_tmdb.movies[603] = dict(fake_tmdb.movies[603], title="The Matrix (Remastered)")
        clock.advance(2)
        refreshed = details_cache.resolve(603)

        assert fake_tmdb.detail_calls == [603, 603]
        assert refreshed.name == "The Matrix (Remastered)"
        assert details_cache.resolve(603).name == "The Matrix (Remastered)"
        assert fake_tmdb.detail_calls == [603, 603]

    def test_expired_entry_is_evicted_on_read(self, details_cache, fake_tmdb, clock):
        details_cache.resolve(603)
        assert len(details_cache) == 1

        clock.advance(3601)
        del fake_tmdb.movies[603]
        with pytest.raises(UpstreamNotFound):
            details_cache.resolve(603)

        assert len(details_cache) == 0

    @pytest.mark.parametrize("bad_id", [0, -1, "abc", "", None, 1.5, True, "12abc"])
    def test_malformed_id_raises_bad_request_without_fetch(self, details_cache, fake_tmdb, bad_id):
        with pytest.raises(BadRequest):
            details_cache.resolve(bad_id)

        assert fake_tmdb.detail_calls == []

    def test_upstream_error_propagates_and_is_not_cached(self, details_cache, fake_tmdb):
        with pytest.raises(UpstreamNotFound) as exc_info:
            details_cache.resolve(999)

        assert exc_info.value.status == 404
        assert exc_info.value.code == "TMDB_NOT_FOUND"
        assert len(details_cache) == 0

    def test_non_object_payload_is_bad_response(self, details_cache, fake_tmdb):
        fake_tmdb.movies[42] = ["not", "an", "object"]

        with pytest.raises(UpstreamBadResponse) as exc_info:
            details_cache.resolve(42)

        assert exc_info.value.status == 502
        assert len(details_cache) == 0

    def test_payload_without_numeric_id_is_bad_response(self, details_cache, fake_tmdb):
        fake_tmdb.movies[42] = {"title": "No id here"}

        with pytest.raises(UpstreamBadResponse) as exc_info:
            details_cache.resolve(42)

        assert exc_info.value.code == "TMDB_SERVER_ERROR"
        assert len(details_cache) == 0

    def test_concurrent_reads_of_expired_entry_do_not_fail(self, fake_tmdb):
        class SyncedClock:
            def __init__(self):
                self.now = 0.0
                self.barrier = None

            def __call__(self):
                if self.barrier is not None:
                    self.barrier.wait(timeout=5)
                return self.now

        clock = SyncedClock()
        cache = MovieDetailsCache(fake_tmdb, ttl_seconds=60, clock=clock)
        cache.resolve(603)
        clock.now = 61
        clock.barrier = threading.Barrier(2)
        errors = []
        results = []

        def worker():
            try:
                results.append(cache.resolve(603))
            except Exception as e:
                errors.append(repr(e))

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(results) == 2
        assert fake_tmdb.detail_calls == [603, 603, 603]

    def test_instances_do_not_share_entries(self, fake_tmdb, clock):
        cache_a = MovieDetailsCache(fake_tmdb, ttl_seconds=60, clock=clock)
        cache_b = MovieDetailsCache(fake_tmdb, ttl_seconds=60, clock=clock)

        cache_a.resolve(603)
        cache_b.resolve(603)

        assert fake_tmdb.detail_calls == [603, 603]


class TestMovieDetail:
    def test_to_dict_and_from_dict(self):
        detail = MovieDetail(id=1, name="A", year=2001, genre=("Drama",), imagePath="/a.jpg")

        assert detail.to_dict() == {"id": 1, "name": "A", "year": 2001, "genre": ["Drama"], "imagePath": "/a.jpg"}
        assert MovieDetail.from_dict(detail.to_dict()) == detail

    def test_from_dict_rejects_non_integer_id(self):
        assert MovieDetail.from_dict({"id": "1"}) is None
        assert MovieDetail.from_dict({"id": True}) is None
        assert MovieDetail.from_dict({}) is None
        assert MovieDetail.from_dict({"id": 0}) is None
        assert MovieDetail.from_dict({"id": -5, "name": "negative"}) is None

    def test_is_immutable(self):
        detail = MovieDetail(id=1)
        with pytest.raises(AttributeError):
            detail.name = "changed"
