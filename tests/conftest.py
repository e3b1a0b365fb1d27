import pytest

from organizer.models import TMDBMovie, TMDBSeries
from organizer.store import MemoryStore
from organizer.tmdb import MetadataProvider, TMDBError


class StubProvider(MetadataProvider):
    """Provider answering from fixed tables and recording every call."""

    def __init__(self, movies=None, series=None, movie_details=None, tv_details=None):
        self.movies = movies or {}
        self.series = series or {}
        self.movie_by_id = movie_details or {}
        self.tv_by_id = tv_details or {}
        self.calls = []

    def search_movie(self, title, year=None):
        self.calls.append(("search_movie", title, year))
        return list(self.movies.get(title, []))

    def search_tv(self, query):
        self.calls.append(("search_tv", query))
        return list(self.series.get(query, []))

    def movie_details(self, movie_id):
        self.calls.append(("movie_details", movie_id))
        if movie_id not in self.movie_by_id:
            raise TMDBError(f"no movie {movie_id}")
        return self.movie_by_id[movie_id]

    def tv_details(self, tv_id):
        self.calls.append(("tv_details", tv_id))
        if tv_id not in self.tv_by_id:
            raise TMDBError(f"no tv {tv_id}")
        return self.tv_by_id[tv_id]


class FailingProvider(MetadataProvider):
    """Provider whose every call fails like a network outage."""

    def search_movie(self, title, year=None):
        raise TMDBError("connection reset")

    def search_tv(self, query):
        raise TMDBError("connection reset")

    def movie_details(self, movie_id):
        raise TMDBError("connection reset")

    def tv_details(self, tv_id):
        raise TMDBError("connection reset")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def breaking_bad_provider():
    return StubProvider(series={
        "Breaking Bad": [TMDBSeries(id=1396, name="絕命毒師", original_name="Breaking Bad", first_air_year=2008)],
    })


@pytest.fixture
def inception_provider():
    return StubProvider(
        movies={"Inception": [TMDBMovie(id=27205, title="盗梦空间", original_title="Inception", year=2010)]},
        movie_details={27205: TMDBMovie(id=27205, title="盗梦空间", original_title="Inception", year=2010)},
    )


@pytest.fixture
def failing_provider():
    return FailingProvider()
