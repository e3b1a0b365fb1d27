import pytest
import requests

from organizer.cache import Cache
from organizer.config import ConfigurationError
from organizer.tmdb import TMDBClient, TMDBError, parse_year


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Replays queued responses (or exceptions) and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, dict(params or {})))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("organizer.tmdb.time.sleep", lambda seconds: None)


def _client(session, **kwargs):
    return TMDBClient("key", session=session, **kwargs)


def test_missing_api_key():
    with pytest.raises(ConfigurationError):
        TMDBClient("")


def test_parse_year():
    assert parse_year("2010-07-16") == 2010
    assert parse_year("") is None
    assert parse_year(None) is None


def test_search_movie_maps_results():
    session = FakeSession(FakeResponse(payload={"results": [
        {"id": 27205, "title": "盗梦空间", "original_title": "Inception", "release_date": "2010-07-15"},
        {"id": 1, "title": "", "original_title": "Other", "release_date": ""},
    ]}))

    results = _client(session).search_movie("Inception", 2010)

    assert [(m.id, m.title, m.year) for m in results] == [(27205, "盗梦空间", 2010), (1, "Other", None)]
    url, params = session.requests[0]
    assert url.endswith("/search/movie")
    assert params["query"] == "Inception"
    assert params["year"] == 2010
    assert params["language"] == "zh-CN"


def test_search_tv_language_override():
    session = FakeSession(FakeResponse(payload={"results": [
        {"id": 1396, "name": "Breaking Bad", "first_air_date": "2008-01-20"},
    ]}))

    results = _client(session, language="en-US").search_tv("Breaking Bad")

    assert (results[0].id, results[0].first_air_year) == (1396, 2008)
    assert session.requests[0][1]["language"] == "en-US"


def test_movie_details_requests_alternative_titles():
    session = FakeSession(FakeResponse(payload={"id": 27205, "title": "盗梦空间", "release_date": "2010-07-15"}))

    movie = _client(session).movie_details(27205)

    assert movie.title == "盗梦空间"
    url, params = session.requests[0]
    assert url.endswith("/movie/27205")
    assert params["append_to_response"] == "alternative_titles"


def test_details_without_id_is_an_error():
    session = FakeSession(FakeResponse(payload={"success": False}))
    with pytest.raises(TMDBError):
        _client(session).tv_details(99)


def test_http_error_raises():
    session = FakeSession(FakeResponse(status_code=401, payload={}))
    with pytest.raises(TMDBError, match="401"):
        _client(session).search_tv("x")


def test_invalid_json_raises():
    session = FakeSession(FakeResponse(payload=None))
    with pytest.raises(TMDBError):
        _client(session).search_tv("x")


def test_transport_errors_are_retried():
    session = FakeSession(
        requests.exceptions.Timeout(),
        requests.exceptions.ConnectionError("reset"),
        FakeResponse(payload={"results": []}),
    )
    assert _client(session, retries=3).search_tv("x") == []
    assert len(session.requests) == 3


def test_retries_exhausted():
    session = FakeSession(requests.exceptions.Timeout(), requests.exceptions.Timeout())
    with pytest.raises(TMDBError, match="after 2 attempts"):
        _client(session, retries=2).search_tv("x")


def test_rate_limit_response_is_retried():
    session = FakeSession(
        FakeResponse(status_code=429, headers={"Retry-After": "2"}),
        FakeResponse(payload={"results": []}),
    )
    assert _client(session).search_movie("x") == []
    assert len(session.requests) == 2


def test_cache_short_circuits_requests(tmp_path):
    cache = Cache(tmp_path)
    session = FakeSession(FakeResponse(payload={"results": [{"id": 5, "title": "Heat", "release_date": "1995-12-15"}]}))

    first = _client(session, cache=cache).search_movie("Heat", 1995)
    second = _client(FakeSession(), cache=Cache(tmp_path)).search_movie("heat ", 1995)

    assert first == second
    assert len(session.requests) == 1


def test_memory_only_cache_writes_nothing(tmp_path):
    cache = Cache(tmp_path, persist=False)
    cache.set_tv_search("x", [])
    assert cache.get_tv_search("X") == []
    assert not (tmp_path / ".organizer_cache.json").exists()


def test_unreadable_cache_file_is_ignored(tmp_path):
    (tmp_path / ".organizer_cache.json").write_text("{not json")
    cache = Cache(tmp_path)
    assert cache.get_details("movie", 1) is None
