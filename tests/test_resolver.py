from organizer.models import TMDBMovie, TMDBSeries
from organizer.resolver import (
    MovieResolution,
    UnresolvedTitleError,
    extract_explicit_id,
    is_collection_name,
    resolve_movie,
    resolve_series,
    strip_explicit_id,
)

import pytest

from conftest import StubProvider


def test_explicit_id_in_any_case_and_bracket():
    assert extract_explicit_id("Inception {TMDB-12345}") == 12345
    assert extract_explicit_id("[tmdb-12345] 盗梦空间 2010") == 12345
    assert extract_explicit_id("Show {Tmdb-12345} S01") == 12345
    assert extract_explicit_id("Show tmdb-12345") is None


def test_strip_explicit_id():
    assert strip_explicit_id("Inception {tmdb-27205} 2010") == "Inception 2010"


def test_collection_names():
    assert is_collection_name("漫威电影合集")
    assert is_collection_name("指环王3部")
    assert is_collection_name("The Lord of the Rings Trilogy")
    assert is_collection_name("Star Wars saga")
    assert not is_collection_name("Inception (2010)")


def test_movie_search_first_result_wins(inception_provider):
    res = resolve_movie("Inception.2010.1080p.BluRay", inception_provider)
    assert res.resolved
    assert res.source == "search"
    assert (res.meta.title, res.meta.year, res.meta.external_id) == ("盗梦空间", 2010, 27205)
    assert inception_provider.calls == [("search_movie", "Inception", 2010)]


def test_movie_without_results_keeps_local_guess():
    res = resolve_movie("Obscure Film 1999", StubProvider())
    assert (res.meta.title, res.meta.year, res.meta.external_id) == ("Obscure Film", 1999, 0)
    assert res.source == "local"


def test_movie_without_provider():
    res = resolve_movie("Heat (1995)")
    assert (res.meta.title, res.meta.year, res.meta.external_id) == ("Heat", 1995, 0)


def test_movie_explicit_id_short_circuits_search(inception_provider):
    res = resolve_movie("whatever name {tmdb-27205}", inception_provider)
    assert res.source == "explicit"
    assert (res.meta.title, res.meta.year, res.meta.external_id) == ("盗梦空间", 2010, 27205)
    assert inception_provider.calls == [("movie_details", 27205)]


def test_movie_explicit_id_falls_back_on_failure(failing_provider):
    res = resolve_movie("Inception 2010 [TMDB-27205]", failing_provider)
    assert (res.meta.title, res.meta.year, res.meta.external_id) == ("Inception", 2010, 27205)
    assert res.warnings


def test_movie_search_failure_degrades_to_local(failing_provider):
    res = resolve_movie("Inception.2010.mkv", failing_provider)
    assert res.resolved
    assert res.meta.title == "Inception"
    assert res.meta.external_id == 0
    assert "connection reset" in res.warnings[0]


def test_movie_unresolved_when_no_title(inception_provider):
    res = resolve_movie("[1080p].2010", inception_provider)
    assert not res.resolved
    assert inception_provider.calls == []
    with pytest.raises(UnresolvedTitleError):
        res.require("[1080p].2010")


def test_resolution_require_returns_meta():
    res = resolve_movie("Heat 1995")
    assert isinstance(res, MovieResolution)
    assert res.require().title == "Heat"


def test_series_search(breaking_bad_provider):
    res = resolve_series("Breaking.Bad.S01.1080p", breaking_bad_provider)
    assert (res.meta.name, res.meta.year, res.meta.external_id) == ("絕命毒師", 2008, 1396)
    assert breaking_bad_provider.calls == [("search_tv", "Breaking Bad")]


def test_series_without_provider_never_fails():
    res = resolve_series("Breaking Bad S01 [1080p]")
    assert (res.meta.name, res.meta.year, res.meta.external_id) == ("Breaking Bad", None, 0)


def test_series_explicit_id():
    provider = StubProvider(tv_details={1396: TMDBSeries(id=1396, name="絕命毒師", first_air_year=2008)})
    res = resolve_series("绝命毒师 {tmdb-1396} S01", provider)
    assert (res.meta.name, res.meta.year, res.meta.external_id) == ("絕命毒師", 2008, 1396)
    assert provider.calls == [("tv_details", 1396)]


def test_series_explicit_id_failure_keeps_cleaned_name(failing_provider):
    res = resolve_series("绝命毒师 [TMDB-1396]", failing_provider)
    assert (res.meta.name, res.meta.year, res.meta.external_id) == ("绝命毒师", None, 1396)
    assert res.warnings


def test_series_search_failure(failing_provider):
    res = resolve_series("The Wire", failing_provider)
    assert res.meta.name == "The Wire"
    assert res.meta.external_id == 0
    assert res.warnings


def test_movie_result_without_year_keeps_local_year():
    provider = StubProvider(movies={"Heat": [TMDBMovie(id=949, title="Heat", year=None)]})
    res = resolve_movie("Heat 1995", provider)
    assert (res.meta.year, res.meta.external_id) == (1995, 949)
