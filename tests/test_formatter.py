from organizer.formatter import (
    collection_folder_name,
    episode_file_name,
    movie_file_name,
    movie_folder_name,
    sanitize_filename,
    series_folder_name,
)
from organizer.models import MovieMeta, SeriesMeta


def test_sanitize_filename():
    assert sanitize_filename('Mission: Impossible?') == "Mission Impossible"
    assert sanitize_filename(" .hidden name. ") == "hidden name"


def test_movie_folder_variants():
    assert movie_folder_name(MovieMeta("盗梦空间", 2010, 27205)) == "盗梦空间 (2010) [TMDB-27205]"
    assert movie_folder_name(MovieMeta("盗梦空间", None, 27205)) == "盗梦空间 [TMDB-27205]"
    assert movie_folder_name(MovieMeta("Heat", 1995)) == "Heat (1995)"
    assert movie_folder_name(MovieMeta("Heat")) == "Heat"


def test_movie_file_keeps_extension_and_tag():
    meta = MovieMeta("盗梦空间", 2010, 27205)
    assert movie_file_name(meta, "Inception.2010.2160p.mkv") == "盗梦空间 (2010) - 4K.mkv"
    assert movie_file_name(meta, "inception.MP4") == "盗梦空间 (2010).MP4"


def test_movie_file_without_year():
    assert movie_file_name(MovieMeta("Heat"), "heat.1080p.avi") == "Heat - 1080p.avi"


def test_collection_folder_has_no_year():
    assert collection_folder_name("漫威") == "漫威"


def test_series_folder_needs_year_and_id():
    assert series_folder_name(SeriesMeta("絕命毒師", 2008, 1396)) == "絕命毒師 (2008) [TMDB-1396]"
    assert series_folder_name(SeriesMeta("絕命毒師", None, 1396)) == "絕命毒師"
    assert series_folder_name(SeriesMeta("The Wire")) == "The Wire"


def test_episode_file_name():
    assert episode_file_name("絕命毒師", 1, 2, "ep02.mkv") == "絕命毒師 - S01E02.mkv"
    assert episode_file_name("Show", 10, 105, "Show.720p.srt") == "Show - S10E105 - 720p.srt"
