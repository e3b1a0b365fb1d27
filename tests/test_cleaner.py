import re

from organizer.cleaner import (
    clean_movie_noise,
    clean_series_query,
    extract_movie_info,
    extract_quality_tag,
    extract_year,
)


def test_movie_info_from_scene_name():
    assert extract_movie_info("Inception.2010.1080p.BluRay.x264.mkv") == ("Inception", 2010)


def test_movie_info_bracketed_year():
    assert extract_movie_info("盗梦空间 (2010) [国英双语]") == ("盗梦空间", 2010)
    assert extract_movie_info("The Matrix [1999] 2160p") == ("The Matrix", 1999)


def test_movie_info_without_year_strips_noise():
    title, year = extract_movie_info("Heat.REMUX.2160p.HEVC.DTS-HD")
    assert year is None
    assert title == "Heat"


def test_movie_info_fullwidth_digits():
    assert extract_movie_info("阿凡达．２００９．４Ｋ") == ("阿凡达", 2009)


def test_year_must_be_bounded():
    assert extract_year("Blade Runner 2049x")[0] is None
    assert extract_year("file12010")[0] is None
    assert extract_year("2012 disaster") == (2012, "")


def test_only_first_year_counts():
    year, region = extract_year("1917 (2019)")
    assert year == 1917
    assert region == ""


def test_movie_noise_removes_brackets_and_markers():
    assert clean_movie_noise("【高清】漫威电影 Collection") == "漫威"
    assert clean_movie_noise("Alien.Director's Cut.Extended") == "Alien"


def test_movie_noise_accepts_custom_patterns():
    patterns = (re.compile(r"SPECIAL"),)
    assert clean_movie_noise("Movie.SPECIAL.1080p", patterns) == "Movie 1080p"


def test_series_query_strips_season_and_quality():
    assert clean_series_query("Breaking.Bad.S01.1080p.WEB-DL") == "Breaking Bad"
    assert clean_series_query("绝命毒师 第1季 [中英字幕]") == "绝命毒师"
    assert clean_series_query("The Wire Season 3 4K HDR") == "The Wire"
    assert clean_series_query("Silo S01-S02 2160p DV") == "Silo"


def test_series_query_keeps_words_containing_tag_letters():
    assert clean_series_query("Adventure Time") == "Adventure Time"


def test_quality_tag_priority():
    assert extract_quality_tag("Show.S01E01.2160p.mkv") == "4K"
    assert extract_quality_tag("Show.1080p.4K.remux.mkv") == "4K"
    assert extract_quality_tag("Show.720p.1080p.mkv") == "1080p"
    assert extract_quality_tag("Show.720p.mkv") == "720p"
    assert extract_quality_tag("Show.mkv") == ""
