"""Noise and tag extraction for folder and file names.

Turns noisy release names into something a metadata search can work
with: the year is pulled out, quality / source / codec / edition tokens
and bracketed spans are removed, and the remaining separators are
collapsed to single spaces.

The *parser* module handles season/episode numbers.  This module only
deals with titles, years and the display quality tag.
"""
import re
from typing import Iterable, Pattern

from .normalizer import to_halfwidth, normalize_spaces
from .parser import split_extension, VIDEO_EXTS, SUB_EXTS

# ---------------------------------------------------------------------------
# Pattern groups
# ---------------------------------------------------------------------------

# Release tags are matched with ASCII word boundaries so that a tag glued
# to CJK text ('盗梦空间1080p') is still recognised.
_TAG_FLAGS = re.IGNORECASE | re.ASCII

# Resolution / quality
_RESOLUTION = r"\b(480p|720p|1080p|2160p|4k|8k)\b"

# Source / rip type
_SOURCE = r"\b(BluRay|REMUX|WEB-?DL|WEBRip|HDTV|DVDRip|BDRip|UHD)\b"

# Video / audio codec, HDR, bit depth
_CODEC = (
    r"\b(H\.?264|H\.?265|x264|x265|HEVC|AVC|DDP|AAC|AC3|DTS-HD|TrueHD"
    r"|Atmos|HDR|DV|DoVi|10-?bit)\b"
)

# Edition tags
_EDITION = r"\b(Repack|Proper|Limited|Complete|Uncut|Extended|Director's Cut|DC)\b"

# Bracketed content, ASCII and full-width
_BRACKETS = r"(\[.*?\]|\(.*?\)|【.*?】|〔.*?〕|（.*?）)"

# Collection markers
_COLLECTION = r"(\d+(?:-\d+)?部|合集|系列|Collection|Trilogy|Saga|动漫)"

# Generic category words
_GENERIC = r"(电影|制片厂)"

MOVIE_NOISE_PATTERNS: tuple[Pattern[str], ...] = (
    re.compile(_RESOLUTION, _TAG_FLAGS),
    re.compile(_SOURCE, _TAG_FLAGS),
    re.compile(_CODEC, _TAG_FLAGS),
    re.compile(_EDITION, _TAG_FLAGS),
    re.compile(_BRACKETS),
    re.compile(_COLLECTION, re.IGNORECASE),
    re.compile(_GENERIC),
)

SERIES_NOISE_PATTERNS: tuple[Pattern[str], ...] = (
    # Season tokens: S01, S1-S3, Season 2, 第2季, 2-3部
    re.compile(r"(?<![A-Za-z])S\d{1,2}(?:-S\d{1,2})?(?!\d)", re.IGNORECASE),
    re.compile(r"Season\s*\d+", re.IGNORECASE),
    re.compile(r"第?\s*\d+(?:-\d+)?\s*[季部]"),
    # Reduced quality set
    re.compile(r"\b(1080p|2160p|4k|8k|HDR|DV|WEB-DL|H\.?\d{3}|AAC|DDP)\b", _TAG_FLAGS),
    re.compile(r"(\[.*?\]|\(.*?\)|【.*?】)"),
)

# Year inside optional separators / brackets
YEAR_RE = re.compile(r"(?:^|[\s.(\[【（])(19\d{2}|20\d{2})(?=$|[\s.)\]】）])")

QUALITY_TAGS = (
    ("4K", ("4k", "2160p")),
    ("1080p", ("1080p",)),
    ("720p", ("720p",)),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _strip_patterns(text: str, patterns: Iterable[Pattern[str]]) -> str:
    for pattern in patterns:
        text = pattern.sub(" ", text)
    return text


def _tidy(text: str) -> str:
    text = normalize_spaces(text.replace(".", " "))
    return text.strip(" -_")


def extract_year(text: str) -> tuple[int | None, str]:
    """
    Find the first plausible release year.

    Returns:
        (year, title_region) where *title_region* is everything before
        the year.  Without a year the whole text is returned.
    """
    m = YEAR_RE.search(text)
    if not m:
        return None, text
    return int(m.group(1)), text[:m.start()]


def clean_movie_noise(
    text: str,
    patterns: Iterable[Pattern[str]] = MOVIE_NOISE_PATTERNS,
) -> str:
    """Remove release noise from a movie title candidate."""
    return _tidy(_strip_patterns(text, patterns))


def extract_movie_info(
    raw_name: str,
    patterns: Iterable[Pattern[str]] = MOVIE_NOISE_PATTERNS,
) -> tuple[str, int | None]:
    """
    Guess a movie (title, year) from a folder or file name.

    For movies everything after the year is almost always codec / source /
    group noise, so the title is taken from the text before it.
    """
    name = to_halfwidth(raw_name)
    stem, ext = split_extension(name)
    if ext.lower() in VIDEO_EXTS or ext.lower() in SUB_EXTS:
        name = stem

    year, region = extract_year(name)
    return clean_movie_noise(region, patterns), year


def clean_series_query(
    folder_name: str,
    patterns: Iterable[Pattern[str]] = SERIES_NOISE_PATTERNS,
) -> str:
    """Turn a series folder name into a search-friendly query."""
    text = to_halfwidth(folder_name)
    return _tidy(_strip_patterns(text, patterns))


def extract_quality_tag(filename: str) -> str:
    """
    Return the display quality tag of a file name.

    Only one tag is returned; 4K beats 1080p beats 720p.  Returns an
    empty string when no resolution marker is present.
    """
    lower = to_halfwidth(filename).lower()
    for tag, needles in QUALITY_TAGS:
        if any(n in lower for n in needles):
            return tag
    return ""
