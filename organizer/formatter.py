"""Formatter module for generating target folder and file names."""
import re

from .cleaner import extract_quality_tag
from .models import MovieMeta, SeriesMeta
from .parser import split_extension, season_folder_name


def sanitize_filename(name: str) -> str:
    """
    Remove or replace characters that are invalid in file names.

    Args:
        name: The name to sanitize

    Returns:
        Sanitized name safe for use as a filename
    """
    # Characters not allowed in Windows filenames: / \ : * ? " < > |
    invalid_chars = r'[<>:"/\\|?*]'
    sanitized = re.sub(invalid_chars, '', name)
    # Remove leading/trailing dots and spaces
    sanitized = sanitized.strip('. ')
    # Replace multiple spaces with single space
    sanitized = re.sub(r'\s+', ' ', sanitized)
    return sanitized


def _with_tag(base: str, old_name: str) -> str:
    tag = extract_quality_tag(old_name)
    ext = split_extension(old_name)[1]
    return f"{base} - {tag}{ext}" if tag else f"{base}{ext}"


def movie_folder_name(meta: MovieMeta) -> str:
    """'Title (Year) [TMDB-id]', 'Title (Year)' or 'Title'."""
    title = sanitize_filename(meta.title)
    if meta.external_id and meta.year:
        return f"{title} ({meta.year}) [TMDB-{meta.external_id}]"
    if meta.external_id:
        return f"{title} [TMDB-{meta.external_id}]"
    if meta.year:
        return f"{title} ({meta.year})"
    return title


def movie_file_name(meta: MovieMeta, old_name: str) -> str:
    """'Title (Year)[ - tag].ext'; the year is left out when unknown."""
    title = sanitize_filename(meta.title)
    base = f"{title} ({meta.year})" if meta.year else title
    return _with_tag(base, old_name)


def collection_folder_name(title: str) -> str:
    """A collection holds several movies, so it carries no year or id."""
    return sanitize_filename(title)


def series_folder_name(meta: SeriesMeta) -> str:
    """'Name (Year) [TMDB-id]' when both are known, otherwise 'Name'."""
    name = sanitize_filename(meta.name)
    if meta.year and meta.external_id:
        return f"{name} ({meta.year}) [TMDB-{meta.external_id}]"
    return name


def episode_file_name(series_name: str, season: int, episode: int, old_name: str) -> str:
    """'Series - S01E02[ - tag].ext'."""
    base = f"{sanitize_filename(series_name)} - {season_folder_name(season)}E{episode:02d}"
    return _with_tag(base, old_name)
