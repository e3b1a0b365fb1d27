"""Title resolution: local name analysis combined with provider lookups.

Every provider call goes through :func:`attempt`, which turns the
"call failed, keep the local guess" path into an explicit value instead
of a silently swallowed exception.  Failures end up in the resolution's
``warnings`` so the planner can report them.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from .cleaner import extract_movie_info, clean_series_query
from .models import MovieMeta, SeriesMeta
from .normalizer import normalize_spaces, to_halfwidth
from .tmdb import MetadataProvider, MetadataProviderError

log = logging.getLogger(__name__)

T = TypeVar("T")

EXPLICIT_ID_RE = re.compile(r"[{\[]tmdb-(\d+)[}\]]", re.IGNORECASE)
COLLECTION_RE = re.compile(r"\d+部|合集|系列|Collection|Trilogy|Saga", re.IGNORECASE)


class UnresolvedTitleError(Exception):
    """Raised when no usable title can be derived from a name."""
    pass


@dataclass
class ProviderResult(Generic[T]):
    """Outcome of one provider call: a value or the error that replaced it."""
    value: T | None = None
    error: MetadataProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(call: Callable[..., T], *args) -> ProviderResult[T]:
    """Run a provider call, capturing provider failures as a value."""
    try:
        return ProviderResult(value=call(*args))
    except MetadataProviderError as e:
        log.warning("Metadata lookup failed: %s", e)
        return ProviderResult(error=e)


@dataclass
class MovieResolution:
    """Resolved movie metadata; ``meta`` is None when unresolved."""
    meta: MovieMeta | None
    source: str = "local"
    warnings: list[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.meta is not None

    def require(self, name: str = "") -> MovieMeta:
        if self.meta is None:
            raise UnresolvedTitleError(f"Could not resolve a title from {name!r}")
        return self.meta


@dataclass
class SeriesResolution:
    """Resolved series metadata.  A series always has a display name."""
    meta: SeriesMeta
    source: str = "local"
    warnings: list[str] = field(default_factory=list)


def extract_explicit_id(name: str) -> int | None:
    """Return the id of a '{tmdb-123}' / '[TMDB-123]' tag, if present."""
    m = EXPLICIT_ID_RE.search(to_halfwidth(name))
    return int(m.group(1)) if m else None


def strip_explicit_id(name: str) -> str:
    return normalize_spaces(EXPLICIT_ID_RE.sub(" ", to_halfwidth(name)))


def is_collection_name(name: str) -> bool:
    """True for folders holding several movies ('合集', 'Trilogy', '3部' ...)."""
    return bool(COLLECTION_RE.search(to_halfwidth(name)))


def resolve_movie(name: str, provider: MetadataProvider | None = None) -> MovieResolution:
    """
    Resolve a movie folder (or file stem) to canonical naming metadata.

    Args:
        name: Folder name or file stem.
        provider: Metadata provider, or None for local-only resolution.

    Returns:
        MovieResolution; unresolved when no title could be extracted.
    """
    explicit_id = extract_explicit_id(name)
    if explicit_id is not None:
        return _resolve_movie_by_id(name, explicit_id, provider)

    title, year = extract_movie_info(name)
    if not title:
        return MovieResolution(meta=None)

    meta = MovieMeta(title=title, year=year)
    resolution = MovieResolution(meta=meta)
    if provider is None:
        return resolution

    result = attempt(provider.search_movie, title, year)
    if not result.ok:
        resolution.warnings.append(f"Movie search failed for {title!r}: {result.error}")
    elif result.value:
        best = result.value[0]
        meta.title = best.title or meta.title
        meta.year = best.year or meta.year
        meta.external_id = best.id
        resolution.source = "search"
    return resolution


def _resolve_movie_by_id(name: str, explicit_id: int, provider: MetadataProvider | None) -> MovieResolution:
    title, year = extract_movie_info(strip_explicit_id(name))
    resolution = MovieResolution(meta=MovieMeta(title=title, year=year, external_id=explicit_id))

    if provider is not None:
        result = attempt(provider.movie_details, explicit_id)
        if result.ok and result.value and result.value.title:
            resolution.meta.title = result.value.title
            resolution.meta.year = result.value.year or year
            resolution.source = "explicit"
            return resolution
        if not result.ok:
            resolution.warnings.append(f"Movie details failed for id {explicit_id}: {result.error}")

    if not title:
        resolution.meta = None
    return resolution


def resolve_series(name: str, provider: MetadataProvider | None = None) -> SeriesResolution:
    """
    Resolve a series folder to canonical naming metadata.

    Without a provider the cleaned folder name is used as is.
    """
    explicit_id = extract_explicit_id(name)
    if explicit_id is not None:
        query = clean_series_query(strip_explicit_id(name))
    else:
        query = clean_series_query(name)
    meta = SeriesMeta(name=query or normalize_spaces(name), external_id=explicit_id or 0)
    resolution = SeriesResolution(meta=meta)
    if provider is None:
        return resolution

    if explicit_id is not None:
        result = attempt(provider.tv_details, explicit_id)
        if not result.ok:
            resolution.warnings.append(f"TV details failed for id {explicit_id}: {result.error}")
        elif result.value and result.value.name:
            meta.name = result.value.name
            meta.year = result.value.first_air_year
            resolution.source = "explicit"
        return resolution

    if not query:
        return resolution
    result = attempt(provider.search_tv, query)
    if not result.ok:
        resolution.warnings.append(f"TV search failed for {query!r}: {result.error}")
    elif result.value:
        best = result.value[0]
        meta.name = best.name or meta.name
        meta.year = best.first_air_year
        meta.external_id = best.id
        resolution.source = "search"
    return resolution
