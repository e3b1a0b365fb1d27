"""Metadata provider interface and the TMDB API client."""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import requests

from .cache import Cache
from .config import ConfigurationError
from .models import TMDBMovie, TMDBSeries

log = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_TIMEOUT = 10
RATE_LIMIT_DELAY = 0.25  # 250ms between requests to avoid rate limiting
DEFAULT_LANGUAGE = "zh-CN"


class MetadataProviderError(Exception):
    """Raised when a metadata lookup fails."""
    pass


class TMDBError(MetadataProviderError):
    """Exception raised for TMDB API errors."""
    pass


def parse_year(date: str | None) -> int | None:
    """Year from a 'YYYY-MM-DD' date string."""
    if date and len(date) >= 4 and date[:4].isdigit():
        return int(date[:4])
    return None


def movie_from_result(data: dict) -> TMDBMovie:
    return TMDBMovie(
        id=int(data["id"]),
        title=data.get("title") or data.get("original_title") or "",
        original_title=data.get("original_title", ""),
        year=parse_year(data.get("release_date")),
        overview=data.get("overview", ""),
    )


def series_from_result(data: dict) -> TMDBSeries:
    return TMDBSeries(
        id=int(data["id"]),
        name=data.get("name") or data.get("original_name") or "",
        original_name=data.get("original_name", ""),
        first_air_year=parse_year(data.get("first_air_date")),
        overview=data.get("overview", ""),
    )


class MetadataProvider(ABC):
    """Source of canonical movie and series titles.

    Search results are ranked; the first one is treated as the best match.
    Implementations raise :class:`MetadataProviderError` on failure.
    """

    @abstractmethod
    def search_movie(self, title: str, year: int | None = None) -> list[TMDBMovie]:
        ...

    @abstractmethod
    def search_tv(self, query: str) -> list[TMDBSeries]:
        ...

    @abstractmethod
    def movie_details(self, movie_id: int) -> TMDBMovie:
        ...

    @abstractmethod
    def tv_details(self, tv_id: int) -> TMDBSeries:
        ...


class TMDBClient(MetadataProvider):
    """Client for TMDB API."""

    def __init__(
        self,
        api_key: str,
        language: str | None = None,
        cache: Cache | None = None,
        session: requests.Session | None = None,
        retries: int = 3,
    ):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB API key.
            language: TMDB API language tag. Falls back to DEFAULT_LANGUAGE.
            cache: Optional cache for search results and details.
            session: Optional requests session (shared connection pool).
            retries: Attempts per request on timeouts and transport errors.

        Raises:
            ConfigurationError: If the API key is empty.
        """
        if not api_key:
            raise ConfigurationError(
                "TMDB API key not found.\n"
                "Set it using one of these methods:\n"
                "  1. Environment variable: export TMDB_API_KEY=your_key\n"
                "  2. Create a .env file with: TMDB_API_KEY=your_key\n"
                "Get your free API key at: https://www.themoviedb.org/settings/api"
            )
        self.api_key = api_key
        self.language = language or DEFAULT_LANGUAGE
        self.cache = cache
        self.session = session or requests.Session()
        self.retries = max(1, retries)
        self._last_request_time = 0.0
        log.debug("Using TMDB language: %s", self.language)

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < RATE_LIMIT_DELAY:
            time.sleep(RATE_LIMIT_DELAY - elapsed)
        self._last_request_time = time.time()

    def _request(self, endpoint: str, params: dict | None = None) -> dict:
        """
        Make a GET request to the TMDB API.

        Args:
            endpoint: API endpoint (e.g., '/search/movie')
            params: Query parameters

        Returns:
            Decoded JSON response

        Raises:
            TMDBError: When every attempt failed or the API rejected the call.
        """
        url = f"{TMDB_BASE_URL}{endpoint}"
        all_params = {
            "api_key": self.api_key,
            "language": self.language,
            **(params or {})
        }

        # Log the request (hide API key)
        log_params = {k: v for k, v in all_params.items() if k != "api_key"}
        log.debug("GET %s params=%s", endpoint, log_params)

        last_error = "no attempt made"
        for attempt in range(self.retries):
            self._rate_limit()
            try:
                response = self.session.get(url, params=all_params, timeout=DEFAULT_TIMEOUT)
            except requests.exceptions.Timeout:
                last_error = "timeout"
                log.debug("Timeout (attempt %d/%d)", attempt + 1, self.retries)
            except requests.exceptions.RequestException as e:
                last_error = str(e)
                log.debug("Request error: %s (attempt %d/%d)", e, attempt + 1, self.retries)
            else:
                log.debug("Response status: %s", response.status_code)
                if response.status_code == 429:  # Rate limited
                    retry_after = int(response.headers.get("Retry-After", 1))
                    log.debug("Rate limited, waiting %ss", retry_after)
                    last_error = "rate limited"
                    time.sleep(retry_after)
                    continue
                try:
                    response.raise_for_status()
                    return response.json()
                except (requests.exceptions.HTTPError, ValueError) as e:
                    raise TMDBError(f"TMDB {endpoint} failed: {e}") from e

            if attempt < self.retries - 1:
                time.sleep(1)

        raise TMDBError(f"TMDB {endpoint} failed after {self.retries} attempts: {last_error}")

    def search_movie(self, title: str, year: int | None = None) -> list[TMDBMovie]:
        """
        Search for a movie on TMDB.

        Args:
            title: Movie title to search for
            year: Optional release year

        Returns:
            Ranked list of matches (may be empty)
        """
        results = self.cache.get_movie_search(title, year) if self.cache else None
        if results is None:
            params: dict[str, Any] = {"query": title}
            if year:
                params["year"] = year
            results = self._request("/search/movie", params).get("results") or []
            log.debug("Found %d movie results for %r", len(results), title)
            if self.cache:
                self.cache.set_movie_search(title, year, results)
        return [movie_from_result(r) for r in results]

    def search_tv(self, query: str) -> list[TMDBSeries]:
        """
        Search for a TV series on TMDB.

        Args:
            query: Series title to search for

        Returns:
            Ranked list of matches (may be empty)
        """
        results = self.cache.get_tv_search(query) if self.cache else None
        if results is None:
            results = self._request("/search/tv", {"query": query}).get("results") or []
            log.debug("Found %d tv results for %r", len(results), query)
            if self.cache:
                self.cache.set_tv_search(query, results)
        return [series_from_result(r) for r in results]

    def _details(self, media_type: str, tmdb_id: int) -> dict:
        data = self.cache.get_details(media_type, tmdb_id) if self.cache else None
        if data is None:
            params = {"append_to_response": "alternative_titles"} if media_type == "movie" else None
            data = self._request(f"/{media_type}/{tmdb_id}", params)
            if not data.get("id"):
                raise TMDBError(f"TMDB returned no {media_type} with id {tmdb_id}")
            if self.cache:
                self.cache.set_details(media_type, tmdb_id, data)
        return data

    def movie_details(self, movie_id: int) -> TMDBMovie:
        """Fetch a movie by TMDB id."""
        return movie_from_result(self._details("movie", movie_id))

    def tv_details(self, tv_id: int) -> TMDBSeries:
        """Fetch a TV series by TMDB id."""
        return series_from_result(self._details("tv", tv_id))
