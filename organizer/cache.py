"""JSON cache for TMDB lookups.

Raw API payloads are stored, not the mapped dataclasses, so a cache file
survives changes to the models.  Layout::

    {"movie_searches": {"inception:2010": [...]},
     "tv_searches":    {"breaking bad": [...]},
     "movie_details":  {"27205": {...}},
     "tv_details":     {"1396": {...}}}
"""
import json
import logging
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

CACHE_FILE = ".organizer_cache.json"
BUCKETS = ("movie_searches", "tv_searches", "movie_details", "tv_details")


def _query_key(text: str) -> str:
    return text.lower().strip()


class Cache:
    """Lookup cache kept in memory and mirrored to a JSON file.

    With ``persist=False`` nothing touches the disk.  Read and write
    failures are logged and otherwise ignored.
    """

    def __init__(self, cache_dir: Path | None = None, persist: bool = True):
        self.cache_path = Path(cache_dir or Path.cwd()) / CACHE_FILE
        self.persist = persist
        self._data: dict[str, dict[str, Any]] = {bucket: {} for bucket in BUCKETS}
        if persist:
            self._read()

    def _read(self) -> None:
        if not self.cache_path.exists():
            return
        try:
            with open(self.cache_path, 'r', encoding='utf-8') as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError):
            log.warning("Ignoring unreadable cache file %s", self.cache_path)
            return
        if not isinstance(stored, dict):
            log.warning("Ignoring malformed cache file %s", self.cache_path)
            return
        for bucket in BUCKETS:
            if isinstance(stored.get(bucket), dict):
                self._data[bucket] = stored[bucket]

    def _write(self) -> None:
        if not self.persist:
            return
        try:
            with open(self.cache_path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            log.warning("Could not write cache file %s: %s", self.cache_path, e)

    def _get(self, bucket: str, key: str) -> Any:
        return self._data[bucket].get(key)

    def _put(self, bucket: str, key: str, value: Any) -> None:
        self._data[bucket][key] = value
        self._write()

    # -- searches -----------------------------------------------------------

    def get_movie_search(self, title: str, year: int | None = None) -> list[dict] | None:
        return self._get("movie_searches", f"{_query_key(title)}:{year or ''}")

    def set_movie_search(self, title: str, year: int | None, results: list[dict]) -> None:
        self._put("movie_searches", f"{_query_key(title)}:{year or ''}", results)

    def get_tv_search(self, query: str) -> list[dict] | None:
        return self._get("tv_searches", _query_key(query))

    def set_tv_search(self, query: str, results: list[dict]) -> None:
        self._put("tv_searches", _query_key(query), results)

    # -- details ------------------------------------------------------------

    def get_details(self, media_type: str, tmdb_id: int) -> dict | None:
        """Cached details payload; *media_type* is 'movie' or 'tv'."""
        return self._get(f"{media_type}_details", str(tmdb_id))

    def set_details(self, media_type: str, tmdb_id: int, data: dict) -> None:
        self._put(f"{media_type}_details", str(tmdb_id), data)

    def clear(self) -> None:
        """Drop every cached lookup."""
        self._data = {bucket: {} for bucket in BUCKETS}
        self._write()
