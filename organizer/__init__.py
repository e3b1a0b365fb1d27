"""
drive-organizer - Cloud drive media organizer

Infers canonical movie / series names from noisy folder and file names,
resolves them against TMDB and reorganizes the folders through a
directory store.
"""
from .models import (
    ActionLog,
    DirEntry,
    EpisodeRef,
    MovieMeta,
    RunResult,
    SeriesMeta,
    TMDBMovie,
    TMDBSeries,
)
from .normalizer import normalize_spaces, to_halfwidth
from .cleaner import (
    clean_movie_noise,
    clean_series_query,
    extract_movie_info,
    extract_quality_tag,
)
from .parser import parse_episode_from_name, parse_season_from_text
from .junk import JunkRules, is_junk, partition_junk
from .config import ConfigurationError, Settings, load_settings
from .tmdb import MetadataProvider, MetadataProviderError, TMDBClient, TMDBError
from .resolver import (
    UnresolvedTitleError,
    extract_explicit_id,
    resolve_movie,
    resolve_series,
)
from .store import DirectoryStore, LocalStore, MemoryStore, OperationError
from .planner import Planner
from .api import handle_request
from .cache import Cache

__version__ = "0.4.0"
__all__ = [
    "ActionLog",
    "DirEntry",
    "EpisodeRef",
    "MovieMeta",
    "RunResult",
    "SeriesMeta",
    "TMDBMovie",
    "TMDBSeries",
    "normalize_spaces",
    "to_halfwidth",
    "clean_movie_noise",
    "clean_series_query",
    "extract_movie_info",
    "extract_quality_tag",
    "parse_episode_from_name",
    "parse_season_from_text",
    "JunkRules",
    "is_junk",
    "partition_junk",
    "ConfigurationError",
    "Settings",
    "load_settings",
    "MetadataProvider",
    "MetadataProviderError",
    "TMDBClient",
    "TMDBError",
    "UnresolvedTitleError",
    "extract_explicit_id",
    "resolve_movie",
    "resolve_series",
    "DirectoryStore",
    "LocalStore",
    "MemoryStore",
    "OperationError",
    "Planner",
    "handle_request",
    "Cache",
]
