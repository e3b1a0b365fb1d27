"""Request handling for clean / organize-movie / organize-series.

A request is a plain mapping::

    {"folderId": "...", "folderName": "...", "dryRun": true}

and the response is ``{"success": True, "logs": [...]}`` or
``{"error": "...", "logs": [...]}``.  ``folderName`` is trusted as given;
the folder is not re-listed to confirm it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from .cache import Cache
from .config import ConfigurationError, Settings
from .models import ActionLog, RunResult
from .planner import CancelToken, Planner
from .store import DirectoryStore, LocalStore
from .tmdb import MetadataProvider, TMDBClient

log = logging.getLogger(__name__)

ACTIONS = ("clean", "movie", "series")


def create_provider(settings: Settings, use_cache: bool = True) -> TMDBClient:
    """
    Build the TMDB client from settings.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    settings.require("tmdb_api_key")
    cache = None
    if use_cache:
        cache = Cache(Path(settings.cache_dir).expanduser() if settings.cache_dir else None)
    return TMDBClient(settings.tmdb_api_key, language=settings.tmdb_language, cache=cache)


def create_local_store(root: Path, settings: Settings) -> LocalStore:
    """
    Build a store over a local or mounted directory.

    Raises:
        ConfigurationError: If *root* is not an existing directory.
    """
    root = Path(root).expanduser()
    if not root.is_dir():
        raise ConfigurationError(f"Library root is not a directory: {root}")
    trash = Path(settings.trash_dir).expanduser() if settings.trash_dir else None
    return LocalStore(root, trash_dir=trash)


def _validate(action: str, payload: Mapping[str, Any]) -> tuple[str, str]:
    if action not in ACTIONS:
        raise ValueError(f"Unknown action {action!r}; expected one of {', '.join(ACTIONS)}")
    folder_id = payload.get("folderId")
    if not folder_id:
        raise ValueError("folderId is required")
    folder_name = payload.get("folderName") or ""
    if action != "clean" and not folder_name:
        raise ValueError("folderName is required")
    return str(folder_id), str(folder_name)


def handle_request(
    action: str,
    payload: Mapping[str, Any],
    *,
    store: DirectoryStore,
    provider: MetadataProvider | None = None,
    settings: Settings | None = None,
    cancel: CancelToken | None = None,
) -> dict[str, Any]:
    """
    Run one clean / movie / series request.

    Any error is turned into a failure response carrying the logs that
    were produced before it.
    """
    settings = settings or Settings()
    logs: list[ActionLog] = []
    try:
        folder_id, folder_name = _validate(action, payload)
        planner = Planner(
            store,
            provider,
            dry_run=bool(payload.get("dryRun", False)),
            cancel=cancel,
            clean_max_depth=settings.clean_max_depth,
            clean_max_items=settings.clean_max_items,
        )
        logs = planner.logs
        if action == "clean":
            planner.clean(folder_id, folder_name)
            summary = f"Clean finished: {sum(1 for e in logs if e.type == 'clean')} junk log entries"
        elif action == "movie":
            planner.organize_movie(folder_id, folder_name)
            summary = f"Done: {len(logs)} log entries"
        else:
            planner.organize_series(folder_id, folder_name)
            summary = f"Done: {len(logs)} log entries"
        logs.append(ActionLog(type="info", description=summary))
        return RunResult(success=True, logs=logs).to_dict()
    except Exception as e:
        log.exception("%s request failed", action)
        return RunResult(success=False, logs=logs, error=str(e)).to_dict()
