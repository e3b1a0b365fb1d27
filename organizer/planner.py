"""Reorganization planner.

Drives one clean / organize-movie / organize-series request against a
:class:`~organizer.store.DirectoryStore`.  Per folder the run goes
through::

    Start -> JunkRemoved -> TitleResolved
          -> CollectionExpansion | SingleItemRename
          -> FileReconciliation -> Done (or Skipped)

Every mutation adds exactly one entry to ``logs``, in execution order: one
per rename, move and mkdir, and one per junk item removed by a batched
remove.  Dry-run stand-ins are logged the same way.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

from .cleaner import extract_movie_info
from .formatter import (
    collection_folder_name,
    episode_file_name,
    movie_file_name,
    movie_folder_name,
    series_folder_name,
)
from .junk import DEFAULT_RULES, JunkRules, partition_junk
from .models import ActionLog, ActionType, DirEntry, SeriesMeta
from .parser import (
    is_subtitle_file,
    is_video_file,
    parse_episode_from_name,
    parse_season_from_text,
    season_folder_name,
)
from .resolver import is_collection_name, resolve_movie, resolve_series
from .store import DirectoryStore, OperationError
from .tmdb import MetadataProvider

log = logging.getLogger(__name__)

DRY_PREFIX = "[DRY] "
DRY_RUN_ID_PREFIX = "dry-run:"


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class RunCancelled(Exception):
    """Raised internally when the caller asked the run to stop."""
    pass


def is_placeholder_id(item_id: str) -> bool:
    """True for ids handed out by a dry-run mkdir."""
    return item_id.startswith(DRY_RUN_ID_PREFIX)


def _is_media(entry: DirEntry) -> bool:
    return not entry.is_dir and (is_video_file(entry.name) or is_subtitle_file(entry.name))


class Planner:
    """
    Executes (or simulates) one reorganization run.

    Usage::

        planner = Planner(store, provider, dry_run=True)
        logs = planner.organize_series(folder_id, "Breaking Bad")
    """

    def __init__(
        self,
        store: DirectoryStore,
        provider: MetadataProvider | None = None,
        *,
        dry_run: bool = False,
        junk_rules: JunkRules = DEFAULT_RULES,
        cancel: CancelToken | None = None,
        clean_max_depth: int = 8,
        clean_max_items: int = 5000,
    ):
        self.store = store
        self.provider = provider
        self.dry_run = dry_run
        self.junk_rules = junk_rules
        self.cancel = cancel
        self.clean_max_depth = clean_max_depth
        self.clean_max_items = clean_max_items
        self.logs: list[ActionLog] = []

    # ------------------------------------------------------------------
    # Logging and cancellation
    # ------------------------------------------------------------------

    def _record(self, kind: ActionType, description: str, mutating: bool = False) -> None:
        if mutating and self.dry_run:
            description = DRY_PREFIX + description
        self.logs.append(ActionLog(type=kind, description=description))
        level = logging.WARNING if kind == "error" else logging.INFO
        log.log(level, "%s: %s", kind, description)

    def _check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise RunCancelled()

    def _run(self, step, *args) -> list[ActionLog]:
        try:
            step(*args)
        except RunCancelled:
            self._record("info", "Run cancelled; completed actions were kept")
        return self.logs

    # ------------------------------------------------------------------
    # Store operations (dry-run aware)
    # ------------------------------------------------------------------

    def _rename(self, item_id: str, old_name: str, new_name: str, what: str) -> bool:
        if not new_name or new_name == old_name:
            return False
        if not self.dry_run:
            self.store.rename(item_id, new_name)
        self._record("rename", f"Rename {what}: {old_name} -> {new_name}", mutating=True)
        return True

    def _mkdir(self, parent_id: str, name: str) -> str:
        if self.dry_run:
            new_id = f"{DRY_RUN_ID_PREFIX}{parent_id}/{name}"
        else:
            new_id = self.store.mkdir(parent_id, name)
        self._record("mkdir", f"Create folder {name}", mutating=True)
        return new_id

    def _move(self, entry: DirEntry, to_parent_id: str, to_name: str) -> None:
        if not self.dry_run:
            self.store.wait(self.store.move([entry.id], to_parent_id))
        self._record("move", f"Move {entry.name} -> {to_name}/", mutating=True)

    def _remove_junk(self, label: str, entries: list[DirEntry]) -> list[DirEntry]:
        """Remove junk among *entries* in one batch and return the kept ones.

        The batch gets one entry per removed item.
        """
        junk, kept = partition_junk(entries, self.junk_rules)
        if not junk:
            return kept
        if not self.dry_run:
            self.store.wait(self.store.remove([entry.id for entry in junk]))
        for entry in junk:
            self._record("clean", f"Remove junk from {label}: {entry.name}", mutating=True)
        return kept

    def _list_and_clean(self, folder_id: str, label: str) -> list[DirEntry]:
        return self._remove_junk(label, self.store.list_dir(folder_id))

    # ------------------------------------------------------------------
    # Clean
    # ------------------------------------------------------------------

    def clean(self, folder_id: str, folder_name: str = "") -> list[ActionLog]:
        """Remove junk from a folder tree, breadth first.

        Errors inside one folder are logged and do not stop the rest of
        the walk.  The walk is bounded by ``clean_max_depth`` and
        ``clean_max_items``.
        """
        return self._run(self._clean, folder_id, folder_name or folder_id)

    def _clean(self, folder_id: str, label: str) -> None:
        queue: deque[tuple[str, str, int]] = deque([(folder_id, label, 0)])
        seen = 0
        while queue:
            self._check_cancelled()
            current_id, label, depth = queue.popleft()
            try:
                entries = self.store.list_dir(current_id)
                seen += len(entries)
                kept = self._remove_junk(label, entries)
            except OperationError as e:
                self._record("error", f"Cleaning {label} failed: {e}")
                continue
            if seen >= self.clean_max_items:
                self._record("info", f"Stopped after {seen} items (limit {self.clean_max_items})")
                return
            for entry in kept:
                if not entry.is_dir:
                    continue
                if depth + 1 > self.clean_max_depth:
                    self._record("info", f"Not descending into {entry.name}: depth limit {self.clean_max_depth}")
                    continue
                queue.append((entry.id, entry.name, depth + 1))

    # ------------------------------------------------------------------
    # Movies
    # ------------------------------------------------------------------

    def organize_movie(self, folder_id: str, folder_name: str) -> list[ActionLog]:
        """Organize a movie folder, or expand a movie collection folder."""
        return self._run(self._organize_movie, folder_id, folder_name)

    def _organize_movie(self, folder_id: str, folder_name: str) -> None:
        self._record("info", f"Processing movie folder: {folder_name}")
        if is_collection_name(folder_name):
            self._organize_collection(folder_id, folder_name)
            return

        kept = self._list_and_clean(folder_id, folder_name)

        resolution = resolve_movie(folder_name, self.provider)
        self._report_warnings(resolution.warnings)
        if resolution.meta is None:
            self._record("skip", f"Skipped {folder_name}: no title could be resolved")
            return
        meta = resolution.meta

        self._rename(folder_id, folder_name, movie_folder_name(meta), "folder")

        for entry in kept:
            self._check_cancelled()
            if entry.is_dir or not is_video_file(entry.name):
                continue
            try:
                self._rename(entry.id, entry.name, movie_file_name(meta, entry.name), "file")
            except OperationError as e:
                self._record("error", f"Renaming {entry.name} failed: {e}")

    def _organize_collection(self, folder_id: str, folder_name: str) -> None:
        kept = self._list_and_clean(folder_id, folder_name)

        bare_title, _ = extract_movie_info(folder_name)
        self._rename(folder_id, folder_name, collection_folder_name(bare_title), "collection")

        for entry in kept:
            self._check_cancelled()
            if entry.is_dir:
                self._record("info", f"Subfolder {entry.name} needs to be organized separately")
                continue
            if not is_video_file(entry.name):
                continue
            try:
                self._expand_collection_item(folder_id, entry)
            except OperationError as e:
                self._record("error", f"Organizing {entry.name} failed: {e}")

    def _expand_collection_item(self, collection_id: str, entry: DirEntry) -> None:
        resolution = resolve_movie(entry.stem, self.provider)
        self._report_warnings(resolution.warnings)
        if resolution.meta is None:
            self._record("skip", f"Skipped {entry.name}: no title could be resolved")
            return
        meta = resolution.meta
        target_folder = movie_folder_name(meta)
        target_id = self._mkdir(collection_id, target_folder)
        self._move(entry, target_id, target_folder)
        self._rename(entry.id, entry.name, movie_file_name(meta, entry.name), "file")

    # ------------------------------------------------------------------
    # Series
    # ------------------------------------------------------------------

    def organize_series(self, folder_id: str, folder_name: str) -> list[ActionLog]:
        """Organize a series folder into canonical season folders."""
        return self._run(self._organize_series, folder_id, folder_name)

    def _organize_series(self, folder_id: str, folder_name: str) -> None:
        self._record("info", f"Processing series folder: {folder_name}")
        kept = self._list_and_clean(folder_id, folder_name)

        resolution = resolve_series(folder_name, self.provider)
        self._report_warnings(resolution.warnings)
        meta = resolution.meta
        self._rename(folder_id, folder_name, series_folder_name(meta), "folder")

        season_map: dict[int, str] = {}
        top_files: list[DirEntry] = []
        for entry in kept:
            if entry.is_dir:
                self._register_season_folder(entry, season_map)
            elif _is_media(entry):
                top_files.append(entry)

        for entry in top_files:
            self._check_cancelled()
            try:
                self._place_episode(folder_id, entry, meta, season_map)
            except OperationError as e:
                self._record("error", f"Placing {entry.name} failed: {e}")

        for season in sorted(season_map):
            self._check_cancelled()
            self._reconcile_season(season, season_map[season], meta)

    def _register_season_folder(self, entry: DirEntry, season_map: dict[int, str]) -> None:
        season = parse_season_from_text(entry.name)
        if season is None:
            return
        if season in season_map:
            self._record("info", f"Folder {entry.name} duplicates season {season}; left as is")
            return
        season_map[season] = entry.id
        self._rename(entry.id, entry.name, season_folder_name(season), "season")

    def _place_episode(
        self,
        series_id: str,
        entry: DirEntry,
        meta: SeriesMeta,
        season_map: dict[int, str],
    ) -> None:
        ref = parse_episode_from_name(entry.name, in_season_folder=False)
        if ref.episode is None:
            self._record("skip", f"Left {entry.name}: no episode number")
            return
        season = 1 if ref.season is None else ref.season
        season_name = season_folder_name(season)

        season_id = season_map.get(season)
        if season_id is None:
            season_id = self._mkdir(series_id, season_name)
            season_map[season] = season_id

        if entry.parent_id != season_id:
            self._move(entry, season_id, season_name)
        self._rename(entry.id, entry.name, episode_file_name(meta.name, season, ref.episode, entry.name), "file")

    def _reconcile_season(self, season: int, season_id: str, meta: SeriesMeta) -> None:
        """Rename files already inside a season folder; the folder owns the season."""
        if is_placeholder_id(season_id):
            return
        for entry in self.store.list_dir(season_id):
            if not _is_media(entry):
                continue
            ref = parse_episode_from_name(entry.name, in_season_folder=True)
            if ref.episode is None:
                continue
            try:
                self._rename(entry.id, entry.name, episode_file_name(meta.name, season, ref.episode, entry.name), "file")
            except OperationError as e:
                self._record("error", f"Renaming {entry.name} failed: {e}")

    # ------------------------------------------------------------------

    def _report_warnings(self, warnings: list[str]) -> None:
        for warning in warnings:
            self._record("info", f"{warning}; using local name")
