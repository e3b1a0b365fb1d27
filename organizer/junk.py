"""Classification of disposable clutter in media folders."""
from dataclasses import dataclass, field
from typing import Iterable

from .models import DirEntry


# Substrings that mark a file as an ad, a tracker leftover or a note
JUNK_MARKERS: tuple[str, ...] = (
    "www.", ".com", ".net", ".org",
    "dygm", "dygod", "ygdy8", "piaohua", "迅雷",
    "下载", "资源", "首发", "免费", "搜索",
    ".pdf", ".txt",
)

# Folder names (lowercase) that never hold the main feature
MISC_DIR_NAMES: frozenset[str] = frozenset({
    "@eadir", "__macosx", ".ds_store",
    "sample", "samples", "screens", "screen", "screenshots",
    "extras", "extra", "bonus", "bts",
    "poster", "posters", "fanart", "thumb", "thumbs", "artwork",
    "cd1", "cd2",
    "subs", "sub", "subtitle", "subtitles", "字幕", "字幕组",
})


@dataclass(frozen=True)
class JunkRules:
    """Rule set used to decide what counts as junk."""
    markers: tuple[str, ...] = JUNK_MARKERS
    misc_dirs: frozenset[str] = field(default=MISC_DIR_NAMES)


DEFAULT_RULES = JunkRules()


def is_junk(entry: DirEntry, rules: JunkRules = DEFAULT_RULES) -> bool:
    """
    Decide whether a directory entry is clutter.

    Directories are judged by name only; files by marker substrings.
    Both checks are case-insensitive.
    """
    name = entry.name.lower()
    if entry.is_dir:
        return name in rules.misc_dirs
    return any(marker.lower() in name for marker in rules.markers)


def partition_junk(
    entries: Iterable[DirEntry],
    rules: JunkRules = DEFAULT_RULES,
) -> tuple[list[DirEntry], list[DirEntry]]:
    """Split entries into (junk, kept), preserving listing order."""
    junk: list[DirEntry] = []
    kept: list[DirEntry] = []
    for entry in entries:
        (junk if is_junk(entry, rules) else kept).append(entry)
    return junk, kept
