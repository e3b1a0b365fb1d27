"""Parser module for extracting season and episode numbers from names."""
import re

from .models import EpisodeRef
from .normalizer import to_halfwidth, normalize_spaces


VIDEO_EXTS = frozenset({
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".m4v",
    ".ts", ".m2ts", ".webm", ".rmvb", ".iso",
})
SUB_EXTS = frozenset({".srt", ".ass", ".ssa", ".vtt", ".sub", ".idx", ".sup"})

SXXEYY_RE = re.compile(r"S(\d{1,2})\s*E(\d{1,3})", re.IGNORECASE)
CN_EPISODE_RE = re.compile(r"第\s*(\d{1,4})\s*[集话回]")
# ASCII word boundaries so 'E01' right after CJK text still counts
EP_NUM_RE = re.compile(r"\b(?:EP|E)(\d{1,3})\b", re.IGNORECASE | re.ASCII)

# Episode patterns for files at the series root (order matters)
ROOT_EPISODE_PATTERNS = (
    # [Group][Show] 03 title
    re.compile(r"^(?:\[[^\]]*\]\s*|【[^】]*】\s*)*(\d{1,3})\s"),
    # Show-03 / Show_03 / Show.03
    re.compile(r"[-_.](\d{1,3})$"),
    # Show 03
    re.compile(r"[\s\-_](\d{1,3})$"),
    # 03
    re.compile(r"^(\d{1,3})$"),
)

# A standalone run of 1-3 digits, used only inside season folders
LOOSE_NUMBER_RE = re.compile(r"(?<!\d)(\d{1,3})(?!\d)")

SEASON_RANGE_PATTERNS = (
    re.compile(r"\bS\d{1,2}\s*[-~—–]\s*S?\d{1,2}\b", re.IGNORECASE | re.ASCII),
    re.compile(r"(?:第\s*)?\d{1,2}\s*[-~—–]\s*\d{1,2}\s*季"),
)

CN_NUM = {
    "零": 0, "一": 1, "二": 2, "两": 2, "三": 3, "四": 4,
    "五": 5, "六": 6, "七": 7, "八": 8, "九": 9,
}


def strip_extension(name: str) -> str:
    """Remove the last '.ext' suffix from a name."""
    return re.sub(r"\.[^/.]+$", "", name)


def split_extension(name: str) -> tuple[str, str]:
    """Split a name into (stem, ext) where ext keeps its dot."""
    stem = strip_extension(name)
    return stem, name[len(stem):]


def is_video_file(name: str) -> bool:
    """Check if a file name carries a video extension."""
    return split_extension(name)[1].lower() in VIDEO_EXTS


def is_subtitle_file(name: str) -> bool:
    """Check if a file name carries a subtitle extension."""
    return split_extension(name)[1].lower() in SUB_EXTS


def chinese_to_int(s: str) -> int | None:
    """Convert a small Chinese numeral (一 .. 九十九) to an int."""
    s = s.strip()
    if not s:
        return None
    if s.isdigit():
        return int(s)
    if s == "十":
        return 10
    if "十" in s:
        tens, _, units = s.partition("十")
        if tens and tens not in CN_NUM:
            return None
        if units and units not in CN_NUM:
            return None
        return (CN_NUM[tens] if tens else 1) * 10 + (CN_NUM[units] if units else 0)
    if len(s) == 1 and s in CN_NUM:
        return CN_NUM[s]
    return None


def parse_episode_from_name(name: str, in_season_folder: bool = False) -> EpisodeRef:
    """
    Extract season and episode numbers from a file name.

    Args:
        name: File name, with or without extension.
        in_season_folder: True when the file already sits inside a season
            folder. The caller then owns the season number, so only the
            episode is taken from the name.

    Returns:
        EpisodeRef; ``episode is None`` means the name is not an episode.
    """
    stem = normalize_spaces(to_halfwidth(strip_extension(name)))
    if in_season_folder:
        return _parse_in_season_folder(stem)

    m = SXXEYY_RE.search(stem)
    if m:
        return EpisodeRef(season=int(m.group(1)), episode=int(m.group(2)))

    m = CN_EPISODE_RE.search(stem)
    if m:
        return EpisodeRef(episode=int(m.group(1)))

    m = EP_NUM_RE.search(stem)
    if m:
        return EpisodeRef(episode=int(m.group(1)))

    for pattern in ROOT_EPISODE_PATTERNS:
        m = pattern.search(stem)
        if m:
            return EpisodeRef(episode=int(m.group(1)))

    return EpisodeRef()


def _parse_in_season_folder(stem: str) -> EpisodeRef:
    m = SXXEYY_RE.search(stem)
    if m:
        return EpisodeRef(season=int(m.group(1)), episode=int(m.group(2)))

    for pattern in (EP_NUM_RE, CN_EPISODE_RE, LOOSE_NUMBER_RE):
        m = pattern.search(stem)
        if m:
            return EpisodeRef(episode=int(m.group(1)))

    return EpisodeRef()


def parse_season_from_text(text: str) -> int | None:
    """
    Parse a season number from a folder name.

    Handles 'S2', 'S02', 'Season 2', '第2季', '第二季', '第二部', names with
    an embedded 'S2' such as '安多S2', and a trailing bare number such as
    '权力的游戏2' or 'Fargo 3 (2017)'. Season ranges like 'S1-S3' are
    containers, not seasons, and yield None.
    """
    t = normalize_spaces(to_halfwidth(text))
    if not t:
        return None
    if any(p.search(t) for p in SEASON_RANGE_PATTERNS):
        return None

    season = _match_season(t)
    if season is None or season <= 0:
        return None
    return season


def _match_season(t: str) -> int | None:
    m = re.fullmatch(r"S(\d{1,2})", t, flags=re.IGNORECASE)
    if m:
        return int(m.group(1))

    m = re.search(r"Season\s*(\d+)", t, flags=re.IGNORECASE)
    if m:
        return int(m.group(1))

    m = re.search(r"第\s*(\d+)\s*[季部]", t)
    if m:
        return int(m.group(1))

    m = re.search(r"第([零一二两三四五六七八九十]+)[季部]", t)
    if m:
        return chinese_to_int(m.group(1))

    m = re.search(r"(?:^|[^A-Za-z])S(\d{1,2})(?:\D|$)", t, flags=re.IGNORECASE)
    if m:
        return int(m.group(1))

    m = re.search(r"(?:[A-Za-z一-鿿]|\s)(\d{1,2})\s*(?:\(\d{4}\))?$", t)
    if m:
        return int(m.group(1))

    return None


def season_folder_name(season: int) -> str:
    """Canonical season folder name, e.g. 'S01'."""
    return f"S{season:02d}"
