"""Data models for the organizer package."""
from dataclasses import dataclass, field
from typing import Any, Literal


ActionType = Literal["rename", "move", "mkdir", "clean", "skip", "info", "error"]


@dataclass(frozen=True)
class DirEntry:
    """One item returned by a directory listing."""
    name: str
    is_dir: bool
    id: str
    parent_id: str
    size: int = 0
    updated_at: str = ""

    @property
    def ext(self) -> str:
        """Last extension including the dot, or an empty string."""
        dot = self.name.rfind(".")
        if dot <= 0:
            return ""
        return self.name[dot:]

    @property
    def stem(self) -> str:
        ext = self.ext
        return self.name[: -len(ext)] if ext else self.name


@dataclass
class MovieMeta:
    """Naming metadata for a movie folder."""
    title: str
    year: int | None = None
    external_id: int = 0


@dataclass
class SeriesMeta:
    """Naming metadata for a series folder."""
    name: str
    year: int | None = None
    external_id: int = 0


@dataclass(frozen=True)
class EpisodeRef:
    """Season/episode numbers parsed from a file name."""
    season: int | None = None
    episode: int | None = None

    @property
    def is_episode(self) -> bool:
        return self.episode is not None


@dataclass
class TMDBMovie:
    """Represents a movie from TMDB."""
    id: int
    title: str
    original_title: str = ""
    year: int | None = None
    overview: str = ""


@dataclass
class TMDBSeries:
    """Represents a TV series from TMDB."""
    id: int
    name: str
    original_name: str = ""
    first_air_year: int | None = None
    overview: str = ""


@dataclass
class ActionLog:
    """One entry of the audit trail produced by a run."""
    type: ActionType
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "description": self.description}


@dataclass
class RunResult:
    """Outcome of one clean/organize request."""
    success: bool
    logs: list[ActionLog] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        logs = [entry.to_dict() for entry in self.logs]
        if self.success:
            return {"success": True, "logs": logs}
        return {"error": self.error or "Unknown error", "logs": logs}
