"""Domain models for listening history returned by the catalog service"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar('T')


class SourceKind(str, Enum):
    """Which listening-history collection to read"""
    TOP_TRACKS = 'top_tracks'
    SAVED_TRACKS = 'saved_tracks'


@dataclass(frozen=True)
class HistoryItem:
    """A single track from the listener's history, reduced to its primary artist"""
    item_id: str
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None


@dataclass(frozen=True)
class ArtistRecord:
    """Full artist metadata"""
    artist_id: str
    name: str
    genres: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated collection. An empty cursor marks the last page."""
    items: Tuple[T, ...] = field(default_factory=tuple)
    cursor: Optional[str] = None

    @property
    def has_next(self) -> bool:
        return bool(self.cursor)


@dataclass(frozen=True)
class SourceSummary:
    """Ranked aggregates computed from one history source"""
    source: SourceKind
    top_genres: Tuple[str, ...]
    top_artists: Tuple[str, ...]
    item_count: int
    artist_count: int
