"""Shared fixtures: an in-memory catalog service"""
from typing import Dict, List, Optional, Sequence

from taste_profile.models.catalog import ArtistRecord, HistoryItem, Page, SourceKind


def make_items(*artists: Optional[str]) -> List[HistoryItem]:
    """One history item per artist name; None yields an item with no artist"""
    items = []
    for index, name in enumerate(artists):
        if name is None:
            items.append(HistoryItem(item_id=f"track{index}"))
        else:
            items.append(HistoryItem(item_id=f"track{index}", artist_id=f"id-{name}", artist_name=name))
    return items


def chain_pages(items: Sequence[HistoryItem], page_size: int, prefix: str) -> Dict[Optional[str], Page]:
    """Split items into pages keyed by the cursor that reaches them (None = first page)"""
    pages: Dict[Optional[str], Page] = {}
    chunks = [tuple(items[i:i + page_size]) for i in range(0, len(items), page_size)] or [()]
    for index, chunk in enumerate(chunks):
        key = None if index == 0 else f"{prefix}-{index}"
        cursor = f"{prefix}-{index + 1}" if index + 1 < len(chunks) else None
        pages[key] = Page(items=chunk, cursor=cursor)
    return pages


class FakeCatalog:
    """Catalog service backed by dictionaries, recording every call"""

    def __init__(self, sources: Dict[SourceKind, List[HistoryItem]], genres: Dict[str, List[str]],
                 page_size: int = 2):
        self.genres = genres
        self.pages: Dict[SourceKind, Dict[Optional[str], Page]] = {
            kind: chain_pages(items, page_size, kind.value) for kind, items in sources.items()
        }
        self.calls: List[tuple] = []
        self.fail_initial: set = set()
        self.fail_cursors: set = set()
        self.fail_artist_calls: set = set()
        self.artist_calls = 0

    def fetch_initial_page(self, source_kind: SourceKind, page_size: int) -> Page:
        self.calls.append(('initial', source_kind, page_size))
        if source_kind in self.fail_initial:
            raise ConnectionError(f"{source_kind.value} unavailable")
        return self.pages.get(source_kind, {None: Page()})[None]

    def advance_page(self, cursor: str) -> Page:
        self.calls.append(('advance', cursor))
        if cursor in self.fail_cursors:
            raise ConnectionError(f"page {cursor} unavailable")
        for pages in self.pages.values():
            if cursor in pages:
                return pages[cursor]
        raise KeyError(cursor)

    def fetch_artists(self, ids: Sequence[str]) -> List[ArtistRecord]:
        self.calls.append(('artists', tuple(ids)))
        call_index = self.artist_calls
        self.artist_calls += 1
        if call_index in self.fail_artist_calls:
            raise ConnectionError("artist lookup failed")
        return [ArtistRecord(artist_id=i, name=i[len("id-"):], genres=tuple(self.genres.get(i, ()))) for i in ids]
