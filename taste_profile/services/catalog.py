"""Read-only query contract required from the catalog service"""
from typing import List, Protocol, Sequence

from taste_profile.models.catalog import ArtistRecord, HistoryItem, Page, SourceKind


class CatalogService(Protocol):
    """Anything able to page through listening history and look up artists"""

    def fetch_initial_page(self, source_kind: SourceKind, page_size: int) -> Page[HistoryItem]:
        ...

    def advance_page(self, cursor: str) -> Page[HistoryItem]:
        ...

    def fetch_artists(self, ids: Sequence[str]) -> List[ArtistRecord]:
        """Callers never pass more ids than the service's batch limit"""
        ...
