"""Genre and artist frequency ranking"""
from collections import Counter
from typing import Iterable, List, Mapping

from taste_profile.models.catalog import ArtistRecord, HistoryItem

DEFAULT_TOP_N = 5


def rank_counts(counts: Mapping[str, int], top_n: int = DEFAULT_TOP_N) -> List[str]:
    """Labels ordered by descending count, ties broken alphabetically"""
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [label for label, _ in ranked[:top_n]]


def count_genres(artists: Iterable[ArtistRecord]) -> Counter:
    """Each artist record adds one to each of its genres, duplicates included"""
    genre_counts: Counter = Counter()
    for artist in artists:
        # a record listing the same tag twice still counts once
        genre_counts.update(set(artist.genres))
    return genre_counts


def top_genres(artists: Iterable[ArtistRecord], top_n: int = DEFAULT_TOP_N) -> List[str]:
    return rank_counts(count_genres(artists), top_n)


def count_primary_artists(items: Iterable[HistoryItem]) -> Counter:
    """Occurrences of each primary artist name; items without one are skipped"""
    return Counter(item.artist_name for item in items if item.artist_name)


def top_artists(items: Iterable[HistoryItem], top_n: int = DEFAULT_TOP_N) -> List[str]:
    return rank_counts(count_primary_artists(items), top_n)
