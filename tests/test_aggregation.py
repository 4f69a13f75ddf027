from conftest import make_items

from taste_profile.aggregation import count_genres, rank_counts, top_artists, top_genres
from taste_profile.models.catalog import ArtistRecord


def _artist(name, *genres):
    return ArtistRecord(artist_id=name, name=name, genres=genres)


def test_genres_ranked_by_count():
    artists = [
        _artist("a", "rock", "pop"),
        _artist("b", "pop"),
        _artist("c", "jazz", "pop", "rock"),
    ]
    assert top_genres(artists) == ["pop", "rock", "jazz"]


def test_repeated_artist_counts_every_time():
    artists = [_artist("a", "metal"), _artist("a", "metal"), _artist("b", "jazz"), _artist("c", "jazz", "funk")]
    counts = count_genres(artists)
    assert counts["metal"] == 2
    assert counts["jazz"] == 2


def test_genre_ties_are_alphabetical_and_truncated():
    artists = [_artist("a", "g", "f", "e", "d", "c", "b", "a")]
    assert top_genres(artists) == ["a", "b", "c", "d", "e"]
    assert top_genres(list(reversed(artists))) == top_genres(artists)


def test_tie_order_does_not_depend_on_input_order():
    first = [_artist("x", "zouk"), _artist("y", "ambient")]
    second = list(reversed(first))
    assert top_genres(first) == top_genres(second) == ["ambient", "zouk"]


def test_counts_are_non_increasing():
    artists = [_artist(str(i), *[f"g{j}" for j in range(i % 7)]) for i in range(40)]
    ranked = top_genres(artists)
    counts = count_genres(artists)
    assert len(ranked) <= 5
    assert [counts[g] for g in ranked] == sorted((counts[g] for g in ranked), reverse=True)


def test_empty_input():
    assert top_genres([]) == []
    assert top_artists([]) == []


def test_top_artists_skip_items_without_artist():
    items = make_items("Bea", None, "Abe", "Bea", None, "Cy")
    assert top_artists(items) == ["Bea", "Abe", "Cy"]


def test_top_artists_limit():
    items = make_items("F", "E", "D", "C", "B", "A", "A")
    assert top_artists(items) == ["A", "B", "C", "D", "E"]
    assert top_artists(items, top_n=2) == ["A", "B"]


def test_rank_counts():
    assert rank_counts({"b": 2, "a": 2, "c": 3}, 2) == ["c", "a"]
