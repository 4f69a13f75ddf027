"""Listener archetype classification"""
import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping

logger = logging.getLogger(__name__)

FALLBACK_ARCHETYPE = "OUTLIER"


@dataclass(frozen=True)
class ArchetypeTable:
    """
    Immutable mapping from archetype name to its defining genres.

    The fallback archetype has no genres. It is never scored and is only
    returned when no single archetype wins.
    """
    archetypes: Mapping[str, FrozenSet[str]] = field(hash=False)
    fallback: str = FALLBACK_ARCHETYPE
    names: tuple = field(init=False)

    def __post_init__(self):
        if self.fallback in self.archetypes and self.archetypes[self.fallback]:
            raise ValueError(f"Fallback archetype {self.fallback} cannot define genres")
        frozen = {name: frozenset(genres) for name, genres in self.archetypes.items() if name != self.fallback}
        if not frozen:
            raise ValueError("Archetype table needs at least one archetype besides the fallback")
        object.__setattr__(self, 'archetypes', MappingProxyType(frozen))
        object.__setattr__(self, 'names', tuple(sorted(frozen)) + (self.fallback,))

    @classmethod
    def from_mapping(cls, archetypes: Mapping[str, Iterable[str]],
                     fallback: str = FALLBACK_ARCHETYPE) -> 'ArchetypeTable':
        return cls({name: frozenset(genres) for name, genres in archetypes.items()}, fallback)


DEFAULT_ARCHETYPES = ArchetypeTable.from_mapping({
    "RISKLORD": ["metal", "hardcore", "punk", "drum and bass"],
    "STRATEGIST": ["techno", "classical", "ambient", "progressive"],
    "OPTIMIST": ["funk", "disco", "pop", "groove"],
    "HUSTLER": ["rap", "trap", "drill", "afrobeat"],
    "ZEN_INVESTOR": ["jazz", "lo-fi", "indie folk", "instrumental"],
    "CHAOS_SELECTOR": ["hyperpop", "experimental", "electronic", "indie alt"],
    FALLBACK_ARCHETYPE: [],
})


def load_archetype_table(path: str) -> ArchetypeTable:
    """
    Load an archetype table from a JSON file.

    Expected format:
        {"fallback": "OUTLIER", "archetypes": {"NAME": ["genre", ...], ...}}

    Raises:
        ValueError: If the file is not a valid table
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict) or not isinstance(data.get('archetypes'), dict):
        raise ValueError(f"Archetype file {path} must contain an 'archetypes' object")
    archetypes = data['archetypes']
    for name, genres in archetypes.items():
        if not isinstance(genres, list) or not all(isinstance(g, str) for g in genres):
            raise ValueError(f"Archetype {name} in {path} must map to a list of genre strings")
    table = ArchetypeTable.from_mapping(archetypes, data.get('fallback', FALLBACK_ARCHETYPE))
    logger.info(f"Loaded {len(table.archetypes)} archetypes from {path} (fallback: {table.fallback}).")
    return table


def score_archetypes(top_genres: Iterable[str], table: ArchetypeTable) -> Dict[str, int]:
    """Number of each archetype's genres present in the listener's genres"""
    genre_set = set(top_genres)
    return {name: len(genres & genre_set) for name, genres in table.archetypes.items()}


def classify(top_genres: Iterable[str], table: ArchetypeTable = DEFAULT_ARCHETYPES) -> str:
    """Return the single best-matching archetype, or the fallback on zero score or a tie"""
    scores = score_archetypes(top_genres, table)
    best_score = max(scores.values())
    best = [name for name, score in scores.items() if score == best_score]

    if best_score == 0 or len(best) != 1:
        logger.debug(f"No unique archetype winner (score {best_score}, candidates {sorted(best)}).")
        return table.fallback
    return best[0]
