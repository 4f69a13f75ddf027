"""Profile response model definition"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

MAX_RANKED = 5


class Profile(BaseModel):
    """
    Behavioral profile computed for one listener.

    Attributes:
        top_genres: Up to five genres, most frequent first
        top_artists: Up to five primary artists, most frequent first
        archetype: Exactly one name from the archetype table
        source: History source the profile was computed from (not serialized)
    """
    top_genres: List[str] = Field(default_factory=list, description="Ranked favorite genres")
    top_artists: List[str] = Field(default_factory=list, description="Ranked favorite artists")
    archetype: str = Field(description="Archetype label")
    source: Optional[str] = Field(default=None, exclude=True, description="History source used")

    @field_validator('top_genres', 'top_artists')
    @classmethod
    def check_ranked_length(cls, value: List[str]) -> List[str]:
        if len(value) > MAX_RANKED:
            raise ValueError(f"ranked lists hold at most {MAX_RANKED} entries, got {len(value)}")
        return value
