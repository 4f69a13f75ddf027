"""Profile analysis: primary source first, saved tracks as fallback"""
import logging
from typing import Optional

from taste_profile.aggregation import DEFAULT_TOP_N, top_artists, top_genres
from taste_profile.archetypes import DEFAULT_ARCHETYPES, ArchetypeTable, classify
from taste_profile.batching import DEFAULT_MAX_BATCH_SIZE, fetch_in_batches
from taste_profile.errors import AnalysisCancelled, ExhaustedSourcesError, FetchError, NoDataError, TasteProfileError
from taste_profile.models.catalog import SourceKind, SourceSummary
from taste_profile.models.profile import Profile
from taste_profile.pagination import walk_pages
from taste_profile.services.catalog import CatalogService
from taste_profile.utils.cancellation import Cancellation, check

logger = logging.getLogger(__name__)

PRIMARY_SOURCE = SourceKind.TOP_TRACKS
FALLBACK_SOURCE = SourceKind.SAVED_TRACKS


class ProfileAnalyzer:
    """Builds a listener profile from one catalog service"""

    def __init__(self, catalog: CatalogService, archetypes: ArchetypeTable = DEFAULT_ARCHETYPES,
                 max_batch_size: int = DEFAULT_MAX_BATCH_SIZE, top_n: int = DEFAULT_TOP_N,
                 top_page_size: int = 20, saved_page_size: int = 5, batch_workers: int = 1,
                 cancellation: Optional[Cancellation] = None):
        self.catalog = catalog
        self.archetypes = archetypes
        self.max_batch_size = max_batch_size
        self.top_n = top_n
        self.page_sizes = {
            SourceKind.TOP_TRACKS: top_page_size,
            SourceKind.SAVED_TRACKS: saved_page_size,
        }
        self.batch_workers = batch_workers
        self.cancellation = cancellation

    @classmethod
    def from_settings(cls, catalog: CatalogService, settings, archetypes: ArchetypeTable = DEFAULT_ARCHETYPES,
                      cancellation: Optional[Cancellation] = None) -> 'ProfileAnalyzer':
        return cls(
            catalog,
            archetypes=archetypes,
            max_batch_size=settings.MAX_BATCH_SIZE,
            top_n=settings.TOP_N,
            top_page_size=settings.TOP_TRACKS_PAGE_SIZE,
            saved_page_size=settings.SAVED_TRACKS_PAGE_SIZE,
            batch_workers=settings.BATCH_WORKERS,
            cancellation=cancellation
        )

    def analyze_source(self, source: SourceKind) -> SourceSummary:
        """
        Walk one history source and rank its genres and artists.

        Raises:
            FetchError: A catalog call failed, annotated with the source
            NoDataError: The source has no history items
            AnalysisCancelled: The cancellation signal tripped
        """
        check(self.cancellation, f"fetching first page of {source.value}")
        try:
            first_page = self.catalog.fetch_initial_page(source, self.page_sizes[source])
        except FetchError as e:
            raise e.with_source(source.value) from e.cause
        except TasteProfileError:
            raise
        except Exception as e:
            raise FetchError("Could not fetch first page", cause=e, source=source.value) from e

        try:
            items = walk_pages(first_page, self.catalog.advance_page, self.cancellation)
            if not items:
                raise NoDataError(source.value)

            artist_ids = [item.artist_id for item in items if item.artist_id]
            artists = fetch_in_batches(artist_ids, self.catalog.fetch_artists, self.max_batch_size,
                                       self.cancellation, self.batch_workers)
        except FetchError as e:
            raise e.with_source(source.value) from e.cause

        summary = SourceSummary(
            source=source,
            top_genres=tuple(top_genres(artists, self.top_n)),
            top_artists=tuple(top_artists(items, self.top_n)),
            item_count=len(items),
            artist_count=len(artists)
        )
        logger.info(f"Analyzed {source.value}: {summary.item_count} items, {summary.artist_count} artist records, "
                    f"top genres {list(summary.top_genres)}, top artists {list(summary.top_artists)}")
        return summary

    def _try_source(self, source: SourceKind) -> SourceSummary:
        summary = self.analyze_source(source)
        if not summary.top_artists:
            raise NoDataError(source.value)
        return summary

    def analyze(self) -> Profile:
        """
        Build the listener profile.

        The primary source is used when it yields at least one artist,
        otherwise the fallback source is used on its own. Results from the
        two sources are never combined.

        Raises:
            ExhaustedSourcesError: Both sources failed or yielded no artists
            AnalysisCancelled: The cancellation signal tripped
        """
        try:
            summary = self._try_source(PRIMARY_SOURCE)
        except AnalysisCancelled:
            raise
        except (FetchError, NoDataError) as primary_error:
            logger.warning(f"Primary source {PRIMARY_SOURCE.value} unusable ({primary_error}). "
                           f"Falling back to {FALLBACK_SOURCE.value}.")
            try:
                summary = self._try_source(FALLBACK_SOURCE)
            except AnalysisCancelled:
                raise
            except (FetchError, NoDataError) as fallback_error:
                logger.error(f"Fallback source {FALLBACK_SOURCE.value} failed too: {fallback_error}")
                raise ExhaustedSourcesError(primary_error, fallback_error) from fallback_error

        archetype = classify(summary.top_genres, self.archetypes)
        profile = Profile(
            top_genres=list(summary.top_genres),
            top_artists=list(summary.top_artists),
            archetype=archetype,
            source=summary.source.value
        )
        logger.info(f"Profile built from {summary.source.value}: archetype {archetype}")
        return profile
