"""Spotify Web API implementation of the catalog service"""
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from taste_profile.models.catalog import ArtistRecord, HistoryItem, Page, SourceKind
from taste_profile.utils.cancellation import Cancellation, check

logger = logging.getLogger(__name__)

# Spotify rejects artist lookups with more ids than this
SPOTIFY_MAX_ARTIST_IDS = 50
# Base delay in seconds for retries on rate limit
RATE_LIMIT_RETRY_BASE_DELAY = 2
# Upper bound on a single Retry-After wait
MAX_RETRY_AFTER_SECONDS = 60


def _get_primary_artist_info(artists_list: Optional[List[Dict]]) -> Tuple[Optional[str], Optional[str]]:
    """Safely extracts primary artist name and ID."""
    if isinstance(artists_list, list) and artists_list:
        primary_artist = artists_list[0]
        if isinstance(primary_artist, dict):
            return primary_artist.get('name'), primary_artist.get('id')
    return None, None


def parse_history_page(response_data: Dict[str, Any]) -> Page[HistoryItem]:
    """
    Convert a Spotify paging object into a Page of history items.

    Top tracks pages hold track objects directly, saved tracks pages wrap
    them as {"added_at": ..., "track": {...}}. Both shapes are accepted.
    """
    raw_items = response_data.get('items')
    if not isinstance(raw_items, list):
        raise ValueError(f"Unexpected paging object, missing 'items': {str(response_data)[:200]}")

    items = []
    for entry in raw_items:
        track = entry.get('track') if isinstance(entry, dict) and 'track' in entry else entry
        if not isinstance(track, dict):
            logger.warning(f"Skipping invalid history entry: {entry}")
            continue
        artist_name, artist_id = _get_primary_artist_info(track.get('artists'))
        items.append(HistoryItem(item_id=track.get('id') or '', artist_id=artist_id, artist_name=artist_name))
    return Page(items=tuple(items), cursor=response_data.get('next') or None)


def parse_artist(artist: Dict[str, Any]) -> ArtistRecord:
    genres = artist.get('genres') or []
    return ArtistRecord(
        artist_id=artist.get('id', ''),
        name=artist.get('name', ''),
        genres=tuple(g for g in genres if isinstance(g, str))
    )


class SpotifyCatalog:
    """Read-only access to a listener's Spotify history and artist metadata"""

    def __init__(self, token: str, base_url: str = "https://api.spotify.com/v1",
                 time_range: str = 'medium_term', timeout: float = 15, retries: int = 3,
                 cancellation: Optional[Cancellation] = None, session: Optional[requests.Session] = None):
        """
        Initialize with Spotify access token
        """
        if not token:
            raise ValueError("Spotify token cannot be empty")
        self.base_url = base_url.rstrip('/')
        self.time_range = time_range
        self.timeout = timeout
        self.retries = retries
        self.cancellation = cancellation
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/json'
        })

    def fetch_initial_page(self, source_kind: SourceKind, page_size: int) -> Page[HistoryItem]:
        """
        Get the first page of a history source

        Args:
            source_kind: TOP_TRACKS or SAVED_TRACKS
            page_size: Number of items per page (Spotify API max is 50)
        """
        limit = min(page_size, 50)
        if source_kind == SourceKind.TOP_TRACKS:
            endpoint = f'me/top/tracks?time_range={self.time_range}&limit={limit}'
        elif source_kind == SourceKind.SAVED_TRACKS:
            endpoint = f'me/tracks?limit={limit}'
        else:
            raise ValueError(f"Unknown source kind: {source_kind}")
        logger.info(f"Fetching first page of {source_kind.value} (limit: {limit})...")
        return parse_history_page(self._make_request(endpoint))

    def advance_page(self, cursor: str) -> Page[HistoryItem]:
        """Follow a paging object's `next` URL"""
        return parse_history_page(self._make_request(cursor))

    def fetch_artists(self, ids: Sequence[str]) -> List[ArtistRecord]:
        """Get full artist objects for up to 50 ids, one record per id"""
        if len(ids) > SPOTIFY_MAX_ARTIST_IDS:
            raise ValueError(f"At most {SPOTIFY_MAX_ARTIST_IDS} artist ids per request, got {len(ids)}")
        if not ids:
            return []
        response_data = self._make_request(f"artists?ids={','.join(ids)}")
        artists = response_data.get('artists')
        if not isinstance(artists, list):
            raise ValueError(f"Unexpected response format for artists: {str(response_data)[:200]}")
        # Unknown ids come back as null entries
        return [parse_artist(artist) for artist in artists if isinstance(artist, dict)]

    def _url_for(self, endpoint: str) -> str:
        if endpoint.startswith('http://') or endpoint.startswith('https://'):
            return endpoint
        return f'{self.base_url}/{endpoint}'

    def _wait(self, seconds: float, url: str) -> None:
        """Sleep before a retry, waking early when the analysis is cancelled"""
        if self.cancellation is None:
            time.sleep(seconds)
            return
        self.cancellation.wait(seconds)
        check(self.cancellation, f"retrying request to {url}")

    def _make_request(self, endpoint: str) -> Dict:
        """Make authenticated request to Spotify API, retrying on rate limits and server errors"""
        url = self._url_for(endpoint)
        attempt = 0
        last_exception: Optional[Exception] = None

        while attempt < self.retries:
            check(self.cancellation, f"request to {url}")
            attempt += 1
            try:
                logger.debug(f"Attempt {attempt}/{self.retries}: Making request to {url}")
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                logger.debug(f"Request successful (Status: {response.status_code}) to {url}")
                try:
                    json_response = response.json()
                except ValueError as e:
                    logger.error(f"Failed to decode JSON response from {url}. Response text: {response.text[:200]}")
                    raise ValueError(f"Invalid JSON from {url}") from e
                if not isinstance(json_response, dict):
                    raise ValueError(f"Expected a JSON object from {url}")
                return json_response
            except requests.exceptions.HTTPError as e:
                last_exception = e
                response = e.response
                status = response.status_code if response is not None else None
                logger.warning(f"HTTP Error on attempt {attempt} for {url}: {e}")
                if status == 401:
                    logger.error(f"Spotify token is invalid or expired (401) for {url}. Cannot proceed.")
                    raise
                elif status == 403:
                    logger.error(f"Forbidden access (403) to Spotify endpoint {url}. Check scopes/permissions.")
                    raise
                elif status == 429:
                    retry_after = RATE_LIMIT_RETRY_BASE_DELAY * (2 ** (attempt - 1))
                    try:
                        retry_after = int(response.headers.get('Retry-After', retry_after))
                    except (TypeError, ValueError):
                        pass
                    retry_after = max(1, min(retry_after, MAX_RETRY_AFTER_SECONDS))
                    if attempt < self.retries:
                        logger.warning(f"Rate limit hit (429) for {url}. Retrying after {retry_after} seconds...")
                        self._wait(retry_after, url)
                    continue
                elif status is not None and status >= 500:
                    logger.warning(f"Spotify server error ({status}) for {url}. Retrying...")
                else:
                    logger.error(f"Client error ({status}) for {url}. Aborting request.")
                    raise
            except requests.exceptions.RequestException as e:
                last_exception = e
                logger.warning(f"Request Error on attempt {attempt} for {url}: {e}. Retrying...")
            if attempt < self.retries:
                sleep_time = RATE_LIMIT_RETRY_BASE_DELAY * (1.5 ** (attempt - 1))
                logger.info(f"Waiting {sleep_time:.2f}s before next retry for {url}...")
                self._wait(sleep_time, url)

        logger.error(f"Request failed after {self.retries} attempts for {url}.")
        raise last_exception or requests.exceptions.RetryError(f"Request failed after {self.retries} attempts for {url}")
