"""Walks a paginated collection to completion"""
import logging
from typing import Callable, List, Optional, TypeVar

from taste_profile.errors import AnalysisCancelled, FetchError
from taste_profile.models.catalog import Page
from taste_profile.utils.cancellation import Cancellation, check

logger = logging.getLogger(__name__)

T = TypeVar('T')


def walk_pages(first_page: Page[T], advance: Callable[[str], Page[T]],
               cancellation: Optional[Cancellation] = None) -> List[T]:
    """
    Concatenate the items of every page, in server order.

    Args:
        first_page: Page already fetched by the caller
        advance: Fetches the page a cursor points to
        cancellation: Checked before every page request

    Raises:
        FetchError: If any page request fails. Items gathered so far are dropped.
    """
    items: List[T] = list(first_page.items)
    page = first_page
    page_count = 1

    while page.has_next:
        check(cancellation, f"fetching page {page_count + 1}")
        try:
            page = advance(page.cursor)
        except AnalysisCancelled:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch page {page_count + 1} (cursor: {page.cursor}): {e}")
            raise FetchError(f"Could not fetch page {page_count + 1}", cause=e) from e
        page_count += 1
        items.extend(page.items)
        logger.debug(f"Page {page_count}: {len(page.items)} items, {len(items)} total.")

    logger.info(f"Walked {page_count} pages, {len(items)} items.")
    return items
