"""Fetches metadata for long id lists in bounded-size batches"""
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from taste_profile.errors import AnalysisCancelled, FetchError
from taste_profile.utils.cancellation import Cancellation, check

logger = logging.getLogger(__name__)

R = TypeVar('R')

DEFAULT_MAX_BATCH_SIZE = 20


def chunk_ranges(length: int, size: int) -> List[Tuple[int, int]]:
    """Half-open (start, end) ranges covering `length` items, `size` at a time"""
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [(start, min(start + size, length)) for start in range(0, length, size)]


def fetch_in_batches(ids: Sequence[str], fetch: Callable[[List[str]], Sequence[R]],
                     max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
                     cancellation: Optional[Cancellation] = None,
                     max_workers: int = 1) -> List[R]:
    """
    Fetch records for `ids` with one call per contiguous chunk.

    Duplicated ids are requested again, so every occurrence yields a record.
    Results are concatenated in chunk order regardless of `max_workers`.

    Raises:
        FetchError: On the first failing chunk, annotated with its index range.
            Records from other chunks are discarded.
        ValueError: If max_batch_size is below 1.
    """
    ranges = chunk_ranges(len(ids), max_batch_size)
    if not ranges:
        return []
    logger.info(f"Fetching metadata for {len(ids)} ids in {len(ranges)} batches of up to {max_batch_size}.")

    def _fetch_chunk(start: int, end: int) -> List[R]:
        check(cancellation, f"fetching batch {start}..{end}")
        try:
            return list(fetch(list(ids[start:end])))
        except AnalysisCancelled:
            raise
        except Exception as e:
            logger.error(f"Batch {start}..{end} failed: {e}")
            raise FetchError("Could not fetch artist batch", cause=e, chunk_range=(start, end)) from e

    if max_workers <= 1 or len(ranges) == 1:
        records: List[R] = []
        for start, end in ranges:
            records.extend(_fetch_chunk(start, end))
        return records

    results: Dict[int, List[R]] = {}
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="artist-batch") as executor:
        futures = {executor.submit(_fetch_chunk, start, end): index for index, (start, end) in enumerate(ranges)}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [future for future in done if future.exception() is not None]
        if failed:
            for future in pending:
                future.cancel()
            # Lowest failing chunk wins when several fail together
            first = min(failed, key=lambda future: futures[future])
            raise first.exception()
        for future in done:
            results[futures[future]] = future.result()

    records = []
    for index in range(len(ranges)):
        records.extend(results[index])
    return records
