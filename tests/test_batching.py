import math
import threading

import pytest

from taste_profile.batching import chunk_ranges, fetch_in_batches
from taste_profile.errors import AnalysisCancelled, FetchError
from taste_profile.utils.cancellation import Cancellation


class RecordingFetch:
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = set(fail_on or ())
        self._lock = threading.Lock()

    def __call__(self, chunk):
        with self._lock:
            self.calls.append(list(chunk))
        if chunk and chunk[0] in self.fail_on:
            raise ConnectionError(f"failed at {chunk[0]}")
        return [f"record-{i}" for i in chunk]


@pytest.mark.parametrize("length,size", [(0, 20), (1, 20), (20, 20), (21, 20), (45, 20), (7, 3)])
def test_call_count_is_ceiling(length, size):
    ids = [str(i) for i in range(length)]
    fetch = RecordingFetch()
    result = fetch_in_batches(ids, fetch, size)
    assert len(fetch.calls) == math.ceil(length / size)
    assert all(len(chunk) <= size for chunk in fetch.calls)
    assert result == [f"record-{i}" for i in ids]


def test_duplicates_are_requested_again():
    fetch = RecordingFetch()
    result = fetch_in_batches(["a", "a", "b"], fetch, 2)
    assert fetch.calls == [["a", "a"], ["b"]]
    assert result == ["record-a", "record-a", "record-b"]


def test_failing_chunk_aborts_everything():
    ids = [str(i) for i in range(10)]
    fetch = RecordingFetch(fail_on={"6"})
    with pytest.raises(FetchError) as exc_info:
        fetch_in_batches(ids, fetch, 3)
    assert exc_info.value.chunk_range == (6, 9)
    assert isinstance(exc_info.value.cause, ConnectionError)
    # no further chunk is attempted after the failure
    assert len(fetch.calls) == 3


def test_invalid_batch_size():
    with pytest.raises(ValueError):
        chunk_ranges(5, 0)


def test_parallel_keeps_chunk_order():
    ids = [str(i) for i in range(50)]
    fetch = RecordingFetch()
    assert fetch_in_batches(ids, fetch, 4, max_workers=4) == [f"record-{i}" for i in ids]
    assert len(fetch.calls) == 13


def test_parallel_failure_discards_results():
    ids = [str(i) for i in range(12)]
    fetch = RecordingFetch(fail_on={"4"})
    with pytest.raises(FetchError) as exc_info:
        fetch_in_batches(ids, fetch, 4, max_workers=3)
    assert exc_info.value.chunk_range == (4, 8)


def test_cancelled_before_first_chunk():
    cancellation = Cancellation()
    cancellation.cancel()
    fetch = RecordingFetch()
    with pytest.raises(AnalysisCancelled):
        fetch_in_batches(["a", "b"], fetch, 1, cancellation)
    assert fetch.calls == []
