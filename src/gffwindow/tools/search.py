from itertools import chain

from .classes import SequenceIndex, Window
from .helpers import GffReader, open_stream


def _find_seed(index: SequenceIndex, lo: int, hi: int):
    """Binary search for an index whose prefix holds a record overlapping [lo, hi]."""
    starts = index.starts
    max_ends = index.max_ends
    low, high = 0, len(starts) - 1

    while low <= high:
        mid = (low + high) // 2
        if max_ends[mid] < lo:
            low = mid + 1
        elif starts[mid] > hi:
            high = mid - 1
        else:
            return mid
    return None


def _binary_matches(index: SequenceIndex, lo: int, hi: int):
    seed = _find_seed(index, lo, hi)
    if seed is None:
        return

    records = index.records
    starts = index.starts
    max_ends = index.max_ends

    # records after the seed can only overlap while they start before hi
    up = seed
    while up + 1 < len(records) and starts[up + 1] <= hi:
        up += 1
        if records[up].end >= lo:
            yield records[up]

    # records before the seed start before hi; stop once nothing earlier reaches lo
    down = seed
    while down > 0 and max_ends[down - 1] >= lo:
        down -= 1
        if records[down].end >= lo:
            yield records[down]

    if records[seed].end >= lo:
        yield records[seed]


def range_iterators(window: Window, index: SequenceIndex) -> list:
    """One lazy match iterator per sub-range of ``window``."""
    return [_binary_matches(index, lo, hi) for lo, hi in window.ranges]


def binary_range_search(window: Window, index: SequenceIndex):
    """Records of a sorted in-memory index overlapping ``window``, sub-range by sub-range."""
    return chain.from_iterable(range_iterators(window, index))


def _linear_matches(source, seqname: str, lo: int, hi: int):
    with open_stream(source) as lines:
        for record in GffReader(lines).records(seqname):
            if record.start > hi:
                return
            if record.end < lo:
                continue
            yield record


def linear_range_search(window: Window, source, seqname: str):
    """
    Records overlapping ``window`` found by re-reading ``source``.

    Each sub-range opens its own stream filtered to ``seqname`` and stops at
    the first record starting past the sub-range, so records are expected to
    follow start order within the sequence.
    """
    return chain.from_iterable(
        _linear_matches(source, seqname, lo, hi) for lo, hi in window.ranges
    )
