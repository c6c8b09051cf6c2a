"""Tests for gffwindow.tools.search module."""

import random
from collections import Counter

import pytest

from gffwindow.tools.classes import GffRecord, SequenceIndex, Window
from gffwindow.tools.helpers import read_sequence_records
from gffwindow.tools.search import binary_range_search, linear_range_search, range_iterators


def make_record(start, end, seqname="chr1"):
    return GffRecord(seqname, "test", "CG", start, end, ".", "+", ".", f"ID=r{start}_{end}")


def write_gff(path, records):
    with open(path, "w") as handle:
        for record in records:
            handle.write(
                "\t".join(
                    [record.seqname, record.source, record.feature, str(record.start), str(record.end),
                     record.score, record.strand, record.frame, record.attribute]
                ) + "\n"
            )
    return path


def spans(records):
    return sorted((record.start, record.end) for record in records)


@pytest.fixture
def dense_records():
    """Adjacent, non-overlapping 10bp records on chr1 from 1 to 200."""
    return [make_record(start, start + 9) for start in range(1, 200, 10)]


class TestBinaryRangeSearch:
    """Test cases for binary_range_search function."""

    def test_overlap_boundaries(self, dense_records):
        """Test that touching ends on both sides count as overlaps."""
        index = SequenceIndex("chr1", dense_records)

        matches = binary_range_search(Window([(20, 31)]), index)

        assert spans(matches) == [(11, 20), (21, 30), (31, 40)]

    def test_each_record_emitted_once(self, dense_records):
        """Test that a wide window returns every covered record exactly once."""
        index = SequenceIndex("chr1", dense_records)

        matches = list(binary_range_search(Window([(1, 200)]), index))

        assert len(matches) == len(dense_records)
        assert spans(matches) == spans(dense_records)

    def test_no_seed(self, dense_records):
        """Test a sub-range past the last record."""
        index = SequenceIndex("chr1", dense_records)

        assert list(binary_range_search(Window([(500, 600)]), index)) == []
        assert list(binary_range_search(Window([(1, 5)]), SequenceIndex("chr1", []))) == []

    def test_sub_ranges_in_order(self, dense_records):
        """Test that matches follow sub-range order and empty sub-ranges are dropped."""
        index = SequenceIndex("chr1", dense_records)
        window = Window([(5, 5), (300, 400), (95, 95)])

        matches = list(binary_range_search(window, index))

        assert [(record.start, record.end) for record in matches] == [(1, 10), (91, 100)]
        assert len(range_iterators(window, index)) == 3

    def test_nested_records(self):
        """Test that a long record spanning shorter ones is still found."""
        records = [make_record(1, 1000), make_record(5, 6), make_record(10, 12), make_record(700, 710)]
        index = SequenceIndex("chr1", records)

        assert spans(binary_range_search(Window([(500, 600)]), index)) == [(1, 1000)]
        assert spans(binary_range_search(Window([(8, 11)]), index)) == [(1, 1000), (10, 12)]


class TestLinearRangeSearch:
    """Test cases for linear_range_search function."""

    def test_filtered_to_sequence(self, tmp_path, dense_records):
        """Test that only records of the requested sequence are scanned."""
        other = [make_record(start, start + 9, seqname="chr2") for start in range(1, 100, 10)]
        path = write_gff(tmp_path / "data.gff", other + dense_records)

        matches = list(linear_range_search(Window([(20, 31)]), path, "chr1"))

        assert spans(matches) == [(11, 20), (21, 30), (31, 40)]
        assert all(record.seqname == "chr1" for record in matches)

    def test_lazy_scan(self, tmp_path, dense_records):
        """Test that nothing is read until the iterator is consumed."""
        path = tmp_path / "data.gff"
        matches = linear_range_search(Window([(1, 10)]), path, "chr1")

        write_gff(path, dense_records)

        assert spans(matches) == [(1, 10)]


class TestSearchAgreement:
    """Binary and linear search must find the same records."""

    def test_random_windows(self, tmp_path):
        """Test both strategies against a brute-force overlap check."""
        rng = random.Random(7)
        records = []
        for _ in range(300):
            start = rng.randint(1, 5000)
            length = rng.choice([1, 1, 5, 20, 300])
            records.append(make_record(start, start + length - 1))
        records.sort(key=lambda record: record.start)
        path = write_gff(tmp_path / "random.gff", records)

        index = SequenceIndex("chr1", read_sequence_records(path, "chr1"))

        for _ in range(60):
            lo = rng.randint(1, 5200)
            hi = lo + rng.randint(0, 200)
            lo2 = hi + rng.randint(1, 300)
            window = Window([(lo, hi), (lo2, lo2 + 50)])

            expected = Counter()
            for a, b in window.ranges:
                expected.update(r.as_tuple() for r in records if r.start <= b and r.end >= a)

            binary = Counter(r.as_tuple() for r in binary_range_search(window, index))
            linear = Counter(r.as_tuple() for r in linear_range_search(window, path, "chr1"))

            assert binary == expected
            assert linear == expected
