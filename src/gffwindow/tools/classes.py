from typing import Optional
from array import array


class GffRecord:
    __slots__ = (
        "seqname",
        "source",
        "feature",
        "start",
        "end",
        "score",
        "strand",
        "frame",
        "attribute",
    )

    def __init__(
        self,
        seqname: str,
        source: str,
        feature: str,
        start: int,
        end: int,
        score: str,
        strand: str,
        frame: str,
        attribute: str,
    ):
        self.seqname = seqname
        self.source = source
        self.feature = feature
        self.start = start
        self.end = end
        self.score = score
        self.strand = strand
        self.frame = frame
        self.attribute = attribute

    def as_tuple(self) -> tuple:
        return tuple(getattr(self, name) for name in self.__slots__)

    def overlaps(self, lo: int, hi: int) -> bool:
        return self.start <= hi and self.end >= lo

    def __eq__(self, other):
        if not isinstance(other, GffRecord):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"GffRecord({self.seqname!r}, {self.feature!r}, {self.start}, {self.end}, {self.score!r})"


class Window:
    """One unit of aggregation: ascending (start, end) sub-ranges and an optional locus."""

    __slots__ = ("ranges", "locus")

    def __init__(self, ranges, locus: Optional[str] = None):
        self.ranges = tuple(ranges)
        self.locus = locus

    @property
    def start(self) -> int:
        return self.ranges[0][0]

    @property
    def end(self) -> int:
        return self.ranges[-1][1]

    def __eq__(self, other):
        if not isinstance(other, Window):
            return NotImplemented
        return self.ranges == other.ranges and self.locus == other.locus

    def __repr__(self):
        return f"Window({list(self.ranges)!r}, locus={self.locus!r})"


class SequenceIndex:
    """Records of one sequence sorted by start.

    ``max_ends[i]`` is the largest end among ``records[0..i]``; it only
    differs from ``records[i].end`` where a long record contains later ones.
    """

    __slots__ = ("seqname", "records", "starts", "max_ends")

    def __init__(self, seqname: str, records: list):
        self.seqname = seqname
        records.sort(key=lambda record: record.start)
        self.records = records
        self.starts = array("q")
        self.max_ends = array("q")

        running_max = None
        for record in records:
            self.starts.append(record.start)
            if running_max is None or record.end > running_max:
                running_max = record.end
            self.max_ends.append(running_max)

    def __len__(self):
        return len(self.records)

    @property
    def last_end(self) -> Optional[int]:
        """End coordinate of the last record by start, ``None`` when empty."""
        if not self.records:
            return None
        return self.records[-1].end


class SequenceScan:
    __slots__ = ("names", "last_ends", "grouped")

    def __init__(self, names: list, last_ends: dict, grouped: bool):
        self.names = names
        self.last_ends = last_ends
        self.grouped = grouped
