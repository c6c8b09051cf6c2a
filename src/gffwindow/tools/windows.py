import re
from typing import Optional

from .classes import Window
from .helpers import GffReader, open_stream, parse_attributes
from .logger import get_logger

LOGGER = get_logger()

ID_JUNK_RE = re.compile(r'["\t\r\n]')
CHILD_SUFFIX_RE = re.compile(r"\.\w+$") # exon Parent=ATG101010.1 -> locus ATG101010


def sliding_windows(width: int, step: int, upper: int, lower: int = 1):
    """
    Yield fixed-width windows from ``lower`` to ``upper``.

    The last window is truncated to ``upper`` rather than dropped, as long as
    it starts before ``upper``.
    """
    if not width or width < 1:
        raise ValueError(f"Window width must be a positive integer, got {width!r}")
    if not step or step < 1:
        raise ValueError(f"Window step must be a positive integer, got {step!r}")

    i = lower
    while True:
        if i <= upper - width + 1:
            yield Window([(i, i + width - 1)])
        elif i < upper:
            yield Window([(i, upper)])
        else:
            return
        i += step


def extract_locus_id(
    attribute: str,
    feature: str,
    tag: str = "ID",
    merge_feature: Optional[str] = None,
) -> Optional[str]:
    """Locus ID of an annotation record, ``None`` when nothing usable is found."""
    locus_id = parse_attributes(attribute).get(tag)

    if not locus_id:
        locus_id = attribute.split(";", 1)[0].strip()
        return locus_id or None

    locus_id = ID_JUNK_RE.sub("", locus_id.split(",", 1)[0])
    if merge_feature and feature == merge_feature:
        locus_id = CHILD_SUFFIX_RE.sub("", locus_id)
    return locus_id or None


def index_annotation(records, tag: str = "ID", merge_feature: Optional[str] = None) -> dict:
    """Map sequence name -> locus ID -> list of (start, end) ranges."""
    annotation = {}
    skipped = 0

    for record in records:
        if merge_feature and record.feature != merge_feature:
            continue

        locus_id = extract_locus_id(record.attribute, record.feature, tag, merge_feature)
        if locus_id is None:
            skipped += 1
            continue

        loci = annotation.setdefault(record.seqname, {})
        loci.setdefault(locus_id, []).append((record.start, record.end))

    if skipped:
        LOGGER.debug("Skipped %d annotation records without a locus ID", skipped)

    return annotation


def unique_ranges(ranges) -> list:
    seen = set()
    uniq = []
    for pair in ranges:
        if pair not in seen:
            seen.add(pair)
            uniq.append(pair)
    return uniq


class AnnotationWindows:
    """One window per annotated locus, consumed as it is handed out."""

    __slots__ = ("annotation",)

    def __init__(self, annotation: dict):
        self.annotation = annotation

    @classmethod
    def load(cls, path, tag: str = "ID", merge_feature: Optional[str] = None):
        LOGGER.info("Indexing annotation from: %s", path)
        with open_stream(path) as lines:
            annotation = index_annotation(GffReader(lines).records(), tag, merge_feature)
        LOGGER.info(
            "Indexed %d loci on %d sequences",
            sum(len(loci) for loci in annotation.values()),
            len(annotation),
        )
        return cls(annotation)

    def windows(self, seqname: str):
        loci = self.annotation.get(seqname)
        if loci is None:
            return

        for locus_id in sorted(loci):
            ranges = loci.pop(locus_id)
            if ranges:
                yield Window(sorted(unique_ranges(ranges)), locus_id)

        self.annotation.pop(seqname, None)
