import sys
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional

from .tools.classes import SequenceIndex, Window
from .tools.helpers import GffReader, open_stream, read_sequence_records, scan_sequences
from .tools.logger import get_logger
from .tools.reference import load_reference_lengths, reference_upper_bound
from .tools.scoring import SCORERS, make_scorer
from .tools.search import binary_range_search, linear_range_search
from .tools.windows import AnnotationWindows, sliding_windows

LOGGER = get_logger()

SOURCE_LABEL = "dzlab"


@dataclass
class WindowOptions:
    width: Optional[int] = 50
    step: Optional[int] = 50
    scoring: str = "meth"
    merge: Optional[str] = None
    no_sort: bool = False
    no_skip: bool = False
    annotation: Optional[str] = None
    tag: str = "ID"
    feature: Optional[str] = None
    absolute: Optional[str] = None
    lengths: Optional[str] = None
    reverse: bool = False

    def validate(self) -> None:
        """Check the option combination and apply the merge/absolute implications."""
        if self.scoring not in SCORERS:
            raise ValueError(
                f"Unknown scoring scheme: {self.scoring} (available: {', '.join(SCORERS)})"
            )
        if not ((self.width and self.step) or self.annotation):
            raise ValueError("Need either a window width and step or an annotation file")

        if self.merge:
            self.width = 1
            self.step = 1

        if not self.annotation:
            for name in ("width", "step"):
                value = getattr(self, name)
                if not isinstance(value, int) or value < 1:
                    raise ValueError(f"Window {name} must be a positive integer, got {value!r}")

        if self.absolute:
            self.no_skip = True
            lengths = load_reference_lengths(self.lengths)
            if self.absolute.lower() not in lengths:
                raise ValueError(
                    f"Absolute mode only works with {', '.join(sorted(lengths))}, got {self.absolute}"
                )

    @property
    def feature_label(self) -> str:
        if self.feature:
            return self.feature
        return "locus" if self.annotation else "window"


def format_value(value) -> str:
    if isinstance(value, float):
        return "%.15g" % value
    return str(value)


def format_window(seqname: str, window: Window, result: Optional[dict], options: WindowOptions) -> Optional[str]:
    """GFF line for one window, or ``None`` when an empty window is skipped."""
    if result is not None:
        fields = dict(result)
        score = "%g" % fields.pop("score")
        attribute = f"ID={window.locus}; " if window.locus else ""
        attribute += "; ".join(f"{key}={format_value(fields[key])}" for key in sorted(fields))
    elif options.no_skip:
        score = "."
        attribute = f"ID={window.locus}" if window.locus else "."
    else:
        return None

    return "\t".join(
        [
            seqname,
            SOURCE_LABEL,
            options.feature_label,
            str(window.start),
            str(window.end),
            score,
            ".",
            ".",
            attribute,
        ]
    )


def _load_lengths(options: WindowOptions) -> dict:
    if not options.absolute:
        return {}
    return load_reference_lengths(options.lengths)


def iter_window_scores(source, options: Optional[WindowOptions] = None):
    """
    Yield one output GFF line per scored window of ``source``.

    Sequences are handled one at a time in sorted-name order. In sorted mode
    a sequence's records are loaded, sorted and searched in memory, then
    dropped before the next sequence; in unsorted mode the input is re-read
    for every window instead.

    Raises:
        ValueError: For invalid option combinations, before any input is read
        FileNotFoundError: If a local input file does not exist
        requests.RequestException: If a URL cannot be accessed
    """
    options = options or WindowOptions()
    options.validate()
    scorer = make_scorer(options.scoring, reverse=options.reverse)
    lengths = _load_lengths(options)

    LOGGER.info("Processing GFF from: %s", source)
    scan = scan_sequences(source)
    LOGGER.info("Found %d sequences", len(scan.names))

    annotation = None
    if options.annotation:
        annotation = AnnotationWindows.load(options.annotation, options.tag, options.merge)

    with ExitStack() as stack:
        reader = None
        if not options.no_sort:
            if scan.grouped:
                LOGGER.debug("Input grouped by sequence, indexing in a single pass")
                reader = GffReader(stack.enter_context(open_stream(source)))
            else:
                LOGGER.debug("Input not grouped by sequence, re-reading it per sequence")

        for seqname in scan.names:
            index = None
            if not options.no_sort:
                if reader is not None:
                    records = list(reader.block(seqname))
                else:
                    records = read_sequence_records(source, seqname)
                index = SequenceIndex(seqname, records)
                last_end = index.last_end
            else:
                last_end = scan.last_ends[seqname]

            if annotation is not None:
                windows = annotation.windows(seqname)
            else:
                upper = reference_upper_bound(lengths, options.absolute, seqname, last_end)
                if upper is None:
                    continue
                windows = sliding_windows(options.width, options.step, upper)

            emitted = 0
            for window in windows:
                if index is not None:
                    matches = binary_range_search(window, index)
                else:
                    matches = linear_range_search(window, source, seqname)

                line = format_window(seqname, window, scorer.score(matches), options)
                if line is not None:
                    emitted += 1
                    yield line

            LOGGER.debug("Sequence %s: %d windows written", seqname, emitted)


def compute_window_scores(source, options: Optional[WindowOptions] = None, output=None) -> int:
    """Write the window scores of ``source`` to ``output`` (stdout by default)."""
    if output is None:
        output = sys.stdout
    written = 0
    for line in iter_window_scores(source, options):
        output.write(line + "\n")
        written += 1
    LOGGER.info("Wrote %d windows", written)
    return written
