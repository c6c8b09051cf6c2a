import gzip
import os
import re
import sys
from contextlib import contextmanager

import requests

from .classes import GffRecord, SequenceScan


class _Marker:
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return self.name


SKIP = _Marker("SKIP") # comment, blank or unusable line; keep reading
NO_MATCH = _Marker("NO_MATCH") # record belongs to another sequence and is buffered
END = _Marker("END")

COMMENT_RE = re.compile(r"^\s*#")
GZIP_MAGIC = b"\x1f\x8b"


def _is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def _has_gzip_magic(path: str) -> bool:
    with open(path, "rb") as handle:
        return handle.read(2) == GZIP_MAGIC


@contextmanager
def open_stream(path, chunk_size=1024, is_gzipped=None):
    """
    Yield a line-by-line stream for local or HTTP/HTTPS files.
    Gzip is detected from the magic bytes (local) or from the response
    headers and file suffix (remote) unless ``is_gzipped`` is given.
    """
    path = str(path)

    if _is_url(path):
        resp = requests.get(path, stream=True, timeout=120)
        resp.raise_for_status()

        http_is_gzip = is_gzipped
        if http_is_gzip is None:
            http_is_gzip = (
                resp.headers.get("Content-Encoding") == "gzip"
                or path.endswith((".gz", ".gzip"))
            )

        if http_is_gzip:
            gz = gzip.GzipFile(fileobj=resp.raw)

            def line_stream():
                for line in gz:
                    yield line.decode("utf-8")

            try:
                yield line_stream()
            finally:
                gz.close()
                resp.close()

        else:
            if resp.encoding is None:
                resp.encoding = "utf-8"

            def line_stream():
                for line in resp.iter_lines(chunk_size=chunk_size, decode_unicode=True):
                    if line:
                        yield line

            try:
                yield line_stream()
            finally:
                resp.close()

    else:
        if not os.path.isfile(path):
            raise FileNotFoundError(f"GFF file not found: {path}")

        if is_gzipped is None:
            is_gzipped = _has_gzip_magic(path)

        if is_gzipped:
            f = gzip.open(path, "rt", encoding="utf-8")
        else:
            f = open(path, "r", encoding="utf-8")

        try:
            yield f
        finally:
            f.close()


def parse_gff_line(line: str):
    """Parse one GFF line into a ``GffRecord``, or ``SKIP`` when it carries no record."""
    if not line or COMMENT_RE.match(line) or not line.strip():
        return SKIP

    cols = line.rstrip("\r\n").split("\t")
    if len(cols) != 9:
        return SKIP

    try:
        start = int(cols[3])
        end = int(cols[4])
    except ValueError:
        return SKIP

    return GffRecord(
        sys.intern(cols[0].lower()),
        cols[1],
        sys.intern(cols[2]),
        start,
        end,
        cols[5],
        cols[6],
        cols[7],
        cols[8].replace("\r", "").replace("\n", ""),
    )


def parse_attributes(field: str) -> dict:
    """
    Split a ``key=value; key=value`` attribute field into a dict.

    GTF-style ``key "value"`` chunks are accepted too. Surrounding quotes are
    removed and the first occurrence of a key wins.
    """
    out = {}
    for chunk in field.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        if "=" in chunk:
            key, value = chunk.split("=", 1)
        elif " " in chunk:
            key, value = chunk.split(None, 1)
        else:
            key, value = chunk, ""
        key = key.strip()
        if key not in out:
            out[key] = value.strip().strip('"')
    return out


class GffReader:
    """
    Record reader over a line source with a single-record lookahead slot.

    ``read(seqname)`` hands out records of ``seqname`` only. A record of any
    other sequence is parked in the slot and ``NO_MATCH`` is returned, so the
    next caller asking for that sequence picks it up from the same cursor.
    """

    __slots__ = ("_lines", "_pending")

    def __init__(self, lines):
        self._lines = iter(lines)
        self._pending = None

    @property
    def pending(self):
        return self._pending

    def read(self, seqname=None):
        if self._pending is not None:
            if seqname is None or self._pending.seqname == seqname:
                record, self._pending = self._pending, None
                return record
            return NO_MATCH

        line = next(self._lines, None)
        if line is None:
            return END

        record = parse_gff_line(line)
        if record is SKIP:
            return SKIP

        if seqname is not None and record.seqname != seqname:
            self._pending = record
            return NO_MATCH

        return record

    def block(self, seqname: str):
        """Yield the consecutive run of ``seqname`` records at the cursor."""
        while True:
            record = self.read(seqname)
            if record is SKIP:
                continue
            if record is NO_MATCH or record is END:
                return
            yield record

    def records(self, seqname=None):
        """Yield every record of ``seqname`` (or all records), dropping the others."""
        while True:
            record = self.read(seqname)
            if record is SKIP:
                continue
            if record is END:
                return
            if record is NO_MATCH:
                self._pending = None
                continue
            yield record


def scan_sequences(source) -> SequenceScan:
    """
    First, lightweight pass over ``source``: distinct sequence names, the
    last end coordinate seen for each, and whether every sequence forms one
    contiguous block with blocks in sorted-name order.
    """
    last_ends = {}
    previous = None
    grouped = True

    with open_stream(source) as lines:
        for record in GffReader(lines).records():
            seqname = record.seqname
            if seqname != previous:
                if grouped and (
                    seqname in last_ends
                    or (previous is not None and seqname < previous)
                ):
                    grouped = False
                previous = seqname
            last_ends[seqname] = record.end

    return SequenceScan(sorted(last_ends), last_ends, grouped)


def read_sequence_records(source, seqname: str) -> list:
    """Re-read ``source`` and collect the records of a single sequence."""
    with open_stream(source) as lines:
        return list(GffReader(lines).records(seqname))
