from importlib import resources
from typing import Optional

from .helpers import open_stream


def read_reference_lengths(lines) -> dict:
    """
    Parse a reference length table into ``{organism: {seqname: length}}``.

    The table is a ``#<organism>`` header followed by ``<seqname>\\t<length>``
    lines; names are lowercased to match parsed GFF records.
    """
    lengths = {}
    active = None

    for line in lines:
        line = line.strip()
        if not line:
            continue
        if line.startswith("#"):
            active = line.lstrip("#").strip().lower()
            lengths.setdefault(active, {})
            continue
        if active is None:
            continue

        cols = line.split("\t")
        if len(cols) < 2:
            continue
        try:
            lengths[active][cols[0].strip().lower()] = int(cols[1])
        except ValueError:
            continue

    return lengths


def load_reference_lengths(path=None) -> dict:
    """Read the bundled reference table, or a user table at ``path``."""
    if path is None:
        text = resources.files("gffwindow").joinpath("data/reference_lengths.txt").read_text(
            encoding="utf-8"
        )
        return read_reference_lengths(text.splitlines())

    with open_stream(path) as lines:
        return read_reference_lengths(lines)


def reference_upper_bound(
    lengths: dict,
    organism: Optional[str],
    seqname: str,
    fallback: Optional[int],
) -> Optional[int]:
    """Reference length of ``seqname``, else ``fallback`` (the last loaded end)."""
    if organism:
        length = lengths.get(organism.lower(), {}).get(seqname)
        if length is not None:
            return length
    return fallback
