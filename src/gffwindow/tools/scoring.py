import math
from typing import Optional

from .helpers import parse_attributes

NO_VALUE = {".", ""}
BASES = "acgt"


def numeric_score(score: str) -> Optional[float]:
    """Float value of a score column, ``None`` for placeholders and junk."""
    if score in NO_VALUE:
        return None
    try:
        return float(score)
    except ValueError:
        return None


class Scorer:
    """
    Reduce the records matched by one window to a result mapping.

    ``score`` consumes the iterable to exhaustion and returns a dict that
    always carries ``score`` and ``n``, or ``None`` when no record contributed.
    """

    name = None

    def score(self, records) -> Optional[dict]:
        raise NotImplementedError


class MethylationScorer(Scorer):
    """Fractional methylation c / (c + t) from ``c=`` and ``t=`` attribute tags."""

    name = "meth"

    def score(self, records) -> Optional[dict]:
        c_count = 0
        t_count = 0
        n = 0

        for record in records:
            attributes = parse_attributes(record.attribute)
            try:
                c = int(attributes["c"])
                t = int(attributes["t"])
            except (KeyError, ValueError):
                continue
            c_count += c
            t_count += t
            n += 1

        if n and (c_count + t_count) > 0:
            return {
                "score": c_count / (c_count + t_count),
                "c": c_count,
                "t": t_count,
                "n": n,
            }
        return None


class SumScorer(Scorer):
    """
    Sum of scores over every matched record. Placeholder scores count as 1
    and other non-numeric scores as 0.

    With ``reverse`` the sum and the record count trade places, so the score
    column holds the count.
    """

    name = "sum"

    def __init__(self, reverse: bool = False):
        self.reverse = reverse

    def score(self, records) -> Optional[dict]:
        score_sum = 0.0
        score_count = 0

        for record in records:
            if record.score in NO_VALUE:
                value = 1.0
            else:
                value = numeric_score(record.score) or 0.0
            score_sum += value
            score_count += 1

        if self.reverse:
            score_sum, score_count = score_count, score_sum

        if score_count or (self.reverse and score_sum):
            return {"score": score_sum, "n": score_count}
        return None


class AverageScorer(Scorer):
    """Mean, sample variance and standard deviation in one pass (Welford)."""

    name = "average"

    def score(self, records) -> Optional[dict]:
        mean = 0.0
        m2 = 0.0
        n = 0

        for record in records:
            value = numeric_score(record.score)
            if value is None:
                continue
            n += 1
            delta = value - mean
            mean += delta / n
            m2 += delta * (value - mean)

        if not n:
            return None

        result = {"score": mean, "n": n}
        if n > 1:
            var = m2 / (n - 1)
            result["var"] = var
            result["std"] = math.sqrt(var)
        return result


class SequenceFrequencyScorer(Scorer):
    """
    Per-position base frequencies of ``seq=`` tags plus the mean score.

    Every matched record enters the mean, non-numeric scores as 0.
    """

    name = "seq_freq"

    def score(self, records) -> Optional[dict]:
        mean = 0.0
        n = 0
        positions = []

        for record in records:
            value = numeric_score(record.score) or 0.0
            n += 1
            mean += (value - mean) / n

            sequence = parse_attributes(record.attribute).get("seq", "")
            for i, base in enumerate(sequence.lower()):
                if i == len(positions):
                    positions.append(dict.fromkeys(BASES, 0))
                counts = positions[i]
                counts[base] = counts.get(base, 0) + 1

        if not n or not positions:
            return None

        result = {}
        for i, counts in enumerate(positions, 1):
            total = sum(counts.values())
            result[str(i)] = ",".join(
                "%g" % (counts[base] / total) for base in sorted(counts)
            )
        result["score"] = mean
        result["n"] = n
        return result


SCORERS = {
    scorer.name: scorer
    for scorer in (MethylationScorer, AverageScorer, SumScorer, SequenceFrequencyScorer)
}


def make_scorer(name: str, reverse: bool = False) -> Scorer:
    scorer_cls = SCORERS.get(name)
    if scorer_cls is None:
        raise ValueError(
            f"Unknown scoring scheme: {name} (available: {', '.join(SCORERS)})"
        )
    if scorer_cls is SumScorer:
        return SumScorer(reverse=reverse)
    return scorer_cls()
