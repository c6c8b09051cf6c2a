"""
gffwindow - GFF window scoring

Aggregates GFF scores over sliding windows or over the loci of an annotation file.
"""

__version__ = "0.0.1"

from .window_stats import WindowOptions, compute_window_scores, iter_window_scores

__all__ = ["WindowOptions", "compute_window_scores", "iter_window_scores"]
