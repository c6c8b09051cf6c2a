#!/usr/bin/env python3
"""
Command-line interface for gffwindow - GFF window scoring
"""

import argparse
import sys
from pathlib import Path

from gffwindow import WindowOptions, compute_window_scores
from gffwindow.tools.logger import set_verbosity
from gffwindow.tools.scoring import SCORERS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Score GFF data over a sliding window or over the loci of a GFF annotation file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 50bp windows every 25bp on methylation data (attribute field 'c=n; t=m')
  %(prog)s --width 50 --step 25 --scoring meth --output out.gff in.gff

  # Average the score field per locus
  %(prog)s --gff genes.gff --scoring average --output out.gff in.gff

  # Merge 'exon' features per parent gene
  %(prog)s --gff exons.gff --scoring average --tag Parent --merge exon in.gff
        """
    )

    parser.add_argument(
        "gff_source",
        help="URL or local path to the GFF data to score (may be compressed with .gz)"
    )

    parser.add_argument("-w", "--width", type=int, default=50, help="Sliding window width (default: 50)")
    parser.add_argument("-s", "--step", type=int, default=50, help="Sliding window step (default: 50)")
    parser.add_argument(
        "-c", "--scoring",
        default="meth",
        choices=list(SCORERS),
        help="Score computation scheme (default: meth)"
    )
    parser.add_argument(
        "-m", "--merge",
        metavar="FEATURE",
        help="Merge this annotation feature onto its parent locus (eg. exon); forces 1bp windows"
    )
    parser.add_argument(
        "-n", "--no-sort",
        action="store_true",
        help="Do not sort the input; re-read it for every window instead"
    )
    parser.add_argument(
        "-k", "--no-skip",
        action="store_true",
        help="Print windows or loci without coverage"
    )
    parser.add_argument("-g", "--gff", help="GFF annotation file defining the windows")
    parser.add_argument(
        "-t", "--tag",
        default="ID",
        help="Attribute tag holding the locus ID in the annotation (default: ID)"
    )
    parser.add_argument("-f", "--feature", help="Overwrite the output feature field with this label")
    parser.add_argument(
        "-b", "--absolute",
        metavar="ORGANISM",
        help="Organism whose chromosome lengths bound the windows (arabidopsis, rice, puffer); implies --no-skip"
    )
    parser.add_argument(
        "--lengths",
        type=Path,
        help="Reference length table to use with --absolute instead of the bundled one"
    )
    parser.add_argument("-r", "--reverse", action="store_true", help="Swap score and count (sum scoring)")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file path (default: stdout)"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debugging messages")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    return parser


def options_from_args(args: argparse.Namespace) -> WindowOptions:
    return WindowOptions(
        width=args.width,
        step=args.step,
        scoring=args.scoring,
        merge=args.merge,
        no_sort=args.no_sort,
        no_skip=args.no_skip,
        annotation=args.gff,
        tag=args.tag,
        feature=args.feature,
        absolute=args.absolute,
        lengths=args.lengths,
        reverse=args.reverse,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(verbose=args.verbose, quiet=args.quiet)

    try:
        options = options_from_args(args)
        options.validate()

        if args.output:
            with open(args.output, "w") as f:
                compute_window_scores(args.gff_source, options, f)
        else:
            compute_window_scores(args.gff_source, options, sys.stdout)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
