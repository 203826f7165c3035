"""
Command line entry point.

Reads every file given on the command line, estimates it and prints one
section per file in the order the files were given.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence

from estimator.config import EstimatorConfig, FeedUnit
from estimator.estimate_pipeline import FileEstimate, estimate_files
from reporting.report import render_estimate
from reporting.timeline_plot import plot_layers


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resin-time",
        description="More accurate print time estimation for resin printer gcode files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """\
            Example:
              resin-time part.gcode other.gcode --feed-unit um/min --plot charts/
            """
        ),
    )
    parser.add_argument("files", metavar="FILE", nargs="+", type=Path)
    parser.add_argument(
        "--feed-unit",
        choices=[unit.value for unit in FeedUnit],
        default=FeedUnit.MM_PER_MIN.value,
        help="Unit of F values (Peopoly Moai firmware uses um/min)",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Number of files estimated at the same time",
    )
    parser.add_argument(
        "--plot",
        metavar="DIR",
        type=Path,
        help="Write a per-layer time chart for every estimated file into DIR",
    )
    parser.add_argument(
        "--show-ignored",
        action="store_true",
        help="List every line that was ignored as unrecognized",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("-q", "--quiet", action="store_true")
    return parser


def setup_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    log_format = "%(asctime)s %(levelname)s %(message)s"
    logging.basicConfig(level=level, format=log_format)


def write_plots(estimates: List[FileEstimate], out_dir: Path) -> None:
    for estimate in estimates:
        if not estimate.ok:
            continue
        out_path = out_dir / f"{estimate.path.stem}-layers.png"
        plot_layers(estimate.breakdown, out_path, title=estimate.path.name)
        logger.info("Wrote %s", out_path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    if args.jobs < 1:
        logger.error("--jobs must be at least 1")
        return 2

    config = EstimatorConfig(feed_unit=FeedUnit(args.feed_unit))
    estimates = estimate_files(args.files, config, jobs=args.jobs)

    color = sys.stdout.isatty()
    for estimate in estimates:
        print(render_estimate(estimate, show_ignored=args.show_ignored, color=color))

    if args.plot is not None:
        write_plots(estimates, args.plot)

    return 0 if all(estimate.ok for estimate in estimates) else 1


if __name__ == "__main__":
    sys.exit(main())
