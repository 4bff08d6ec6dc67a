"""
Command line interface of shiftmi.

Reads two series from text or raw binary files, scans their mutual
information over a range of shifts and writes the result as delimited text.

Usage::

    shiftmi PATH1 PATH2 [-f FROM] [-t TO] [-s STEP] [-a BINS_X] [-c BINS_Y]
                        [-n MIN1] [-m MAX1] [-N MIN2] [-M MAX2]
                        [-b [-B SAMPLES] [-R REPETITIONS] [--seed SEED]]
                        [-d DELIMITER] [-p {0,32,64}] [-o OUTFILE] [-j N_JOBS]
"""

import argparse
import logging
import sys

import numpy as np

from . import __version__
from .exceptions import ShiftMIError
from .shifts.bootstrap import (
    DEFAULT_BOOTSTRAP_REPETITIONS,
    DEFAULT_BOOTSTRAP_SAMPLES,
    shifted_mutual_information_with_bootstrap,
)
from .shifts.scan import (
    DEFAULT_BINS,
    DEFAULT_SHIFT_FROM,
    DEFAULT_SHIFT_STEP,
    DEFAULT_SHIFT_TO,
    shifted_mutual_information,
)

logger = logging.getLogger(__name__)

# Input precision codes: 0 is delimited text, the others raw little-endian floats.
BINARY_DTYPES = {32: "<f4", 64: "<f8"}


def load_series(path, delimiter=" ", precision=0):
    """
    Read one series from a file.

    Parameters
    ----------
    path : str or path-like
        Input file.
    delimiter : str, default=' '
        Separator between values of a text file. Line breaks also separate
        values; surrounding whitespace is ignored.
    precision : {0, 32, 64}, default=0
        0 reads delimited text, 32 and 64 read raw little-endian float32 or
        float64 values.

    Returns
    -------
    ndarray
        float64 for text input, float32/float64 for binary input.
    """
    if precision in BINARY_DTYPES:
        file_dtype = np.dtype(BINARY_DTYPES[precision])
        return np.fromfile(path, dtype=file_dtype).astype(file_dtype.newbyteorder("="))
    if precision != 0:
        raise ValueError(f"precision must be 0, 32 or 64, got {precision}")

    with open(path) as f:
        text = f.read()
    if delimiter.isspace():
        tokens = text.split()
    else:
        tokens = [t.strip() for line in text.splitlines() for t in line.split(delimiter)]
        tokens = [t for t in tokens if t]
    try:
        return np.array(tokens, dtype=np.float64)
    except ValueError as e:
        raise ValueError(f"Could not parse numeric values from {path}: {e}") from e


def write_result(result, stream, delimiter=" "):
    """Write a 1-D result as one line, a 2-D result as one line per row."""
    rows = np.atleast_2d(result)
    for row in rows:
        stream.write(delimiter.join(repr(float(v)) for v in row))
        stream.write("\n")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="shiftmi",
        description="Calculates mutual information by shifting over two data vectors.",
    )
    parser.add_argument("path1", help="first data vector")
    parser.add_argument("path2", help="second data vector")
    parser.add_argument(
        "-f", "--shift-from", type=int, default=DEFAULT_SHIFT_FROM,
        help=f"minimum shift of second data vector against first one (default: {DEFAULT_SHIFT_FROM})",
    )
    parser.add_argument(
        "-t", "--shift-to", type=int, default=DEFAULT_SHIFT_TO,
        help=f"maximum shift of second data vector against first one (default: {DEFAULT_SHIFT_TO})",
    )
    parser.add_argument(
        "-s", "--shift-step", type=int, default=DEFAULT_SHIFT_STEP,
        help=f"distance between consecutive shifts (default: {DEFAULT_SHIFT_STEP})",
    )
    parser.add_argument(
        "-a", "--bins-x", type=int, default=DEFAULT_BINS,
        help=f"number of bins on the x-axis of the joint histogram (default: {DEFAULT_BINS})",
    )
    parser.add_argument(
        "-c", "--bins-y", type=int, default=DEFAULT_BINS,
        help=f"number of bins on the y-axis of the joint histogram (default: {DEFAULT_BINS})",
    )
    parser.add_argument("-n", "--min1", type=float, default=None,
                        help="minimum value to consider in first data vector")
    parser.add_argument("-m", "--max1", type=float, default=None,
                        help="maximum value to consider in first data vector")
    parser.add_argument("-N", "--min2", type=float, default=None,
                        help="minimum value to consider in second data vector")
    parser.add_argument("-M", "--max2", type=float, default=None,
                        help="maximum value to consider in second data vector")
    parser.add_argument("-b", "--bootstrap", action="store_true",
                        help="use bootstrapping for histograms")
    parser.add_argument(
        "-B", "--samples", type=int, default=DEFAULT_BOOTSTRAP_SAMPLES,
        help=f"number of sampled histograms for bootstrapping (default: {DEFAULT_BOOTSTRAP_SAMPLES})",
    )
    parser.add_argument(
        "-R", "--repetitions", type=int, default=DEFAULT_BOOTSTRAP_REPETITIONS,
        help=f"bootstrap estimates per shift (default: {DEFAULT_BOOTSTRAP_REPETITIONS})",
    )
    parser.add_argument("--seed", type=int, default=None,
                        help="seed of the bootstrap random streams")
    parser.add_argument("-d", "--delimiter", default=" ",
                        help="delimiter between values in text files (default: space)")
    parser.add_argument(
        "-p", "--precision", type=int, choices=(0, 32, 64), default=0,
        help="input format: 0 delimited text (default), 32 raw float, 64 raw double",
    )
    parser.add_argument("-o", "--outfile", default=None,
                        help="write results to this file (default: stdout)")
    parser.add_argument("-j", "--n-jobs", type=int, default=1,
                        help="number of parallel workers, -1 for all cores (default: 1)")
    parser.add_argument("--progress", action="store_true", help="show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    """Entry point of the ``shiftmi`` console script. Returns the exit status."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        series_x = load_series(args.path1, args.delimiter, args.precision)
        series_y = load_series(args.path2, args.delimiter, args.precision)
        logger.debug(f"Loaded {series_x.shape[0]} and {series_y.shape[0]} samples")

        common = dict(
            shift_from=args.shift_from,
            shift_to=args.shift_to,
            bins_x=args.bins_x,
            bins_y=args.bins_y,
            range_x=(args.min1, args.max1),
            range_y=(args.min2, args.max2),
            series_x=series_x,
            series_y=series_y,
            shift_step=args.shift_step,
            n_jobs=args.n_jobs,
            enable_progressbar=args.progress,
        )
        if args.bootstrap:
            result = shifted_mutual_information_with_bootstrap(
                nr_samples=args.samples,
                nr_repetitions=args.repetitions,
                seed=args.seed,
                **common,
            )
        else:
            result = shifted_mutual_information(**common)

        if args.outfile is None:
            write_result(result, sys.stdout, args.delimiter)
        else:
            with open(args.outfile, "w") as f:
                write_result(result, f, args.delimiter)
    except (ShiftMIError, ValueError, TypeError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
