"""Command-line front end for the resistor calculator."""

import argparse
import logging
import sys
from typing import List, Optional

from resistor_calc import config
from resistor_calc.calc import RCalc
from resistor_calc.constraints import ConstraintBuilder
from resistor_calc.errors import (
    DegenerateSearchError,
    EvaluationError,
    NoAcceptableCombinationError,
    ParseError,
    SearchSpaceTooLargeError,
)
from resistor_calc.series import STANDARD_SERIES

logger = logging.getLogger(__name__)

EXAMPLE = """\
example (adjustable regulator, VOUT 6 V to 12 V with a 0.8 V reference):
  resistor-calc -s E24 E6 E24 \\
      -b "R1+R2+R3 <= 1e6" -b "R1+R2+R3 >= 1e4" \\
      -b "0.8 * (1 + R1/R3) ~ 6.0" -b "0.8 * (1 + (R1+R2)/R3) ~ 12.0"
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='resistor-calc',
        description='Find standard resistor values that best satisfy a set of bounds.',
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('-s', '--series', nargs='+', required=True, metavar='SERIES',
                        type=str.upper, choices=list(STANDARD_SERIES),
                        help='series for each slot, in order (R1 first)')
    parser.add_argument('-b', '--bound', action='append', required=True, dest='bounds', metavar='BOUND',
                        help="relation such as 'R1+R2 <= 1e6' or '0.8*(1+R1/R2) ~ 5' (repeatable)")
    parser.add_argument('--names', nargs='+', metavar='NAME',
                        help='variable name per slot (default R1 R2 ...)')
    parser.add_argument('-n', '--top', type=int, default=config.DEFAULT_TOP_K,
                        help='number of matches to print (default: %(default)s)')
    parser.add_argument('--all-best', action='store_true',
                        help='print every match sharing the lowest error instead of --top')
    parser.add_argument('--notation', choices=('rkm', 'eng'), default='rkm',
                        help="value notation: 'rkm' (4K7) or 'eng' (4.7kΩ)")
    parser.add_argument('-w', '--workers', type=int, default=config.DEFAULT_WORKERS,
                        help='scoring threads (default: %(default)s)')
    parser.add_argument('--chunk-size', type=int, default=config.DEFAULT_CHUNK_SIZE,
                        help='combinations per chunk (default: %(default)s)')
    parser.add_argument('--timeout', type=float, default=None,
                        help='stop after this many seconds and show partial results')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    try:
        rcalc = RCalc(args.series, names=args.names)
    except ValueError as e:
        parser.error(str(e))

    try:
        builder = ConstraintBuilder(variables=rcalc.names)
        for text in args.bounds:
            builder.bound(text)
        constraints = builder.finish()
    except ParseError as e:
        print(f"error: {e}\n{e.pointer()}", file=sys.stderr)
        return 2
    except EvaluationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(f"Number of combinations: {rcalc.combinations()}")

    try:
        res = rcalc.calc(
            constraints,
            workers=args.workers,
            chunk_size=args.chunk_size,
            keep=None if args.all_best else args.top,
            timeout=args.timeout,
        )
    except (DegenerateSearchError, NoAcceptableCombinationError, SearchSpaceTooLargeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except EvaluationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if not res.complete:
        print(f"Search stopped early: explored {res.explored} of {res.total} combinations")

    if args.all_best:
        print(res.format_best(notation=args.notation), end='')
    else:
        print(res.format_top(args.top, notation=args.notation), end='')
    return 0


if __name__ == '__main__':
    sys.exit(main())
