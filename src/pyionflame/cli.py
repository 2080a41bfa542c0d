"""
Command line entry point.

Usage: pyionflame [equivalence_ratio] [electric_field] [refine_grid] [loglevel]
"""
import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

from .core.config import FlameConfig, RunContext
from .core.exceptions import FlameError
from .flamespeed import run_flame, sweep
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyionflame",
        description="Free ion flame speed and gap voltage under an applied electric field",
    )
    parser.add_argument("equivalence_ratio", type=float, nargs="?")
    parser.add_argument("electric_field", type=float, nargs="?")
    parser.add_argument("refine_grid", type=int, nargs="?", default=1, choices=(0, 1))
    parser.add_argument("loglevel", type=int, nargs="?", default=1)
    parser.add_argument("--mechanism", default=FlameConfig.mechanism)
    parser.add_argument("--output-dir", default=".")
    parser.add_argument("--subdir", action="store_true",
                        help="write into phi<phi>_eField<E> below the output directory")
    parser.add_argument("--fields", type=float, nargs="+",
                        help="additional field values, each run independently")
    parser.add_argument("--plot", action="store_true", help="save a profile plot")
    parser.add_argument("--log-file")
    return parser


def prompt_float(label: str, read: Callable[[str], str] = input) -> float:
    while True:
        text = read(f"Enter {label}: ")
        try:
            return float(text)
        except ValueError:
            print(f"Not a number: {text!r}")


def main(argv: Optional[List[str]] = None, read: Callable[[str], str] = input,
         context_factory: Callable[[FlameConfig], RunContext] = RunContext.cantera) -> int:
    args = build_parser().parse_args(argv)
    phi = args.equivalence_ratio
    if phi is None:
        phi = prompt_float("phi", read)
    e_field = args.electric_field
    if e_field is None:
        e_field = prompt_float("eField", read)

    setup_logging(args.loglevel, args.log_file)
    output_dir = args.output_dir
    if args.subdir:
        output_dir = os.path.join(output_dir, f"phi{phi}_eField{e_field}")

    config = FlameConfig(
        mechanism=args.mechanism,
        refine_grid=bool(args.refine_grid),
        loglevel=args.loglevel,
        output_dir=output_dir,
    )
    try:
        context = context_factory(config)
        if args.fields:
            sweep(context, [phi], [e_field] + args.fields)
        else:
            result = run_flame(context, phi, e_field)
            if args.plot:
                from .utils.visualization import FlameVisualizer
                path = os.path.join(output_dir, f"flamespeed_phi{phi:.6f}_eField{e_field:.6f}.png")
                FlameVisualizer().plot_profile(
                    result.profile, path,
                    title=f"phi = {phi}, E = {e_field} V/m, V_gap = {result.gap_voltage:.4g} V"
                )
    except FlameError as err:
        logger.error(str(err))
        logger.error("program terminating.")
        return -1
    return 0


if __name__ == "__main__":
    sys.exit(main())
