"""
Command-line front end for the buffer planner.

Usage:
    trr-buffer buffer  --demands "8 12 9 0 5 0 11 7 0 4" --horizon-days 9
    trr-buffer reverse --demands "8 12 9 0 5 0 11 7 0 4" --buffer 20
    trr-buffer buffer  --file history.txt --service-level 95 --json
    trr-buffer settings --save                  # write current defaults

Demand values may be separated by spaces, commas or new lines.  Defaults
for service level, alpha, horizon, iterations, seed and workers come from
the settings file (see trr_buffer.config).

Exit codes:
    0  success
    1  unexpected error
    2  invalid input
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from trr_buffer.analytics import assess_forecast_quality
from trr_buffer.buffer_policy import calculate_buffer
from trr_buffer.config import PlannerSettings, load_settings, save_settings
from trr_buffer.domain.contracts import BufferMethod, CalculationResult, ReverseResult
from trr_buffer.domain.validation import (
    InputValidationError,
    parse_demand_text,
    require_valid,
    validate_buffer_inputs,
    validate_reverse_inputs,
)
from trr_buffer.reverse_horizon import calculate_reverse_horizon
from trr_buffer.simulation import make_rng
from trr_buffer.utils.logging_config import get_logger, setup_logging


# ============================================================
# Argument parsing
# ============================================================

def _add_common_arguments(parser: argparse.ArgumentParser, defaults: PlannerSettings) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--demands", type=str, help="Demand history, oldest first")
    source.add_argument("--file", type=str, help="Text file with the demand history")
    parser.add_argument(
        "--service-level", type=float, default=defaults.service_level_percent,
        help=f"Service level goal in %% (default: {defaults.service_level_percent})",
    )
    parser.add_argument(
        "--alpha", type=float, default=defaults.alpha,
        help=f"Croston smoothing constant (default: {defaults.alpha})",
    )
    parser.add_argument(
        "--iterations", type=int, default=defaults.iterations,
        help=f"Monte Carlo iterations (default: {defaults.iterations})",
    )
    parser.add_argument(
        "--seed", type=int, default=defaults.random_seed,
        help="Random seed (0 = random)",
    )
    parser.add_argument(
        "--workers", type=int, default=defaults.n_workers,
        help="Worker processes for Monte Carlo",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")


def build_parser(defaults: PlannerSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trr-buffer",
        description="Safety-stock buffer and maximum TRR calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--settings", type=str, help="Settings JSON file")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--log-dir", type=str, help="Directory for log files")

    sub = parser.add_subparsers(dest="command", required=True)

    buffer_parser = sub.add_parser("buffer", help="Buffer needed for a TRR")
    _add_common_arguments(buffer_parser, defaults)
    buffer_parser.add_argument(
        "--horizon-days", type=float, default=defaults.horizon_days,
        help=f"TRR / lead time in days (default: {defaults.horizon_days})",
    )

    reverse_parser = sub.add_parser("reverse", help="Maximum TRR a buffer supports")
    _add_common_arguments(reverse_parser, defaults)
    reverse_parser.add_argument("--buffer", type=float, required=True, help="Current buffer (units)")

    settings_parser = sub.add_parser("settings", help="Show or save default settings")
    settings_parser.add_argument("--save", action="store_true", help="Write defaults to the settings file")

    return parser


def _settings_path(argv: Optional[List[str]]) -> Optional[str]:
    # --settings must be known before the real parser is built (it feeds defaults)
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--settings", type=str)
    known, _ = pre.parse_known_args(argv)
    return known.settings


def _read_demands(args: argparse.Namespace) -> List[float]:
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = args.demands
    return parse_demand_text(text)


# ============================================================
# Rendering
# ============================================================

def format_buffer_result(result: CalculationResult, iterations: int) -> str:
    quality = assess_forecast_quality(result.mase, result.demand_stats.count)
    lines = [
        f"Total buffer:   {result.total_buffer:,.2f}",
        f"  Base stock:   {result.base_stock:,.2f}",
        f"  Safety stock: {result.safety_stock:,.2f}",
        "",
        f"Demand pattern: {'Predictable (normal)' if result.predictable else 'Intermittent / non-normal'}",
        f"Method:         {result.method.value}",
        f"Forecast:       {result.forecast:.3f} per period (std {result.std:.3f})",
        f"MASE:           {result.mase:.3f} ({quality.rating.value})",
        f"A-D p-value:    {result.p_value:.3f}",
    ]
    if result.method is BufferMethod.MONTE_CARLO:
        lines.append(f"Simulation:     {iterations:,} iterations")
    if result.explanation:
        lines.append(f"Note:           {result.explanation}")
    if quality.advisory:
        lines.extend(["", quality.advisory])
    return "\n".join(lines)


def format_reverse_result(
    result: ReverseResult,
    target_buffer: float,
    service_level: float,
    n_points: int,
) -> str:
    quality = assess_forecast_quality(result.mase, n_points)
    lines = [
        f"With a buffer of {target_buffer:,.2f} units you can support a TRR of up to "
        f"{result.max_horizon:.1f} days at a {service_level}% service level.",
        "",
        f"Demand pattern: {'Normal Distribution' if result.predictable else 'Intermittent / Complex'}",
        f"Methodology:    {result.explanation}",
        f"Forecast:       {result.forecast:.3f} per period (std {result.std:.3f})",
        f"MASE:           {result.mase:.3f} ({quality.rating.value})",
        f"A-D p-value:    {result.p_value:.3f}",
    ]
    if quality.advisory:
        lines.extend(["", quality.advisory])
    return "\n".join(lines)


# ============================================================
# CLI Entry Point
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    settings_path = _settings_path(argv)
    defaults = load_settings(settings_path)
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    setup_logging(log_dir=args.log_dir, verbose=args.verbose)
    logger = get_logger("trr_buffer.cli")

    if args.command == "settings":
        if args.save:
            ok = save_settings(defaults, settings_path)
            print("Settings saved." if ok else "Could not save settings.", file=sys.stdout if ok else sys.stderr)
            return 0 if ok else 1
        print(json.dumps(asdict(defaults), indent=2))
        return 0

    try:
        demands = _read_demands(args)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read demand file: {exc}", file=sys.stderr)
        return 2

    try:
        if args.command == "buffer":
            require_valid(validate_buffer_inputs(
                demands, args.service_level, args.horizon_days, args.alpha, args.iterations, args.seed,
            ))
        else:
            require_valid(validate_reverse_inputs(
                demands, args.buffer, args.service_level, args.alpha, args.iterations, args.seed,
            ))
    except InputValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    rng = make_rng(args.seed)
    workers = max(1, args.workers)

    try:
        if args.command == "buffer":
            result = calculate_buffer(
                demands, args.service_level, args.horizon_days, args.alpha, args.iterations,
                rng=rng, n_workers=workers,
            )
            output = format_buffer_result(result, args.iterations)
        else:
            result = calculate_reverse_horizon(
                demands, args.buffer, args.service_level, args.alpha, args.iterations,
                rng=rng, n_workers=workers,
            )
            output = format_reverse_result(result, args.buffer, args.service_level, len(demands))
    except Exception as exc:
        logger.exception("Calculation failed: %s", exc)
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2) if args.json else output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
