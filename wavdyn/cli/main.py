"""wavdyn CLI - loudness curves and A/B dynamics comparison."""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path

from wavdyn.cli.commands import HELP_TEXT, execute_command
from wavdyn.config import load_config
from wavdyn.errors import ExportError
from wavdyn.logging_config import configure_logging
from wavdyn.metrics.stats import CRITICAL_VALUES, DEFAULT_CONFIDENCE
from wavdyn.reporting.compare_report import build_compare_report, curve_summary, render_compare_text
from wavdyn.reporting.export import default_export_name
from wavdyn.runtime.session import Session
from wavdyn.types import Slot, TaskStatus
from wavdyn.version import __version__


EXIT_OK = 0
EXIT_BAD_ARGS = 2
EXIT_DECODE_ERROR = 3
EXIT_COMPARE_ERROR = 4
EXIT_INTERNAL_ERROR = 5


def _open_session(args) -> Session:
    config = load_config(getattr(args, "config", None))
    return Session(config=config)


def _failed_tasks(session: Session) -> list:
    return [
        t for t in session.pool.registry.snapshot()
        if t.state.status == TaskStatus.ERROR
    ]


def cmd_analyze(args) -> int:
    """Handle analyze command."""
    try:
        session = _open_session(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid config - {e}", file=sys.stderr)
        return EXIT_BAD_ARGS
    try:
        if args.target_lufs is not None:
            session.target_lufs = float(args.target_lufs)
        session.open_files(args.paths)
        session.wait_until_idle()

        failures = _failed_tasks(session)
        for task in failures:
            print(f"[ERROR] {task.name}: {task.state.message}", file=sys.stderr)
        for curve in session.curves:
            print(
                f"[OK] {curve.name}: duration={curve.duration:.2f}s, "
                f"points={len(curve)}, average={curve.average_dbfs:.2f} dBFS"
            )

        if args.export_dir and session.curves:
            out_dir = Path(args.export_dir)
            out_dir.mkdir(parents=True, exist_ok=True)
            for i, curve in enumerate(session.curves):
                out = session.export_curve(out_dir / default_export_name(curve), index=i)
                print(f"Exported: {out}", file=sys.stderr)

        if args.json:
            payload = {
                "target_lufs": session.target_lufs,
                "curves": [curve_summary(c) for c in session.curves],
                "errors": [{"task": t.name, "message": t.state.message} for t in failures],
            }
            print(json.dumps(payload, indent=2))
        return EXIT_DECODE_ERROR if failures else EXIT_OK
    except ExportError as e:
        print(f"Error: Export failed - {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    finally:
        session.close()


def cmd_compare(args) -> int:
    """Handle compare command."""
    try:
        session = _open_session(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid config - {e}", file=sys.stderr)
        return EXIT_BAD_ARGS
    try:
        session.target_mean_diff = float(args.target_diff)
        session.confidence = float(args.confidence)
        session.select_track(Slot.A, args.track_a)
        session.select_track(Slot.B, args.track_b)
        session.wait_until_idle()

        failures = _failed_tasks(session)
        if failures:
            for task in failures:
                print(f"[ERROR] {task.name}: {task.state.message}", file=sys.stderr)
            return EXIT_DECODE_ERROR
        if session.compare_result is None or session.verdict is None:
            print(f"Error: {session.error_msg}", file=sys.stderr)
            return EXIT_COMPARE_ERROR

        report = build_compare_report(
            session.track_a,
            session.track_b,
            session.compare_result,
            session.verdict,
            include_diff_points=args.diff_points,
        )
        if args.out:
            Path(args.out).write_text(json.dumps(report, indent=2), encoding="utf-8")
            print(f"Report written to: {args.out}", file=sys.stderr)
        print(render_compare_text(report))
        return EXIT_OK
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    finally:
        session.close()


def _print_new_log(session: Session, cursor: int, out) -> int:
    entries, cursor = session.store.read_since(cursor)
    for entry in entries:
        print(entry.format(), file=out)
    return cursor


def cmd_console(args, stdin=None, stdout=None) -> int:
    """Handle console command: read command lines until quit or EOF."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    try:
        session = _open_session(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid config - {e}", file=sys.stderr)
        return EXIT_BAD_ARGS
    print(HELP_TEXT, file=stdout)
    cursor = 0
    try:
        if args.paths:
            session.open_files(args.paths)
        interactive = stdin.isatty()
        while True:
            session.drain()
            cursor = _print_new_log(session, cursor, stdout)
            if interactive:
                print("CMD > ", end="", file=stdout, flush=True)
            line = stdin.readline()
            if not line:
                break
            outcome = execute_command(session, line.strip())
            session.drain()
            cursor = _print_new_log(session, cursor, stdout)
            if not outcome.ok:
                print(outcome.message, file=stdout)
            if outcome.quit:
                session.pool.join()
                session.drain()
                _print_new_log(session, cursor, stdout)
                return EXIT_OK
        return EXIT_OK
    finally:
        session.close()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="wavdyn",
        description="wavdyn - WAV/CSV loudness curves and A/B dynamics comparison"
    )
    parser.add_argument(
        "--version", action="version",
        version=f"wavdyn {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to analysis config JSON"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic logging level on stderr (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Build loudness curves for one or more WAV/CSV files"
    )
    analyze_parser.add_argument(
        "paths",
        nargs="+",
        help="Paths to WAV or CSV files"
    )
    analyze_parser.add_argument(
        "--target-lufs", "-t",
        type=float,
        default=None,
        help="Normalization target in average dBFS (default: from config, -23.0)"
    )
    analyze_parser.add_argument(
        "--export-dir",
        help="Write a normalized CSV export per curve into this directory"
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON summary on stdout"
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    # compare command
    compare_parser = subparsers.add_parser(
        "compare",
        help="A/B dynamic consistency check of two files"
    )
    compare_parser.add_argument("track_a", help="Reference track (WAV/CSV)")
    compare_parser.add_argument("track_b", help="Target track (WAV/CSV)")
    compare_parser.add_argument(
        "--target-diff",
        type=float,
        default=0.0,
        help="Hypothesized mean difference A-B in dB (default: 0.0)"
    )
    compare_parser.add_argument(
        "--confidence",
        type=float,
        choices=sorted(CRITICAL_VALUES),
        default=DEFAULT_CONFIDENCE,
        help="Hypothesis test confidence (default: 0.95)"
    )
    compare_parser.add_argument(
        "--out", "-o",
        help="Output path for comparison report JSON"
    )
    compare_parser.add_argument(
        "--diff-points",
        action="store_true",
        help="Include the per-point difference curve in the JSON report"
    )
    compare_parser.set_defaults(func=cmd_compare)

    # console command
    console_parser = subparsers.add_parser(
        "console",
        help="Interactive task/log console reading commands from stdin"
    )
    console_parser.add_argument(
        "paths",
        nargs="*",
        help="Files to start loading before the first prompt"
    )
    console_parser.set_defaults(func=cmd_console)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(EXIT_BAD_ARGS)


if __name__ == "__main__":
    main()
