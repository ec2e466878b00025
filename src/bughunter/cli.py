"""CLI entry point: ``bughunter serve``, ``analyze`` and ``samples``."""

from __future__ import annotations

# Phase 1: Singleton logging: before any transitive litellm imports
from bughunter.logging_config import setup_logging

setup_logging()

import argparse  # noqa: E402
import asyncio  # noqa: E402
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

from bughunter import __version__  # noqa: E402
from bughunter.config import Settings  # noqa: E402
from bughunter.constants import (  # noqa: E402
    RESULTS_EXPORT_PREFIX,
    SESSION_EXPORT_PREFIX,
)
from bughunter.export.csv_export import (  # noqa: E402
    export_results_csv,
    export_session_csv,
    write_export,
)
from bughunter.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)
from bughunter.resilience.errors import (  # noqa: E402
    InputError,
    ProtocolError,
    TransportError,
)

# Phase 2: Clear litellm's duplicate handlers after all imports
cleanup_third_party_handlers()


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"bughunter {__version__}")
        return

    if args.command == "serve":
        _run_serve(args)
    elif args.command == "analyze":
        _run_analyze(args)
    elif args.command == "samples":
        _run_samples(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bughunter",
        description="Agentic Bug Hunter: RDI bug analysis.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser(
        "serve",
        help="Run the analysis gateway HTTP service",
    )
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Bind address (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port (default: 8000)",
    )

    analyze = sub.add_parser(
        "analyze",
        help="Submit a CSV of buggy code to the gateway",
    )
    analyze.add_argument(
        "input_csv",
        type=str,
        help="CSV with an id column and a buggy code column",
    )
    analyze.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Directory for the results CSV (default: from settings)",
    )
    analyze.add_argument(
        "--gateway-url",
        default=None,
        help="Override the gateway URL from settings",
    )
    analyze.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print each analyzed record",
    )

    samples = sub.add_parser(
        "samples",
        help="Export the built-in sample bugs as CSV",
    )
    samples.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="Directory for the CSV (default: from settings)",
    )
    samples.add_argument(
        "--full",
        action="store_true",
        help="Write the full results shape instead of a session snapshot",
    )

    return parser


def _run_serve(args: argparse.Namespace) -> None:
    """Start uvicorn with the gateway app."""
    import uvicorn

    uvicorn.run("bughunter.main:app", host=args.host, port=args.port)


def _run_analyze(args: argparse.Namespace) -> None:
    """Execute the analyze command."""
    from bughunter.gateway.client import AnalysisGatewayClient
    from bughunter.ingestion.csv_reader import read_input_csv
    from bughunter.models.record import Record

    input_path = Path(args.input_csv)
    if not input_path.is_file():
        print(f"Error: {input_path} does not exist", file=sys.stderr)
        sys.exit(1)

    try:
        rows = read_input_csv(input_path.read_text(encoding="utf-8"))
    except InputError as exc:
        print(f"Error: unrecognized CSV: {exc}", file=sys.stderr)
        sys.exit(1)
    if not rows:
        print("Error: no rows with an id and buggy code", file=sys.stderr)
        sys.exit(1)

    settings = Settings()
    if args.gateway_url:
        settings = settings.model_copy(
            update={"gateway_url": args.gateway_url}
        )
    output_dir = Path(args.output_dir or settings.export_dir)
    records = [Record.from_row(r) for r in rows]

    print(f"Analyzing {len(records)} record(s) via {settings.gateway_url}")

    async def _submit() -> tuple[Record, ...]:
        async with AnalysisGatewayClient(settings) as client:
            batch = await client.submit(records)
        return batch.records

    try:
        results = asyncio.run(_submit())
    except TransportError as exc:
        print(f"Error ({exc.reason}): {exc}", file=sys.stderr)
        sys.exit(1)
    except ProtocolError as exc:
        print(f"Error: invalid gateway response: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        for record in results:
            print(
                f"  [{record.trust_score:3d}] {record.id} "
                f"({record.bug_type})"
            )

    path = write_export(
        export_results_csv(results), output_dir, RESULTS_EXPORT_PREFIX
    )
    print(f"\nDone! {len(results)} result(s) written to {path}")


def _run_samples(args: argparse.Namespace) -> None:
    """Write the canned samples as CSV."""
    from bughunter.samples import SAMPLE_RECORDS

    settings = Settings()
    output_dir = Path(args.output_dir or settings.export_dir)
    if args.full:
        path = write_export(
            export_results_csv(SAMPLE_RECORDS),
            output_dir,
            RESULTS_EXPORT_PREFIX,
        )
    else:
        path = write_export(
            export_session_csv(SAMPLE_RECORDS),
            output_dir,
            SESSION_EXPORT_PREFIX,
        )
    print(f"Wrote {len(SAMPLE_RECORDS)} sample(s) to {path}")


if __name__ == "__main__":
    main()
