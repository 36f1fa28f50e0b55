"""CLI entrypoint: look up a city by postal code and find its closest neighbour."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from city_locator.common.config_loader import load_config_from_dir
from city_locator.common.constants import EXIT_HARD_FAIL, EXIT_NOT_FOUND, EXIT_SUCCESS, EXIT_USAGE
from city_locator.common.errors import LocatorError, NotFoundError, UsageError
from city_locator.common.logging import build_logger, log_event
from city_locator.pipeline.loader import load_catalog


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = _ArgumentParser(description=__doc__)
    parser.add_argument("--zip", required=True, help='postal code to query, e.g. "--zip 12345"')
    parser.add_argument("--data", default=None, help="dataset path or URL, overrides dataset.path")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--log-level", default="WARN", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--log-file", default=None, help="also append JSON log lines to this file")
    parser.add_argument("--with-distance", action="store_true")
    args = parser.parse_args(argv)
    args.zip = args.zip.strip()
    if not args.zip:
        raise UsageError('No ZIP provided, use "--zip 12345" when running the program.')
    return args


def _exit_code_for(exc: LocatorError) -> int:
    if isinstance(exc, UsageError):
        return EXIT_USAGE
    if isinstance(exc, NotFoundError):
        return EXIT_NOT_FOUND
    return EXIT_HARD_FAIL


def run_command(args: argparse.Namespace, *, stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    log_path = Path(args.log_file) if args.log_file else None
    logger = build_logger(level=args.log_level, log_path=log_path, stream=stderr)

    try:
        overlay_path = Path(args.overlay_config) if args.overlay_config else None
        config = load_config_from_dir(Path(args.config_dir), overlay_path=overlay_path)
        catalog = load_catalog(args.data or config.dataset_path, config, logger)

        city = catalog.lookup_by_postal_code(args.zip)
        closest, distance = catalog.nearest_with_distance(args.zip)
    except LocatorError as exc:
        log_event(
            logger,
            str(exc),
            level=logging.ERROR,
            stage="query",
            event="QUERY_FAIL",
            status="error",
            zip=args.zip,
            error_code=exc.error_code,
        )
        print(f"Error: {exc}", file=stderr)
        return _exit_code_for(exc)
    except Exception as exc:
        logger.exception(
            "unexpected failure",
            extra={"stage": "query", "event": "QUERY_FAIL", "status": "error", "zip": args.zip, "error_code": "UNEXPECTED_ERROR"},
        )
        print(f"Error: {exc}", file=stderr)
        return EXIT_HARD_FAIL

    log_event(logger, "query complete", stage="query", event="QUERY_END", status="ok", zip=args.zip)
    lines = [
        f"City with zipcode {args.zip}:",
        city.short_view(),
        "",
        "Closest city:",
        closest.short_view(),
    ]
    if args.with_distance:
        lines.append(f"Distance: {distance:.2f} miles")
    lines.append("")
    print("\n".join(lines), file=stdout)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    return run_command(args)


if __name__ == "__main__":
    raise SystemExit(main())
