from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from fs_analyzer.collectors.filesystem_collector import FilesystemAnalyzer
from fs_analyzer.exceptions import ConfigError
from fs_analyzer.models.common import UsageStatus
from fs_analyzer.services.config_service import ConfigPaths, ConfigService
from fs_analyzer.services.report_service import ReportService

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fs-analyzer",
        description="Report capacity, usage and inode statistics per mount point",
    )
    parser.add_argument("--version", action="version", version=f"fs-analyzer {__version__}")
    parser.add_argument("--config", type=Path, help="JSON config file (default: XDG config dir)")
    parser.add_argument(
        "-p",
        "--path",
        dest="paths",
        action="append",
        metavar="PATH",
        help="Path to scan; repeat to scan several (replaces the platform defaults)",
    )
    parser.add_argument("--warning", type=float, help="Warning threshold in percent (default: 80)")
    parser.add_argument("--critical", type=float, help="Critical threshold in percent (default: 90)")
    parser.add_argument("--timeout", type=float, help="Timeout in seconds for each external query")
    parser.add_argument("--workers", type=int, help="Probe paths in parallel with this many threads")
    parser.add_argument(
        "--format",
        choices=["text", "json", "html"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the report to a file instead of stdout (html defaults to ~/fs_analyzer_reports/)",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration to the config file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    config_svc = ConfigService(ConfigPaths(path=args.config) if args.config else None)
    try:
        cfg = config_svc.load_config().merged(
            warning_threshold=args.warning,
            critical_threshold=args.critical,
            timeout_seconds=args.timeout,
            workers=args.workers,
            scan_paths=args.paths,
        )
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_USAGE

    if args.save_config:
        try:
            written = config_svc.save(cfg)
        except OSError as e:
            logger.error("Could not save configuration: %s", e)
            return EXIT_USAGE
        logger.info("Configuration saved to %s", written)

    analyzer = FilesystemAnalyzer(cfg)
    logger.debug("Scanning %s", ", ".join(analyzer.scan_paths))
    result = analyzer.collect()
    for note in result.data.notes:
        logger.debug(note)

    reporter = ReportService()
    if args.format == "json":
        out = json.dumps(reporter.as_dict(result), indent=2) + "\n"
    else:
        bundle = reporter.build_report(result)
        out = bundle.html if args.format == "html" else bundle.text

    target = args.output
    if target is not None or args.format == "html":
        try:
            if target is None:
                target = reporter.default_report_path()
            written = reporter.write_report(target, out)
        except OSError as e:
            logger.error("Could not write report to %s: %s", target, e)
            return EXIT_USAGE
        logger.info("Report written to %s", written)
    else:
        sys.stdout.write(out)

    if result.status is UsageStatus.OK:
        return EXIT_OK
    return EXIT_ISSUES


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
