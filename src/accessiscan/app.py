import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from accessiscan.core.managers.config_manager import config_manager
from accessiscan.core.utils.configure_logging import configure_logger
from auditor.controllers.scan_controller import ScanController
from auditor.model import ScanMode, ScanResult
from auditor.services.report_format_service import format_text, to_json
from crawler.errors import ErrorKind, ScanError
from crawler.model import CrawlSettings
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


def _setup_windows_event_loop_if_needed() -> None:
    """Installs Windows compatible asyncio policy if possible."""
    if not sys.platform.startswith("win"):
        return
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
        logger.debug("Using WindowsSelectorEventLoopPolicy for asyncio on Windows.")
    except AttributeError as exc:  # pragma: no cover
        logger.warning("Could not set WindowsSelectorEventLoopPolicy: %s", exc)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="accessiscan", description="Web accessibility checker (WCAG)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command")

    # 1. Subcommand: SCAN
    scan_parser = subparsers.add_parser("scan", help="Scan a web page or a local HTML file")
    scan_parser.add_argument("url", nargs="?", help="URL to scan; https:// is assumed without a scheme.")
    scan_parser.add_argument("--mode", choices=[m.value for m in ScanMode], default=ScanMode.SINGLE.value,
                             help="'single' scans one page, 'full' also scans linked pages of the same site.")
    scan_parser.add_argument("--file", type=str, default=None, help="Scan a local HTML file instead of a URL.")
    scan_parser.add_argument("--json", action="store_true", help="Print the report as JSON.")
    scan_parser.add_argument("--output", type=str, default=None, help="Write the report to this file.")
    scan_parser.add_argument("--check-links", action="store_true", default=None,
                             help="Also check link targets for broken links.")
    scan_parser.add_argument("--max-pages", type=int, default=None, help="Pages per full-site scan.")

    # 2. Subcommand: SERVE
    serve_parser = subparsers.add_parser("serve", help="Start the scan API server")
    serve_parser.add_argument("--host", type=str, default=config_manager.get_nested("server.host", "127.0.0.1"))
    serve_parser.add_argument("--port", type=int, default=config_manager.get_nested("server.port", 5000))
    serve_parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode.")

    return parser


def _emit_report(result: ScanResult, as_json: bool, output: Optional[str]) -> None:
    report = to_json(result) if as_json else format_text(result)
    if output:
        Path(output).write_text(report + "\n", encoding="utf-8")
        print(f"✅ Report written to {output}")
    else:
        print(report)


def _handle_scan(parsed_args: argparse.Namespace) -> int:
    if not parsed_args.url and not parsed_args.file:
        print("❌ Provide a URL or --file.", file=sys.stderr)
        return 2

    settings = CrawlSettings.from_config(
        check_broken_links=parsed_args.check_links,
        max_pages=parsed_args.max_pages,
    )
    mode = ScanMode(parsed_args.mode)
    controller = ScanController(settings=settings, show_progress=mode == ScanMode.FULL and not parsed_args.json)

    try:
        if parsed_args.file:
            result = _scan_file(controller, parsed_args.file, parsed_args.url)
        else:
            url = UrlUtils.ensure_scheme(parsed_args.url)
            result = asyncio.run(controller.scan(url, mode))
    except ScanError as e:
        print(f"❌ Scan failed [{e.kind.value}]: {e.message}", file=sys.stderr)
        return 1

    _emit_report(result, parsed_args.json, parsed_args.output)
    return 0


def _scan_file(controller: ScanController, file_path: str, url: Optional[str]) -> ScanResult:
    """Audits local markup; the URL (default: the file URI) only labels the report."""
    path = Path(file_path)
    try:
        html = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ScanError(ErrorKind.INVALID_URL, f"Cannot read {file_path}: {e.strerror or e}") from e

    label = UrlUtils.ensure_scheme(url) if url else path.resolve().as_uri()
    page = controller.scan_html(label, html)
    return ScanResult.from_pages(label, ScanMode.SINGLE, [page])


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    parsed_args = parser.parse_args(argv)

    level = "DEBUG" if parsed_args.verbose else config_manager.get_nested("debug.level", "INFO")
    configure_logger(level, silenced_loggers=config_manager.get_nested("debug.silenced_loggers", {}))
    _setup_windows_event_loop_if_needed()

    if parsed_args.command == "scan":
        return _handle_scan(parsed_args)
    if parsed_args.command == "serve":
        # Flask is only needed for the server
        from auditor.server.app import run_server
        run_server(parsed_args.host, parsed_args.port, parsed_args.debug)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
