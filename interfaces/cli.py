#!/usr/bin/env python3
import argparse, logging, signal, sys
from pathlib import Path

from core.config import SECURITY_LEVELS, load_settings
from core.errors import AnalysisAborted, StegtoolError
from core.utils import save_json, run_timestamp
from core.workspace import LOG_FORMAT, LOG_DATEFMT, VERSION
from orchestrator.orchestrator import RunOptions, process_target
from workers.batch import run_batch

LOG = logging.getLogger("stegtool")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class _Parser(argparse.ArgumentParser):
    # usage errors exit 1, not argparse's 2
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = _Parser(prog="stegtool",
                     description="Steganography & forensic analysis orchestrator",
                     epilog="Example: stegtool -i /path/to/suspicious/file.jpg")
    parser.add_argument('-i', '--interactive', action='store_true', help='menu-driven analysis')
    parser.add_argument('-b', '--batch', action='store_true', help='analyse several files one after another')
    parser.add_argument('-s', '--security', choices=SECURITY_LEVELS, help='input validation level')
    parser.add_argument('-np', '--no-progress', action='store_true', help='suppress per-tool status lines')
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')
    parser.add_argument('files', nargs='+', metavar='file')
    return parser


def console_handler(quiet=False):
    # run loggers emit DEBUG into analysis_log.txt; the console shows INFO, or WARN when quiet
    handler = logging.StreamHandler()
    handler.setLevel(logging.WARNING if quiet else logging.INFO)
    return handler


def write_batch_report(report, settings):
    path = Path(settings["output_root"]) / f"batch_report_{run_timestamp()}.json"
    try:
        save_json(path, report.as_dict())
    except OSError as e:
        LOG.error(f"Could not write batch report: {e}")
        return None
    return path


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.batch and len(args.files) != 1:
        parser.error("exactly one file is required without --batch")

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATEFMT,
                        handlers=[console_handler(args.no_progress)])
    signal.signal(signal.SIGTERM, _raise_interrupt)

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    options = RunOptions(
        interactive=args.interactive,
        batch=args.batch,
        security_level=args.security or settings["security_level"],
        progress=not args.no_progress,
        settings=settings,
    )
    if options.progress:
        print(f"🚀 Starting Steganography Analysis Tool v{VERSION}")
        print(f"Mode: {'Batch' if args.batch else 'Single'}")
        print(f"Interactive: {'Yes' if args.interactive else 'No'}")
        print(f"Security Level: {options.security_level}")

    try:
        if args.batch:
            report = run_batch(args.files, options)
            print(f"\n📋 Batch processing complete! "
                  f"{len(report.succeeded)} of {report.attempted} files analysed")
            for path, error in report.failures:
                print(f"   ❌ {path}: {error}")
            saved = write_batch_report(report, settings)
            if saved:
                print(f"   📄 Report: {saved}")
            return EXIT_OK
        process_target(args.files[0], options)
    except (KeyboardInterrupt, AnalysisAborted):
        LOG.error("Script interrupted by user")
        return EXIT_INTERRUPTED
    except StegtoolError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
