"""CLI command for CRC32 file verification."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO

from pydantic import ValidationError

from mtsfv import __version__
from mtsfv.common import ConfigLoader, LogContext, format_crc32, setup_logging
from .api import checksum_file, checksum_stream
from .config import MTSFVConfig, VerifierConfig
from .errors import SourceReadError
from .frontend import VerificationSession
from .progress import ProgressTracker

# Application name derived from the top-level package name
_package = __package__ or "mtsfv.verifier"
APP_NAME = _package.split('.')[0]

logger = logging.getLogger(__name__)


def verify_sequential(paths: List[str], config: MTSFVConfig,
                      out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> int:
    """Checksum files one at a time in the calling thread.

    Returns:
        Number of files that failed
    """
    out = out or sys.stdout
    err = err or sys.stderr

    failed = 0
    for path in paths:
        try:
            crc = checksum_file(path, config.verifier.chunk_size)
        except SourceReadError as e:
            print(f"Error reading {path}: {e.reason}", file=err)
            failed += 1
            continue
        print(f"{path}: {format_crc32(crc)}", file=out)
    return failed


def verify_parallel(paths: List[str], config: MTSFVConfig,
                    out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> int:
    """Checksum files concurrently, then print results in argument order.

    Paths repeated on the command line are verified once.

    Returns:
        Number of files that failed
    """
    out = out or sys.stdout
    err = err or sys.stderr

    unique_paths = list(dict.fromkeys(paths))
    tracker = ProgressTracker(len(unique_paths), log_interval=config.verifier.progress_log_interval)

    with VerificationSession(config.verifier) as session:
        session.add_files(unique_paths)
        while True:
            session.refresh()
            counts = session.verification_set.counts()
            tracker.increment(
                counts["ok"] + counts["failed"] - tracker.files_done,
                failed=counts["failed"] - tracker.files_failed,
            )
            if counts["pending"] == 0:
                break
            time.sleep(config.verifier.poll_interval)

    tracker.log_final_summary()

    for path in paths:
        outcome = session.verification_set.get(path).outcome
        if outcome.ok:
            print(f"{path}: {outcome.hex}", file=out)
        else:
            print(f"Error reading {outcome.error}", file=err)

    return counts["failed"]


def verify_stdin(config: MTSFVConfig, out: Optional[TextIO] = None) -> int:
    """Checksum standard input and print it. Returns the process exit code."""
    out = out or sys.stdout
    crc = checksum_stream(sys.stdin.buffer, config.verifier.chunk_size)
    print(f"CRC32: {format_crc32(crc)}", file=out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compute CRC32 checksums of files",
        epilog=(
            "Examples:\n"
            f"  {APP_NAME} test.txt\n"
            f"  echo -n '123456789' | {APP_NAME} --stdin"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Files to checksum"
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Checksum data read from standard input"
    )
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Checksum files concurrently"
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        required=False,
        help="Bound the number of worker threads in --parallel mode (overrides config)"
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        required=False,
        help="Bytes read per chunk (overrides config)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {__version__}"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the mtsfv command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files and not args.stdin:
        parser.print_usage(sys.stdout)
        return 1

    loader = ConfigLoader(app_name=APP_NAME, config_class=MTSFVConfig)
    config = loader.load(defaults_path=args.config)

    overrides = {}
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.chunk_size is not None:
        overrides["chunk_size"] = args.chunk_size
    if overrides:
        try:
            verifier_config = VerifierConfig.model_validate({**config.verifier.model_dump(), **overrides})
        except ValidationError as e:
            parser.error(str(e))
        config = MTSFVConfig(logging=config.logging, verifier=verifier_config)

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=config.logging.log_path,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )

    mode = "stdin" if args.stdin else "parallel" if args.parallel else "sequential"
    try:
        with LogContext(logger, mode=mode):
            if args.stdin:
                return verify_stdin(config)

            if args.parallel:
                failed = verify_parallel(args.files, config)
            else:
                failed = verify_sequential(args.files, config)
        logger.info(f"Verification finished: {{'files': {len(args.files)}, 'failed': {failed}}}")
        # Per-file failures are reported but do not change the exit code
        return 0

    except KeyboardInterrupt:
        logger.info("Verification interrupted by user")
        return 130

    except SourceReadError as e:
        print(f"Error reading {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
