"""
Command line entry point for FolderDiff.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading and request construction
- Ctrl+C cancellation
- Report output, export and exit codes
"""

from __future__ import annotations

import argparse
import faulthandler
import logging
import os
import signal
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, List

from folderdiff import __version__
from folderdiff.core.cancellation import CancellationToken
from folderdiff.core.errors import ComparisonCancelled, ComparisonError
from folderdiff.core.folder.comparer import CompareOptions, FolderComparer
from folderdiff.core.models import ComparisonRequest, ComparisonResult
from folderdiff.services.report import ReportOptions, export_report, render_report
from folderdiff.services.settings import ApplicationSettings, SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "folderdiff"
APP_DISPLAY_NAME = "Folder Diff"
APP_VERSION = __version__

LOGS_DIR = Path(os.environ.get('XDG_STATE_HOME', os.path.expanduser('~/.local/state'))) / APP_NAME / "logs"

# Exit codes follow diff(1): 0 same, 1 different, 2 trouble
EXIT_SAME = 0
EXIT_DIFFERENCES = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    left_path: str = ""
    right_path: str = ""
    recursive: Optional[bool] = None
    compare_contents: Optional[bool] = None
    ignore_patterns: list[str] = field(default_factory=list)
    use_default_ignores: bool = True
    swap: bool = False
    output_path: Optional[str] = None
    only_left: bool = False
    only_right: bool = False
    quiet: bool = False
    workers: Optional[int] = None
    config_file: Optional[str] = None
    reset_settings: bool = False
    log_level: str = "WARNING"
    debug: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream=None):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


_installed_handlers: list[logging.Handler] = []


def setup_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Console output goes to stderr so the report on stdout stays clean.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove handlers from a previous call
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True, stream=sys.stderr))
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    return root_logger


# =============================================================================
# Exception Handling
# =============================================================================

class ExceptionHandler:
    """Logs unhandled exceptions before the interpreter reports them."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def handle_exception(
        self,
        exc_type: type,
        exc_value: BaseException,
        exc_tb
    ) -> None:
        """Handle an unhandled exception."""
        # Don't handle keyboard interrupt
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        self.logger.critical(
            "Unhandled exception",
            exc_info=(exc_type, exc_value, exc_tb)
        )


# =============================================================================
# Command Line Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two folders and list their differences",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output lines:
  < path    only in the left folder
  > path    only in the right folder
  ! path    in both folders, contents differ
  ? path    could not be read

Examples:
  %(prog)s old/ new/                      Recursive comparison with content check
  %(prog)s --no-recursive old/ new/       Compare top-level entries only
  %(prog)s -i '*.pyc' -i build old/ new/  Ignore matching names
  %(prog)s old/ new/ -o                   Also export to diff_results.txt
        """
    )

    parser.add_argument('left', help='Left folder to compare')
    parser.add_argument('right', help='Right folder to compare')

    # Comparison options
    parser.add_argument(
        '--recursive',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Descend into subfolders (default from settings)'
    )
    parser.add_argument(
        '--contents',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Compare contents of files present in both folders (default from settings)'
    )
    parser.add_argument(
        '-i', '--ignore',
        action='append',
        default=[],
        metavar='PATTERN',
        help='Ignore entries whose name matches PATTERN (repeatable)'
    )
    parser.add_argument(
        '--no-default-ignores',
        action='store_true',
        help='Do not apply the ignore patterns from settings'
    )
    parser.add_argument(
        '-s', '--swap',
        action='store_true',
        help='Swap the left and right folders'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Number of threads used for content comparison'
    )

    # Output options
    parser.add_argument(
        '-o', '--output',
        nargs='?',
        const='',
        default=None,
        metavar='FILE',
        help='Export the report to FILE (default name from settings)'
    )
    parser.add_argument(
        '-1', '--only-left',
        action='store_true',
        help='Show only entries found only in the left folder'
    )
    parser.add_argument(
        '-2', '--only-right',
        action='store_true',
        help='Show only entries found only in the right folder'
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Do not print the report; exit status only'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Configuration file path'
    )
    parser.add_argument(
        '--reset-settings',
        action='store_true',
        help='Reset all settings to defaults'
    )

    # Logging
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode (also logs to a file)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default='WARNING',
        help='Log level'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    if parsed.workers is not None and parsed.workers < 1:
        parser.error("--workers must be at least 1")

    result = CommandLineArgs()
    result.left_path = parsed.left
    result.right_path = parsed.right
    result.recursive = parsed.recursive
    result.compare_contents = parsed.contents
    result.ignore_patterns = parsed.ignore
    result.use_default_ignores = not parsed.no_default_ignores
    result.swap = parsed.swap
    result.output_path = parsed.output
    result.only_left = parsed.only_left
    result.only_right = parsed.only_right
    result.quiet = parsed.quiet
    result.workers = parsed.workers
    result.config_file = parsed.config
    result.reset_settings = parsed.reset_settings
    result.debug = parsed.debug

    # Log level
    if parsed.debug:
        result.log_level = 'DEBUG'
    elif parsed.verbose:
        result.log_level = 'INFO'
    else:
        result.log_level = parsed.log_level

    return result


# =============================================================================
# Request / Report Construction
# =============================================================================

def build_request(args: CommandLineArgs, settings: ApplicationSettings) -> ComparisonRequest:
    """Combine persisted defaults with command line overrides."""
    comparison = settings.comparison

    patterns = set(args.ignore_patterns)
    if args.use_default_ignores:
        patterns |= set(comparison.ignore_patterns)

    request = ComparisonRequest(
        left=Path(args.left_path),
        right=Path(args.right_path),
        recursive=comparison.recursive if args.recursive is None else args.recursive,
        ignore_patterns=frozenset(patterns),
        compare_contents=comparison.compare_contents if args.compare_contents is None else args.compare_contents,
    )

    if args.swap:
        request = request.swapped()

    return request


def build_report_options(args: CommandLineArgs, settings: ApplicationSettings) -> ReportOptions:
    """Report filters; --only-left / --only-right narrow the settings."""
    options = settings.report.to_options()

    if args.only_left or args.only_right:
        options.show_left_only = args.only_left
        options.show_right_only = args.only_right
        options.show_differing = False

    return options


# =============================================================================
# Signal Handlers
# =============================================================================

def install_interrupt_handler(token: CancellationToken):
    """
    Route Ctrl+C to the cancellation token.

    Returns the previous handler, or None when not on the main thread.
    """
    if threading.current_thread() is not threading.main_thread():
        return None

    def _signal_handler(signum, frame) -> None:
        logging.info(f"Received signal {signum}, cancelling comparison...")
        token.cancel()

    return signal.signal(signal.SIGINT, _signal_handler)


def restore_interrupt_handler(previous) -> None:
    if previous is not None:
        signal.signal(signal.SIGINT, previous)


# =============================================================================
# Main Function
# =============================================================================

def run_comparison(
    request: ComparisonRequest,
    settings: ApplicationSettings,
    workers: Optional[int] = None
) -> ComparisonResult:
    """Run one comparison with Ctrl+C wired to cancellation."""
    options = CompareOptions(
        parallel_workers=workers or settings.comparison.parallel_workers,
        chunk_size=settings.comparison.chunk_size,
    )

    token = CancellationToken()
    previous = install_interrupt_handler(token)
    try:
        return FolderComparer(options).compare(request, token)
    finally:
        restore_interrupt_handler(previous)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code: 0 no differences, 1 differences, 2 error, 130 cancelled
    """
    args = parse_arguments(argv)

    if args.debug:
        faulthandler.enable()

    log_file = LOGS_DIR / f"{APP_NAME}_{datetime.now():%Y%m%d}.log" if args.debug else None
    logger = setup_logging(args.log_level, log_file)
    logger.info(f"Starting {APP_NAME} v{APP_VERSION}")

    sys.excepthook = ExceptionHandler(logger).handle_exception

    manager = SettingsManager(Path(args.config_file) if args.config_file else None)
    if args.reset_settings:
        manager.reset()
    settings = manager.settings

    request = build_request(args, settings)

    try:
        result = run_comparison(request, settings, args.workers)
    except ComparisonCancelled:
        logger.warning("Comparison cancelled by user")
        print("Comparison cancelled.", file=sys.stderr)
        return EXIT_CANCELLED
    except ComparisonError as e:
        logger.error(f"Comparison failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    report_options = build_report_options(args, settings)

    if not args.quiet:
        sys.stdout.write(render_report(result, report_options))

    if args.output_path is not None:
        output_path = Path(args.output_path or settings.report.export_filename)
        try:
            export_report(result, output_path, report_options)
        except OSError as e:
            print(f"Error: could not export report to {output_path}: {e}", file=sys.stderr)
            return EXIT_ERROR

    manager.add_recent_pair(str(request.left), str(request.right))

    return EXIT_DIFFERENCES if result.has_differences else EXIT_SAME


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == '__main__':
    sys.exit(main())
