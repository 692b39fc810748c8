"""
Logging configuration for the MuPix converter.

Terminal output goes through rich; an optional log file gets plain lines.
Conversion diagnostics are logged with their code and context attached to
the record (``extra={"diagnostic": ...}``), and ``DiagnosticContextFilter``
flattens them into ``diagnostic_code`` / ``diagnostic_context`` attributes so
the file format can show which frame and block a message concerns.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "mupix_converter"

FILE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(diagnostic_code)s %(message)s%(diagnostic_context)s"
)


class DiagnosticContextFilter(logging.Filter):
    """Expose the diagnostic carried by a record as formatter fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        diagnostic = getattr(record, "diagnostic", None)
        if diagnostic is None:
            record.diagnostic_code = "-"
            record.diagnostic_context = ""
        else:
            record.diagnostic_code = diagnostic.code.value
            context = " ".join(f"{k}={v}" for k, v in diagnostic.context.items())
            record.diagnostic_context = f" ({context})" if context else ""
        return True


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance for mupix_converter
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console = Console(stderr=True)
    show_details = level <= logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=show_details,
            # Diagnostic messages contain "[MC...]" codes, not rich markup
            markup=False,
            show_time=True,
            show_path=show_details,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.addFilter(DiagnosticContextFilter())
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'mupix_converter.aggregator')
              If None, returns the root mupix_converter logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
