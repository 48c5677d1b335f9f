"""
Centralized logging configuration for the search simulator.
Terminal output goes through Rich; batch runs can also be mirrored to a plain log file.
"""

import logging
import sys
from rich.logging import RichHandler
from rich.console import Console
from typing import Optional

def setup_logging(
    level: str = "INFO",
    use_rich: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Set up consistent logging for the simulator.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        use_rich: Whether to use Rich's colored output
        log_file: Optional path; when given, records are also appended there as plain text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    plain_formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    if use_rich:
        console = Console(file=sys.stderr)  # stderr keeps stdout free for result tables

        handler = RichHandler(
            console=console,
            level=numeric_level,
            show_time=True,
            show_level=True,
            show_path=True,
            enable_link_path=True,
            rich_tracebacks=True,
            markup=False,
            log_time_format="[%H:%M:%S]"
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(plain_formatter)

    handler.setLevel(numeric_level)
    root_logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(plain_formatter)
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging configured: level={level}, rich={use_rich}, file={log_file}")

def setup_prod_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Plain output for long batch runs."""
    setup_logging(level=level, use_rich=False, log_file=log_file)
