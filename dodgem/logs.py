import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console(highlight=False)

log = logging.getLogger("dodgem")

FILE_FORMAT = "%(asctime)s  %(levelname)-8s  %(message)s"


def setup_logging(level: str = "INFO", log_file: Path = None) -> logging.Logger:
    """Rich console output, plus a rotating plain-text file when log_file is given."""
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    log.handlers.clear()

    log.addHandler(RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        markup=True,
        log_time_format="%H:%M:%S",
    ))

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        to_file = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=3, encoding="utf-8")
        to_file.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        log.addHandler(to_file)

    return log
