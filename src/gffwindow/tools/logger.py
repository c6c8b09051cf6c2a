import logging
import sys

LOGGER_NAME = "gffwindow"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def get_logger() -> logging.Logger:
    """
    Logger for progress messages. Output lines go to stdout, so messages
    are written to stderr through a single handler attached on first use.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def verbosity_level(verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def set_verbosity(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Apply the CLI ``--verbose`` / ``--quiet`` switches to the progress logger."""
    logger = get_logger()
    logger.setLevel(verbosity_level(verbose, quiet))
    return logger
