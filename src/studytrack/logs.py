import logging
import os
import sys

from .config import log_dir

ROOT_LOGGER = "studytrack"
LOG_FILE = "studytrack.log"

DETAILED_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s:%(funcName)s:%(lineno)d] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _debug_enabled() -> bool:
    return os.getenv('STUDYTRACK_DEBUG', '').lower() in ('1', 'true', 'yes')


def console_level() -> int:
    """STUDYTRACK_DEBUG wins over STUDYTRACK_LOG_LEVEL; WARNING otherwise."""
    if _debug_enabled():
        return logging.DEBUG
    name = os.getenv('STUDYTRACK_LOG_LEVEL', '').upper()
    return getattr(logging, name, logging.WARNING) if name else logging.WARNING


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(console_level())
    handler.setFormatter(logging.Formatter(
        '%(levelname)-8s [%(name)s] %(message)s' if _debug_enabled()
        else '%(levelname)s: %(message)s'
    ))
    return handler


def _file_handler() -> logging.Handler:
    directory = log_dir()
    directory.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(directory / LOG_FILE, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT, DATE_FORMAT))
    return handler


def setup_logging() -> logging.Logger:
    """Attach a console handler and, when the log directory is writable, a detailed file handler."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False
    logger.addHandler(_console_handler())

    try:
        logger.addHandler(_file_handler())
    except OSError as e:
        logger.warning(f"File logging disabled: {e}")

    return logger


setup_logging()


def get_logger(name: str = None):
    """Child of the package logger, e.g. ``get_logger("store")`` -> ``studytrack.store``."""
    if name:
        return logging.getLogger(f'{ROOT_LOGGER}.{name}')
    return logging.getLogger(ROOT_LOGGER)
