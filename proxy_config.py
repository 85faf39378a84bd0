"""
Configuration and logging for the website proxy.
Everything is read from the environment once, at import.
"""
import logging
import os
import sys


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Configuration
PORT = _env_int('PORT', 3000)
HOST = '0.0.0.0'
UPSTREAM_TIMEOUT = _env_int('UPSTREAM_TIMEOUT', 15)
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.environ.get('LOG_FILE')
REWRITE_FORM_RESPONSES = _env_flag('REWRITE_FORM_RESPONSES')

LOGGER_NAME = 'website_proxy'
LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level=None, log_file=None):
    """Attach console (and optional file) handlers to the proxy logger"""
    level = level or LOG_LEVEL
    log_file = log_file or LOG_FILE

    logger.setLevel(getattr(logging, level, logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_request(mode, method, url, status="→"):
    """Consistent logging format"""
    logger.info(f"[{mode.upper():8}] {status} {method:4} {url[:80]}")
