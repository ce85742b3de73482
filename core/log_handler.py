import logging
import os
import sys

LOGGER_NAME = "otp_toolkit"
FALLBACK_LEVEL = logging.INFO


def resolve_level(level):
    """Level name or number -> logging level; unknown values fall back to INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else FALLBACK_LEVEL


def _build_logger():
    logger = logging.getLogger(LOGGER_NAME)

    # Prevent creation of handlers more than once
    if logger.handlers:
        return logger

    logger.setLevel(resolve_level(os.environ.get("OTP_LOG_LEVEL", "INFO")))

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(name)s "
        "%(message)s  (in %(filename)s:%(lineno)d)"
    )

    # ---- Console (stdout) Handler ----
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    return logger


def configure(level=None):
    """Return the package logger, optionally changing its level."""
    logger = _build_logger()
    if level is not None:
        logger.setLevel(resolve_level(level))
    return logger


log = _build_logger()
