"""
text_embedder/core/logger.py

Centralised logging configuration.
Every module should obtain its logger via:

    from text_embedder.core.logger import get_logger
    logger = get_logger(__name__)

All loggers live under the ``text_embedder`` package logger. Importing the
package never touches the root logger: the package logger only carries a
NullHandler, and records propagate to whatever the host application has
configured. Call ``enable_console_logging()`` (or set ``LOG_TO_STDOUT=true``)
to get the structured stdout output without configuring logging yourself.
"""

import logging
import sys
from typing import IO, Optional

from text_embedder.core.config import settings

PACKAGE_LOGGER = "text_embedder"
CONSOLE_HANDLER_NAME = "text_embedder.console"


def _build_handler(stream: Optional[IO[str]] = None) -> logging.StreamHandler:
    """Return a stdout handler with a structured, readable format."""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(fmt)
    return handler


def enable_console_logging(stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Attach the structured console handler to the package logger.

    Safe to call more than once; the existing handler is returned.

    Args:
        stream: Where to write; defaults to ``sys.stdout``.
    """
    package = logging.getLogger(PACKAGE_LOGGER)
    for handler in package.handlers:
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            return handler

    handler = _build_handler(stream)
    package.addHandler(handler)

    # The runtime and tokenizer libraries log through their own channels;
    # keep any Python-side chatter at warning level.
    logging.getLogger("onnxruntime").setLevel(logging.WARNING)
    logging.getLogger("tokenizers").setLevel(logging.WARNING)
    return handler


def _configure_package_logger() -> None:
    """Configure the package logger once at import time."""
    package = logging.getLogger(PACKAGE_LOGGER)
    package.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    if not any(isinstance(h, logging.NullHandler) for h in package.handlers):
        package.addHandler(logging.NullHandler())

    if settings.log_to_stdout:
        enable_console_logging()


_configure_package_logger()


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger.

    Usage
    -----
    >>> logger = get_logger(__name__)
    >>> logger.info("Embedder ready")
    """
    return logging.getLogger(name)
