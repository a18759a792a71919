"""Logging setup with rich output for the CLI."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "guidelint"
DEFAULT_LEVEL = "WARNING"


def configure_logging(level: str | None = None, console: Console | None = None) -> logging.Logger:
  """Attach a RichHandler to the package logger.

  Args:
    level: Logging level name. If None, uses GUIDELINT_LOG_LEVEL or WARNING.
    console: Console to write to (default: stderr).

  Returns:
    The configured package logger.
  """
  logger = logging.getLogger(LOGGER_NAME)
  logger.setLevel((level or os.environ.get("GUIDELINT_LOG_LEVEL", DEFAULT_LEVEL)).upper())

  # Avoid adding multiple handlers if already configured
  if any(isinstance(h, RichHandler) for h in logger.handlers):
    return logger

  handler = RichHandler(
    console=console or Console(stderr=True),
    show_time=False,
    show_path=False,
    markup=False,
  )
  handler.setFormatter(logging.Formatter("%(message)s"))
  logger.addHandler(handler)
  return logger
