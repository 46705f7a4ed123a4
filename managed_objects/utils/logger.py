"""Logging for the managed_objects handler and CLI.

Everything logs under the ``managed_objects`` logger, whose single
stream handler writes to stderr; in Lambda each line lands in the
function's CloudWatch log stream. Level tags are plain ``[LEVEL]`` text
unless ``LOG_COLOUR`` is set, since CloudWatch shows ANSI escapes
verbatim. The CLI colours by default (``--no-colour`` turns it off).

``handler.py`` calls ``setup_logging`` on every invocation and
``cli.py`` once per run. Repeated calls reuse the existing handler and
only update its level and formatter. Propagation is disabled so the
Lambda runtime's root handler does not print every line a second time.
Other modules only call ``get_logger``.
"""
import logging
import sys

from colorama import Fore, Style

__all__ = ["get_logger", "setup_logging"]

# ---------------------------------------------------------------------------
# Custom formatter that injects colorama colours per level
# ---------------------------------------------------------------------------

_LEVEL_COLOURS = {
    logging.DEBUG: Fore.WHITE,
    logging.INFO: Fore.CYAN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColouredFormatter(logging.Formatter):
    """Formatter that prepends (optionally coloured) level tags."""

    def __init__(self, fmt: str = "%(message)s", colour: bool = True):
        super().__init__(fmt)
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not self.colour:
            return f"[{record.levelname}] {msg}"
        colour = _LEVEL_COLOURS.get(record.levelno, "")
        return f"{colour}[{record.levelname}]{Style.RESET_ALL} {msg}"


# ---------------------------------------------------------------------------
# Module-level setup
# ---------------------------------------------------------------------------

_ROOT_LOGGER_NAME = "managed_objects"
_configured = False


def setup_logging(verbose: bool = False, quiet: bool = False, colour: bool = False) -> None:
    """Configure the root *managed_objects* logger.

    Called by the handler on each invocation, or once by the CLI.

    Args:
        verbose: If *True*, set level to ``DEBUG``.
        quiet: If *True*, set level to ``WARNING`` (overrides *verbose*).
        colour: If *True*, colour the level tags.
    """
    global _configured  # noqa: PLW0603

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(level)
    # The Lambda runtime installs its own root handler
    root.propagate = False

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setLevel(level)
        handler.setFormatter(ColouredFormatter("%(message)s", colour=colour))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the *managed_objects* namespace.

    If :func:`setup_logging` has not been called yet, a default
    ``INFO``-level configuration is applied automatically.

    Args:
        name: Typically ``__name__`` of the calling module.

    Returns:
        A :class:`logging.Logger` instance.
    """
    if not _configured:
        setup_logging()

    if not name.startswith(_ROOT_LOGGER_NAME):
        name = f"{_ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
