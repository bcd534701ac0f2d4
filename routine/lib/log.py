import logging
import sys

from routine import config

__all__ = ["setup_logging"]

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def setup_logging(verbose: bool = False) -> None:
    """Route package logs to stderr at the configured level (-v forces DEBUG)."""
    global _handler
    level = logging.DEBUG if verbose else getattr(logging, config.get_log_level())
    root = logging.getLogger("routine")
    root.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(_handler)
