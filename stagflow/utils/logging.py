"""Logging setup for stagflow (loguru).

The package disables its own loguru messages on import, as libraries
should; ``setup_logging`` installs a handler and re-enables them.
"""

import sys
from loguru import logger

_FORMAT_TIME = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FORMAT_PLAIN = (
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level="INFO", show_time=True, sink=None):
    """Configure loguru for the project.
    
    Parameters
    ----------
    level : str
        Logging level (DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)
    show_time : bool
        Whether to show timestamps in the output.
    sink : file-like or str, optional
        Destination of the messages. Defaults to stderr.
    """
    logger.remove()
    logger.add(
        sys.stderr if sink is None else sink,
        format=_FORMAT_TIME if show_time else _FORMAT_PLAIN,
        level=level,
        colorize=sink is None,
    )
    logger.enable("stagflow")
    return logger
