from .logging import setup_logging, logger

__all__ = ['setup_logging', 'logger']
