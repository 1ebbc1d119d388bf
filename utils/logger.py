"""
Logging helpers
Every module gets its logger through get_logger so output shares one format.
"""
import logging
import sys

from config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    
    root = logging.getLogger("commerce_asi")
    root.addHandler(handler)
    root.setLevel(logging.getLevelName(settings.LOG_LEVEL.upper()))
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the shared commerce_asi namespace"""
    _configure_root()
    return logging.getLogger(f"commerce_asi.{name}")
