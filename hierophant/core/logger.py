"""
Logging setup shared by services and infrastructure.
"""

import logging
import sys

from hierophant.core.config import get_settings

_ROOT_NAME = "hierophant"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if get_settings().DEBUG else logging.INFO)
    return root


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Module loggers under the ``hierophant`` namespace propagate to the package
    logger, which owns the only handler.
    """
    _configure_root()
    return logging.getLogger(name)


logger = _configure_root()
