from .logger import LogConfig, NAMESPACE, get_logger, setup_logging  # noqa: F401

__all__ = ["LogConfig", "NAMESPACE", "get_logger", "setup_logging"]

import logging as _logging

_logging.getLogger(NAMESPACE).addHandler(_logging.NullHandler())
