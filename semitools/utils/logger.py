import logging
import sys
from typing import Union

from semitools.core.config import LOG_FORMAT

# Third-party loggers that flood INFO output on every Streamlit rerun
QUIET_LOGGERS = ("matplotlib", "PIL", "urllib3")


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configures the root logger for the calculator suite.
    Accepts a numeric level or a level name such as 'DEBUG'.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger with the specified name.
    """
    return logging.getLogger(name)
