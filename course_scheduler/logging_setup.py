# course_scheduler/logging_setup.py
import logging
from typing import Union


def setup_logging(level: Union[int, str] = "INFO") -> None:
    """
    Configura un único handler de consola. Llamarla varias veces no duplica
    handlers.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if root.handlers:
        root.setLevel(level)
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[console])
