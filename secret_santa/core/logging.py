import sys
from typing import List

from loguru import logger

from secret_santa.core.config import Settings

CONSOLE_FORMAT = "<level>{level: <8}</level> | {message}"
FILE_FORMAT = "{time} | {level} | {name}:{function}:{line} | {message}"


def _own_records(record) -> bool:
    return record["name"].startswith("secret_santa")


def setup_logging(settings: Settings) -> List[int]:
    """Route draw logs to stderr and, when ``settings.log_path`` is set, to a rotating file.

    The file sink keeps full DEBUG detail of this package only, so weight
    downscaling and candidate registration can be audited after a draw.
    """
    logger.remove()
    handlers = [logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT)]
    if settings.log_path:
        handlers.append(
            logger.add(
                settings.log_path,
                level="DEBUG",
                format=FILE_FORMAT,
                filter=_own_records,
                rotation="100 KB",
                compression="zip",
            )
        )
    return handlers
