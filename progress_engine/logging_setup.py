import os
import sys

from loguru import logger


def setup_logging() -> None:
    from progress_engine.config import settings

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_path:
        log_dir = os.path.dirname(settings.log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        logger.add(settings.log_path, rotation="10 MB", level=settings.log_level)
