import logging
import os

from cafe_finder.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging():
    """Configure the root logger: console always, file when LOG_DIR is set."""
    handlers = [logging.StreamHandler()]
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(
            logging.FileHandler(
                os.path.join(settings.LOG_DIR, settings.APP_LOG_FILENAME)
            )
        )
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT, handlers=handlers
    )
