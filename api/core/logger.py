import logging
import logging.handlers
import os
import sys

from api.core.settings import Settings

LOG_NAME = "pytag"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_SIZE = 10 * 1024 * 1024
LOG_BACKUPS = 7


def setup_logging(settings: Settings) -> logging.Logger:
    """
    Configure the root logger from the settings.
    Safe to call more than once: handlers are only installed the first time.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level))
    if getattr(root, "pytag_handler_set", False):
        return logging.getLogger(LOG_NAME)

    formatter = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if settings.log_dir is not None:
        # rotate by size, keep a week's worth of files
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(settings.log_dir, f"{LOG_NAME}.log"), "a", LOG_SIZE, LOG_BACKUPS
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.pytag_handler_set = True
    return logging.getLogger(LOG_NAME)
