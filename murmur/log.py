# murmur/log.py
import logging
import logging.handlers
import os

from murmur.config import LoggingSettings


def setup_logging(settings: LoggingSettings) -> None:
    """
    Configure the root logger: console output plus an optional rotating file.
    """
    level = settings.level.upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers to avoid duplication
    if root.hasHandlers():
        root.handlers.clear()

    formatter = logging.Formatter(settings.format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if settings.log_file:
        log_dir = os.path.dirname(settings.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        # Rotates at 1MB, keeps 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            settings.log_file, maxBytes=1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.getLogger(__name__).debug(
        "Logging initialized at %s (file: %s)", level, settings.log_file
    )
