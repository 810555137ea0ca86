import logging
import os
from logging import Formatter, StreamHandler, getLogger
from logging.handlers import RotatingFileHandler
from logging import DEBUG, INFO, WARNING, ERROR, CRITICAL

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class ColourFormatter(Formatter):
    """Coloured console output, one colour per level."""

    LEVEL_COLOURS = [
        (DEBUG, "\x1b[40;1m"),
        (INFO, "\x1b[34;1m"),
        (WARNING, "\x1b[33;1m"),
        (ERROR, "\x1b[31m"),
        (CRITICAL, "\x1b[41m"),
    ]

    FORMATS = {
        level: Formatter(
            f"\x1b[30;1m%(asctime)s\x1b[0m {colour}%(levelname)-8s\x1b[0m "
            f"\x1b[35m%(name)s\x1b[0m %(message)s",
            "%H:%M:%S",
        )
        for level, colour in LEVEL_COLOURS
    }

    def format(self, record):
        formatter = self.FORMATS.get(record.levelno, self.FORMATS[DEBUG])
        return formatter.format(record)


class PlainFormatter(Formatter):
    """Formatter without colours, used for files and process managers."""

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-8s %(name)s %(message)s (%(filename)s:%(lineno)d)",
            "%Y-%m-%d %H:%M:%S"
        )


class SystemdFormatter(Formatter):
    """journald adds its own timestamps."""

    def __init__(self):
        super().__init__("%(levelname)s %(name)s %(message)s")


def _console_formatter() -> Formatter:
    """Pick the console formatter for the environment we are running in."""
    if os.environ.get('JOURNAL_STREAM') or os.environ.get('INVOCATION_ID'):
        return SystemdFormatter()
    if os.environ.get('PM2_HOME') or os.environ.get('NO_COLOR'):
        return PlainFormatter()
    return ColourFormatter()


def _file_handler(log_file_path, max_file_size, backup_count):
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        log_file_path,
        maxBytes=max_file_size,
        backupCount=backup_count
    )
    handler.setFormatter(PlainFormatter())
    return handler


def setup_logging(level="INFO", log_to_file=False, log_file_path="logs/pixelmind.log", max_file_size=5*1024*1024, backup_count=3):
    """
    Configure the root logger for the PixelMind client.

    Args:
        level (str): Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file (bool): Also write to a rotating log file
        log_file_path (str): Path of the log file when log_to_file is set
        max_file_size (int): Size in bytes before the file is rotated
        backup_count (int): Number of rotated files to keep

    Returns:
        logging.Logger: The root logger
    """
    console_handler = StreamHandler()
    console_handler.setFormatter(_console_formatter())
    handlers = [console_handler]

    if log_to_file:
        try:
            handlers.append(_file_handler(log_file_path, max_file_size, backup_count))
        except OSError as e:
            # Continue with console only
            print(f"Warning: Could not set up file logging at {log_file_path}: {e}")

    root_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    # Request lines from httpx are only interesting when debugging
    for name in NOISY_LOGGERS:
        getLogger(name).setLevel(DEBUG if root_level <= DEBUG else WARNING)

    return logging.getLogger()


def get_logger(name=None):
    """
    Get a module logger. Handlers are inherited from the root logger set up
    by setup_logging.

    Args:
        name (str): Logger name, normally __name__

    Returns:
        logging.Logger
    """
    return getLogger(name)
