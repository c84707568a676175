"""
Logging setup for the translation_sync package.

Modules never configure logging themselves; each one calls
`logging.getLogger(__name__)`, which gives a child of the `translation_sync`
package logger (for example `translation_sync.xliff_unpacker`). Records from
those children propagate up to the package logger, so the handlers that
`setup_logger` attaches there (a UTF-8 log file and, optionally, the console)
receive every module's output with its module name in the `%(name)s` field.
The package logger itself does not propagate to the root logger, which keeps
the host application's logging configuration separate.
"""
import logging
import os
import sys
from logging import Handler

from tqdm import tqdm

PACKAGE_LOGGER_NAME = "translation_sync"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class TqdmLoggingHandler(Handler):
    """
    Logging handler that writes through tqdm.write so log lines do not
    break the progress bar of a folder unpack.
    """
    def __init__(self, level=logging.NOTSET):
        super().__init__(level)

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def setup_logger(log_level_str: str, log_file_path: str, log_to_console: bool) -> logging.Logger:
    """
    Configure the package logger that every translation_sync module logs through.

    Args:
        log_level_str: The logging level as a string (e.g., 'INFO', 'DEBUG').
        log_file_path: The path to the log file; its folder is created if needed.
        log_to_console: Whether to also log to stderr.

    Returns:
        The configured logger instance.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level_str.upper(), logging.INFO))

    # Reconfiguring must not stack handlers.
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT)

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if log_to_console:
        tqdm_handler = TqdmLoggingHandler()
        tqdm_handler.setFormatter(formatter)
        logger.addHandler(tqdm_handler)

    return logger
