import sys
import warnings

import loguru


class Logger:
    """Logger with stderr and optional log file support.

    Building it replaces all loguru sinks, so only the application should build it. The library modules log through
    `loguru.logger` directly and never touch the sinks.
    """

    def __init__(self, log_file=None, level="INFO"):
        self._logger = loguru.logger
        self._logger.remove()
        fmt_str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <level><n>{message}</n></level>"
        self._logger.add(sys.stderr, format=fmt_str, colorize=True, level=level)

        self._log_file = log_file
        if self._log_file is not None:
            fmt_str = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
            self._logger.add(self._log_file, format=fmt_str, level="DEBUG")
            self._logger.info(f"Logs are saved to {self._log_file}.")

    @property
    def log_file(self):
        return self._log_file

    def log(self, message, level="INFO"):
        if level not in ["DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]:
            self._logger.warning(f"Unsupported logging level: {level}. Fallback to INFO.")
            level = "INFO"
        self._logger.log(level, message)

    def debug(self, message):
        self._logger.debug(message)

    def info(self, message):
        self._logger.info(message)

    def warn(self, message):
        self._logger.warning(message)

    def error(self, message):
        self._logger.error(message)


_LOGGER = None


def get_logger(log_file=None, level=None):
    """Guarantee only one logger per process is built."""
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = Logger(log_file=log_file, level=level or "INFO")
    elif log_file is not None or level is not None:
        log_strings = []
        if log_file is not None:
            log_strings.append(f"log_file={log_file}")
        if level is not None:
            log_strings.append(f"level={level}")
        message = "Logger is already initialized. New parameters (" + ",".join(log_strings) + ") are ignored."
        warnings.warn(message)
    return _LOGGER
