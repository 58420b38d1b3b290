import logging
import sys

LOGGER_NAME = "fine_processing"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(message)s"


class Log:
    """Shared logger for the webhook server and the queue workers.

    Records carry the thread name so lines from concurrent worker loops
    (``worker-<n>``) and lock heartbeats can be told apart.
    """

    _logger: logging.Logger = logging.getLogger(LOGGER_NAME)

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level from LOG_LEVEL and attach one stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, exc_info: bool = False, **kwargs: object) -> None:
        """Log an error; pass ``exc_info=True`` inside an except block to keep the traceback."""
        cls._logger.error(message, exc_info=exc_info, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
