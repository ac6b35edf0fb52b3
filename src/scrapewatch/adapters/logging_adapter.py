import logging

from scrapewatch.core.interfaces.logging import LoggingPort
from scrapewatch.core.logging_config import coerce_level


class LoggingAdapter(LoggingPort):
    """Concrete logging adapter.

    Delegates to Python's logging and adds no handlers of its own;
    `configure_logging` owns the sinks. The job id is injected by the root
    handlers' filter, so this class only emits.
    """

    def __init__(self, name: str = "scrapewatch", log_level: int | str = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(coerce_level(log_level))
        # Let records bubble up to the root handlers
        self.logger.propagate = True

    def info(self, msg: str, *args):
        self.logger.info(msg, *args)

    def warning(self, msg: str, *args):
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args):
        self.logger.error(msg, *args)

    def debug(self, msg: str, *args):
        self.logger.debug(msg, *args)
