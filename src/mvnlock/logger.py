"""Functions for logging."""

import logging

# chatty third-party loggers that are only interesting when debugging
_QUIET_LOGGERS = ("urllib3", "requests")


def setup_logger(level: str) -> None:
    """Configure root logger for the application so all modules log to stderr.

    HTTP client libraries only log at debug level when mvnlock itself does.
    """
    level_name = level.upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    # Remove all handlers associated with the root logger (avoid duplicate logs)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root_logger.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level_value <= logging.DEBUG else logging.WARNING)
