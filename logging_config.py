import logging

from config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(log_level: str | int | None = None) -> None:
    """
    Configure the root logger once for the API server and scripts.
    """
    level = log_level if log_level is not None else get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers so uvicorn reloads don't duplicate output
    if root_logger.handlers:
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    # Plaid's urllib3 pool is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
