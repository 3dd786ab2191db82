"""Process-wide logging setup."""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty framework/network loggers stay at WARNING unless we are debugging.
NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "asyncio",
)


def configure_logging(level: str = "info") -> None:
    """Install the root handler and level once; later calls only adjust levels."""
    app_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=app_level, format=LOG_FORMAT)
    logging.getLogger("searxng_bridge").setLevel(app_level)
    noisy_level = app_level if app_level <= logging.DEBUG else logging.WARNING
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)
