"""Standard library logging wiring."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger.

    Calling this more than once only updates the level.
    """

    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(getattr(h, "_graphql_api", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._graphql_api = True  # type: ignore[attr-defined]
        root.addHandler(handler)
