"""Logging setup shared by the API process."""

from __future__ import annotations

import logging

from asgi_correlation_id import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler whose records carry the request id."""
    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(handler, "_quote_handler", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter(uuid_length=32, default_value="-"))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._quote_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(logger_name).setLevel(level)


__all__ = ["LOG_FORMAT", "configure_logging"]
