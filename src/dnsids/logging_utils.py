from __future__ import annotations

import logging

from dnsids.config import get_log_level

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or get_log_level()).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)
    # uvicorn access lines drown out analysis logs at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
