from __future__ import annotations

import logging

from defensoria.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
