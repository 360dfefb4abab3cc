"""Process-wide logging setup, called once from the FastAPI lifespan."""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Per-statement chatter that drowns out request and ledger logs
NOISY_LOGGERS = ["sqlalchemy.engine", "asyncpg", "httpx", "httpcore"]


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
