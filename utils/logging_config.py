"""
Logging setup
"""

import logging


def configure_logging(config) -> None:
    """Attach one console handler to the root logger (idempotent)"""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO))

    if any(getattr(h, "_clinic_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    handler._clinic_handler = True
    root.addHandler(handler)

    # SQL echo goes through its own logger; keep it quiet unless asked for
    if not config.SQL_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
