import logging
import sys
from pythonjsonlogger import jsonlogger
from config import settings

HANDLER_NAME = "repairx-console"


def setup_logger():
    """Setup application logger"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # uvicorn --reload and the test client re-import app.py
    if any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(HANDLER_NAME)

    if settings.ENVIRONMENT == 'production':
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s'
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
