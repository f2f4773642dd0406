"""
Logging configuration for SimpananKu

Console output plus a rotating file under the config directory. Every record
passes through `SecretFilter`, so callback URLs that end up in a message never
write their tokens or authorization code to disk.
"""

import os
import re
import sys
import logging
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler


LOG_FILE_NAME = "simpananku.log"
LOG_LEVEL_ENV = "SIMPANANKU_LOG_LEVEL"

_SECRET_PARAMS = re.compile(r"\b(access_token|refresh_token|provider_token|code|code_verifier)=([^&#\s]+)")


def redact(text: str) -> str:
    return _SECRET_PARAMS.sub(r"\1=***", text)


class SecretFilter(logging.Filter):
    """Masks OAuth secrets in the rendered message"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(log_dir: Path, log_level: Optional[str] = None):
    """Setup logging; the level falls back to $SIMPANANKU_LOG_LEVEL, then INFO"""
    log_dir.mkdir(parents=True, exist_ok=True)
    level_name = (log_level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.handlers.clear()

    secret_filter = SecretFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    console_handler.addFilter(secret_filter)
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
    ))
    file_handler.addFilter(secret_filter)
    root_logger.addHandler(file_handler)

    # Qt event loop integration and HTTP internals are chatty at DEBUG
    for noisy in ('aiohttp', 'asyncio', 'qasync'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging to {log_dir / LOG_FILE_NAME} at {level_name}")
