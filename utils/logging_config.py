"""
Logging setup for the POS core: one root logger writing to a daily rotated
<LOG_DIR>/pos.log and the console, with Odoo credentials and customer
contact data masked before anything is written.
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config

LOG_FORMAT = '%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "aiohttp.access")


class SecretMaskingFilter(logging.Filter):
    """Rewrites credentials, emails, phone numbers and addresses to [REDACTED_*] markers."""

    PATTERNS: list[tuple[Pattern, str]] = [
        # Odoo API keys and session tokens
        (re.compile(r'(api[_-]?(?:key|secret)["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-]{20,})(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_API_KEY]\3'),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:]{20,})(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_TOKEN]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),

        # ODOO_PASSWORD and JSON-RPC login arguments
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_PASSWORD]\3'),

        # Customer contact data
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),
        (re.compile(r'(?<![\w.])\+\d{1,3}[-.\s]?\d{3,4}[-.\s]?\d{3,4}[-.\s]?\d{0,4}\b'), '[REDACTED_PHONE]'),
        (re.compile(r'\b\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),
        (re.compile(r'(address["\']?\s*[:=]\s*["\']?)([^"\']{10,})(["\']?)', re.IGNORECASE),
         r'\1[REDACTED_ADDRESS]\3'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        # Records are rewritten, never dropped
        if record.msg:
            record.msg = self.mask(str(record.msg))
        if record.args:
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)
        return True


def _make_handler(handler: logging.Handler, level: int, mask_secrets: bool) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.setLevel(level)
    if mask_secrets:
        handler.addFilter(SecretMaskingFilter())
    return handler


def setup_logging(log_dir: str | Path | None = None):
    """Replace the root logger's handlers. Called once from PosApp.create()."""
    log_dir = Path(log_dir or config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / "pos.log",
        when="midnight",
        backupCount=config.LOG_RETENTION_DAYS,
        encoding="utf-8"
    )
    handlers = [
        _make_handler(file_handler, level, config.LOG_MASK_SECRETS),
        _make_handler(logging.StreamHandler(), level, config.LOG_MASK_SECRETS),
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(
        f"📝 Logging to {log_dir / 'pos.log'}: level={config.LOG_LEVEL}, "
        f"retention={config.LOG_RETENTION_DAYS} days, masking={'on' if config.LOG_MASK_SECRETS else 'off'}"
    )
