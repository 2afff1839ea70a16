"""
Logging utilities.

Application logging setup plus a filter that scrubs personal data and
credentials out of every record before it is emitted.
"""

import hashlib
import logging
import re

from meetinglens.utils.env_utils import get_log_hash_salt

APP_LOGGER_NAME = "meetinglens"
MAX_MESSAGE_LENGTH = 2000

# Applied in order
LOG_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}", re.IGNORECASE), "[REDACTED_EMAIL]"),
    (re.compile(r"https?://\S+", re.IGNORECASE), "[REDACTED_URL]"),
    (re.compile(r"Bearer\s+[A-Za-z0-9\-_.=]+", re.IGNORECASE), "Bearer [REDACTED_TOKEN]"),
    (re.compile(r"\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\b"), "[REDACTED_TOKEN]"),
    (re.compile(r"\+?\d[\d\s().-]{7,}\d"), "[REDACTED_PHONE]"),
    (re.compile(r"\b\d{6,}\b"), "[REDACTED_ID]"),
)


def redact_log_text(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Scrub PII/credential patterns and truncate to max_length characters."""
    for pattern, marker in LOG_REDACTIONS:
        text = pattern.sub(marker, text)
    if len(text) > max_length:
        return f"{text[:max_length]}..."
    return text


def hash_identifier(value: str | None) -> str:
    """Stable, salted 16-hex-char digest for correlating ids in logs."""
    if not value:
        return "unknown"
    salt = get_log_hash_salt()
    return hashlib.sha256(f"{salt}:{value}".encode("utf-8")).hexdigest()[:16]


class RedactingFilter(logging.Filter):
    """
    Rewrite each record's message with sensitive substrings removed.

    The message is formatted once (msg % args), scrubbed, and stored back
    with args cleared so handlers see only the redacted text.
    """

    def __init__(self, max_length: int = MAX_MESSAGE_LENGTH) -> None:
        super().__init__()
        self.max_length = max_length

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Mismatched format args; keep the raw template rather than fail the caller
            message = str(record.msg)
        record.msg = redact_log_text(message, self.max_length)
        record.args = None
        return True


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Configure the application logger once.

    Attaches a stream handler with the redacting filter to the
    "meetinglens" logger. Repeat calls only update the level.

    Returns:
        The application logger.
    """
    logger = logging.getLogger(APP_LOGGER_NAME)
    resolved = level if isinstance(level, int) else logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)
    logger.setLevel(resolved)
    return logger
