"""
Output guardrails.

Best-effort PII scrubbing of model output plus detection of canned non-answers.
Redaction is a fixed, ordered set of regex passes (emails, then phone-shaped
digit runs, then SSNs); it is not a guarantee of PII-free output. Because the
phone pass runs first, separator-formatted SSNs and long dashed dates are
claimed by it.
"""

import logging
import re
from typing import Any, NamedTuple, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
SSN_RE = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

# Applied in order; each pass sees the previous pass's output
REDACTION_PASSES: tuple[tuple[re.Pattern[str], str], ...] = (
    (EMAIL_RE, "[redacted-email]"),
    (PHONE_RE, "[redacted-phone]"),
    (SSN_RE, "[redacted-ssn]"),
)

DISALLOWED_ANSWER_PHRASES: tuple[str, ...] = (
    "i can't access the transcript",
    "i cannot access the transcript",
    "as an ai",
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RedactionResult(NamedTuple):
    """Scrubbed text and whether any pattern matched."""
    text: str
    redacted: bool


def redact_sensitive(text: str) -> RedactionResult:
    """
    Replace PII-shaped substrings with fixed markers.

    Args:
        text: Any string.

    Returns:
        RedactionResult with the scrubbed text and a flag set when any
        replacement happened.
    """
    redacted = False
    output = text
    for pattern, marker in REDACTION_PASSES:
        output, count = pattern.subn(marker, output)
        if count:
            redacted = True
    return RedactionResult(output, redacted)


def _redact_value(value: Any) -> tuple[Any, bool]:
    """Recursively redact every string leaf of dicts/lists."""
    if isinstance(value, str):
        return redact_sensitive(value)
    if isinstance(value, list):
        items = [_redact_value(item) for item in value]
        return [item for item, _ in items], any(hit for _, hit in items)
    if isinstance(value, dict):
        entries = {key: _redact_value(item) for key, item in value.items()}
        return (
            {key: item for key, (item, _) in entries.items()},
            any(hit for _, hit in entries.values()),
        )
    return value, False


def redact_model(model: ModelT) -> tuple[ModelT, bool]:
    """
    Redact every string field of a result model, at any depth.

    Returns:
        A new model of the same type and whether anything was redacted.
    """
    scrubbed, redacted = _redact_value(model.model_dump())
    if redacted:
        logger.info("Redacted sensitive content from %s", type(model).__name__)
    return type(model).model_validate(scrubbed), redacted


def contains_disallowed_answer(answer: str) -> bool:
    """Detect refusal/disclaimer answers that are polite but useless."""
    normalized = answer.lower().replace("’", "'")
    return any(phrase in normalized for phrase in DISALLOWED_ANSWER_PHRASES)
