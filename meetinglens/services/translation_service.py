"""
Translation service.

Language detection and text translation through the model client. Model
output is parsed leniently: anything unusable falls back to a safe default
(English for detection, the input text for translation) instead of raising.
"""

import logging
import re
from typing import Optional

from meetinglens.services.llm_client import CompletionOptions, ModelClient
from meetinglens.services.prompts import (
    DETECT_LANGUAGE_SYSTEM_PROMPT,
    TRANSLATE_SYSTEM_PROMPT,
    build_translate_user_prompt,
)
from meetinglens.services.result_parser import iter_json_objects
from meetinglens.utils.document_labels import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

# Shorter sources are too likely to occur inside a legitimate translation
_MIN_ECHO_LENGTH = 5


def _first_string_field(raw: str, key: str) -> str:
    for data in iter_json_objects(raw):
        value = data.get(key)
        if isinstance(value, str):
            return value
    return ""


def strip_source_text(translated: str, source: str) -> str:
    """Remove echoed copies of the source from a translation (case-insensitive)."""
    trimmed_source = source.strip()
    if len(trimmed_source) < _MIN_ECHO_LENGTH:
        return translated.strip()
    stripped = re.sub(re.escape(trimmed_source), "", translated, flags=re.IGNORECASE).strip()
    return stripped or translated.strip()


class TranslationService:
    """Detect and translate free text with the configured model."""

    def __init__(self, client: ModelClient, completion: Optional[CompletionOptions] = None) -> None:
        self.client = client
        self.completion = completion

    def detect_language(self, text: str) -> str:
        """
        Detect the language of text.

        Returns:
            Lower-case language code; "en" for blank text or unusable output.

        Raises:
            RuntimeError: Model client failure.
        """
        if not text.strip():
            return DEFAULT_LANGUAGE

        raw = self.client.complete(
            [
                {"role": "system", "content": DETECT_LANGUAGE_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            self.completion,
        )
        language = _first_string_field(raw, "language").strip().lower()
        if not language:
            logger.warning("Language detection returned no usable code; defaulting to %s", DEFAULT_LANGUAGE)
        return language or DEFAULT_LANGUAGE

    def translate(self, text: str, target_language: str) -> str:
        """
        Translate text into target_language.

        Blank text and English targets are returned unchanged without a
        model call.

        Raises:
            RuntimeError: Model client failure.
        """
        if not text.strip() or target_language.strip().lower() == DEFAULT_LANGUAGE:
            return text

        raw = self.client.complete(
            [
                {"role": "system", "content": TRANSLATE_SYSTEM_PROMPT},
                {"role": "user", "content": build_translate_user_prompt(text, target_language)},
            ],
            self.completion,
        )
        translated = _first_string_field(raw, "translated").strip()
        if not translated:
            logger.warning("Translation returned no usable text; keeping the original")
            translated = text
        return strip_source_text(translated, text)
