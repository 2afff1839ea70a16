"""
Services module.

Business logic services for chunked summarization, template rendering,
transcript Q&A and translation.
"""

from .qna_service import QaService
from .summarization_service import SummarizationOptions, SummarizationService
from .template_renderer import render_summary
from .translation_service import TranslationService

__all__ = [
    "QaService",
    "SummarizationOptions",
    "SummarizationService",
    "render_summary",
    "TranslationService",
]
