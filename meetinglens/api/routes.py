"""
API route definitions.

HTTP endpoints for transcript summarization, Q&A, translation and language
detection. No business logic; delegates to services.

Route prefix is configurable via API_PREFIX environment variable:
- Development: /api (routes at /api/summarize, etc.)
- Production: "" (routes at /summarize, etc.)
"""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from meetinglens.config.settings import SUPPORTED_FORMATS, settings
from meetinglens.errors import ErrorKind, MeetingLensError
from meetinglens.models.schemas import (
    AskRequest,
    DetectLanguageRequest,
    DetectLanguageResponse,
    QaResult,
    SummarizeRequest,
    SummaryResult,
    TranslateRequest,
    TranslateResponse,
)
from meetinglens.services.llm_client import CompletionOptions, ModelClient, build_model_client
from meetinglens.services.qna_service import QaService
from meetinglens.services.summarization_service import SummarizationOptions, SummarizationService
from meetinglens.services.translation_service import TranslationService
from meetinglens.utils.document_labels import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

# Create router with configurable prefix from environment
router = APIRouter(prefix=settings.normalized_api_prefix, tags=["api"])

_STATUS_BY_KIND = {
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.OUTPUT_VALIDATION: 422,
}


@lru_cache
def _configured_client() -> ModelClient:
    return build_model_client(settings)


def get_model_client() -> ModelClient:
    """
    FastAPI dependency for the configured model client.

    Raises:
        HTTPException: 503 when the provider is misconfigured.
    """
    try:
        return _configured_client()
    except RuntimeError as e:
        logger.error("Model client unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e)) from e


def _http_error(exc: Exception) -> HTTPException:
    """Map pipeline errors to HTTP status codes (model/transport failures -> 503)."""
    if isinstance(exc, MeetingLensError):
        return HTTPException(status_code=_STATUS_BY_KIND[exc.kind], detail=exc.message)
    return HTTPException(status_code=503, detail=str(exc))


def _language(value: str | None) -> str:
    return (value or settings.default_language).strip() or settings.default_language


@router.get("/health")
def health() -> dict[str, str]:
    """Liveness check. Returns API status and configuration info."""
    return {
        "status": "ok",
        "environment": settings.app_env,
        "provider": settings.llm_provider,
        "api_prefix": settings.normalized_api_prefix or "(root)",
    }


@router.get("/languages")
def languages() -> dict[str, list[str] | str]:
    """Return supported label languages and summary formats."""
    return {
        "languages": sorted(SUPPORTED_LANGUAGES),
        "formats": list(SUPPORTED_FORMATS),
        "default_language": settings.default_language,
        "default_format": settings.summary_default_format,
    }


@router.post("/summarize", response_model=SummaryResult)
def summarize(request: SummarizeRequest, client: ModelClient = Depends(get_model_client)) -> SummaryResult:
    """
    Transcript (cues or raw text) → chunked summary → redacted, rendered document.

    format: markdown | xml | plain (default from SUMMARY_DEFAULT_FORMAT).
    language: label/output language; unknown languages fall back to English.
    """
    service = SummarizationService(client, SummarizationOptions.from_settings(settings))
    try:
        return service.summarize(request.transcript, _language(request.language), request.format)
    except (MeetingLensError, RuntimeError) as e:
        raise _http_error(e) from e


@router.post("/ask", response_model=QaResult)
def ask(request: AskRequest, client: ModelClient = Depends(get_model_client)) -> QaResult:
    """Answer a question from the most relevant transcript cues only."""
    service = QaService(client, max_cues=settings.qa_max_cues)
    try:
        return service.answer_question(request.question, request.transcript, _language(request.language))
    except (MeetingLensError, RuntimeError) as e:
        raise _http_error(e) from e


@router.post("/translate", response_model=TranslateResponse)
def translate(request: TranslateRequest, client: ModelClient = Depends(get_model_client)) -> TranslateResponse:
    """Translate text; English targets and blank text are returned unchanged."""
    service = TranslationService(client, CompletionOptions(temperature=0.0))
    try:
        return TranslateResponse(translated=service.translate(request.text, request.target_language))
    except (MeetingLensError, RuntimeError) as e:
        raise _http_error(e) from e


@router.post("/detect-language", response_model=DetectLanguageResponse)
def detect_language(
    request: DetectLanguageRequest, client: ModelClient = Depends(get_model_client)
) -> DetectLanguageResponse:
    """Detect the language of a text (ISO code, "en" when unsure)."""
    service = TranslationService(client, CompletionOptions(temperature=0.0))
    try:
        return DetectLanguageResponse(language=service.detect_language(request.text))
    except (MeetingLensError, RuntimeError) as e:
        raise _http_error(e) from e
