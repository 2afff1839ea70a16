"""
Summarization service.

Meeting summary pipeline for transcripts of any length:

  Validate -> Flatten -> Chunk -> PerChunkComplete* -> Merge -> Redact -> Render

PHASE 1: Chunk-Level Extraction
  - Transcript split into token-budgeted, overlapping chunks
  - One model call per chunk, parsed with the tolerant result parser
  - Optional ordered fan-out on a thread pool

PHASE 2: Deterministic Merge
  - Partial summaries merged structurally, no extra model call
  - Stable tie-breaks (first non-blank wins, chunk order kept)

The merged result is redacted and rendered into the seven-section document.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from meetinglens.errors import InvalidRequestError, OutputValidationError
from meetinglens.models.schemas import (
    ChunkedText,
    MeetingHeader,
    SummaryLimits,
    SummaryNextSteps,
    SummaryPartySteps,
    SummaryPathForward,
    SummaryResult,
    SummaryTemplateData,
    SummaryTopic,
    TranscriptContent,
)
from meetinglens.services.chunking import chunk_text
from meetinglens.services.guardrails import redact_model
from meetinglens.services.llm_client import CompletionOptions, ModelClient
from meetinglens.services.prompts import build_summary_system_prompt, build_summary_user_prompt
from meetinglens.services.result_parser import parse_summary
from meetinglens.services.template_renderer import SUPPORTED_FORMATS, render_summary

logger = logging.getLogger(__name__)


# ============================================
# Options
# ============================================

@dataclass(frozen=True)
class SummarizationOptions:
    """Chunking, fan-out and rendering knobs for one service instance."""
    max_tokens_per_chunk: int = 1500
    overlap_tokens: int = 150
    max_chunks: int = 6
    parallelism: int = 1
    limits: SummaryLimits = field(default_factory=SummaryLimits)
    default_format: str = "xml"
    completion: Optional[CompletionOptions] = None

    @classmethod
    def from_settings(cls, settings) -> "SummarizationOptions":
        return cls(
            max_tokens_per_chunk=settings.summary_max_tokens_per_chunk,
            overlap_tokens=settings.summary_overlap_tokens,
            max_chunks=settings.summary_max_chunks,
            parallelism=settings.effective_parallelism,
            limits=settings.summary_limits,
            default_format=settings.summary_default_format,
        )


# ============================================
# Flatten
# ============================================

def flatten_transcript(content: TranscriptContent) -> str:
    """
    Turn transcript content into plain text.

    Cues win over raw text: one "[speaker] text" line per cue, speaker prefix
    omitted when absent.
    """
    if not content.cues:
        return content.raw
    lines = []
    for cue in content.cues:
        speaker = f"[{cue.speaker}] " if cue.speaker else ""
        lines.append(f"{speaker}{cue.text}".strip())
    return "\n".join(lines)


# ============================================
# Merge
# ============================================

def _first_non_blank(values) -> str:
    for value in values:
        if value and value.strip():
            return value
    return ""


def _dedupe(values: list[str]) -> list[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def merge_topics(topics: list[SummaryTopic]) -> list[SummaryTopic]:
    """
    Merge detailed topics by exact trimmed name.

    Blank-named topics are kept as-is and never merged. On a name collision
    scalar fields take the first non-blank value and observations concatenate.
    """
    merged: list[SummaryTopic] = []
    by_name: dict[str, int] = {}

    for topic in topics:
        name = topic.topic.strip()
        if not name:
            merged.append(topic.model_copy(deep=True))
            continue
        if name not in by_name:
            by_name[name] = len(merged)
            merged.append(topic.model_copy(deep=True))
            continue

        existing = merged[by_name[name]]
        merged[by_name[name]] = existing.model_copy(update={
            "issue_description": _first_non_blank([existing.issue_description, topic.issue_description]),
            "root_cause": _first_non_blank([existing.root_cause, topic.root_cause]),
            "impact": _first_non_blank([existing.impact, topic.impact]),
            "observations": existing.observations + topic.observations,
        })

    return merged


def merge_template_data(partials: list[Optional[SummaryTemplateData]]) -> Optional[SummaryTemplateData]:
    """Merge per-chunk template data; None only when no chunk supplied any."""
    present = [data for data in partials if data is not None]
    if not present:
        return None

    headers = [data.meeting_header for data in present]
    paths = [data.path_forward for data in present]
    party_a = [data.next_steps.party_a for data in present]
    party_b = [data.next_steps.party_b for data in present]

    return SummaryTemplateData(
        meeting_header=MeetingHeader(
            meeting_title=_first_non_blank(h.meeting_title for h in headers),
            companies_parties=_first_non_blank(h.companies_parties for h in headers),
            date=_first_non_blank(h.date for h in headers),
            duration=_first_non_blank(h.duration for h in headers),
            link_reference=_first_non_blank(h.link_reference for h in headers),
        ),
        action_items_detailed=[item for data in present for item in data.action_items_detailed],
        meeting_purpose=_first_non_blank(data.meeting_purpose for data in present),
        key_points_detailed=[point for data in present for point in data.key_points_detailed],
        topics_detailed=merge_topics([topic for data in present for topic in data.topics_detailed]),
        path_forward=SummaryPathForward(
            definition_of_success=_first_non_blank(p.definition_of_success for p in paths),
            agreed_next_attempt=_first_non_blank(p.agreed_next_attempt for p in paths),
            decision_point=_first_non_blank(p.decision_point for p in paths),
            checkpoint_date=_first_non_blank(p.checkpoint_date for p in paths),
        ),
        next_steps=SummaryNextSteps(
            party_a=SummaryPartySteps(
                name=_first_non_blank(p.name for p in party_a),
                steps=[step for p in party_a for step in p.steps],
            ),
            party_b=SummaryPartySteps(
                name=_first_non_blank(p.name for p in party_b),
                steps=[step for p in party_b for step in p.steps],
            ),
        ),
    )


def merge_summaries(partials: list[SummaryResult]) -> SummaryResult:
    """
    Merge partial chunk summaries into one result, in chunk order.

    Args:
        partials: Non-empty list of per-chunk results.

    Returns:
        The single partial unchanged, or the structural merge of all of them.
    """
    if not partials:
        raise InvalidRequestError("No partial summaries to merge.")
    if len(partials) == 1:
        return partials[0]

    return SummaryResult(
        summary=" ".join(p.summary for p in partials),
        key_points=[item for p in partials for item in p.key_points],
        action_items=[item for p in partials for item in p.action_items],
        decisions=[item for p in partials for item in p.decisions],
        topics=_dedupe([item for p in partials for item in p.topics]),
        template_data=merge_template_data([p.template_data for p in partials]),
    )


# ============================================
# Service
# ============================================

class SummarizationService:
    """Chunked, merged, redacted and rendered meeting summaries."""

    def __init__(self, client: ModelClient, options: Optional[SummarizationOptions] = None) -> None:
        self.client = client
        self.options = options or SummarizationOptions()

    def _summarize_chunk(self, chunk: ChunkedText, system_prompt: str, total: int) -> SummaryResult:
        logger.info("Summarizing chunk %d/%d (%d chars)", chunk.index + 1, total, len(chunk.text))
        raw = self.client.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": build_summary_user_prompt(chunk.text)},
            ],
            self.options.completion,
        )
        return parse_summary(raw)

    def _summarize_chunks(self, chunks: list[ChunkedText], system_prompt: str) -> list[SummaryResult]:
        total = len(chunks)
        workers = min(self.options.parallelism, total)
        if workers <= 1:
            return [self._summarize_chunk(chunk, system_prompt, total) for chunk in chunks]

        logger.info("Fanning out %d chunks over %d workers", total, workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order regardless of completion order
            return list(pool.map(lambda chunk: self._summarize_chunk(chunk, system_prompt, total), chunks))

    def summarize(
        self,
        content: TranscriptContent,
        language: Optional[str] = "en",
        fmt: Optional[str] = None,
    ) -> SummaryResult:
        """
        Summarize a meeting transcript into a rendered, redacted document.

        Args:
            content: Transcript as cues or raw text.
            language: Output and label language (unknown falls back to English).
            fmt: markdown | xml | plain; None uses the configured default.

        Returns:
            SummaryResult whose summary is the rendered document, with
            template_format set and every string field redacted.

        Raises:
            InvalidRequestError: Empty transcript, nothing to chunk,
                unparsable model output, or unknown format.
            OutputValidationError: Blank summary after redaction or blank
                rendered document.
            RuntimeError: Model client failure.
        """
        if content.is_empty:
            raise InvalidRequestError("Transcript content is empty.")

        resolved_format = (fmt or self.options.default_format).strip().lower()
        if resolved_format not in SUPPORTED_FORMATS:
            raise InvalidRequestError(f"Unsupported summary format: {fmt}.")

        started = time.perf_counter()
        text = flatten_transcript(content)
        chunks = chunk_text(text, self.options.max_tokens_per_chunk, self.options.overlap_tokens)
        if len(chunks) > self.options.max_chunks:
            logger.info("Capping %d chunks to the first %d", len(chunks), self.options.max_chunks)
            chunks = chunks[: self.options.max_chunks]
        if not chunks:
            raise InvalidRequestError("Transcript produced no chunks to summarize.")

        logger.info("Summarizing transcript in %d chunk(s)", len(chunks))
        system_prompt = build_summary_system_prompt(language, self.options.limits)
        partials = self._summarize_chunks(chunks, system_prompt)

        merged = merge_summaries(partials)
        logger.info(
            "Merged %d partial(s): %d action items, %d key points, %d topics",
            len(partials),
            len(merged.action_items),
            len(merged.key_points),
            len(merged.topics),
        )

        redacted, _ = redact_model(merged)
        if not redacted.summary.strip():
            raise OutputValidationError("Summary output is empty after redaction.")

        document = render_summary(redacted, language, resolved_format, self.options.limits)
        if not document.strip():
            raise OutputValidationError("Rendered summary is empty.")

        logger.info("Summary rendered as %s in %.2fs", resolved_format, time.perf_counter() - started)
        return redacted.model_copy(update={
            "summary": document,
            "template_format": resolved_format,
        })
