"""
Transcript Q&A service.

Answers a free-form question from the transcript only. Context selection is
lexical: cues are scored by how many distinct question tokens they contain,
and the best few (in score order) become the model's context.
"""

import logging
import re
import time
from typing import Optional

from meetinglens.errors import InvalidRequestError, NotFoundError, OutputValidationError
from meetinglens.models.schemas import QaResult, TranscriptContent, TranscriptCue
from meetinglens.services.guardrails import contains_disallowed_answer, redact_model
from meetinglens.services.llm_client import CompletionOptions, ModelClient
from meetinglens.services.prompts import build_qa_system_prompt, build_qa_user_prompt
from meetinglens.services.result_parser import parse_answer

logger = logging.getLogger(__name__)

_TOKEN_SPLIT_RE = re.compile(r"\W+")


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens; empties dropped."""
    return [token for token in _TOKEN_SPLIT_RE.split(text.lower()) if token]


def score_cue(question_tokens: list[str], cue: TranscriptCue) -> int:
    """Number of question tokens (with repeats) present in the cue's token set."""
    cue_tokens = set(tokenize(cue.text))
    return sum(1 for token in question_tokens if token in cue_tokens)


def select_cues(question: str, cues: list[TranscriptCue], max_cues: int) -> list[TranscriptCue]:
    """
    Pick the most relevant cues for a question.

    Cues scoring zero are dropped; the rest are stable-sorted by descending
    score (ties keep transcript order) and cut to max_cues.
    """
    question_tokens = tokenize(question)
    scored = [(score_cue(question_tokens, cue), cue) for cue in cues]
    relevant = [item for item in scored if item[0] > 0]
    relevant.sort(key=lambda item: item[0], reverse=True)
    return [cue for _, cue in relevant[:max_cues]]


def format_context(cues: list[TranscriptCue]) -> str:
    """One "[start - end] speaker: text" line per cue, in the given order."""
    lines = []
    for cue in cues:
        speaker = f"{cue.speaker}: " if cue.speaker else ""
        lines.append(f"[{cue.start} - {cue.end}] {speaker}{cue.text}".strip())
    return "\n".join(lines)


class QaService:
    """Grounded question answering over a transcript."""

    def __init__(
        self,
        client: ModelClient,
        max_cues: int = 6,
        completion: Optional[CompletionOptions] = None,
    ) -> None:
        self.client = client
        self.max_cues = max_cues
        self.completion = completion

    def answer_question(
        self,
        question: str,
        content: TranscriptContent,
        language: Optional[str] = "en",
    ) -> QaResult:
        """
        Answer a question using only the most relevant transcript cues.

        Args:
            question: Free-form question.
            content: Transcript as cues or raw text.
            language: Answer language.

        Returns:
            Redacted QaResult.

        Raises:
            InvalidRequestError: Blank question or unparsable model output.
            NotFoundError: No transcript, or no cue relevant to the question.
            OutputValidationError: Blank or disallowed answer.
            RuntimeError: Model client failure.
        """
        if not question or not question.strip():
            raise InvalidRequestError("Question is required.")
        if content.is_empty:
            raise NotFoundError("No transcript available to answer from.")

        cues = content.cues or [TranscriptCue(start="", end="", text=content.raw)]
        selected = select_cues(question, cues, self.max_cues)
        if not selected:
            raise NotFoundError("No relevant transcript context found for the question.")
        logger.info("Selected %d of %d cue(s) as Q&A context", len(selected), len(cues))

        started = time.perf_counter()
        raw = self.client.complete(
            [
                {"role": "system", "content": build_qa_system_prompt(language)},
                {"role": "user", "content": build_qa_user_prompt(question, format_context(selected))},
            ],
            self.completion,
        )
        result, _ = redact_model(parse_answer(raw))
        logger.info("Q&A completed in %.2fs", time.perf_counter() - started)

        if not result.answer.strip():
            raise OutputValidationError("Answer is empty after redaction.")
        if contains_disallowed_answer(result.answer):
            raise OutputValidationError("Answer contains disallowed content.")
        return result
