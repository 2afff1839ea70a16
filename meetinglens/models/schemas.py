"""
Pydantic schemas and DTOs.

Transcript input, summary and Q&A results, rich template data, rendering
limits and API request/response models. All models serialize with camelCase
aliases (the JSON shape the model is asked to produce) and accept snake_case
names as well.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases and name population."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================
# Transcript Input
# ============================================

class TranscriptCue(CamelModel):
    """A timestamped, optionally speaker-attributed line of transcript text."""

    start: str = ""
    end: str = ""
    speaker: Optional[str] = None
    text: str = ""


class TranscriptContent(CamelModel):
    """
    Transcript handed in by the caller.

    When cues are present they are authoritative; raw is the whole-text
    fallback form.
    """

    raw: str = ""
    cues: list[TranscriptCue] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.raw and not self.cues


class ChunkedText(CamelModel):
    """A token-budget-bounded span of transcript text."""

    index: int
    text: str


# ============================================
# Rich Template Data
# ============================================

class MeetingHeader(CamelModel):
    meeting_title: str = ""
    companies_parties: str = ""
    date: str = ""
    duration: str = ""
    link_reference: str = ""


class SummaryActionItem(CamelModel):
    action: str = ""
    owner: str = ""
    due_date: str = ""
    notes: str = ""


class SummaryKeyPoint(CamelModel):
    title: str = ""
    explanation: str = ""


class SummaryTopic(CamelModel):
    topic: str = ""
    issue_description: str = ""
    observations: list[str] = Field(default_factory=list)
    root_cause: str = ""
    impact: str = ""


class SummaryPathForward(CamelModel):
    definition_of_success: str = ""
    agreed_next_attempt: str = ""
    decision_point: str = ""
    checkpoint_date: str = ""


class SummaryPartySteps(CamelModel):
    name: str = ""
    steps: list[str] = Field(default_factory=list)


class SummaryNextSteps(CamelModel):
    party_a: SummaryPartySteps = Field(default_factory=SummaryPartySteps)
    party_b: SummaryPartySteps = Field(default_factory=SummaryPartySteps)


class SummaryTemplateData(CamelModel):
    """Section-structured representation of a summary."""

    meeting_header: MeetingHeader = Field(default_factory=MeetingHeader)
    action_items_detailed: list[SummaryActionItem] = Field(default_factory=list)
    meeting_purpose: str = ""
    key_points_detailed: list[SummaryKeyPoint] = Field(default_factory=list)
    topics_detailed: list[SummaryTopic] = Field(default_factory=list)
    path_forward: SummaryPathForward = Field(default_factory=SummaryPathForward)
    next_steps: SummaryNextSteps = Field(default_factory=SummaryNextSteps)


# ============================================
# Results
# ============================================

class SummaryResult(CamelModel):
    """
    Structured meeting summary.

    The flat list fields are the coarse summary; template_data is the rich
    structure used for rendering. After rendering, summary holds the
    rendered document and template_format names its format.
    """

    summary: str
    """Coarse summary text, or the rendered document once rendered."""

    key_points: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    decisions: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)

    template_data: Optional[SummaryTemplateData] = None
    """Rich structure; None when the model supplied none."""

    template_format: Optional[str] = None
    """markdown | xml | plain once rendered."""


class QaResult(CamelModel):
    """A grounded answer plus the model's supporting references."""

    answer: str
    citations: list[str] = Field(default_factory=list)


class SummaryLimits(CamelModel):
    """Maximum entry counts for each renderable list (first-N truncation)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    action_items: int = 5
    key_points: int = 5
    topics: int = 4
    observations_per_topic: int = 3
    next_steps_per_party: int = 4


# ============================================
# API Models
# ============================================

class SummarizeRequest(CamelModel):
    transcript: TranscriptContent
    language: Optional[str] = None
    format: Optional[str] = None


class AskRequest(CamelModel):
    question: str
    transcript: TranscriptContent
    language: Optional[str] = None


class TranslateRequest(CamelModel):
    text: str
    target_language: str


class TranslateResponse(CamelModel):
    translated: str


class DetectLanguageRequest(CamelModel):
    text: str


class DetectLanguageResponse(CamelModel):
    language: str
