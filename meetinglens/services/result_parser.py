"""
Tolerant result parsing.

Extracts structured summary and answer records from free-form model output.
The model is told to return JSON only, but in practice may wrap it in prose or
Markdown code fences, or emit small syntax slips. Parsing runs in two stages:

  1. Locate candidate JSON spans (whole text, fenced blocks, balanced braces)
  2. Decode each with json.loads, with one light repair attempt

The first candidate that decodes to an object with the required key wins.
"""

import json
import re
from collections.abc import Iterator
from typing import Any

from meetinglens.errors import InvalidRequestError
from meetinglens.models.schemas import (
    MeetingHeader,
    QaResult,
    SummaryActionItem,
    SummaryKeyPoint,
    SummaryNextSteps,
    SummaryPartySteps,
    SummaryPathForward,
    SummaryResult,
    SummaryTemplateData,
    SummaryTopic,
)

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)


# ============================================
# JSON Location and Repair
# ============================================

def _iter_balanced_objects(text: str) -> Iterator[str]:
    """
    Yield every top-level balanced {...} span in text, in order.

    Braces inside JSON string literals (including escaped quotes) are ignored.
    """
    start = -1
    depth = 0
    in_string = False
    escaped = False

    for i, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            # Quotes only delimit strings inside an object; prose quotes are skipped
            if depth > 0:
                in_string = True
            continue
        if char == "{":
            if depth == 0:
                start = i
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start >= 0:
                yield text[start : i + 1]
                start = -1


def extract_json_object(raw: str) -> str | None:
    """Return the first top-level balanced {...} span in raw, if any."""
    return next(_iter_balanced_objects(raw.strip()), None)


def _fix_json_string(s: str) -> str:
    """
    Fix common JSON issues: trailing commas, unescaped characters.
    """
    # Remove trailing commas
    s = re.sub(r",(\s*[}\]])", r"\1", s)

    # Escape raw control characters inside strings
    result = []
    in_string = False
    escape_next = False

    for char in s:
        if escape_next:
            result.append(char)
            escape_next = False
            continue

        if char == "\\":
            escape_next = True
            result.append(char)
            continue

        if char == '"':
            in_string = not in_string
            result.append(char)
            continue

        if in_string:
            if char == "\n":
                result.append("\\n")
                continue
            if char == "\r":
                continue
            if char == "\t":
                result.append("\\t")
                continue

        result.append(char)

    return "".join(result)


def _iter_candidates(raw: str) -> Iterator[str]:
    """Candidate JSON texts, most literal first."""
    text = raw.strip()
    if not text:
        return
    yield text
    for match in _FENCE_RE.finditer(text):
        body = match.group(1).strip()
        if body:
            yield body
    yield from _iter_balanced_objects(text)


def _decode(candidate: str) -> Any:
    """Decode candidate, retrying once after repair. None on failure."""
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(_fix_json_string(candidate))
    except json.JSONDecodeError:
        return None


def iter_json_objects(raw: str) -> Iterator[dict]:
    """Yield every decodable JSON object found in raw, in candidate order."""
    for candidate in _iter_candidates(raw):
        data = _decode(candidate)
        if isinstance(data, dict):
            yield data


def _locate_payload(raw: str, required_key: str, label: str) -> dict:
    """
    Find the first JSON object in raw whose required_key is a string.

    Raises:
        InvalidRequestError: No JSON object at all, or none with the key.
    """
    found_object = False
    for data in iter_json_objects(raw):
        found_object = True
        if isinstance(data.get(required_key), str):
            return data
    if found_object:
        raise InvalidRequestError(f"{label} response missing {required_key}.")
    raise InvalidRequestError(f"{label} response is not valid JSON.")


# ============================================
# Field Coercion
# ============================================

def _ensure_string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _ensure_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _ensure_object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _ensure_object_list(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [_ensure_object(item) for item in value]


def _parse_meeting_header(value: Any) -> MeetingHeader:
    obj = _ensure_object(value)
    return MeetingHeader(
        meeting_title=_ensure_string(obj.get("meetingTitle")),
        companies_parties=_ensure_string(obj.get("companiesParties")),
        date=_ensure_string(obj.get("date")),
        duration=_ensure_string(obj.get("duration")),
        link_reference=_ensure_string(obj.get("linkReference")),
    )


def _parse_action_items(value: Any) -> list[SummaryActionItem]:
    return [
        SummaryActionItem(
            action=_ensure_string(obj.get("action")),
            owner=_ensure_string(obj.get("owner")),
            due_date=_ensure_string(obj.get("dueDate")),
            notes=_ensure_string(obj.get("notes")),
        )
        for obj in _ensure_object_list(value)
    ]


def _parse_key_points(value: Any) -> list[SummaryKeyPoint]:
    return [
        SummaryKeyPoint(
            title=_ensure_string(obj.get("title")),
            explanation=_ensure_string(obj.get("explanation")),
        )
        for obj in _ensure_object_list(value)
    ]


def _parse_topics(value: Any) -> list[SummaryTopic]:
    return [
        SummaryTopic(
            topic=_ensure_string(obj.get("topic")),
            issue_description=_ensure_string(obj.get("issueDescription")),
            observations=_ensure_string_list(obj.get("observations")),
            root_cause=_ensure_string(obj.get("rootCause")),
            impact=_ensure_string(obj.get("impact")),
        )
        for obj in _ensure_object_list(value)
    ]


def _parse_path_forward(value: Any) -> SummaryPathForward:
    obj = _ensure_object(value)
    return SummaryPathForward(
        definition_of_success=_ensure_string(obj.get("definitionOfSuccess")),
        agreed_next_attempt=_ensure_string(obj.get("agreedNextAttempt")),
        decision_point=_ensure_string(obj.get("decisionPoint")),
        checkpoint_date=_ensure_string(obj.get("checkpointDate")),
    )


def _parse_party_steps(value: Any) -> SummaryPartySteps:
    obj = _ensure_object(value)
    return SummaryPartySteps(
        name=_ensure_string(obj.get("name")),
        steps=_ensure_string_list(obj.get("steps")),
    )


def _parse_template_data(value: Any) -> SummaryTemplateData | None:
    if not isinstance(value, dict):
        return None
    next_steps = _ensure_object(value.get("nextSteps"))
    return SummaryTemplateData(
        meeting_header=_parse_meeting_header(value.get("meetingHeader")),
        action_items_detailed=_parse_action_items(value.get("actionItemsDetailed")),
        meeting_purpose=_ensure_string(value.get("meetingPurpose")),
        key_points_detailed=_parse_key_points(value.get("keyPointsDetailed")),
        topics_detailed=_parse_topics(value.get("topicsDetailed")),
        path_forward=_parse_path_forward(value.get("pathForward")),
        next_steps=SummaryNextSteps(
            party_a=_parse_party_steps(next_steps.get("partyA")),
            party_b=_parse_party_steps(next_steps.get("partyB")),
        ),
    )


# ============================================
# Public Parsers
# ============================================

def parse_summary(raw_text: str) -> SummaryResult:
    """
    Parse a summary record from model output.

    Args:
        raw_text: Model output; may contain prose, code fences, or repairable
            JSON slips around the object.

    Returns:
        SummaryResult with string-only list fields and optional template data.

    Raises:
        InvalidRequestError: No JSON object with a string "summary" found.
    """
    data = _locate_payload(raw_text, "summary", "Summary")
    return SummaryResult(
        summary=data["summary"],
        key_points=_ensure_string_list(data.get("keyPoints")),
        action_items=_ensure_string_list(data.get("actionItems")),
        decisions=_ensure_string_list(data.get("decisions")),
        topics=_ensure_string_list(data.get("topics")),
        template_data=_parse_template_data(data.get("templateData")),
    )


def parse_answer(raw_text: str) -> QaResult:
    """
    Parse a Q&A record from model output.

    Raises:
        InvalidRequestError: No JSON object with a string "answer" found.
    """
    data = _locate_payload(raw_text, "answer", "Q&A")
    return QaResult(
        answer=data["answer"],
        citations=_ensure_string_list(data.get("citations")),
    )
