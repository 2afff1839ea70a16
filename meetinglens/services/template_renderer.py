"""
Summary template rendering.

Renders a SummaryResult into a fixed seven-section document:

  1. Meeting Header   2. Action Items   3. Meeting Purpose   4. Key Points
  5. Topics (detailed)   6. Path Forward   7. Next Steps

Section numbering and order are a structural contract shared by every output
format (markdown, xml, plain). Lists are truncated to SummaryLimits (first N),
blank header facts show the "not found" placeholder, blank body details show
"not provided", and all label text comes from the label catalog.

Pure functions, no I/O.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Union

from meetinglens.errors import InvalidRequestError
from meetinglens.models.schemas import (
    MeetingHeader,
    SummaryActionItem,
    SummaryKeyPoint,
    SummaryLimits,
    SummaryNextSteps,
    SummaryPartySteps,
    SummaryPathForward,
    SummaryResult,
    SummaryTemplateData,
    SummaryTopic,
)
from meetinglens.utils.document_labels import DocumentLabels, get_labels

SUPPORTED_FORMATS = ("markdown", "xml", "plain")
DEFAULT_FORMAT = "xml"
MIN_STEPS_PER_PARTY = 2

# (xml key, label key) in contract order
SECTIONS: tuple[tuple[str, str], ...] = (
    ("meetingHeader", "meeting_header"),
    ("actionItems", "action_items"),
    ("meetingPurpose", "meeting_purpose"),
    ("keyPoints", "key_points"),
    ("topicsDetailed", "topics_detailed"),
    ("pathForward", "path_forward"),
    ("nextSteps", "next_steps"),
)


# ============================================
# Document Model
# ============================================

@dataclass
class Field:
    key: str
    label: str
    value: str


@dataclass
class ListField:
    key: str
    label: str
    values: list[str]


@dataclass
class Group:
    key: str
    index: int
    entries: list[Union[Field, ListField]]


@dataclass
class Section:
    index: int
    key: str
    title: str
    hint: str = ""
    entries: list[Union[Field, Group]] = field(default_factory=list)

    @property
    def heading(self) -> str:
        return f"{self.index}. {self.title}"


# ============================================
# Normalization
# ============================================

def _value_or(value: str | None, placeholder: str) -> str:
    trimmed = (value or "").strip()
    return trimmed if trimmed else placeholder


def _clean_list(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


def build_template_data(result: SummaryResult, limits: SummaryLimits | None = None) -> SummaryTemplateData:
    """
    Build normalized, capped template data for rendering.

    Detailed lists come from result.template_data; any that is empty (or
    missing entirely) is synthesized from the matching flat list. Every list
    and each topic's observations are truncated to the first N entries.
    """
    limits = limits or SummaryLimits()
    data = result.template_data or SummaryTemplateData()

    action_items = data.action_items_detailed or [
        SummaryActionItem(action=action) for action in result.action_items
    ]
    key_points = data.key_points_detailed or [SummaryKeyPoint(title=title) for title in result.key_points]
    topics = data.topics_detailed or [SummaryTopic(topic=topic) for topic in result.topics]

    return SummaryTemplateData(
        meeting_header=data.meeting_header.model_copy(),
        action_items_detailed=[item.model_copy() for item in action_items[: limits.action_items]],
        meeting_purpose=data.meeting_purpose.strip(),
        key_points_detailed=[point.model_copy() for point in key_points[: limits.key_points]],
        topics_detailed=[
            topic.model_copy(update={"observations": list(topic.observations[: limits.observations_per_topic])})
            for topic in topics[: limits.topics]
        ],
        path_forward=data.path_forward.model_copy(),
        next_steps=data.next_steps.model_copy(deep=True),
    )


def normalize_steps(steps: list[str], placeholder: str, max_steps: int) -> list[str]:
    """Drop blank steps, pad to the minimum with placeholder, cap at max_steps."""
    resolved = _clean_list(steps)
    while len(resolved) < MIN_STEPS_PER_PARTY:
        resolved.append(placeholder)
    return resolved[:max_steps]


# ============================================
# Section Assembly
# ============================================

def _header_section(header: MeetingHeader, labels: DocumentLabels) -> list[Field]:
    not_found = labels["not_found"]
    return [
        Field("meetingTitle", labels["meeting_title"], _value_or(header.meeting_title, not_found)),
        Field("companiesParties", labels["companies_parties"], _value_or(header.companies_parties, not_found)),
        Field("date", labels["date"], _value_or(header.date, not_found)),
        Field("duration", labels["duration"], _value_or(header.duration, not_found)),
        Field("linkReference", labels["link_reference"], _value_or(header.link_reference, not_found)),
    ]


def _action_groups(items: list[SummaryActionItem], labels: DocumentLabels) -> list[Group]:
    missing = labels["not_provided"]
    items = items or [SummaryActionItem()]
    return [
        Group("actionItem", i, [
            Field("action", labels["action_verb_object"], _value_or(item.action, missing)),
            Field("owner", labels["owner"], _value_or(item.owner, missing)),
            Field("dueDate", labels["due_date"], _value_or(item.due_date, missing)),
            Field("notes", labels["notes_context"], _value_or(item.notes, missing)),
        ])
        for i, item in enumerate(items, start=1)
    ]


def _key_point_groups(points: list[SummaryKeyPoint], labels: DocumentLabels) -> list[Group]:
    missing = labels["not_provided"]
    points = points or [SummaryKeyPoint()]
    return [
        Group("keyPoint", i, [
            Field("title", labels["point_title"], _value_or(point.title, missing)),
            Field("explanation", labels["point_explanation"], _value_or(point.explanation, missing)),
        ])
        for i, point in enumerate(points, start=1)
    ]


def _topic_groups(topics: list[SummaryTopic], labels: DocumentLabels) -> list[Group]:
    missing = labels["not_provided"]
    topics = topics or [SummaryTopic()]
    return [
        Group("topic", i, [
            Field("topic", labels["topic"], _value_or(topic.topic, missing)),
            Field("issueDescription", labels["issue_description"], _value_or(topic.issue_description, missing)),
            ListField("observations", labels["key_observations"], _clean_list(topic.observations) or [missing]),
            Field("rootCause", labels["root_cause"], _value_or(topic.root_cause, missing)),
            Field("impact", labels["impact"], _value_or(topic.impact, missing)),
        ])
        for i, topic in enumerate(topics, start=1)
    ]


def _path_forward_fields(path: SummaryPathForward, labels: DocumentLabels) -> list[Field]:
    missing = labels["not_provided"]
    return [
        Field("definitionOfSuccess", labels["definition_of_success"], _value_or(path.definition_of_success, missing)),
        Field("agreedNextAttempt", labels["agreed_next_attempt"], _value_or(path.agreed_next_attempt, missing)),
        Field("decisionPoint", labels["decision_point"], _value_or(path.decision_point, missing)),
        Field("checkpointDate", labels["checkpoint_date"], _value_or(path.checkpoint_date, missing)),
    ]


def _party_group(
    key: str, index: int, label: str, party: SummaryPartySteps, labels: DocumentLabels, max_steps: int
) -> Group:
    missing = labels["not_provided"]
    steps = normalize_steps(party.steps, missing, max_steps)
    entries: list[Union[Field, ListField]] = [Field("name", label, _value_or(party.name, missing))]
    entries.extend(
        Field("step", f"{labels['step']} {n}", step) for n, step in enumerate(steps, start=1)
    )
    return Group(key, index, entries)


def _next_steps_groups(next_steps: SummaryNextSteps, labels: DocumentLabels, max_steps: int) -> list[Group]:
    return [
        _party_group("partyA", 1, labels["party_a"], next_steps.party_a, labels, max_steps),
        _party_group("partyB", 2, labels["party_b"], next_steps.party_b, labels, max_steps),
    ]


def build_sections(data: SummaryTemplateData, labels: DocumentLabels, limits: SummaryLimits) -> list[Section]:
    """Assemble the seven sections, in contract order, with placeholders applied."""
    titles = [labels[label_key] for _, label_key in SECTIONS]
    keys = [key for key, _ in SECTIONS]
    return [
        Section(1, keys[0], titles[0], entries=_header_section(data.meeting_header, labels)),
        Section(2, keys[1], titles[1], hint=labels["for_each_action"],
                entries=_action_groups(data.action_items_detailed, labels)),
        Section(3, keys[2], titles[2], entries=[
            Field("purpose", labels["purpose_one_sentence"], _value_or(data.meeting_purpose, labels["not_provided"])),
        ]),
        Section(4, keys[3], titles[3], hint=labels["short_list_each_point"],
                entries=_key_point_groups(data.key_points_detailed, labels)),
        Section(5, keys[4], titles[4], entries=_topic_groups(data.topics_detailed, labels)),
        Section(6, keys[5], titles[5], entries=_path_forward_fields(data.path_forward, labels)),
        Section(7, keys[6], titles[6],
                entries=_next_steps_groups(data.next_steps, labels, limits.next_steps_per_party)),
    ]


def section_headings(language: str | None = None) -> list[str]:
    """Numbered section headings ("1. Meeting Header", ...) for a language."""
    labels = get_labels(language)
    return [f"{i}. {labels[label_key]}" for i, (_, label_key) in enumerate(SECTIONS, start=1)]


# ============================================
# Emitters
# ============================================

def _emit_markdown(title: str, sections: list[Section]) -> str:
    lines = [f"# {title}"]
    for section in sections:
        lines.append("")
        lines.append(f"## {section.heading}")
        if section.hint:
            lines.append(f"_{section.hint}_")
        lines.append("")
        for entry in section.entries:
            if isinstance(entry, Field):
                lines.append(f"- **{entry.label}:** {entry.value}")
                continue
            first, *rest = entry.entries
            lines.append(f"- **{first.label}:** {first.value}")
            for item in rest:
                if isinstance(item, ListField):
                    lines.append(f"  - **{item.label}:**")
                    lines.extend(f"    - {value}" for value in item.values)
                else:
                    lines.append(f"  - **{item.label}:** {item.value}")
    return "\n".join(lines)


def _emit_plain(title: str, sections: list[Section]) -> str:
    lines = [title]
    for section in sections:
        lines.append("")
        lines.append(section.heading)
        if section.hint:
            lines.append(f"   {section.hint}")
        for entry in section.entries:
            if isinstance(entry, Field):
                lines.append(f"   {entry.label}: {entry.value}")
                continue
            first, *rest = entry.entries
            lines.append(f"   - {first.label}: {first.value}")
            for item in rest:
                if isinstance(item, ListField):
                    lines.append(f"     {item.label}:")
                    lines.extend(f"       * {value}" for value in item.values)
                else:
                    lines.append(f"     {item.label}: {item.value}")
    return "\n".join(lines)


# Characters XML 1.0 forbids; tab, newline and carriage return are allowed
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _xml_text(value: str) -> str:
    return _XML_INVALID_RE.sub("", value)


def _xml_field(parent: ET.Element, entry: Union[Field, ListField]) -> None:
    attrs = {"key": entry.key, "label": _xml_text(entry.label)}
    if isinstance(entry, ListField):
        node = ET.SubElement(parent, "list", attrs)
        for value in entry.values:
            ET.SubElement(node, "entry").text = _xml_text(value)
        return
    ET.SubElement(parent, "field", attrs).text = _xml_text(entry.value)


def _emit_xml(title: str, language: str, sections: list[Section]) -> str:
    root = ET.Element("meetingSummary", {"language": _xml_text(language), "title": _xml_text(title)})
    for section in sections:
        node = ET.SubElement(
            root,
            "section",
            {"index": str(section.index), "key": section.key, "heading": _xml_text(section.heading)},
        )
        if section.hint:
            ET.SubElement(node, "hint").text = _xml_text(section.hint)
        for entry in section.entries:
            if isinstance(entry, Group):
                group = ET.SubElement(node, "item", {"key": entry.key, "index": str(entry.index)})
                for item in entry.entries:
                    _xml_field(group, item)
            else:
                _xml_field(node, entry)
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode")


# ============================================
# Public API
# ============================================

def render_summary(
    result: SummaryResult,
    language: str | None = "en",
    fmt: str | None = DEFAULT_FORMAT,
    limits: SummaryLimits | None = None,
    labels: DocumentLabels | None = None,
) -> str:
    """
    Render a summary into the fixed seven-section document.

    Args:
        result: Merged (and redacted) summary.
        language: Label language; unknown languages fall back to English.
        fmt: "markdown", "xml" or "plain". None means xml.
        limits: List caps; defaults to SummaryLimits().
        labels: Label catalog override; defaults to get_labels(language).

    Returns:
        The rendered document.

    Raises:
        InvalidRequestError: Unknown format.
    """
    resolved_format = (fmt or DEFAULT_FORMAT).strip().lower()
    if resolved_format not in SUPPORTED_FORMATS:
        raise InvalidRequestError(
            f"Unsupported summary format: {fmt}. Use one of: {', '.join(SUPPORTED_FORMATS)}."
        )

    limits = limits or SummaryLimits()
    labels = labels if labels is not None else get_labels(language)
    data = build_template_data(result, limits)
    sections = build_sections(data, labels, limits)
    title = labels["summary_title"]

    if resolved_format == "markdown":
        return _emit_markdown(title, sections)
    if resolved_format == "plain":
        return _emit_plain(title, sections)
    return _emit_xml(title, getattr(labels, "language", language or "en"), sections)
