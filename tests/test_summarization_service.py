import pytest
from conftest import FailingModelClient, FakeModelClient, summary_json

from meetinglens.errors import InvalidRequestError, OutputValidationError
from meetinglens.models.schemas import (
    SummaryResult,
    SummaryTemplateData,
    SummaryTopic,
    TranscriptContent,
    TranscriptCue,
)
from meetinglens.services.summarization_service import (
    SummarizationOptions,
    SummarizationService,
    flatten_transcript,
    merge_summaries,
    merge_topics,
)
from meetinglens.services.template_renderer import section_headings

TWO_CHUNK_TEXT = "alpha beta gamma delta epsilon zeta"
TWO_CHUNKS = SummarizationOptions(max_tokens_per_chunk=5, overlap_tokens=0)


def _by_chunk(first, second):
    """Responder returning `first` for the chunk holding "alpha", else `second`."""
    def respond(messages):
        return first if "alpha" in messages[1]["content"] else second
    return respond


def test_flatten_prefers_cues_with_speaker_prefix():
    content = TranscriptContent(
        raw="ignored",
        cues=[
            TranscriptCue(start="0", end="1", speaker="Alice", text="Hello "),
            TranscriptCue(start="1", end="2", text="  no speaker"),
        ],
    )
    assert flatten_transcript(content) == "[Alice] Hello\nno speaker"
    assert flatten_transcript(TranscriptContent(raw="just raw")) == "just raw"


def test_single_chunk_renders_seven_sections():
    client = FakeModelClient([
        summary_json(
            "Alice delivers the deck Friday; Bob updates the roadmap next week.",
            actionItems=["Alice delivers the deck", "Bob updates the roadmap"],
            templateData={
                "actionItemsDetailed": [
                    {"action": "Deliver the deck", "owner": "Alice", "dueDate": "Friday"},
                    {"action": "Update the roadmap", "owner": "Bob", "dueDate": "Next week"},
                ],
            },
        )
    ])
    content = TranscriptContent(raw="Alice delivers the deck Friday, Bob updates the roadmap next week")
    result = SummarizationService(client).summarize(content)

    assert len(client.calls) == 1
    assert result.template_format == "xml"
    positions = [result.summary.index(heading) for heading in section_headings("en")]
    assert positions == sorted(positions)
    assert "Deliver the deck" in result.summary
    assert result.action_items == ["Alice delivers the deck", "Bob updates the roadmap"]


def test_each_call_sends_system_and_user_messages():
    client = FakeModelClient([summary_json()])
    SummarizationService(client).summarize(TranscriptContent(raw="Hola a todos"), language="es", fmt="plain")
    messages = client.calls[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"].endswith("Respond in Spanish.")
    assert messages[1]["content"] == "Summarize the following transcript chunk:\n\nHola a todos"


def test_empty_content_is_rejected_without_model_calls():
    client = FakeModelClient([])
    service = SummarizationService(client)
    with pytest.raises(InvalidRequestError):
        service.summarize(TranscriptContent())
    with pytest.raises(InvalidRequestError):
        service.summarize(TranscriptContent(raw="   \n "))
    assert client.calls == []


def test_unknown_format_is_rejected_before_model_calls():
    client = FakeModelClient([])
    with pytest.raises(InvalidRequestError):
        SummarizationService(client).summarize(TranscriptContent(raw="hello"), fmt="pdf")
    assert client.calls == []


def test_chunks_are_capped():
    client = FakeModelClient(lambda messages: summary_json("part"))
    options = SummarizationOptions(max_tokens_per_chunk=3, overlap_tokens=0, max_chunks=2)
    text = " ".join(f"word{i}" for i in range(40))
    result = SummarizationService(client, options).summarize(TranscriptContent(raw=text), fmt="markdown")
    assert len(client.calls) == 2
    assert result.template_format == "markdown"


def test_topic_merge_prefers_first_non_blank_root_cause():
    first = summary_json("One.", topics=["Budget"], templateData={
        "topicsDetailed": [{"topic": "Budget", "rootCause": "", "observations": ["Over by 10%"]}],
    })
    second = summary_json("Two.", topics=["Budget", "Hiring"], templateData={
        "topicsDetailed": [{"topic": "Budget ", "rootCause": "Scope creep", "observations": ["Vendor delays"]}],
    })
    client = FakeModelClient(_by_chunk(first, second))
    result = SummarizationService(client, TWO_CHUNKS).summarize(
        TranscriptContent(raw=TWO_CHUNK_TEXT), fmt="markdown"
    )

    assert len(client.calls) == 2
    topics = result.template_data.topics_detailed
    assert len(topics) == 1
    assert topics[0].root_cause == "Scope creep"
    assert topics[0].observations == ["Over by 10%", "Vendor delays"]
    assert result.topics == ["Budget", "Hiring"]
    assert "- **Root cause:** Scope creep" in result.summary


def test_merged_action_items_are_capped_when_rendered():
    first = summary_json("One.", actionItems=[f"First task {i}" for i in range(10)])
    second = summary_json("Two.", actionItems=[f"Second task {i}" for i in range(10)])
    client = FakeModelClient(_by_chunk(first, second))
    result = SummarizationService(client, TWO_CHUNKS).summarize(
        TranscriptContent(raw=TWO_CHUNK_TEXT), fmt="markdown"
    )
    assert len(result.action_items) == 20
    assert result.summary.count("**Action:**") == 5
    assert "Second task" not in result.summary


def test_parallel_fan_out_keeps_chunk_order():
    first = summary_json("First chunk.", keyPoints=["from first"])
    second = summary_json("Second chunk.", keyPoints=["from second"])

    sequential = SummarizationService(FakeModelClient(_by_chunk(first, second)), TWO_CHUNKS)
    parallel = SummarizationService(
        FakeModelClient(_by_chunk(first, second)),
        SummarizationOptions(max_tokens_per_chunk=5, overlap_tokens=0, parallelism=4),
    )
    content = TranscriptContent(raw=TWO_CHUNK_TEXT)

    expected = sequential.summarize(content, fmt="plain")
    actual = parallel.summarize(content, fmt="plain")
    assert actual == expected
    assert actual.key_points == ["from first", "from second"]


def test_output_is_redacted():
    client = FakeModelClient([
        summary_json("Send notes to pm@example.com", keyPoints=["Call +1 555 111 2222"])
    ])
    result = SummarizationService(client).summarize(TranscriptContent(raw="notes"), fmt="markdown")
    assert result.key_points == ["Call [redacted-phone]"]
    assert "pm@example.com" not in result.model_dump_json()


def test_blank_summary_fails_validation():
    client = FakeModelClient([summary_json("   ")])
    with pytest.raises(OutputValidationError):
        SummarizationService(client).summarize(TranscriptContent(raw="hello"))


def test_unparsable_output_is_invalid_request():
    client = FakeModelClient(["Sorry, I can only chat."])
    with pytest.raises(InvalidRequestError):
        SummarizationService(client).summarize(TranscriptContent(raw="hello"))


def test_transport_failures_propagate():
    with pytest.raises(RuntimeError):
        SummarizationService(FailingModelClient()).summarize(TranscriptContent(raw="hello"))


def test_merge_summaries_rules():
    first = SummaryResult(
        summary="One.",
        key_points=["a"],
        topics=["Budget", "Hiring"],
        template_data=SummaryTemplateData.model_validate({
            "meetingHeader": {"meetingTitle": "", "date": "Monday"},
            "meetingPurpose": "",
            "nextSteps": {"partyA": {"name": "", "steps": ["a1"]}},
        }),
    )
    second = SummaryResult(
        summary="Two.",
        key_points=["a", "b"],
        topics=["Hiring", "Roadmap"],
        template_data=SummaryTemplateData.model_validate({
            "meetingHeader": {"meetingTitle": "Weekly", "date": "Tuesday"},
            "meetingPurpose": "Plan Q3",
            "nextSteps": {"partyA": {"name": "Ops", "steps": ["a2"]}},
        }),
    )
    merged = merge_summaries([first, second])
    assert merged.summary == "One. Two."
    assert merged.key_points == ["a", "a", "b"]
    assert merged.topics == ["Budget", "Hiring", "Roadmap"]
    header = merged.template_data.meeting_header
    assert header.meeting_title == "Weekly"
    assert header.date == "Monday"
    assert merged.template_data.meeting_purpose == "Plan Q3"
    assert merged.template_data.next_steps.party_a.name == "Ops"
    assert merged.template_data.next_steps.party_a.steps == ["a1", "a2"]


def test_merge_without_template_data_stays_none():
    merged = merge_summaries([SummaryResult(summary="a"), SummaryResult(summary="b")])
    assert merged.template_data is None


def test_merge_topics_never_merges_blank_names():
    merged = merge_topics([
        SummaryTopic(topic="", impact="x"),
        SummaryTopic(topic="  ", impact="y"),
        SummaryTopic(topic="budget"),
        SummaryTopic(topic="Budget"),
    ])
    assert len(merged) == 4
