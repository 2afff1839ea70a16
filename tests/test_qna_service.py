import pytest
from conftest import FakeModelClient, answer_json

from meetinglens.errors import InvalidRequestError, NotFoundError, OutputValidationError
from meetinglens.models.schemas import TranscriptContent, TranscriptCue
from meetinglens.services.qna_service import QaService, format_context, select_cues, tokenize


def _cue(text, start="00:00:01", end="00:00:02", speaker=None):
    return TranscriptCue(start=start, end=end, speaker=speaker, text=text)


def test_tokenize_lowercases_and_drops_empties():
    assert tokenize("What's the BUDGET, again?") == ["what", "s", "the", "budget", "again"]
    assert tokenize("  ") == []


def test_blank_question_is_invalid(cue_content):
    client = FakeModelClient([])
    with pytest.raises(InvalidRequestError):
        QaService(client).answer_question("", cue_content)
    with pytest.raises(InvalidRequestError):
        QaService(client).answer_question("   ", cue_content)
    assert client.calls == []


def test_missing_transcript_is_not_found():
    with pytest.raises(NotFoundError):
        QaService(FakeModelClient([])).answer_question("What happened?", TranscriptContent())


def test_unrelated_question_is_not_found(cue_content):
    client = FakeModelClient([])
    with pytest.raises(NotFoundError):
        QaService(client).answer_question("unrelated question", cue_content)
    assert client.calls == []


def test_selection_is_stable_score_order():
    cues = [
        _cue("budget talk", start="1"),
        _cue("the budget is approved for the launch", start="2"),
        _cue("launch moved", start="3"),
        _cue("nothing relevant", start="4"),
        _cue("budget again", start="5"),
    ]
    selected = select_cues("Is the budget approved for launch?", cues, max_cues=3)
    assert [c.start for c in selected] == ["2", "1", "3"]


def test_selection_respects_max_cues():
    cues = [_cue(f"budget item {i}", start=str(i)) for i in range(10)]
    assert len(select_cues("budget", cues, max_cues=6)) == 6


def test_context_lines_in_score_order():
    cues = [
        _cue("Budget is approved", start="00:00:01", end="00:00:10", speaker="A"),
        _cue("Timeline moved", start="00:00:11", end="00:00:20"),
    ]
    assert format_context(cues) == "[00:00:01 - 00:00:10] A: Budget is approved\n[00:00:11 - 00:00:20] Timeline moved"


def test_answer_uses_selected_context(cue_content):
    client = FakeModelClient([answer_json("The budget is approved.", ["00:00:01 - 00:00:10"])])
    result = QaService(client).answer_question("Is the budget approved?", cue_content)

    assert result.answer == "The budget is approved."
    assert result.citations == ["00:00:01 - 00:00:10"]
    messages = client.calls[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["content"] == (
        "Question: Is the budget approved?\n\nContext:\n[00:00:01 - 00:00:10] A: Budget is approved"
    )


def test_raw_transcript_becomes_single_pseudo_cue():
    client = FakeModelClient([answer_json("March.")])
    content = TranscriptContent(raw="The launch moves to March.")
    QaService(client).answer_question("When is the launch?", content, language="fr")

    messages = client.calls[0]["messages"]
    assert messages[1]["content"].endswith("Context:\n[ - ] The launch moves to March.")
    assert "Je ne sais pas" in messages[0]["content"]
    assert messages[0]["content"].endswith("Respond in French.")


def test_answer_is_redacted(cue_content):
    client = FakeModelClient([answer_json("Ask finance@example.com about the budget.")])
    result = QaService(client).answer_question("budget?", cue_content)
    assert result.answer == "Ask [redacted-email] about the budget."


def test_disallowed_answer_fails(cue_content):
    client = FakeModelClient([answer_json("As an AI, I cannot say.")])
    with pytest.raises(OutputValidationError):
        QaService(client).answer_question("budget?", cue_content)


def test_blank_answer_fails(cue_content):
    client = FakeModelClient([answer_json("  ")])
    with pytest.raises(OutputValidationError):
        QaService(client).answer_question("budget?", cue_content)


def test_unparsable_answer_is_invalid(cue_content):
    client = FakeModelClient(["The budget is approved."])
    with pytest.raises(InvalidRequestError):
        QaService(client).answer_question("budget?", cue_content)
