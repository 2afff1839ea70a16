from meetinglens.models.schemas import SummaryResult, SummaryTemplateData, SummaryTopic
from meetinglens.services.guardrails import contains_disallowed_answer, redact_model, redact_sensitive


def test_redacts_email_and_phone():
    result = redact_sensitive("contact me at user@example.com or +1 555 111 2222")
    assert "[redacted-email]" in result.text
    assert "[redacted-phone]" in result.text
    assert "user@example.com" not in result.text
    assert result.redacted is True


def test_clean_text_is_untouched():
    result = redact_sensitive("Alice delivers the deck Friday.")
    assert result.text == "Alice delivers the deck Friday."
    assert result.redacted is False


def test_phone_pass_claims_dashed_ssn():
    # Phone pattern runs before the SSN pattern
    result = redact_sensitive("SSN 123-45-6789 on file")
    assert result.text == "SSN [redacted-phone] on file"
    assert result.redacted is True


def test_redact_model_reaches_nested_fields():
    summary = SummaryResult(
        summary="Reach Bob at bob@corp.example",
        key_points=["Call +44 20 7946 0958 tomorrow"],
        template_data=SummaryTemplateData(
            topics_detailed=[SummaryTopic(topic="Access", observations=["Mail ops@corp.example"])],
        ),
    )
    redacted, hit = redact_model(summary)
    assert hit is True
    assert isinstance(redacted, SummaryResult)
    assert redacted.summary == "Reach Bob at [redacted-email]"
    assert redacted.key_points == ["Call [redacted-phone] tomorrow"]
    assert redacted.template_data.topics_detailed[0].observations == ["Mail [redacted-email]"]
    # Original left intact
    assert summary.summary == "Reach Bob at bob@corp.example"


def test_disallowed_answers_detected():
    assert contains_disallowed_answer("As an AI, I have no opinion.")
    assert contains_disallowed_answer("Sorry, I can’t access the transcript.")
    assert contains_disallowed_answer("I CANNOT ACCESS THE TRANSCRIPT right now")
    assert not contains_disallowed_answer("The budget was approved.")
