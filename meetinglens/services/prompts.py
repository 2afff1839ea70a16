"""
Prompt templates.

Fixed system prompts for chunk summarization and transcript Q&A, plus the
user-message builders. Every prompt demands JSON only and forbids content
beyond the transcript.
"""

from meetinglens.models.schemas import SummaryLimits
from meetinglens.utils.document_labels import normalize_language

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "ro": "Romanian",
    "fr": "French",
}

NO_ANSWER_TEXT: dict[str, str] = {
    "en": "I don't know",
    "es": "No lo sé",
    "ro": "Nu știu",
    "fr": "Je ne sais pas",
}

_TEMPLATE_DATA_SHAPE = """templateData must be an object with keys:
- meetingHeader { meetingTitle, companiesParties, date, duration, linkReference }
- actionItemsDetailed [ { action, owner, dueDate, notes } ]
- meetingPurpose
- keyPointsDetailed [ { title, explanation } ]
- topicsDetailed [ { topic, issueDescription, observations, rootCause, impact } ]
- pathForward { definitionOfSuccess, agreedNextAttempt, decisionPoint, checkpointDate }
- nextSteps { partyA { name, steps }, partyB { name, steps } }"""


def _base_language(language: str | None) -> str:
    code = normalize_language(language)
    return code if code in LANGUAGE_NAMES else "en"


def language_name(language: str | None) -> str:
    return LANGUAGE_NAMES[_base_language(language)]


def no_answer_text(language: str | None) -> str:
    return NO_ANSWER_TEXT[_base_language(language)]


def build_summary_system_prompt(language: str | None = "en", limits: SummaryLimits | None = None) -> str:
    """System prompt for summarizing one transcript chunk."""
    limits = limits or SummaryLimits()
    return f"""You are a concise meeting summarizer.
Return JSON only with keys: summary, keyPoints, actionItems, decisions, topics, templateData.
summary is a string; keyPoints, actionItems, decisions and topics are arrays of strings.
Do not include markdown, code fences, or extra commentary.
{_TEMPLATE_DATA_SHAPE}
Keep the summary concise. Use at most {limits.action_items} action items, {limits.key_points} key points, \
{limits.topics} topics, {limits.observations_per_topic} observations per topic, \
and {limits.next_steps_per_party} steps per party.
Never fabricate anything beyond the transcript content.
Never include personal data beyond what appears in the transcript.
If information is missing, use empty arrays or empty strings.
Respond in {language_name(language)}."""


def build_summary_user_prompt(chunk_text: str) -> str:
    return f"Summarize the following transcript chunk:\n\n{chunk_text}"


def build_qa_system_prompt(language: str | None = "en") -> str:
    """System prompt for answering from selected transcript context."""
    return f"""You answer questions using only the provided transcript context.
Never fabricate anything beyond the context.
If the answer is not in the context, say "{no_answer_text(language)}".
Return JSON only with keys: answer, citations.
answer is a string; citations is an array of strings referencing context lines by their time range.
Do not include markdown, code fences, or extra commentary.
Respond in {language_name(language)}."""


def build_qa_user_prompt(question: str, context: str) -> str:
    return f"Question: {question}\n\nContext:\n{context}"


DETECT_LANGUAGE_SYSTEM_PROMPT = (
    'Detect the language of the user text. Respond with JSON only: {"language":"<iso-code>"} '
    "where language is a lower-case ISO 639-1 code when possible. Do not include any other text."
)

TRANSLATE_SYSTEM_PROMPT = (
    'Translate the user text to the target language. Respond with JSON only: {"translated":"<text>"} '
    "Do not include the original text or any extra commentary."
)


def build_translate_user_prompt(text: str, target_language: str) -> str:
    return f"Target language: {target_language}\nText:\n{text}"
