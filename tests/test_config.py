from meetinglens.config.settings import Settings
from meetinglens.models.schemas import SummaryLimits


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.summary_max_tokens_per_chunk == 1500
    assert settings.summary_overlap_tokens == 150
    assert settings.summary_max_chunks == 6
    assert settings.qa_max_cues == 6
    assert settings.summary_default_format == "xml"
    assert settings.summary_limits == SummaryLimits()


def test_non_positive_values_fall_back_to_defaults():
    settings = Settings(
        _env_file=None,
        summary_max_chunks=0,
        summary_limit_action_items=-2,
        qa_max_cues="not a number",
        summary_overlap_tokens=-3,
    )
    assert settings.summary_max_chunks == 6
    assert settings.summary_limits.action_items == 5
    assert settings.qa_max_cues == 6
    assert settings.summary_overlap_tokens == 0


def test_parallelism_is_clamped():
    assert Settings(_env_file=None, summary_parallelism=10).effective_parallelism == 4
    assert Settings(_env_file=None, summary_parallelism=2).effective_parallelism == 2


def test_tokens_are_normalized():
    settings = Settings(_env_file=None, llm_provider=" Azure_OpenAI ", summary_default_format="Markdown")
    assert settings.llm_provider == "azure_openai"
    assert settings.summary_default_format == "markdown"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SUMMARY_MAX_CHUNKS", "3")
    monkeypatch.setenv("SUMMARY_LIMIT_TOPICS", "2")
    settings = Settings(_env_file=None)
    assert settings.summary_max_chunks == 3
    assert settings.summary_limits.topics == 2


def test_api_prefix_and_cors():
    assert Settings(_env_file=None, api_prefix="api/").normalized_api_prefix == "/api"
    assert Settings(_env_file=None, api_prefix="/").normalized_api_prefix == ""
    production = Settings(_env_file=None, app_env="production", cors_origins="*, https://lens.example.com")
    assert production.cors_origins_list == ["https://lens.example.com"]
