"""
Model clients.

The pipeline talks to a large language model through a single
complete(messages, options) -> str call. Two concrete clients are provided:
Anthropic (Claude) and Azure OpenAI. Transport failures surface as
RuntimeError and are never retried here.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from anthropic import Anthropic
from openai import AzureOpenAI

from meetinglens.config.settings import SUPPORTED_PROVIDERS, Settings
from meetinglens.errors import OutputValidationError
from meetinglens.utils.env_utils import get_anthropic_api_key, get_azure_openai_api_key

logger = logging.getLogger(__name__)

ChatMessage = dict[str, str]
"""{"role": "system" | "user" | "assistant", "content": str}"""


@dataclass(frozen=True)
class CompletionOptions:
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class ModelClient(Protocol):
    """Anything that can complete an ordered chat message list into text."""

    def complete(self, messages: list[ChatMessage], options: Optional[CompletionOptions] = None) -> str:
        ...


def _resolve_options(options: Optional[CompletionOptions], defaults: CompletionOptions) -> CompletionOptions:
    if options is None:
        return defaults
    return CompletionOptions(
        temperature=options.temperature if options.temperature is not None else defaults.temperature,
        max_tokens=options.max_tokens if options.max_tokens is not None else defaults.max_tokens,
    )


# ============================================
# Anthropic
# ============================================

class AnthropicModelClient:
    """Claude via the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        defaults: CompletionOptions = CompletionOptions(temperature=0.2, max_tokens=4096),
    ) -> None:
        self.model = model
        self.defaults = defaults
        self._client = Anthropic(api_key=api_key, base_url=base_url)

    def complete(self, messages: list[ChatMessage], options: Optional[CompletionOptions] = None) -> str:
        """
        Make a Claude API call and return the text response.

        System messages are joined into Claude's system parameter; the
        remaining messages are sent in order.

        Raises:
            RuntimeError: If the API call fails.
            OutputValidationError: If the response carries no text.
        """
        resolved = _resolve_options(options, self.defaults)
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        conversation = [
            {"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"
        ]

        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=resolved.max_tokens or 4096,
                temperature=resolved.temperature if resolved.temperature is not None else 0.2,
                system=system,
                messages=conversation,
            )
        except Exception as e:
            raise RuntimeError(f"Claude API failed: {e}") from e

        text = ""
        for block in response.content:
            text += getattr(block, "text", "") or ""

        text = text.strip()
        if not text:
            raise OutputValidationError("Claude response missing message content.")
        return text


# ============================================
# Azure OpenAI
# ============================================

class AzureOpenAIModelClient:
    """Chat completions against an Azure OpenAI deployment."""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        deployment: str,
        api_version: str,
        defaults: CompletionOptions = CompletionOptions(temperature=0.2, max_tokens=4096),
    ) -> None:
        self.deployment = deployment
        self.defaults = defaults
        self._client = AzureOpenAI(
            azure_endpoint=endpoint.rstrip("/"),
            api_key=api_key,
            api_version=api_version,
        )

    def complete(self, messages: list[ChatMessage], options: Optional[CompletionOptions] = None) -> str:
        """
        Call the deployment's chat completions endpoint.

        Raises:
            RuntimeError: If the API call fails.
            OutputValidationError: If the response carries no message content.
        """
        resolved = _resolve_options(options, self.defaults)
        try:
            response = self._client.chat.completions.create(
                model=self.deployment,
                messages=messages,
                temperature=resolved.temperature,
                max_tokens=resolved.max_tokens,
            )
        except Exception as e:
            raise RuntimeError(f"Azure OpenAI request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise OutputValidationError("Azure OpenAI response missing message content.")
        return content


def build_model_client(settings: Settings) -> ModelClient:
    """
    Build the configured model client.

    Raises:
        RuntimeError: Unknown provider or missing credentials.
    """
    provider = settings.llm_provider
    if provider not in SUPPORTED_PROVIDERS:
        raise RuntimeError(f"Unsupported LLM_PROVIDER: {provider}")

    defaults = CompletionOptions(temperature=settings.llm_temperature, max_tokens=settings.llm_max_tokens)

    if provider == "azure_openai":
        api_key = settings.azure_openai_api_key or get_azure_openai_api_key()
        if not (api_key and settings.azure_openai_endpoint and settings.azure_openai_deployment):
            raise RuntimeError(
                "AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_API_KEY and AZURE_OPENAI_DEPLOYMENT must be set"
            )
        logger.info("Using Azure OpenAI deployment %s", settings.azure_openai_deployment)
        return AzureOpenAIModelClient(
            endpoint=settings.azure_openai_endpoint,
            api_key=api_key,
            deployment=settings.azure_openai_deployment,
            api_version=settings.azure_openai_api_version,
            defaults=defaults,
        )

    api_key = settings.anthropic_api_key or get_anthropic_api_key()
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY is not set")
    logger.info("Using Anthropic model %s", settings.anthropic_model)
    return AnthropicModelClient(
        api_key=api_key,
        model=settings.anthropic_model,
        base_url=settings.anthropic_base_url,
        defaults=defaults,
    )
