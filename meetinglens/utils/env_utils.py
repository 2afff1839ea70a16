"""
Environment and secrets utilities.

Load and validate variables from .env. No hardcoded keys or defaults.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def get_anthropic_api_key() -> str | None:
    """Return ANTHROPIC_API_KEY from environment."""
    return os.getenv("ANTHROPIC_API_KEY")


def get_azure_openai_api_key() -> str | None:
    """Return AZURE_OPENAI_API_KEY from environment."""
    return os.getenv("AZURE_OPENAI_API_KEY")


def get_log_hash_salt() -> str:
    """Return LOG_HASH_SALT from environment (empty when unset)."""
    return os.getenv("LOG_HASH_SALT", "")
