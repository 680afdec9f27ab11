"""
Runtime configuration for the TOS risk analyzer.

Values come from the environment (a local .env file is honoured).
Components take explicit constructor arguments and fall back to these.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str):
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    """Configuration class for the analysis pipeline."""

    # Generation service
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
    GENERATION_MODEL = os.getenv("GENERATION_MODEL", "gpt-4o-mini")
    GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.3"))
    GENERATION_MAX_TOKENS = int(os.getenv("GENERATION_MAX_TOKENS", "1000"))
    GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "60"))

    # Rate-limit retry policy
    MAX_ATTEMPTS = int(os.getenv("GENERATION_MAX_ATTEMPTS", "5"))
    BASE_DELAY_MS = int(os.getenv("GENERATION_BASE_DELAY_MS", "1000"))
    MAX_JITTER_MS = int(os.getenv("GENERATION_MAX_JITTER_MS", "250"))

    # Text acquisition
    READER_BASE_URL = os.getenv("READER_BASE_URL", "https://r.jina.ai/")
    FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "30"))
    MIN_TEXT_LENGTH = 80
    MAX_TEXT_LENGTH = 25_000

    # Normalizer limits
    MAX_FINDINGS = 10
    SNIPPET_MAX_LENGTH = 240
    FALLBACK_SNIPPET_LENGTH = 200

    # Local credential storage
    CREDENTIAL_STORE_PATH = Path(
        os.getenv("CREDENTIAL_STORE_PATH", str(Path.home() / ".tos_risk" / "credentials.json"))
    )
    API_KEY_STORE_KEY = "openai_api_key"
    API_KEY_PLACEHOLDER = "your_openai_api_key_here"

    # Caller-level timeout around a whole analysis (seconds, unset = none)
    ANALYSIS_TIMEOUT = _optional_float("ANALYSIS_TIMEOUT")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
