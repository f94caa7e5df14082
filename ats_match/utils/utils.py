import os
import re
from functools import lru_cache

from dotenv import load_dotenv

from ats_match.models.ai_settings import AISettings, LLMSettings, ProcessingSettings
from ats_match.utils.exceptions import ConfigurationError, ValidationError

load_dotenv()

OLLAMA = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
LLM_MODEL = os.getenv("LLM_MODEL", "llama3.1:8b")
ORGANIZATION_NAME = os.getenv("ORGANIZATION_NAME", "GRO Early Learning")


def _env_number(key: str, default, cast=float):
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number", config_key=key, config_value=raw, cause=e) from e


@lru_cache(maxsize=1)
def get_ai_settings() -> AISettings:
    """Settings built once from the environment (.env is honoured)."""
    try:
        return AISettings(
            llm_settings=LLMSettings(
                llm_model=LLM_MODEL,
                base_url=OLLAMA,
                temperature=_env_number("LLM_TEMPERATURE", 0.2),
                timeout=_env_number("LLM_TIMEOUT", 30.0),
            ),
            processing_settings=ProcessingSettings(
                max_retries=_env_number("LLM_MAX_RETRIES", 1, int),
                retry_backoff=_env_number("LLM_RETRY_BACKOFF", 0.5),
                match_deadline=_env_number("MATCH_DEADLINE", 90.0),
                max_resume_bytes=_env_number("MAX_RESUME_BYTES", 5 * 1024 * 1024, int),
            ),
            environment=os.getenv("ENVIRONMENT", "development").lower(),
        )
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        raise ConfigurationError(f"Invalid AI settings: {e}", cause=e) from e


def unique_casefold(items) -> list:
    """Drop blanks and case-insensitive duplicates, keeping the first spelling."""
    seen = set()
    out = []
    for item in items or []:
        if item is None:
            continue
        text = str(item).strip()
        key = text.casefold()
        if not text or key in seen:
            continue
        seen.add(key)
        out.append(text)
    return out


def as_text(x) -> str:
    if x is None:
        return ""
    if isinstance(x, list):
        # join list of sentences or tokens into one paragraph
        return " ".join([str(t).strip() for t in x if t is not None and str(t).strip()])
    return str(x).strip()


def as_list(x) -> list:
    if x is None:
        return []
    if isinstance(x, str):
        # split on commas/semicolons; normalize tokens
        parts = [p.strip() for p in x.replace(";", ",").split(",")]
        return [p for p in parts if p]
    if isinstance(x, list):
        return [str(t).strip() for t in x if t is not None and str(t).strip()]
    return []


ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_id(value, field: str) -> str:
    """Ids are 1-64 letters, digits, '-' or '_'; anything else is a 400."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    value = str(value).strip()
    if not ID_PATTERN.match(value):
        raise ValidationError(f"{field} is not a valid id", field=field, value=value)
    return value
