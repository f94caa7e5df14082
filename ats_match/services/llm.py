"""
Thin client for the Ollama generate endpoint, always asking for JSON output.

Failures are raised as typed exceptions so callers can tell a timeout from a
service error from an answer that is not the agreed JSON:

- requests.Timeout                      -> LLMTimeoutError (not retried)
- connection errors, HTTP 502/503/504   -> TransientServiceError (retried)
- any other HTTP error                  -> ExternalServiceError
- non-JSON body or non-object payload   -> MalformedResponseError (never retried)
"""
import json
from typing import Any, Dict, Optional

import requests

from ats_match.models.ai_settings import LLMSettings
from ats_match.utils.exceptions import (
    ExternalServiceError,
    LLMTimeoutError,
    MalformedResponseError,
    TransientServiceError,
    retry_with_logging,
)
from ats_match.utils.logging_config import get_logger
from ats_match.utils.utils import get_ai_settings

logger = get_logger(__name__)

SERVICE_NAME = "ollama"
RETRYABLE_STATUS = {502, 503, 504}

_processing = get_ai_settings().processing_settings


@retry_with_logging(
    max_attempts=1 + _processing.max_retries,
    backoff_factor=_processing.retry_backoff,
    exceptions=(TransientServiceError,),
    logger=logger,
)
def _post_generate(url: str, payload: Dict[str, Any], timeout: float) -> Dict[str, Any]:
    try:
        resp = requests.post(url, json=payload, timeout=timeout)
    except requests.Timeout as e:
        raise LLMTimeoutError(
            f"LLM did not answer within {timeout}s", service_name=SERVICE_NAME, timeout=timeout, cause=e
        ) from e
    except requests.ConnectionError as e:
        raise TransientServiceError(f"Could not reach LLM service: {e}", service_name=SERVICE_NAME, cause=e) from e

    if resp.status_code in RETRYABLE_STATUS:
        raise TransientServiceError(
            f"LLM service unavailable (HTTP {resp.status_code})", service_name=SERVICE_NAME, status_code=resp.status_code
        )
    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        raise ExternalServiceError(
            f"LLM service error (HTTP {resp.status_code})", service_name=SERVICE_NAME, status_code=resp.status_code, cause=e
        ) from e

    try:
        return resp.json()
    except ValueError as e:
        raise MalformedResponseError("LLM service returned a non-JSON body", service_name=SERVICE_NAME, cause=e) from e


def parse_json_object(text: Any) -> Dict[str, Any]:
    """Strict parse of the model's answer; no salvaging of partial JSON."""
    if not isinstance(text, str) or not text.strip():
        raise MalformedResponseError("LLM returned an empty answer", service_name=SERVICE_NAME)
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedResponseError("LLM answer is not valid JSON", service_name=SERVICE_NAME, cause=e) from e
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"LLM answer is JSON {type(data).__name__}, expected an object", service_name=SERVICE_NAME
        )
    return data


def generate_json(system: str, prompt: str, settings: Optional[LLMSettings] = None) -> Dict[str, Any]:
    settings = settings or get_ai_settings().llm_settings
    payload = {
        "model": settings.llm_model,
        "system": system,
        "prompt": prompt,
        "format": "json",
        "options": {"temperature": settings.temperature},
        "stream": False,  # one JSON body, not NDJSON chunks
    }
    body = _post_generate(f"{settings.base_url}/api/generate", payload, settings.timeout)
    if not isinstance(body, dict) or "response" not in body:
        raise MalformedResponseError("LLM service body has no 'response' field", service_name=SERVICE_NAME)
    return parse_json_object(body["response"])


def ping(settings: Optional[LLMSettings] = None) -> bool:
    """True when the configured model is listed by the Ollama server."""
    settings = settings or get_ai_settings().llm_settings
    try:
        resp = requests.get(f"{settings.base_url}/api/tags", timeout=min(settings.timeout, 5.0))
        resp.raise_for_status()
        models = resp.json().get("models", [])
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"LLM availability check failed: {e}")
        return False
    names = {m.get("name") for m in models if isinstance(m, dict)}
    return settings.llm_model in names
