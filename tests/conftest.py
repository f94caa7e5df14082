import json
import os

# must be set before ats_match modules read their settings at import
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LLM_MAX_RETRIES", "1")
os.environ.setdefault("LLM_RETRY_BACKOFF", "0")

from unittest.mock import MagicMock

import pytest
import requests


def _llm_response(payload=None, status_code=200, raw=None):
    resp = MagicMock()
    resp.status_code = status_code
    answer = raw if raw is not None else json.dumps(payload)
    resp.json.return_value = {"response": answer}
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    return resp


@pytest.fixture
def llm_response():
    """Factory for fake requests.Response objects from the Ollama generate endpoint"""
    return _llm_response


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip retry backoff sleeps"""
    sleep = MagicMock()
    monkeypatch.setattr("ats_match.utils.exceptions.time.sleep", sleep)
    return sleep
