"""
AI Settings Router - read-only view of the effective AI configuration
"""
import time
from datetime import datetime

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from ats_match.models.ai_settings import AISettings, ModelStatus, ModelType
from ats_match.services import llm
from ats_match.utils.logging_config import get_logger
from ats_match.utils.utils import get_ai_settings

router = APIRouter(prefix="/ai-settings", tags=["ai-settings"])
logger = get_logger(__name__)


@router.get("/current", response_model=AISettings)
async def get_current_settings():
    """Get the settings this deployment runs with"""
    return get_ai_settings()


@router.get("/models/status", response_model=ModelStatus)
async def get_model_status():
    """Check that the configured LLM is served by Ollama"""
    settings = get_ai_settings().llm_settings
    start_time = time.time()
    available = await run_in_threadpool(llm.ping, settings)
    response_time = (time.time() - start_time) * 1000
    if not available:
        logger.warning(f"Configured model {settings.llm_model} is not available at {settings.base_url}")
    return ModelStatus(
        llm_model=settings.llm_model,
        model_type=ModelType.LLM,
        is_available=available,
        status="available" if available else "unavailable",
        last_checked=datetime.utcnow(),
        response_time_ms=response_time,
        error_message=None if available else f"Model not listed by {settings.base_url}",
    )
