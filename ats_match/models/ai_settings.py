"""
AI Settings Models for Configuration Management
"""
from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from enum import Enum


class ModelType(str, Enum):
    """Available model types"""
    LLM = "llm"


class LLMSettings(BaseModel):
    """LLM Configuration Settings"""
    llm_model: str = Field(default="llama3.1:8b", description="LLM model name")
    base_url: str = Field(default="http://localhost:11434", description="Ollama base URL")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Generation temperature")
    timeout: float = Field(default=30.0, ge=1, le=300, description="Per-request timeout in seconds")

    @validator('base_url')
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


class ProcessingSettings(BaseModel):
    """Retry, deadline and upload limits around AI requests"""
    max_retries: int = Field(default=1, ge=0, le=2, description="Extra attempts for transient failures")
    retry_backoff: float = Field(default=0.5, ge=0.0, le=10.0, description="Base backoff between retries in seconds")
    match_deadline: float = Field(default=90.0, ge=1, le=600, description="Overall deadline for one match request in seconds")
    max_resume_bytes: int = Field(default=5 * 1024 * 1024, ge=1, description="Largest accepted resume upload")


class AISettings(BaseModel):
    """Effective AI configuration of this deployment"""
    llm_settings: LLMSettings = Field(default_factory=LLMSettings)
    processing_settings: ProcessingSettings = Field(default_factory=ProcessingSettings)
    environment: str = "development"


class ModelStatus(BaseModel):
    """Model availability status"""
    llm_model: str
    model_type: ModelType
    is_available: bool
    status: str
    last_checked: datetime
    response_time_ms: Optional[float] = None
    error_message: Optional[str] = None
