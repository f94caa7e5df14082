import asyncio

from fastapi import APIRouter, File, Query, UploadFile
from typing import List, Optional

from ats_match.models.models import EmailDraft, FailureKind, MatchResult, SentimentAnalysis
from ats_match.models.pipeline import parse_status, status_label
from ats_match.models.response import MatchBreakdownResponse, MatchResponse, ResumeUploadResponse
from ats_match.models.schemas import CandidateModel, CommunicationLogModel, EmailDraftRequest
from ats_match.services import match_service
from ats_match.services.communication import (
    analyze_candidate_sentiment,
    fallback_email,
    generate_personalized_email,
    sentiment_unavailable,
)
from ats_match.services.db import candidates_coll, communication_logs_coll
from ats_match.services.decomposition import decompose
from ats_match.services.matching import score_rating
from ats_match.utils.exceptions import ScoringFailedError
from ats_match.utils.logging_config import get_logger
from ats_match.utils.utils import get_ai_settings, validate_id

router = APIRouter()
logger = get_logger(__name__)


async def _match_or_raise(candidate_id: str, job_id: Optional[str]) -> MatchResult:
    candidate_id = validate_id(candidate_id, "candidateId")
    job_id = validate_id(job_id, "jobId")
    result = await match_service.get_candidate_match(candidate_id, job_id)
    if not result.is_ok:
        raise ScoringFailedError(
            "Match scoring failed. Please try again later.",
            candidate_id=candidate_id,
            job_id=job_id,
            failure_kind=result.failure_kind.value if result.failure_kind else None,
        )
    return result


@router.get("/", response_model=List[CandidateModel])
async def list_candidates():
    """Get all candidates"""
    cursor = candidates_coll.find({}, {"resume_text": 0})
    candidates = await cursor.to_list(length=None)
    return [CandidateModel(**c) for c in candidates]


@router.get("/{candidate_id}", response_model=CandidateModel)
async def get_candidate(candidate_id: str):
    """Get one candidate with its structured profile"""
    candidate = await match_service.load_candidate(validate_id(candidate_id, "candidateId"))
    return CandidateModel(**candidate)


@router.post("/{candidate_id}/resume", response_model=ResumeUploadResponse)
async def upload_resume(candidate_id: str, file: UploadFile = File(...)):
    """Upload a PDF or plain text resume and re-extract the candidate profile"""
    candidate_id = validate_id(candidate_id, "candidateId")
    # at most one byte past the limit
    document = await file.read(get_ai_settings().processing_settings.max_resume_bytes + 1)
    logger.info(f"Resume upload for {candidate_id}: {file.filename} ({file.content_type}, {len(document)} bytes)")
    return await match_service.upload_resume(candidate_id, document, file.content_type, file.filename)


@router.get("/{candidate_id}/match", response_model=MatchResponse)
async def get_match(candidate_id: str, job_id: Optional[str] = Query(None, alias="jobId")):
    """Score a candidate against a job posting"""
    result = await _match_or_raise(candidate_id, job_id)
    return MatchResponse.from_result(result, score_rating(result.score))


@router.get("/{candidate_id}/match/breakdown", response_model=MatchBreakdownResponse)
async def get_match_breakdown(candidate_id: str, job_id: Optional[str] = Query(None, alias="jobId")):
    """Match plus the five radar-chart domain scores (display only)"""
    result = await _match_or_raise(candidate_id, job_id)
    return MatchBreakdownResponse(
        match=MatchResponse.from_result(result, score_rating(result.score)),
        domainScores=decompose(result),
    )


@router.post("/{candidate_id}/email-draft", response_model=EmailDraft)
async def draft_email(candidate_id: str, request: EmailDraftRequest):
    """Draft a personalized status-update email for the candidate"""
    candidate = await match_service.load_candidate(validate_id(candidate_id, "candidateId"))
    job = await match_service.load_job(validate_id(request.job_id, "jobId"))
    name = candidate.get("name") or "Candidate"
    title = job.get("title", "")
    label = status_label(parse_status(request.status))
    try:
        return await match_service.run_blocking(
            generate_personalized_email,
            name,
            title,
            label,
            request.additional_context,
            timeout=get_ai_settings().processing_settings.match_deadline,
        )
    except asyncio.TimeoutError:
        logger.error(f"Email draft for {candidate_id} exceeded the deadline; using the fallback template")
        return fallback_email(name, title, label, FailureKind.TIMEOUT)


@router.post("/{candidate_id}/sentiment", response_model=SentimentAnalysis)
async def analyze_sentiment(candidate_id: str):
    """Sentiment and engagement over the candidate's communication logs"""
    candidate_id = validate_id(candidate_id, "candidateId")
    await match_service.load_candidate(candidate_id)
    cursor = communication_logs_coll.find({"candidate_id": candidate_id}).sort("timestamp", 1)
    logs = await cursor.to_list(length=None)
    messages = [CommunicationLogModel(**log).message or "" for log in logs]
    try:
        return await match_service.run_blocking(
            analyze_candidate_sentiment,
            messages,
            timeout=get_ai_settings().processing_settings.match_deadline,
        )
    except asyncio.TimeoutError:
        logger.error(f"Sentiment analysis for {candidate_id} exceeded the deadline")
        return sentiment_unavailable(FailureKind.TIMEOUT)
