"""
Match orchestration: candidate + job from MongoDB -> profile -> score.

The structured profile stored on the candidate is reused when present;
otherwise it is extracted from the stored resume text and written back
(last write wins). Blocking LLM work runs in the default executor under one
overall deadline, and concurrent requests for the same (candidate, job) pair
share a single computation.
"""
import asyncio
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import HTTPException

from ats_match.helpers.parsing import detect_format, extract_document_text
from ats_match.models.models import (
    CandidateProfile,
    EducationEntry,
    ExperienceEntry,
    ExtractionResult,
    FailureKind,
    JobRequirements,
    MatchResult,
)
from ats_match.models.response import ResumeUploadResponse
from ats_match.models.schemas import PROFILE_FAILED, PROFILE_OK
from ats_match.services.db import candidates_coll, job_postings_coll
from ats_match.services.inflight import InFlightRequests
from ats_match.services.matching import score_match
from ats_match.services.resume_structuring import structure_text
from ats_match.utils.exceptions import ExceptionContext, ExtractionFailedError, ValidationError
from ats_match.utils.logging_config import PerformanceMonitor, get_logger
from ats_match.utils.utils import get_ai_settings, unique_casefold

logger = get_logger(__name__)

match_requests = InFlightRequests()


def candidate_profile(doc: Dict[str, Any]) -> CandidateProfile:
    return CandidateProfile(
        skills=unique_casefold(doc.get("skills") or []),
        education=[EducationEntry(**e) for e in doc.get("education") or [] if isinstance(e, dict)],
        experience=[ExperienceEntry(**e) for e in doc.get("experience") or [] if isinstance(e, dict)],
        certifications=unique_casefold(doc.get("certifications") or []),
        summary=doc.get("summary") or "",
    )


def job_requirements(doc: Dict[str, Any]) -> JobRequirements:
    return JobRequirements(
        title=doc.get("title") or "",
        qualifications=doc.get("qualifications") or "",
        description=doc.get("description") or "",
        requirements=doc.get("requirements") or "",
        location=doc.get("location"),
    )


async def load_candidate(candidate_id: str) -> Dict[str, Any]:
    candidate = await candidates_coll.find_one({"candidate_id": candidate_id})
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


async def load_job(job_id: str) -> Dict[str, Any]:
    job = await job_postings_coll.find_one({"job_id": job_id})
    if not job:
        raise HTTPException(status_code=404, detail="Job posting not found")
    return job


async def run_blocking(func: Callable, *args, timeout: float):
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(loop.run_in_executor(None, func, *args), timeout=max(timeout, 0.001))


async def update_candidate(candidate_id: str, fields: Dict[str, Any]):
    with ExceptionContext("update candidate", logger, candidate_id=candidate_id):
        await candidates_coll.update_one(
            {"candidate_id": candidate_id},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
        )


async def save_profile(candidate_id: str, profile: CandidateProfile, extra: Optional[Dict[str, Any]] = None):
    await update_candidate(candidate_id, {**profile.dict(), "profile_status": PROFILE_OK, **(extra or {})})


async def _structure(text: str, timeout: float) -> ExtractionResult:
    try:
        return await run_blocking(structure_text, text, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"Resume structuring exceeded the {timeout:.1f}s deadline")
        return ExtractionResult.failed(FailureKind.TIMEOUT, "Resume extraction timed out")


async def ensure_profile(candidate: Dict[str, Any], timeout: float) -> CandidateProfile:
    """Stored profile, or a freshly extracted one when the last extraction is missing or failed.

    Stored fields are scored as-is only while no extraction has been attempted;
    a failed extraction with no resume text left is an extraction failure.
    """
    candidate_id = candidate["candidate_id"]
    if candidate.get("profile_status") == PROFILE_OK:
        return candidate_profile(candidate)

    resume_text = (candidate.get("resume_text") or "").strip()
    if not resume_text:
        if candidate.get("profile_status") == PROFILE_FAILED:
            # the stored fields belong to a replaced resume
            raise ExtractionFailedError(
                "The latest resume contains no readable text",
                candidate_id=candidate_id,
                failure_kind=FailureKind.EMPTY_DOCUMENT.value,
            )
        logger.info(f"Candidate {candidate_id} has no resume on file; scoring stored fields only")
        return candidate_profile(candidate)

    extraction = await _structure(resume_text, timeout)
    if extraction.extraction_failed:
        await update_candidate(candidate_id, {"profile_status": PROFILE_FAILED})
        raise ExtractionFailedError(
            f"Could not extract a profile from the resume: {extraction.message}",
            candidate_id=candidate_id,
            failure_kind=extraction.failure_kind.value,
        )
    await save_profile(candidate_id, extraction.profile)
    return extraction.profile


async def compute_match(candidate: Dict[str, Any], job: Dict[str, Any]) -> MatchResult:
    loop = asyncio.get_running_loop()
    deadline_at = loop.time() + get_ai_settings().processing_settings.match_deadline

    profile = await ensure_profile(candidate, timeout=deadline_at - loop.time())
    remaining = deadline_at - loop.time()
    try:
        result = await run_blocking(score_match, profile, job_requirements(job), timeout=remaining)
    except asyncio.TimeoutError:
        logger.error(f"Match scoring exceeded the deadline for candidate {candidate['candidate_id']}")
        result = MatchResult.unavailable(FailureKind.TIMEOUT, "the AI service timed out")
        result.job_title = job.get("title")
        result.job_location = job.get("location")
    result.candidate_name = candidate.get("name")
    return result


async def get_candidate_match(candidate_id: str, job_id: str) -> MatchResult:
    """Match result for one pair; the result may be tagged error, never raised for scoring failures."""
    candidate = await load_candidate(candidate_id)
    job = await load_job(job_id)

    async def compute():
        with PerformanceMonitor(f"match {candidate_id}/{job_id}", logger, threshold_ms=15000):
            return await compute_match(candidate, job)

    return await match_requests.run((candidate_id, job_id), compute)


async def upload_resume(candidate_id: str, document: bytes, mime_type: Optional[str], filename: Optional[str]) -> ResumeUploadResponse:
    """Replace the candidate's resume and re-derive the structured profile from it."""
    await load_candidate(candidate_id)

    settings = get_ai_settings().processing_settings
    if not document:
        raise ValidationError("Uploaded resume is empty", field="resume")
    if len(document) > settings.max_resume_bytes:
        raise ValidationError(
            f"Resume exceeds the {settings.max_resume_bytes} byte limit",
            field="resume",
            value=len(document),
        )
    # fail fast on DOC/DOCX and friends before any parsing work
    detect_format(mime_type, filename)

    loop = asyncio.get_running_loop()
    deadline_at = loop.time() + settings.match_deadline
    text = await loop.run_in_executor(None, extract_document_text, document, mime_type, filename)
    extraction = await _structure(text, timeout=deadline_at - loop.time())

    resume_fields = {"resume_filename": filename, "resume_text": text}
    if extraction.extraction_failed:
        # keep the previous structured fields; only the status records the failure
        await update_candidate(candidate_id, {**resume_fields, "profile_status": PROFILE_FAILED})
        logger.warning(f"Resume stored for {candidate_id} but extraction failed: {extraction.message}")
    else:
        await save_profile(candidate_id, extraction.profile, extra=resume_fields)
        logger.info(f"Resume stored and structured for candidate {candidate_id}")

    return ResumeUploadResponse(
        candidate_id=candidate_id,
        resume_filename=filename,
        extraction_status=extraction.status,
        failure_kind=extraction.failure_kind.value if extraction.failure_kind else None,
        message=extraction.message,
        skills=extraction.profile.skills,
        certifications=extraction.profile.certifications,
        summary=extraction.profile.summary,
    )
