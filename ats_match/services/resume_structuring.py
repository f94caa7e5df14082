"""
Resume structuring: document bytes -> text -> one LLM call -> CandidateProfile.

Unsupported formats raise before anything else happens. Every failure after
that point comes back as an ExtractionResult tagged error with an all-empty
profile, so callers never mistake a failed extraction for a blank resume.
"""
from typing import Any, Dict, List, Optional

from ats_match.helpers.parsing import extract_document_text
from ats_match.helpers.prompts import EXTRACT_PROMPT, EXTRACT_SYSTEM
from ats_match.models.models import (
    CandidateProfile,
    EducationEntry,
    ExperienceEntry,
    ExtractionResult,
    FailureKind,
)
from ats_match.services import llm
from ats_match.utils.exceptions import (
    ExternalServiceError,
    LLMTimeoutError,
    MalformedResponseError,
)
from ats_match.utils.logging_config import get_logger, log_function_call
from ats_match.utils.utils import as_list, as_text, unique_casefold

logger = get_logger(__name__)

# LLM text beyond this is dropped; resumes rarely run past a few pages
MAX_PROMPT_CHARS = 24000


def _pick(data: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = as_text(data.get(key))
        if value:
            return value
    return None


def _education(raw: Any) -> List[EducationEntry]:
    entries = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        entry = EducationEntry(
            institution=_pick(item, "institution", "school"),
            degree=_pick(item, "degree"),
            field=_pick(item, "field", "fieldOfStudy"),
            graduation_date=_pick(item, "graduationDate", "graduation_date"),
        )
        if any(entry.dict().values()):
            entries.append(entry)
    return entries


def _experience(raw: Any) -> List[ExperienceEntry]:
    entries = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        entry = ExperienceEntry(
            company=_pick(item, "company", "employer"),
            position=_pick(item, "position", "title", "role"),
            start_date=_pick(item, "startDate", "start_date"),
            end_date=_pick(item, "endDate", "end_date"),
            description=_pick(item, "description"),
        )
        if any(entry.dict().values()):
            entries.append(entry)
    return entries


def profile_from_llm(data: Dict[str, Any]) -> CandidateProfile:
    """Coerce the model's JSON into a CandidateProfile, tolerating nulls and stringly lists."""
    return CandidateProfile(
        skills=unique_casefold(as_list(data.get("skills"))),
        education=_education(data.get("education")),
        experience=_experience(data.get("experience")),
        certifications=unique_casefold(as_list(data.get("certifications"))),
        summary=as_text(data.get("summary")),
    )


def structure_text(text: str) -> ExtractionResult:
    """Run the extraction call on already-extracted resume text."""
    if not text or not text.strip():
        logger.warning("Resume has no extractable text; skipping LLM call")
        return ExtractionResult.failed(FailureKind.EMPTY_DOCUMENT, "The resume contains no readable text")

    try:
        data = llm.generate_json(EXTRACT_SYSTEM, EXTRACT_PROMPT.format(doc=text[:MAX_PROMPT_CHARS]))
    except LLMTimeoutError as e:
        logger.error(f"Resume extraction timed out: {e.message}")
        return ExtractionResult.failed(FailureKind.TIMEOUT, e.message)
    except MalformedResponseError as e:
        logger.error(f"Resume extraction returned malformed output: {e.message}")
        return ExtractionResult.failed(FailureKind.MALFORMED_RESPONSE, e.message)
    except ExternalServiceError as e:
        logger.error(f"Resume extraction service failed: {e.message}")
        return ExtractionResult.failed(FailureKind.SERVICE_ERROR, e.message)

    profile = profile_from_llm(data)
    logger.info(
        f"Resume structured: {len(profile.skills)} skills, {len(profile.education)} education, "
        f"{len(profile.experience)} experience, {len(profile.certifications)} certifications"
    )
    return ExtractionResult.ok(profile)


@log_function_call
def extract_profile(document: bytes, mime_type: Optional[str], filename: Optional[str] = None) -> ExtractionResult:
    """Structured profile for one resume document (PDF or plain text).

    Raises UnsupportedFormatError for DOC/DOCX and any other format, and
    DocumentReadError when a PDF cannot be opened at all.
    """
    text = extract_document_text(document, mime_type, filename)
    return structure_text(text)
