from typing import Any, Dict, List

from ats_match.helpers.prompts import SCORING_PROMPT, SCORING_SYSTEM
from ats_match.models.models import CandidateProfile, FailureKind, JobRequirements, MatchResult
from ats_match.services import llm
from ats_match.utils.exceptions import (
    ExternalServiceError,
    LLMTimeoutError,
    MalformedResponseError,
)
from ats_match.utils.logging_config import get_logger
from ats_match.utils.utils import as_list, unique_casefold

logger = get_logger(__name__)

RATING_BANDS = [
    (90, "Excellent Match"),
    (75, "Strong Match"),
    (60, "Good Match"),
    (45, "Moderate Match"),
]


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def score_rating(score: int) -> str:
    for floor, label in RATING_BANDS:
        if score >= floor:
            return label
    return "Low Match"


def profile_to_text(profile: CandidateProfile) -> str:
    lines = []
    if profile.summary:
        lines.append(f"Summary: {profile.summary}")
    if profile.skills:
        lines.append(f"Skills: {', '.join(profile.skills)}")
    if profile.certifications:
        lines.append(f"Certifications: {', '.join(profile.certifications)}")
    if profile.education:
        lines.append("Education:")
        for ed in profile.education:
            parts = [p for p in (ed.degree, ed.field, ed.institution, ed.graduation_date) if p]
            lines.append(f"- {', '.join(parts)}")
    if profile.experience:
        lines.append("Experience:")
        for ex in profile.experience:
            period = " - ".join(p for p in (ex.start_date, ex.end_date) if p)
            head = ", ".join(p for p in (ex.position, ex.company, period) if p)
            lines.append(f"- {head}" + (f": {ex.description}" if ex.description else ""))
    return "\n".join(lines) or "(no candidate information available)"


def _score(raw: Any) -> int:
    if isinstance(raw, bool) or raw is None:
        raise MalformedResponseError(f"score is not a number: {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"score is not a number: {raw!r}", cause=e) from e
    if value != value:  # NaN
        raise MalformedResponseError("score is NaN")
    return int(round(clamp(value)))


def _skills(data: Dict[str, Any], key: str) -> List[str]:
    if key not in data or not isinstance(data[key], (list, str)):
        raise MalformedResponseError(f"'{key}' missing or not a list")
    return unique_casefold(as_list(data[key]))


def result_from_llm(data: Dict[str, Any]) -> MatchResult:
    """Validate and normalize the scoring answer; out-of-range scores are clamped, not rejected."""
    if "score" not in data:
        raise MalformedResponseError("'score' missing from scoring answer")
    comments = data.get("comments")
    return MatchResult(
        score=_score(data["score"]),
        matched_skills=_skills(data, "matchedSkills"),
        missing_skills=_skills(data, "missingSkills"),
        comments=comments.strip() if isinstance(comments, str) else "",
    )


def score_match(profile: CandidateProfile, requirements: JobRequirements) -> MatchResult:
    prompt = SCORING_PROMPT.format(
        profile=profile_to_text(profile),
        title=requirements.title or "untitled position",
        requirements=requirements.text or "(no requirements listed)",
    )
    try:
        result = result_from_llm(llm.generate_json(SCORING_SYSTEM, prompt))
    except LLMTimeoutError as e:
        logger.error(f"Match scoring timed out: {e.message}")
        result = MatchResult.unavailable(FailureKind.TIMEOUT, "the AI service timed out")
    except MalformedResponseError as e:
        logger.error(f"Match scoring returned malformed output: {e.message}")
        result = MatchResult.unavailable(FailureKind.MALFORMED_RESPONSE, "the AI service returned an invalid answer")
    except ExternalServiceError as e:
        logger.error(f"Match scoring service failed: {e.message}")
        result = MatchResult.unavailable(FailureKind.SERVICE_ERROR, "the AI service is unavailable")

    result.job_title = requirements.title or None
    result.job_location = requirements.location
    if result.is_ok:
        logger.info(
            f"Match scored {result.score} ({len(result.matched_skills)} matched, "
            f"{len(result.missing_skills)} missing) for '{requirements.title}'"
        )
    return result
