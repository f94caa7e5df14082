"""
Candidate communication helpers: status-update email drafts and sentiment
analysis over a candidate's communication history.

Both degrade to a fixed, usable answer tagged error when the model fails,
so the recruiter UI always has something to show.
"""
from typing import List, Optional

from ats_match.helpers.prompts import EMAIL_PROMPT, EMAIL_SYSTEM, SENTIMENT_PROMPT, SENTIMENT_SYSTEM
from ats_match.models.models import EmailDraft, FailureKind, ResultStatus, Sentiment, SentimentAnalysis
from ats_match.services import llm
from ats_match.utils.exceptions import ExternalServiceError, LLMTimeoutError, MalformedResponseError
from ats_match.utils.logging_config import PerformanceMonitor, get_logger
from ats_match.utils.utils import ORGANIZATION_NAME, as_list, as_text

logger = get_logger(__name__)


def _failure_kind(exc: ExternalServiceError) -> FailureKind:
    if isinstance(exc, LLMTimeoutError):
        return FailureKind.TIMEOUT
    if isinstance(exc, MalformedResponseError):
        return FailureKind.MALFORMED_RESPONSE
    return FailureKind.SERVICE_ERROR


def fallback_email(candidate_name: str, job_title: str, status: str,
                   failure_kind: Optional[FailureKind] = None) -> EmailDraft:
    body = (
        f"<p>Dear {candidate_name},</p>\n"
        f"<p>Thank you for your interest in the {job_title} position at {ORGANIZATION_NAME}.</p>\n"
        f"<p>We wanted to inform you that your application status has been updated to: {status}.</p>\n"
        "<p>If you have any questions, please don't hesitate to contact us.</p>\n"
        f"<p>Best regards,<br/>{ORGANIZATION_NAME} Recruitment Team</p>"
    )
    return EmailDraft(
        subject=f"Update on your application for {job_title}",
        body=body,
        status=ResultStatus.ERROR,
        failure_kind=failure_kind,
    )


def generate_personalized_email(candidate_name: str, job_title: str, status: str,
                                additional_context: Optional[str] = None) -> EmailDraft:
    """Draft a status-update email; the fixed template is returned when the model fails."""
    prompt = EMAIL_PROMPT.format(
        candidate_name=candidate_name,
        job_title=job_title,
        status=status,
        context=additional_context or "None provided",
    )
    try:
        with PerformanceMonitor("email draft", logger, threshold_ms=10000):
            data = llm.generate_json(EMAIL_SYSTEM.format(organization=ORGANIZATION_NAME), prompt)
        subject, body = as_text(data.get("subject")), as_text(data.get("body"))
        if not subject or not body:
            raise MalformedResponseError("email draft is missing subject or body")
        return EmailDraft(subject=subject, body=body)
    except ExternalServiceError as e:
        logger.error(f"Email draft failed for {candidate_name}: {e.message}")
        return fallback_email(candidate_name, job_title, status, _failure_kind(e))


def sentiment_unavailable(failure_kind: FailureKind) -> SentimentAnalysis:
    return SentimentAnalysis(
        engagement_level=5,
        suggestions="Error analyzing communications. Please try again later.",
        status=ResultStatus.ERROR,
        failure_kind=failure_kind,
    )


def _sentiment(raw) -> Sentiment:
    try:
        return Sentiment(str(raw).strip().lower())
    except ValueError:
        logger.debug(f"Unknown sentiment label {raw!r}, using neutral")
        return Sentiment.NEUTRAL


def _engagement(raw) -> int:
    if isinstance(raw, bool):
        return 0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0
    if value != value:  # NaN
        return 0
    return int(round(max(0.0, min(10.0, value))))


def analyze_candidate_sentiment(messages: List[str]) -> SentimentAnalysis:
    messages = [m.strip() for m in messages or [] if m and m.strip()]
    if not messages:
        return SentimentAnalysis(suggestions="No communication data to analyze.")

    try:
        with PerformanceMonitor("sentiment analysis", logger, threshold_ms=10000):
            data = llm.generate_json(SENTIMENT_SYSTEM, SENTIMENT_PROMPT.format(logs="\n\n".join(messages)))
    except ExternalServiceError as e:
        logger.error(f"Sentiment analysis failed: {e.message}")
        return sentiment_unavailable(_failure_kind(e))

    return SentimentAnalysis(
        sentiment=_sentiment(data.get("sentiment")),
        engagement_level=_engagement(data.get("engagementLevel", data.get("engagement_level"))),
        key_topics=as_list(data.get("keyTopics", data.get("key_topics"))),
        suggestions=as_text(data.get("suggestions")),
    )
