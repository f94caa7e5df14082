"""
Application statuses and how they map onto the recruitment pipeline.

Every mapping here is total over ApplicationStatus; strings coming from the
database or a request go through parse_status first, so an unknown status
fails loudly instead of landing in the wrong stage.
"""
from enum import Enum
from typing import Dict, Iterable

from ats_match.utils.exceptions import ValidationError


class ApplicationStatus(str, Enum):
    APPLIED = "applied"
    IN_REVIEW = "in_review"
    INTERVIEW = "interview"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    HIRED = "hired"
    REJECTED = "rejected"


class JobStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


class RecruitmentStage(str, Enum):
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    HIRED = "Hired"
    REJECTED = "Rejected"


_STAGE_BY_STATUS: Dict[ApplicationStatus, RecruitmentStage] = {
    ApplicationStatus.APPLIED: RecruitmentStage.APPLIED,
    ApplicationStatus.IN_REVIEW: RecruitmentStage.SCREENING,
    ApplicationStatus.INTERVIEW: RecruitmentStage.INTERVIEW,
    ApplicationStatus.INTERVIEWED: RecruitmentStage.INTERVIEW,
    ApplicationStatus.OFFERED: RecruitmentStage.OFFER,
    ApplicationStatus.HIRED: RecruitmentStage.HIRED,
    ApplicationStatus.REJECTED: RecruitmentStage.REJECTED,
}

_LABEL_BY_STATUS: Dict[ApplicationStatus, str] = {
    ApplicationStatus.APPLIED: "Applied",
    ApplicationStatus.IN_REVIEW: "In Review",
    ApplicationStatus.INTERVIEW: "Interview",
    ApplicationStatus.INTERVIEWED: "Interviewed",
    ApplicationStatus.OFFERED: "Offered",
    ApplicationStatus.HIRED: "Hired",
    ApplicationStatus.REJECTED: "Rejected",
}


def parse_status(raw) -> ApplicationStatus:
    if isinstance(raw, ApplicationStatus):
        return raw
    try:
        return ApplicationStatus(str(raw).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown application status: {raw!r}",
            field="status",
            value=raw,
            details={"allowed": [s.value for s in ApplicationStatus]},
        )


def status_to_stage(status: ApplicationStatus) -> RecruitmentStage:
    return _STAGE_BY_STATUS[parse_status(status)]


def status_label(status: ApplicationStatus) -> str:
    return _LABEL_BY_STATUS[parse_status(status)]


def stage_counts(statuses: Iterable[ApplicationStatus]) -> Dict[RecruitmentStage, int]:
    """Number of applications per stage; every stage is present, zero or not."""
    counts = {stage: 0 for stage in RecruitmentStage}
    for status in statuses:
        counts[status_to_stage(status)] += 1
    return counts
