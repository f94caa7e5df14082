# models/response.py
# Match payloads keep the camelCase field names the recruiter UI consumes.
from pydantic import BaseModel
from typing import Dict, List, Optional

from ats_match.models.models import DomainScore, MatchResult, ResultStatus
from ats_match.models.pipeline import ApplicationStatus, RecruitmentStage


class MatchResponse(BaseModel):
    score: int
    matchedSkills: List[str]
    missingSkills: List[str]
    comments: str
    candidateName: Optional[str] = None
    jobTitle: Optional[str] = None
    jobLocation: Optional[str] = None
    status: ResultStatus
    rating: str

    @classmethod
    def from_result(cls, result: MatchResult, rating: str) -> "MatchResponse":
        return cls(
            score=result.score,
            matchedSkills=result.matched_skills,
            missingSkills=result.missing_skills,
            comments=result.comments,
            candidateName=result.candidate_name,
            jobTitle=result.job_title,
            jobLocation=result.job_location,
            status=result.status,
            rating=rating,
        )


class MatchBreakdownResponse(BaseModel):
    match: MatchResponse
    domainScores: List[DomainScore]


class ResumeUploadResponse(BaseModel):
    candidate_id: str
    resume_filename: Optional[str] = None
    extraction_status: ResultStatus
    failure_kind: Optional[str] = None
    message: str = ""
    skills: List[str] = []
    certifications: List[str] = []
    summary: str = ""


class ApplicationView(BaseModel):
    application_id: str
    candidate_id: str
    job_id: str
    status: ApplicationStatus
    status_label: str
    stage: RecruitmentStage


class PipelineSummary(BaseModel):
    total: int
    stages: Dict[str, int]   # keyed by RecruitmentStage value
