from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ResultStatus(str, Enum):
    OK = "ok"
    ERROR = "error"


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    SERVICE_ERROR = "service_error"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_DOCUMENT = "empty_document"


class EducationEntry(BaseModel):
    institution: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    graduation_date: Optional[str] = None


class ExperienceEntry(BaseModel):
    company: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    description: Optional[str] = None


class CandidateProfile(BaseModel):
    skills: List[str] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    summary: str = ""

    def is_empty(self) -> bool:
        return not (self.skills or self.education or self.experience
                    or self.certifications or self.summary)


class ExtractionResult(BaseModel):
    """Outcome of structuring one resume: the profile, or why there is none."""
    status: ResultStatus
    profile: CandidateProfile = Field(default_factory=CandidateProfile)
    failure_kind: Optional[FailureKind] = None
    message: str = ""

    @property
    def extraction_failed(self) -> bool:
        return self.status == ResultStatus.ERROR

    @classmethod
    def ok(cls, profile: CandidateProfile) -> "ExtractionResult":
        return cls(status=ResultStatus.OK, profile=profile)

    @classmethod
    def failed(cls, kind: FailureKind, message: str) -> "ExtractionResult":
        return cls(status=ResultStatus.ERROR, profile=CandidateProfile(), failure_kind=kind, message=message)


class JobRequirements(BaseModel):
    title: str = ""
    qualifications: str = ""
    description: str = ""
    requirements: str = ""
    location: Optional[str] = None

    @property
    def text(self) -> str:
        sections = [
            ("Qualifications", self.qualifications),
            ("Description", self.description),
            ("Requirements", self.requirements),
        ]
        return "\n\n".join(f"{heading}:\n{body.strip()}" for heading, body in sections if body and body.strip())


class MatchResult(BaseModel):
    score: int = Field(default=0, ge=0, le=100)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    comments: str = ""
    candidate_name: Optional[str] = None
    job_title: Optional[str] = None
    job_location: Optional[str] = None
    status: ResultStatus = ResultStatus.OK
    failure_kind: Optional[FailureKind] = None

    @property
    def is_ok(self) -> bool:
        return self.status == ResultStatus.OK

    @classmethod
    def unavailable(cls, kind: FailureKind, reason: str) -> "MatchResult":
        return cls(
            score=0,
            comments=f"Match analysis unavailable ({reason}). Please try again later.",
            status=ResultStatus.ERROR,
            failure_kind=kind,
        )


class Domain(str, Enum):
    QUALIFICATIONS = "Qualifications"
    EXPERIENCE = "Experience"
    TECHNICAL_SKILLS = "Technical Skills"
    SOFT_SKILLS = "Soft Skills"
    CULTURAL_FIT = "Cultural Fit"


class DomainScore(BaseModel):
    subject: Domain
    value: float = Field(ge=0.0, le=100.0)


class EmailDraft(BaseModel):
    subject: str
    body: str
    status: ResultStatus = ResultStatus.OK
    failure_kind: Optional[FailureKind] = None


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class SentimentAnalysis(BaseModel):
    sentiment: Sentiment = Sentiment.NEUTRAL
    engagement_level: int = Field(default=0, ge=0, le=10)
    key_topics: List[str] = Field(default_factory=list)
    suggestions: str = ""
    status: ResultStatus = ResultStatus.OK
    failure_kind: Optional[FailureKind] = None
