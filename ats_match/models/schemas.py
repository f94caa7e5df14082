from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

from ats_match.models.models import EducationEntry, ExperienceEntry
from ats_match.models.pipeline import ApplicationStatus, JobStatus

# -------- Candidates --------
PROFILE_MISSING = "missing"
PROFILE_OK = "ok"
PROFILE_FAILED = "failed"


class CandidateModel(BaseModel):
    """Candidate as served by the API. The stored document also carries
    resume_text, the raw text of the last upload, kept so a failed structuring
    can be redone; it is never returned."""
    candidate_id: str
    name: str
    email: str
    phone: Optional[str] = None
    resume_filename: Optional[str] = None
    skills: List[str] = []
    education: List[EducationEntry] = []
    experience: List[ExperienceEntry] = []
    certifications: List[str] = []
    summary: str = ""
    profile_status: str = PROFILE_MISSING
    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Job Postings --------
class JobPostingModel(BaseModel):
    job_id: str
    title: str
    location: Optional[str] = None
    qualifications: str = ""
    description: str = ""
    requirements: Optional[str] = None
    status: JobStatus = JobStatus.DRAFT
    created_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Applications --------
class ApplicationModel(BaseModel):
    application_id: str
    candidate_id: str
    job_id: str
    status: ApplicationStatus = ApplicationStatus.APPLIED
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# -------- Communication logs --------
class CommunicationLogModel(BaseModel):
    candidate_id: str
    application_id: Optional[str] = None
    type: str = "email"            # email, call, video, in-person, note, sms
    subject: Optional[str] = None
    message: Optional[str] = None
    direction: str = "outbound"    # inbound or outbound
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    metadata: Optional[Dict[str, Any]] = None


# -------- Request bodies --------
class EmailDraftRequest(BaseModel):
    job_id: str
    status: str
    additional_context: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: str
