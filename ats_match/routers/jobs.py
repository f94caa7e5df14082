from fastapi import APIRouter, Query
from typing import List

from ats_match.models.pipeline import JobStatus
from ats_match.models.schemas import JobPostingModel
from ats_match.services.db import job_postings_coll
from ats_match.services.match_service import load_job
from ats_match.utils.utils import validate_id

router = APIRouter()


@router.get("/", response_model=List[JobPostingModel])
async def list_job_postings():
    """Get all job postings in the system"""
    cursor = job_postings_coll.find({})
    jobs = await cursor.to_list(length=None)
    return [JobPostingModel(**job) for job in jobs]


# registered before /{job_id} so "status" is not taken for an id
@router.get("/status", response_model=List[JobPostingModel])
async def list_job_postings_by_status(status: JobStatus = Query(..., description="Job status (draft, active or closed)")):
    """Get all job postings with a specific status"""
    cursor = job_postings_coll.find({"status": status.value})
    jobs = await cursor.to_list(length=None)
    return [JobPostingModel(**job) for job in jobs]


@router.get("/{job_id}", response_model=JobPostingModel)
async def get_job_posting(job_id: str):
    """Get one job posting"""
    job = await load_job(validate_id(job_id, "jobId"))
    return JobPostingModel(**job)
