from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pymongo import ReturnDocument

from ats_match.models.pipeline import parse_status, stage_counts, status_label, status_to_stage
from ats_match.models.response import ApplicationView, PipelineSummary
from ats_match.models.schemas import ApplicationModel, StatusUpdateRequest
from ats_match.services.db import applications_coll
from ats_match.utils.exceptions import ExceptionContext
from ats_match.utils.logging_config import get_logger
from ats_match.utils.utils import validate_id

router = APIRouter()
logger = get_logger(__name__)


def application_view(doc) -> ApplicationView:
    application = ApplicationModel(**{**doc, "status": parse_status(doc.get("status"))})
    status = application.status
    return ApplicationView(
        application_id=application.application_id,
        candidate_id=application.candidate_id,
        job_id=application.job_id,
        status=status,
        status_label=status_label(status),
        stage=status_to_stage(status),
    )


@router.get("/", response_model=List[ApplicationView])
async def list_applications(status: Optional[str] = Query(None, description="Filter by application status")):
    """Get all applications, optionally only those with one status"""
    query = {}
    if status is not None:
        query["status"] = parse_status(status).value
    cursor = applications_coll.find(query)
    applications = await cursor.to_list(length=None)
    return [application_view(a) for a in applications]


@router.get("/pipeline", response_model=PipelineSummary)
async def pipeline_summary():
    """Number of applications in each recruitment stage"""
    cursor = applications_coll.find({}, {"status": 1})
    applications = await cursor.to_list(length=None)
    statuses = [parse_status(a.get("status")) for a in applications]
    counts = stage_counts(statuses)
    return PipelineSummary(total=len(statuses), stages={stage.value: n for stage, n in counts.items()})


@router.patch("/{application_id}/status", response_model=ApplicationView)
async def update_application_status(application_id: str, update: StatusUpdateRequest):
    """Move an application to a new status"""
    application_id = validate_id(application_id, "applicationId")
    status = parse_status(update.status)
    with ExceptionContext("update application status", logger, application_id=application_id):
        doc = await applications_coll.find_one_and_update(
            {"application_id": application_id},
            {"$set": {"status": status.value, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        raise HTTPException(status_code=404, detail="Application not found")
    logger.info(f"Application {application_id} moved to {status.value}")
    return application_view(doc)
