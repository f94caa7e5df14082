import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

JOB = {
    "job_id": "job_1",
    "title": "Early Childhood Teacher",
    "location": "Brisbane",
    "qualifications": "Bachelor of Early Childhood Education",
    "description": "Lead a preschool room.",
    "status": "active",
}


@pytest.fixture
def test_app():
    from fastapi import FastAPI
    from ats_match.middleware.error_handlers import ExceptionHandlerMiddleware
    from ats_match.routers import jobs

    app = FastAPI()
    app.add_middleware(ExceptionHandlerMiddleware)
    app.include_router(jobs.router, prefix="/api/job-postings")
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


class TestJobPostingsRouter:
    """Test cases for the job postings router"""

    @patch("ats_match.routers.jobs.job_postings_coll")
    def test_list_job_postings(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[JOB])

        response = client.get("/api/job-postings/")

        assert response.status_code == 200
        assert response.json()[0]["title"] == "Early Childhood Teacher"

    @patch("ats_match.routers.jobs.job_postings_coll")
    def test_status_route_is_not_taken_for_an_id(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[JOB])

        response = client.get("/api/job-postings/status?status=active")

        assert response.status_code == 200
        mock_coll.find.assert_called_once_with({"status": "active"})

    def test_unknown_job_status_is_rejected(self, client):
        response = client.get("/api/job-postings/status?status=archived")
        assert response.status_code == 422

    @patch("ats_match.services.match_service.job_postings_coll")
    def test_get_job_posting(self, mock_coll, client):
        mock_coll.find_one = AsyncMock(return_value=JOB)

        response = client.get("/api/job-postings/job_1")

        assert response.status_code == 200
        assert response.json()["job_id"] == "job_1"

    @patch("ats_match.services.match_service.job_postings_coll")
    def test_get_missing_job_posting(self, mock_coll, client):
        mock_coll.find_one = AsyncMock(return_value=None)
        response = client.get("/api/job-postings/job_2")
        assert response.status_code == 404
