import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch


@pytest.fixture
def test_app():
    from fastapi import FastAPI
    from ats_match.middleware.error_handlers import ExceptionHandlerMiddleware
    from ats_match.routers import applications

    app = FastAPI()
    app.add_middleware(ExceptionHandlerMiddleware)
    app.include_router(applications.router, prefix="/api/applications")
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


def _application(app_id, status):
    return {"application_id": app_id, "candidate_id": "cand-1", "job_id": "job_1", "status": status}


class TestApplicationsRouter:
    """Test cases for the applications router"""

    @patch("ats_match.routers.applications.applications_coll")
    def test_list_applications(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[
            _application("app-1", "in_review"),
            _application("app-2", "offered"),
        ])

        response = client.get("/api/applications/")

        assert response.status_code == 200
        data = response.json()
        assert [a["stage"] for a in data] == ["Screening", "Offer"]
        assert data[0]["status_label"] == "In Review"
        mock_coll.find.assert_called_once_with({})

    @patch("ats_match.routers.applications.applications_coll")
    def test_list_filtered_by_status(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[])

        response = client.get("/api/applications/?status=Interview")

        assert response.status_code == 200
        mock_coll.find.assert_called_once_with({"status": "interview"})

    @patch("ats_match.routers.applications.applications_coll")
    def test_list_unknown_status_filter_is_400(self, mock_coll, client):
        response = client.get("/api/applications/?status=ghosted")
        assert response.status_code == 400
        mock_coll.find.assert_not_called()

    @patch("ats_match.routers.applications.applications_coll")
    def test_pipeline_summary(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[
            {"status": "applied"},
            {"status": "interview"},
            {"status": "interviewed"},
            {"status": "hired"},
        ])

        response = client.get("/api/applications/pipeline")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["stages"] == {
            "Applied": 1, "Screening": 0, "Interview": 2, "Offer": 0, "Hired": 1, "Rejected": 0,
        }

    @patch("ats_match.routers.applications.applications_coll")
    def test_pipeline_with_corrupt_status_fails_loudly(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[{"status": "archived"}])
        response = client.get("/api/applications/pipeline")
        assert response.status_code == 400

    @patch("ats_match.routers.applications.applications_coll")
    def test_update_status(self, mock_coll, client):
        mock_coll.find_one_and_update = AsyncMock(return_value=_application("app-1", "offered"))

        response = client.patch("/api/applications/app-1/status", json={"status": "offered"})

        assert response.status_code == 200
        assert response.json()["stage"] == "Offer"
        update = mock_coll.find_one_and_update.call_args.args[1]["$set"]
        assert update["status"] == "offered"

    @patch("ats_match.routers.applications.applications_coll")
    def test_update_unknown_status_is_400(self, mock_coll, client):
        mock_coll.find_one_and_update = AsyncMock()

        response = client.patch("/api/applications/app-1/status", json={"status": "ghosted"})

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "VALIDATION_ERROR"
        mock_coll.find_one_and_update.assert_not_called()

    @patch("ats_match.routers.applications.applications_coll")
    def test_update_missing_application_is_404(self, mock_coll, client):
        mock_coll.find_one_and_update = AsyncMock(return_value=None)
        response = client.patch("/api/applications/app-9/status", json={"status": "hired"})
        assert response.status_code == 404
