import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch


@pytest.fixture
def client():
    from ats_match.main import app
    return TestClient(app)


class TestApplication:
    """Test cases for the assembled application"""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Processing-Time" in response.headers

    def test_error_body_through_full_stack(self, client):
        response = client.get("/api/candidates/cand-1/match")
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.headers["X-Request-ID"] == response.json()["request_id"]

    @patch("ats_match.routers.candidates.candidates_coll")
    def test_candidates_listed_without_resume_text(self, mock_coll, client):
        mock_coll.find.return_value.to_list = AsyncMock(return_value=[
            {"candidate_id": "cand-1", "name": "Jane Citizen", "email": "jane@example.com"},
        ])

        response = client.get("/api/candidates/")

        assert response.status_code == 200
        assert response.json()[0]["profile_status"] == "missing"
        assert "resume_text" not in response.json()[0]
        assert mock_coll.find.call_args.args[1] == {"resume_text": 0}

    @pytest.mark.asyncio
    async def test_lifespan_survives_index_failure(self):
        from ats_match.main import app, lifespan

        with patch("ats_match.services.db.init_indexes", AsyncMock(side_effect=RuntimeError("no mongo"))):
            async with lifespan(app):
                pass
