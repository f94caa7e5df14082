import asyncio
import time

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from ats_match.models.models import MatchResult
from ats_match.services import match_service
from ats_match.services.inflight import InFlightRequests


class TestInFlightRequests:
    """Test cases for sharing concurrent identical requests"""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self):
        requests = InFlightRequests()
        calls = 0
        release = asyncio.Event()

        async def compute():
            nonlocal calls
            calls += 1
            await release.wait()
            return MatchResult(score=77)

        waiters = [asyncio.ensure_future(requests.run(("c1", "j1"), compute)) for _ in range(3)]
        await asyncio.sleep(0)
        assert len(requests) == 1
        release.set()
        results = await asyncio.gather(*waiters)

        assert calls == 1
        assert results[0] is results[1] is results[2]
        assert len(requests) == 0

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self):
        requests = InFlightRequests()

        async def compute(score):
            await asyncio.sleep(0)
            return MatchResult(score=score)

        first, second = await asyncio.gather(
            requests.run(("c1", "j1"), lambda: compute(10)),
            requests.run(("c1", "j2"), lambda: compute(20)),
        )
        assert (first.score, second.score) == (10, 20)

    @pytest.mark.asyncio
    async def test_failure_is_shared_and_key_released(self):
        requests = InFlightRequests()
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            raise RuntimeError("scoring exploded")

        results = await asyncio.gather(
            requests.run("k", compute),
            requests.run("k", compute),
            return_exceptions=True,
        )
        assert calls == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(requests) == 0

    @pytest.mark.asyncio
    async def test_later_request_starts_fresh(self):
        requests = InFlightRequests()
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            return calls

        assert await requests.run("k", compute) == 1
        assert await requests.run("k", compute) == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_others(self):
        requests = InFlightRequests()
        release = asyncio.Event()

        async def compute():
            await release.wait()
            return "done"

        first = asyncio.ensure_future(requests.run("k", compute))
        second = asyncio.ensure_future(requests.run("k", compute))
        await asyncio.sleep(0)
        first.cancel()
        await asyncio.sleep(0)
        release.set()

        assert await second == "done"
        assert first.cancelled()


class TestSharedCandidateMatch:
    """Test cases for concurrent refreshes of one candidate/job match"""

    @pytest.fixture
    def collections(self, monkeypatch):
        candidates = MagicMock()
        candidates.find_one = AsyncMock(return_value={
            "candidate_id": "cand-1", "name": "Jane Citizen", "skills": ["First Aid"], "profile_status": "ok",
        })
        jobs = MagicMock()
        jobs.find_one = AsyncMock(return_value={"job_id": "job_1", "title": "Early Childhood Teacher"})
        monkeypatch.setattr(match_service, "candidates_coll", candidates)
        monkeypatch.setattr(match_service, "job_postings_coll", jobs)

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_score_once(self, collections):
        def slow_score(profile, job):
            time.sleep(0.05)
            return MatchResult(score=74, matched_skills=profile.skills)

        with patch("ats_match.services.match_service.score_match", side_effect=slow_score) as mock_score:
            first, second = await asyncio.gather(
                match_service.get_candidate_match("cand-1", "job_1"),
                match_service.get_candidate_match("cand-1", "job_1"),
            )

        assert mock_score.call_count == 1
        assert first is second
        assert first.score == 74
        assert first.candidate_name == "Jane Citizen"
        assert len(match_service.match_requests) == 0
