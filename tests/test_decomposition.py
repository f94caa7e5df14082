import pytest

from ats_match.models.models import Domain, MatchResult
from ats_match.services.decomposition import decompose, domain_score, DOMAIN_KEYWORDS


def _values(result):
    return {d.subject: d.value for d in decompose(result)}


class TestDecompose:
    """Test cases for the radar-chart domain breakdown"""

    def test_five_domains_in_fixed_order(self):
        """Exactly one entry per domain, always in the same order"""
        result = MatchResult(score=70, matched_skills=["Python"], missing_skills=["Leadership"])
        subjects = [d.subject for d in decompose(result)]
        assert subjects == [
            Domain.QUALIFICATIONS,
            Domain.EXPERIENCE,
            Domain.TECHNICAL_SKILLS,
            Domain.SOFT_SKILLS,
            Domain.CULTURAL_FIT,
        ]

    @pytest.mark.parametrize("score", [0, 1, 37, 50, 99, 100])
    def test_values_stay_in_range(self, score):
        """Every domain value is within 0..100"""
        result = MatchResult(
            score=score,
            matched_skills=["Technical writing", "Teamwork", "Degree in Education"],
            missing_skills=["Years of experience in childcare", "Community values"],
        )
        for d in decompose(result):
            assert 0 <= d.value <= 100

    def test_deterministic(self):
        """Same result in, same breakdown out"""
        result = MatchResult(score=64, matched_skills=["Communication"], missing_skills=["System design"])
        assert decompose(result) == decompose(result)

    def test_no_skills_gives_half_score_plus_neutral(self):
        """Domains that never came up get the flat neutral share"""
        result = MatchResult(score=70)
        values = _values(result)
        assert all(v == pytest.approx(60.0) for v in values.values())

    def test_all_relevant_matched_at_full_score(self):
        """Full score and every relevant skill matched gives 100 everywhere"""
        result = MatchResult(
            score=100,
            matched_skills=["Degree", "Years of experience", "Technical skill", "Communication", "Community care"],
            missing_skills=[],
        )
        assert all(v == pytest.approx(100.0) for v in _values(result).values())

    def test_certification_counts_towards_qualifications(self):
        """A matched certification lifts Qualifications only"""
        result = MatchResult(score=80, matched_skills=["Certification in First Aid"], missing_skills=[])
        values = _values(result)
        assert values[Domain.QUALIFICATIONS] == pytest.approx(90.0)
        assert values[Domain.EXPERIENCE] == pytest.approx(65.0)
        assert values[Domain.CULTURAL_FIT] == pytest.approx(65.0)

    def test_missing_relevant_skills_lower_the_domain(self):
        """Matched share of relevant skills drives the second half"""
        keywords = dict(DOMAIN_KEYWORDS)[Domain.SOFT_SKILLS]
        result = MatchResult(
            score=60,
            matched_skills=["Communication"],
            missing_skills=["Leadership", "Interpersonal skills", "Teamwork"],
        )
        assert domain_score(result, keywords) == pytest.approx(30.0 + 12.5)

    def test_keyword_match_is_case_insensitive(self):
        """Skill case does not affect relevance"""
        keywords = dict(DOMAIN_KEYWORDS)[Domain.TECHNICAL_SKILLS]
        lower = MatchResult(score=50, matched_skills=["technical drawing"])
        upper = MatchResult(score=50, matched_skills=["TECHNICAL DRAWING"])
        assert domain_score(lower, keywords) == domain_score(upper, keywords) == pytest.approx(75.0)
