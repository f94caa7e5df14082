"""
Radar-chart breakdown of a match into five domain scores.

This is a display heuristic over an already computed MatchResult: half the
overall score, plus up to 50 points for the share of domain-related skills
that matched (a flat 25 when the domain never came up). It must not be used
to rank or filter candidates.
"""
from typing import Iterable, List, Sequence, Tuple

from ats_match.models.models import Domain, DomainScore, MatchResult
from ats_match.services.matching import clamp

DOMAIN_KEYWORDS: Sequence[Tuple[Domain, Tuple[str, ...]]] = (
    (Domain.QUALIFICATIONS, ("certification", "qualification", "degree", "education")),
    (Domain.EXPERIENCE, ("experience", "years", "history", "background")),
    (Domain.TECHNICAL_SKILLS, ("skill", "technical", "program", "system")),
    (Domain.SOFT_SKILLS, ("communication", "teamwork", "leadership", "interpersonal")),
    (Domain.CULTURAL_FIT, ("culture", "values", "community", "care")),
)

BASE_WEIGHT = 0.5
SKILL_SHARE_POINTS = 50.0
NEUTRAL_POINTS = 25.0


def _count_relevant(skills: Iterable[str], keywords: Tuple[str, ...]) -> int:
    return sum(1 for skill in skills if any(k in skill.lower() for k in keywords))


def domain_score(result: MatchResult, keywords: Tuple[str, ...]) -> float:
    matched = _count_relevant(result.matched_skills, keywords)
    missing = _count_relevant(result.missing_skills, keywords)
    value = result.score * BASE_WEIGHT
    if matched + missing > 0:
        value += (matched / (matched + missing)) * SKILL_SHARE_POINTS
    else:
        value += NEUTRAL_POINTS
    return clamp(value)


def decompose(result: MatchResult) -> List[DomainScore]:
    return [DomainScore(subject=domain, value=domain_score(result, keywords))
            for domain, keywords in DOMAIN_KEYWORDS]
