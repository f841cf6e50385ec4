"""
Match scoring against a user's career vault.

    score = title_weight  if the posting mentions one of the user's target roles
          + skill_weight per stated skill found (capped at skill_cap)
          + fresh_weight  if posted within fresh_days

With the default weights the total tops out at 100. The weights are
configuration (``SCORE_*`` settings), not a tuned model.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from db.schemas import CareerVault
from jobsearch.models.job import JobResult
from jobsearch.pipeline.normalize import age_in_days, utcnow

logger = logging.getLogger(__name__)


class ScoringWeights(BaseModel):
    title: int = 50
    skill: int = 5
    skill_cap: int = 40
    fresh: int = 10
    fresh_days: int = 7

    @classmethod
    def from_settings(cls, s) -> "ScoringWeights":
        return cls(
            title=s.SCORE_TITLE_WEIGHT,
            skill=s.SCORE_SKILL_WEIGHT,
            skill_cap=s.SCORE_SKILL_CAP,
            fresh=s.SCORE_FRESH_WEIGHT,
            fresh_days=s.SCORE_FRESH_DAYS,
        )


@dataclass
class VaultProfile:
    target_roles: list[str]
    skills: list[str]


def load_vault_profile(session, user_id: str) -> Optional[VaultProfile]:
    vault = session.execute(
        select(CareerVault)
        .options(selectinload(CareerVault.transferable_skills))
        .where(CareerVault.user_id == user_id)
    ).scalar_one_or_none()
    if vault is None:
        return None
    analysis = vault.initial_analysis or {}
    roles = [r for r in (analysis.get("recommended_positions") or []) if isinstance(r, str) and r.strip()]
    skills = [s.stated_skill.lower() for s in vault.transferable_skills if s.stated_skill]
    return VaultProfile(target_roles=roles, skills=skills)


def score_job(job: JobResult, profile: VaultProfile, weights: ScoringWeights, now: Optional[datetime] = None) -> int:
    text = f"{job.title} {job.description or ''}".lower()
    score = 0
    if any(role.lower() in text for role in profile.target_roles):
        score += weights.title
    matching = sum(1 for skill in profile.skills if skill in text)
    score += min(matching * weights.skill, weights.skill_cap)
    age = age_in_days(job.posted_date, now)
    if age is not None and age <= weights.fresh_days:
        score += weights.fresh
    return score


def score_with_vault(
    jobs: list[JobResult],
    user_id: str,
    session,
    weights: Optional[ScoringWeights] = None,
    now: Optional[datetime] = None,
) -> list[JobResult]:
    """Return ``jobs`` with match_score set; unchanged if the vault can't be read."""
    weights = weights or ScoringWeights()
    try:
        profile = load_vault_profile(session, user_id)
        if profile is None:
            logger.info("[vault] no career vault for user %s, skipping scoring", user_id)
            return jobs
        now = now or utcnow()
        scored = [job.model_copy(update={"match_score": score_job(job, profile, weights, now)}) for job in jobs]
    except Exception:
        logger.exception("[vault] scoring failed for user %s", user_id)
        return jobs
    logger.info("[vault] scored %d jobs (%d above zero)", len(scored), sum(1 for j in scored if j.match_score))
    return scored
