import logging
from datetime import datetime
from typing import Dict, List, Optional

from config import settings
from models import scoring
from schemas.domain import JobRequirements, TechnicianProfile
from schemas.response import AssignmentScore

logger = logging.getLogger(__name__)

WEIGHT_KEYS = ('skill', 'availability', 'location', 'performance', 'workload')


class TechnicianRecommender:
    """
    Technician Recommendation System
    Ranks technicians for a job with a fixed-weight five-factor score:
    skill, availability, location, performance and workload.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        weights = dict(weights or settings.weights)

        if set(weights) != set(WEIGHT_KEYS):
            raise ValueError(f"Weights must cover exactly {', '.join(WEIGHT_KEYS)} (got {', '.join(sorted(weights))})")
        if any(w < 0 for w in weights.values()):
            raise ValueError("Weights must not be negative")
        total = sum(weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Scoring weights must sum to 1.0 (got {total:.4f})")

        self.weights = weights
        logger.info(f"Recommender initialized with weights: {self.weights}")

    # ──────────────────────────────────────────────────
    # Main Entry Point
    # ──────────────────────────────────────────────────

    def rank(self, technicians: List[TechnicianProfile], job: JobRequirements, now: datetime) -> List[AssignmentScore]:
        """Score every technician and sort best-first; ties keep input order."""
        scored = [self.score(tech, job, now) for tech in technicians]
        scored.sort(key=lambda s: s.overall_score, reverse=True)

        if scored:
            best = scored[0]
            logger.debug(
                f"Ranked {len(scored)} technicians for job {job.job_id}: "
                f"best={best.technician_id} ({best.overall_score}/100)"
            )
        return scored

    def score(self, technician: TechnicianProfile, job: JobRequirements, now: datetime) -> AssignmentScore:
        raw = self.sub_scores(technician, job, now)
        overall = scoring.weighted_overall(raw, self.weights)

        reasons = scoring.reasoning_factors(raw)
        if job.preferred_technician_id and job.preferred_technician_id == technician.id:
            reasons.append("Customer's preferred technician")

        return AssignmentScore(
            technician_id=technician.id,
            overall_score=overall,
            skill_match_score=scoring.round_half_up(raw['skill']),
            availability_score=scoring.round_half_up(raw['availability']),
            location_score=scoring.round_half_up(raw['location']),
            performance_score=scoring.round_half_up(raw['performance']),
            workload_score=scoring.round_half_up(raw['workload']),
            recommendation=scoring.recommendation_level(overall),
            confidence=scoring.confidence(list(raw.values())),
            reasoning_factors=reasons,
        )

    def sub_scores(self, technician: TechnicianProfile, job: JobRequirements, now: datetime) -> Dict[str, float]:
        return {
            'skill':        scoring.skill_match_score(technician.skills, job.required_skills, job.complexity),
            'availability': scoring.availability_score(technician.availability, job.priority, now),
            'location':     scoring.location_score(technician.location, job.location),
            'performance':  scoring.performance_score(technician.performance, job.customer_tier),
            'workload':     scoring.workload_score(technician.current_workload),
        }

    # ──────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────

    def generate_reason(self, score: AssignmentScore, technician: TechnicianProfile) -> str:
        reasons = []
        if score.skill_match_score >= 80:
            reasons.append('strong skill alignment')
        if score.availability_score >= 80:
            reasons.append('immediate availability')
        if score.location_score >= 80:
            reasons.append('optimal location')
        if score.performance_score >= 80:
            reasons.append('excellent track record')

        main_reason = ', '.join(reasons) if reasons else 'best available option'
        return (
            f"Assigned to {technician.name} based on {main_reason} "
            f"(AI Score: {score.overall_score}/100, Confidence: {round(score.confidence * 100)}%)"
        )
