"""
Sub-scorers for technician/job matching.

Every function here is pure: same inputs, same score. Each returns a float in
[0, 100]; rounding happens only when a score is reported.
"""

import math
from datetime import datetime
from typing import Dict, List, Sequence

import numpy as np

from schemas.domain import (
    AvailabilitySchedule,
    CustomerTier,
    GeoLocation,
    PerformanceMetrics,
    PerformanceTrend,
    Priority,
    Recommendation,
    StressLevel,
    TechnicianSkill,
    WorkloadMetrics,
)
from utils.geo import distance_between

SIMILARITY_THRESHOLD = 0.6

TREND_MULTIPLIERS = {
    PerformanceTrend.IMPROVING: 1.1,
    PerformanceTrend.STABLE:    1.0,
    PerformanceTrend.DECLINING: 0.9,
}

STRESS_PENALTIES = {
    StressLevel.HIGH:   30,
    StressLevel.MEDIUM: 15,
    StressLevel.LOW:    0,
}

PRIORITY_BONUSES = {
    Priority.URGENT: 20,
    Priority.HIGH:   10,
}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


# ──────────────────────────────────────────────────
# Skill Match
# ──────────────────────────────────────────────────

def semantic_similarity(skill_a: str, skill_b: str) -> float:
    """Share of tokens in skill_a that overlap (by substring) a token of skill_b."""
    words_a = skill_a.lower().split()
    words_b = skill_b.lower().split()
    if not words_a or not words_b:
        return 0.0

    common = sum(
        1 for wa in words_a
        if any(wb in wa or wa in wb for wb in words_b)
    )
    return common / max(len(words_a), len(words_b))


def _best_skill_match(tech_skills: List[TechnicianSkill], required: str) -> float:
    required_lc = required.lower()
    best = 0.0

    for ts in tech_skills:
        category = ts.category.lower().strip()

        if ts.skill.lower() == required_lc:
            best = max(best, ts.proficiency_level * 10)
        elif category and (category in required_lc or required_lc in category):
            best = max(best, ts.proficiency_level * 7)
        else:
            similarity = semantic_similarity(ts.skill, required)
            if similarity > SIMILARITY_THRESHOLD:
                best = max(best, ts.proficiency_level * similarity * 8)

    return best


def skill_match_score(tech_skills: List[TechnicianSkill], required_skills: List[str], complexity: int) -> float:
    if not required_skills:
        return 100.0

    total = 0.0
    matched = 0
    for required in required_skills:
        best = _best_skill_match(tech_skills or [], required)
        total += best
        if best > 0:
            matched += 1

    n = len(required_skills)
    complexity_bonus = 1.0 if complexity <= 5 else 0.9
    return clamp((total / n) * (matched / n) * complexity_bonus)


# ──────────────────────────────────────────────────
# Availability
# ──────────────────────────────────────────────────

def availability_score(availability: AvailabilitySchedule, priority: Priority, now: datetime) -> float:
    minutes_until = (availability.next_available_slot - now).total_seconds() / 60

    if availability.is_available:
        score = 40.0
    else:
        score = clamp(40 - (minutes_until / 60) * 2, 0, 40)

    spare = 1 - availability.current_jobs / availability.max_daily_jobs
    score += max(0.0, spare) * 30

    if availability.is_available:
        score += PRIORITY_BONUSES.get(priority, 0)

    score += min(10.0, 10 * (60 / max(1.0, minutes_until)))

    return clamp(score)


# ──────────────────────────────────────────────────
# Location
# ──────────────────────────────────────────────────

def distance_to_score(distance_km: float) -> float:
    if distance_km <= 5:
        score = 100.0
    elif distance_km <= 15:
        score = 85 - (distance_km - 5) * 1.5
    elif distance_km <= 30:
        score = 70 - (distance_km - 15)
    else:
        score = max(20.0, 55 - (distance_km - 30) * 0.5)
    return clamp(score)


def location_score(tech_location: GeoLocation, job_location: GeoLocation) -> float:
    return distance_to_score(distance_between(tech_location, job_location))


# ──────────────────────────────────────────────────
# Performance
# ──────────────────────────────────────────────────

def performance_score(performance: PerformanceMetrics, customer_tier: CustomerTier) -> float:
    satisfaction = performance.customer_satisfaction_rating

    score = (satisfaction / 5) * 25
    score += (performance.first_time_fix_rate / 100) * 20
    score += (performance.job_success_rate / 100) * 15
    score += (performance.quality_score / 100) * 20
    score += min(10.0, 10 * (60 / max(1.0, performance.average_response_time)))

    if customer_tier == CustomerTier.ENTERPRISE and satisfaction >= 4.5:
        score += 10
    elif customer_tier == CustomerTier.PREMIUM and satisfaction >= 4.0:
        score += 5

    score *= TREND_MULTIPLIERS[performance.recent_performance_trend]
    return clamp(score)


# ──────────────────────────────────────────────────
# Workload
# ──────────────────────────────────────────────────

def workload_score(workload: WorkloadMetrics) -> float:
    score = 100.0
    score -= workload.capacity_utilization * 0.5
    score -= workload.active_jobs * 10
    score -= STRESS_PENALTIES[workload.stress_level]
    score -= workload.burnout_risk * 0.4
    return clamp(score)


# ──────────────────────────────────────────────────
# Aggregation
# ──────────────────────────────────────────────────

def weighted_overall(scores: Dict[str, float], weights: Dict[str, float]) -> int:
    return int(clamp(round_half_up(sum(scores[k] * weights[k] for k in weights))))


def confidence(scores: Sequence[float]) -> float:
    """Lower spread across the sub-scores means a more decisive ranking."""
    spread = float(np.std(np.asarray(scores, dtype=np.float64)))
    return clamp(1.0 - spread / 100, 0.5, 1.0)


def recommendation_level(overall: float) -> Recommendation:
    if overall >= 85:
        return Recommendation.EXCELLENT
    if overall >= 70:
        return Recommendation.GOOD
    if overall >= 55:
        return Recommendation.FAIR
    return Recommendation.POOR


_REASONING = {
    'skill': (
        'Excellent skill match for job requirements',
        'Good skill alignment with job needs',
        'Limited skill match - may require additional support',
    ),
    'availability': (
        'Immediately available with low workload',
        'Available within reasonable timeframe',
        'Limited availability - scheduling constraints',
    ),
    'location': (
        'Optimal location - minimal travel time',
        'Reasonable distance from job location',
        'Significant travel distance required',
    ),
    'performance': (
        'Outstanding performance history',
        'Solid performance track record',
        'Performance below average - monitor closely',
    ),
    'workload': (
        'Well-balanced current workload',
        'Manageable workload levels',
        'High workload - potential for delays',
    ),
}


def reasoning_factors(scores: Dict[str, float]) -> List[str]:
    factors = []
    for key, (high, mid, low) in _REASONING.items():
        value = scores[key]
        if value >= 80:
            factors.append(high)
        elif value >= 60:
            factors.append(mid)
        else:
            factors.append(low)
    return factors
