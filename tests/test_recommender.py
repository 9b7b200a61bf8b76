"""
Ranking tests: weighted overall score, confidence, ordering and the A-vs-B dispatch scenario.
Run: pytest tests/test_recommender.py -v
"""

from datetime import timedelta

import pytest

from conftest import JOB_LAT, JOB_LON, NOW, make_job, make_technician
from models import scoring
from models.technician_recommender import TechnicianRecommender
from schemas.domain import Recommendation

WEIGHTS = {'skill': 0.30, 'availability': 0.25, 'location': 0.20, 'performance': 0.15, 'workload': 0.10}


@pytest.fixture
def recommender():
    return TechnicianRecommender(weights=WEIGHTS)


def sarah():
    return make_technician(
        "tech-sarah",
        name="Sarah Johnson",
        skills=[{"category": "Mobile Devices", "skill": "iPhone Repair", "proficiency_level": 9}],
        availability={"current_jobs": 2, "max_daily_jobs": 6},
        performance={
            "customer_satisfaction_rating": 4.8, "first_time_fix_rate": 94, "job_success_rate": 96,
            "average_response_time": 15, "quality_score": 92, "recent_performance_trend": "IMPROVING",
        },
        workload={"active_jobs": 2, "capacity_utilization": 33, "burnout_risk": 15},
    )


def varied_technicians():
    return [
        sarah(),
        make_technician("far", lat=JOB_LAT + 0.5, skills=[{"category": "Laptops", "skill": "Laptop Repair", "proficiency_level": 7}]),
        make_technician(
            "busy",
            lat=JOB_LAT + 0.1,
            availability={"is_available": False, "next_available_slot": NOW + timedelta(hours=5),
                          "current_jobs": 4, "max_daily_jobs": 5},
            workload={"active_jobs": 4, "capacity_utilization": 80, "stress_level": "HIGH", "burnout_risk": 70},
        ),
        make_technician("no-skills", skills=None),
        make_technician(
            "declining",
            lon=JOB_LON + 0.2,
            skills=[{"category": "Electronics", "skill": "iPhone Screen Repair", "proficiency_level": 6}],
            performance={"customer_satisfaction_rating": 3.1, "recent_performance_trend": "DECLINING"},
        ),
    ]


class TestWeights:
    def test_defaults_come_from_settings(self):
        assert sum(TechnicianRecommender().weights.values()) == pytest.approx(1.0)

    def test_rejects_weights_not_summing_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            TechnicianRecommender(weights={**WEIGHTS, 'skill': 0.5})

    def test_rejects_missing_dimension(self):
        partial = {k: v for k, v in WEIGHTS.items() if k != 'workload'}
        partial['skill'] += 0.10
        with pytest.raises(ValueError):
            TechnicianRecommender(weights=partial)

    def test_rejects_negative_weight(self):
        with pytest.raises(ValueError):
            TechnicianRecommender(weights={**WEIGHTS, 'skill': 0.50, 'workload': -0.10})


class TestScore:
    def test_known_profile(self, recommender):
        score = recommender.score(sarah(), make_job(), NOW)

        assert score.skill_match_score == 90
        assert score.availability_score == 70
        assert score.location_score == 100
        assert score.performance_score == 94
        assert score.workload_score == 58
        assert score.overall_score == 84
        assert score.recommendation == Recommendation.GOOD
        assert score.confidence == pytest.approx(0.84, abs=1e-3)
        assert len(score.reasoning_factors) == 5

    def test_overall_is_weighted_sum_of_unrounded_subscores(self, recommender):
        job = make_job(priority="HIGH", customer_tier="PREMIUM")
        for tech in varied_technicians():
            raw = recommender.sub_scores(tech, job, NOW)
            expected = scoring.round_half_up(sum(raw[k] * WEIGHTS[k] for k in WEIGHTS))
            assert recommender.score(tech, job, NOW).overall_score == expected

    def test_all_scores_within_bounds(self, recommender):
        jobs = [
            make_job(),
            make_job(required_skills=[], complexity=9, priority="URGENT", customer_tier="ENTERPRISE"),
            make_job(required_skills=["Gaming Console Repair", "Battery Replacement"], lat=JOB_LAT - 1),
        ]
        for job in jobs:
            for tech in varied_technicians():
                s = recommender.score(tech, job, NOW)
                for value in (s.overall_score, s.skill_match_score, s.availability_score,
                              s.location_score, s.performance_score, s.workload_score):
                    assert 0 <= value <= 100
                assert 0.5 <= s.confidence <= 1.0

    def test_preferred_technician_noted_without_changing_score(self, recommender):
        plain = recommender.score(sarah(), make_job(), NOW)
        preferred = recommender.score(sarah(), make_job(preferred_technician_id="tech-sarah"), NOW)

        assert preferred.overall_score == plain.overall_score
        assert "Customer's preferred technician" in preferred.reasoning_factors


class TestRank:
    def test_sorted_descending(self, recommender):
        ranked = recommender.rank(varied_technicians(), make_job(), NOW)
        scores = [s.overall_score for s in ranked]
        assert scores == sorted(scores, reverse=True)
        assert len(ranked) == 5

    def test_deterministic(self, recommender):
        job = make_job()
        first = [(s.technician_id, s.overall_score, s.confidence) for s in recommender.rank(varied_technicians(), job, NOW)]
        second = [(s.technician_id, s.overall_score, s.confidence) for s in recommender.rank(varied_technicians(), job, NOW)]
        assert first == second

    def test_ties_keep_input_order(self, recommender):
        twins = [make_technician("t1"), make_technician("t2"), make_technician("t3")]
        ranked = recommender.rank(twins, make_job(), NOW)
        assert [s.technician_id for s in ranked] == ["t1", "t2", "t3"]

        ranked = recommender.rank(list(reversed(twins)), make_job(), NOW)
        assert [s.technician_id for s in ranked] == ["t3", "t2", "t1"]

    def test_empty_candidate_list(self, recommender):
        assert recommender.rank([], make_job(), NOW) == []


class TestDispatchScenario:
    def test_matching_nearby_technician_beats_distant_generalist(self, recommender):
        tech_a = make_technician(
            "tech-a",
            lat=JOB_LAT + 0.04,
            skills=[{"category": "Mobile Devices", "skill": "iPhone Repair", "proficiency_level": 9}],
            availability={"current_jobs": 2, "max_daily_jobs": 6},
            performance={"customer_satisfaction_rating": 4.8},
            workload={"active_jobs": 2, "capacity_utilization": 33},
        )
        tech_b = make_technician(
            "tech-b",
            lat=JOB_LAT + 0.36,
            skills=[{"category": "Laptops", "skill": "Laptop Repair", "proficiency_level": 9}],
        )
        job = make_job(required_skills=["iPhone Repair"], complexity=3)

        ranked = recommender.rank([tech_b, tech_a], job, NOW)
        by_id = {s.technician_id: s for s in ranked}

        assert by_id["tech-a"].overall_score > by_id["tech-b"].overall_score
        assert by_id["tech-b"].skill_match_score == 0
        assert ranked[0].technician_id == "tech-a"


class TestGenerateReason:
    def test_lists_strong_dimensions(self, recommender):
        tech = sarah()
        score = recommender.score(tech, make_job(), NOW)
        reason = recommender.generate_reason(score, tech)

        assert reason.startswith("Assigned to Sarah Johnson based on strong skill alignment")
        assert "optimal location" in reason
        assert "excellent track record" in reason
        assert "immediate availability" not in reason
        assert "(AI Score: 84/100, Confidence: 84%)" in reason

    def test_falls_back_to_best_available(self, recommender):
        tech = make_technician(
            "weak",
            lat=JOB_LAT + 1,
            availability={"is_available": False, "next_available_slot": NOW + timedelta(hours=10)},
            workload={"active_jobs": 6},
        )
        score = recommender.score(tech, make_job(), NOW)
        assert "best available option" in recommender.generate_reason(score, tech)
