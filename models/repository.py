import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from schemas.domain import JobRequirements, TechnicianProfile, utcnow

logger = logging.getLogger(__name__)


class TechnicianRepository(ABC):

    @abstractmethod
    def get(self, technician_id: str) -> Optional[TechnicianProfile]:
        ...

    @abstractmethod
    def list_all(self) -> List[TechnicianProfile]:
        ...

    @abstractmethod
    def save(self, technician: TechnicianProfile) -> None:
        ...

    def list_candidates(self) -> List[TechnicianProfile]:
        """Technicians with room for another job today."""
        return [t for t in self.list_all() if t.has_capacity]


class JobRepository(ABC):

    @abstractmethod
    def get(self, job_id: str) -> Optional[JobRequirements]:
        ...

    @abstractmethod
    def save(self, job: JobRequirements) -> None:
        ...

    def get_many(self, job_ids: Iterable[str]) -> Dict[str, JobRequirements]:
        found = {}
        for job_id in job_ids:
            job = self.get(job_id)
            if job is not None:
                found[job_id] = job
        return found


# ──────────────────────────────────────────────────
# In-memory backend
# ──────────────────────────────────────────────────

class InMemoryTechnicianRepository(TechnicianRepository):
    """Dict-backed store; returns copies so callers never mutate stored state by accident."""

    def __init__(self, technicians: Iterable[TechnicianProfile] = ()):
        self._lock = threading.Lock()
        self._technicians: Dict[str, TechnicianProfile] = {}
        for tech in technicians:
            self._technicians[tech.id] = tech.model_copy(deep=True)

    def get(self, technician_id: str) -> Optional[TechnicianProfile]:
        with self._lock:
            tech = self._technicians.get(technician_id)
            return tech.model_copy(deep=True) if tech else None

    def list_all(self) -> List[TechnicianProfile]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._technicians.values()]

    def save(self, technician: TechnicianProfile) -> None:
        with self._lock:
            self._technicians[technician.id] = technician.model_copy(deep=True)


class InMemoryJobRepository(JobRepository):

    def __init__(self, jobs: Iterable[JobRequirements] = ()):
        self._lock = threading.Lock()
        self._jobs: Dict[str, JobRequirements] = {job.job_id: job for job in jobs}

    def get(self, job_id: str) -> Optional[JobRequirements]:
        with self._lock:
            return self._jobs.get(job_id)

    def save(self, job: JobRequirements) -> None:
        with self._lock:
            self._jobs[job.job_id] = job


# ── Sample Technicians ────────────────────────────────

def sample_technicians(now: Optional[datetime] = None) -> List[TechnicianProfile]:
    now = now or utcnow()
    raw = [
        {
            'id': 'tech-sarah-001',
            'name': 'Sarah Johnson',
            'email': 'sarah.johnson@repairx.com',
            'phone': '+1-555-0101',
            'location': {'latitude': 37.7749, 'longitude': -122.4194, 'address': '123 Market St, San Francisco, CA'},
            'skills': [
                {'category': 'Mobile Devices', 'skill': 'iPhone Repair', 'proficiency_level': 9, 'experience_years': 5, 'success_rate': 95},
                {'category': 'Mobile Devices', 'skill': 'Android Repair', 'proficiency_level': 8, 'experience_years': 4, 'success_rate': 92},
                {'category': 'Electronics', 'skill': 'Screen Replacement', 'proficiency_level': 10, 'experience_years': 6, 'success_rate': 98},
            ],
            'availability': {
                'is_available': True, 'next_available_slot': now,
                'working_hours': {'start': '09:00', 'end': '17:00'},
                'current_jobs': 2, 'max_daily_jobs': 6, 'time_zone': 'America/Los_Angeles',
            },
            'performance': {
                'average_completion_time': 2.5, 'customer_satisfaction_rating': 4.8, 'first_time_fix_rate': 94,
                'job_success_rate': 96, 'average_response_time': 15, 'quality_score': 92,
                'recent_performance_trend': 'IMPROVING',
            },
            'current_workload': {
                'active_jobs': 2, 'pending_jobs': 1, 'estimated_workload_hours': 8,
                'capacity_utilization': 33, 'stress_level': 'LOW', 'burnout_risk': 15,
            },
            'specializations': ['Mobile Device Repair', 'Screen Replacement', 'Water Damage'],
            'certifications': ['Apple Certified Repair', 'Samsung Certified'],
            'experience_level': 'SENIOR',
            'rating': 4.8,
            'completion_rate': 96,
        },
        {
            'id': 'tech-mike-002',
            'name': 'Mike Rodriguez',
            'email': 'mike.rodriguez@repairx.com',
            'phone': '+1-555-0102',
            'location': {'latitude': 37.7849, 'longitude': -122.4094, 'address': '456 Union St, San Francisco, CA'},
            'skills': [
                {'category': 'Laptops', 'skill': 'Laptop Repair', 'proficiency_level': 9, 'experience_years': 7, 'success_rate': 93},
                {'category': 'Electronics', 'skill': 'Battery Replacement', 'proficiency_level': 8, 'experience_years': 5, 'success_rate': 90},
                {'category': 'Gaming', 'skill': 'Gaming Console Repair', 'proficiency_level': 10, 'experience_years': 8, 'success_rate': 97},
            ],
            'availability': {
                'is_available': True, 'next_available_slot': now,
                'working_hours': {'start': '08:00', 'end': '16:00'},
                'current_jobs': 1, 'max_daily_jobs': 5, 'time_zone': 'America/Los_Angeles',
            },
            'performance': {
                'average_completion_time': 3.2, 'customer_satisfaction_rating': 4.6, 'first_time_fix_rate': 89,
                'job_success_rate': 91, 'average_response_time': 20, 'quality_score': 88,
                'recent_performance_trend': 'STABLE',
            },
            'current_workload': {
                'active_jobs': 1, 'pending_jobs': 0, 'estimated_workload_hours': 4,
                'capacity_utilization': 20, 'stress_level': 'LOW', 'burnout_risk': 10,
            },
            'specializations': ['Laptop Repair', 'Gaming Console Repair', 'Hardware Diagnostics'],
            'certifications': ['CompTIA A+', 'Microsoft Hardware Certified'],
            'experience_level': 'EXPERT',
            'rating': 4.6,
            'completion_rate': 91,
        },
        {
            'id': 'tech-emma-003',
            'name': 'Emma Chen',
            'email': 'emma.chen@repairx.com',
            'phone': '+1-555-0103',
            'location': {'latitude': 37.7649, 'longitude': -122.4294, 'address': '789 Mission St, San Francisco, CA'},
            'skills': [
                {'category': 'Appliances', 'skill': 'Home Appliance Repair', 'proficiency_level': 8, 'experience_years': 4, 'success_rate': 88},
                {'category': 'Electronics', 'skill': 'Audio Equipment Repair', 'proficiency_level': 9, 'experience_years': 6, 'success_rate': 94},
                {'category': 'Smart Home', 'skill': 'IoT Device Setup', 'proficiency_level': 7, 'experience_years': 3, 'success_rate': 86},
            ],
            'availability': {
                'is_available': False, 'next_available_slot': now + timedelta(hours=2),
                'working_hours': {'start': '10:00', 'end': '18:00'},
                'current_jobs': 4, 'max_daily_jobs': 5, 'time_zone': 'America/Los_Angeles',
            },
            'performance': {
                'average_completion_time': 4.1, 'customer_satisfaction_rating': 4.4, 'first_time_fix_rate': 85,
                'job_success_rate': 87, 'average_response_time': 25, 'quality_score': 84,
                'recent_performance_trend': 'IMPROVING',
            },
            'current_workload': {
                'active_jobs': 4, 'pending_jobs': 2, 'estimated_workload_hours': 16,
                'capacity_utilization': 80, 'stress_level': 'MEDIUM', 'burnout_risk': 45,
            },
            'specializations': ['Home Appliances', 'Audio Equipment', 'Smart Home Setup'],
            'certifications': ['HVAC Certified', 'Smart Home Specialist'],
            'experience_level': 'INTERMEDIATE',
            'rating': 4.4,
            'completion_rate': 87,
        },
    ]
    return [TechnicianProfile.model_validate(t) for t in raw]


def seed_sample_technicians(repository: TechnicianRepository) -> int:
    """Register sample technicians only if they don't exist. Existing workload is preserved."""
    seeded = 0
    for tech in sample_technicians():
        if repository.get(tech.id) is None:
            repository.save(tech)
            seeded += 1
    if seeded:
        logger.info(f"Seeded {seeded} sample technicians (existing technicians left unchanged)")
    return seeded
