"""Shared fixtures. API_KEY must be set before config is imported."""

import os

os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone

import pytest

from schemas.domain import JobRequirements, TechnicianProfile

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
JOB_LAT, JOB_LON = 37.7749, -122.4194


@pytest.fixture
def now():
    return NOW


def make_technician(tech_id="tech-1", name="Test Tech", lat=JOB_LAT, lon=JOB_LON, skills=None,
                    availability=None, performance=None, workload=None, **extra) -> TechnicianProfile:
    data = {
        "id": tech_id,
        "name": name,
        "location": {"latitude": lat, "longitude": lon},
        "skills": skills if skills is not None else [],
        "availability": {
            "is_available": True,
            "next_available_slot": NOW,
            "current_jobs": 0,
            "max_daily_jobs": 5,
            **(availability or {}),
        },
        "performance": performance or {},
        "current_workload": workload or {},
        **extra,
    }
    return TechnicianProfile.model_validate(data)


def make_job(job_id="job-1", required_skills=None, lat=JOB_LAT, lon=JOB_LON, **extra) -> JobRequirements:
    data = {
        "job_id": job_id,
        "device_category": "Mobile Devices",
        "required_skills": required_skills if required_skills is not None else ["iPhone Repair"],
        "complexity": 3,
        "estimated_duration": 2,
        "location": {"latitude": lat, "longitude": lon},
        **extra,
    }
    return JobRequirements.model_validate(data)


@pytest.fixture
def technician_factory():
    return make_technician


@pytest.fixture
def job_factory():
    return make_job
