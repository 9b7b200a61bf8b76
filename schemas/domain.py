from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire, both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enums ─────────────────────────────────────────────

class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class CustomerTier(str, Enum):
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class StressLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class PerformanceTrend(str, Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


class ExperienceLevel(str, Enum):
    JUNIOR = "JUNIOR"
    INTERMEDIATE = "INTERMEDIATE"
    SENIOR = "SENIOR"
    EXPERT = "EXPERT"


class Recommendation(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


def _upper(v):
    return v.upper() if isinstance(v, str) else v


# ── Shared ────────────────────────────────────────────

class GeoLocation(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None


# ── Technician ────────────────────────────────────────

class TechnicianSkill(CamelModel):
    category: str = ""
    skill: str
    proficiency_level: int = Field(..., ge=1, le=10)
    experience_years: float = Field(default=0, ge=0)
    success_rate: float = Field(default=0, ge=0, le=100)
    certification_level: Optional[str] = None


class WorkingHours(CamelModel):
    start: str = Field(default="09:00", pattern=r"^\d{2}:\d{2}$")
    end: str = Field(default="17:00", pattern=r"^\d{2}:\d{2}$")


class AvailabilitySchedule(CamelModel):
    is_available: bool = True
    next_available_slot: datetime = Field(default_factory=utcnow)
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    working_days: List[str] = Field(
        default_factory=lambda: ["monday", "tuesday", "wednesday", "thursday", "friday"]
    )
    current_jobs: int = Field(default=0, ge=0)
    max_daily_jobs: int = Field(default=5, ge=1)
    time_zone: str = "UTC"

    @field_validator('next_available_slot')
    @classmethod
    def assume_utc(cls, v: datetime):
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class PerformanceMetrics(CamelModel):
    average_completion_time: float = Field(default=0, ge=0)
    customer_satisfaction_rating: float = Field(default=0, ge=0, le=5)
    first_time_fix_rate: float = Field(default=0, ge=0, le=100)
    job_success_rate: float = Field(default=0, ge=0, le=100)
    average_response_time: float = Field(default=60, ge=0)
    quality_score: float = Field(default=0, ge=0, le=100)
    recent_performance_trend: PerformanceTrend = PerformanceTrend.STABLE

    @field_validator('recent_performance_trend', mode='before')
    @classmethod
    def normalize_trend(cls, v):
        return _upper(v)


class WorkloadMetrics(CamelModel):
    active_jobs: int = Field(default=0, ge=0)
    pending_jobs: int = Field(default=0, ge=0)
    estimated_workload_hours: float = Field(default=0, ge=0)
    capacity_utilization: float = Field(default=0, ge=0)
    stress_level: StressLevel = StressLevel.LOW
    burnout_risk: float = Field(default=0, ge=0, le=100)

    @field_validator('stress_level', mode='before')
    @classmethod
    def normalize_stress(cls, v):
        return _upper(v)


class TechnicianProfile(CamelModel):
    id: str = Field(..., min_length=1)
    name: str
    email: str = ""
    phone: str = ""
    location: GeoLocation
    skills: List[TechnicianSkill] = Field(default_factory=list)
    availability: AvailabilitySchedule = Field(default_factory=AvailabilitySchedule)
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    current_workload: WorkloadMetrics = Field(default_factory=WorkloadMetrics)
    specializations: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    rating: float = Field(default=0, ge=0, le=5)
    completion_rate: float = Field(default=0, ge=0, le=100)

    @field_validator('experience_level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return _upper(v)

    @field_validator('skills', mode='before')
    @classmethod
    def null_skills(cls, v):
        return [] if v is None else v

    @property
    def has_capacity(self) -> bool:
        return self.availability.current_jobs < self.availability.max_daily_jobs


# ── Job ───────────────────────────────────────────────

class SlaRequirements(CamelModel):
    response_time: float = Field(default=24, gt=0)
    completion_time: float = Field(default=72, gt=0)


class JobRequirements(CamelModel):
    job_id: str = Field(..., min_length=1)
    priority: Priority = Priority.MEDIUM
    device_category: str = ""
    device_brand: str = ""
    device_model: str = ""
    issue_type: str = ""
    complexity: int = Field(default=5, ge=1, le=10)
    estimated_duration: float = Field(default=1.0, gt=0)
    required_skills: List[str] = Field(default_factory=list)
    location: GeoLocation
    customer_tier: CustomerTier = CustomerTier.STANDARD
    sla_requirements: SlaRequirements = Field(default_factory=SlaRequirements)
    preferred_technician_id: Optional[str] = None

    @field_validator('priority', 'customer_tier', mode='before')
    @classmethod
    def normalize_enums(cls, v):
        return _upper(v)

    @field_validator('required_skills')
    @classmethod
    def strip_skills(cls, v: List[str]):
        return [s.strip() for s in v if s and s.strip()]
