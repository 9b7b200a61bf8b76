from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List

from schemas.domain import CamelModel, GeoLocation, Recommendation


class AssignmentScore(CamelModel):
    technician_id: str
    overall_score: int = Field(..., ge=0, le=100)
    skill_match_score: int = Field(..., ge=0, le=100)
    availability_score: int = Field(..., ge=0, le=100)
    location_score: int = Field(..., ge=0, le=100)
    performance_score: int = Field(..., ge=0, le=100)
    workload_score: int = Field(..., ge=0, le=100)
    recommendation: Recommendation
    confidence: float = Field(..., ge=0.5, le=1.0)
    reasoning_factors: List[str] = Field(default_factory=list)


class AssignmentResult(CamelModel):
    job_id: str
    assigned_technician_id: str
    assignment_score: AssignmentScore
    estimated_start_time: datetime
    estimated_completion_time: datetime
    alternative_technicians: List[AssignmentScore] = Field(default_factory=list)
    assignment_reason: str
    scoring_version: str
    assignment_timestamp: datetime


class RouteStop(CamelModel):
    job_id: str
    sequence: int = Field(..., ge=1)
    location: GeoLocation
    distance_km: float
    estimated_travel_time: int
    estimated_arrival: datetime


class OptimizedRoute(CamelModel):
    technician_id: str
    origin: GeoLocation
    stops: List[RouteStop] = Field(default_factory=list)
    total_distance_km: float
    total_travel_time: int
    optimized_at: datetime


class AssignmentAnalytics(CamelModel):
    total_assignments: int
    average_assignment_score: float
    average_confidence: float
    assignment_distribution: Dict[Recommendation, int]
    scoring_version: str
    last_updated: datetime


class ErrorResponse(BaseModel):
    detail: str
