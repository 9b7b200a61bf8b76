from pydantic import Field, field_validator
from typing import List, Optional

from schemas.domain import CamelModel, GeoLocation


class RouteOptimizationRequest(CamelModel):
    job_ids: List[str] = Field(..., min_length=1)
    current_location: Optional[GeoLocation] = None

    @field_validator('job_ids')
    @classmethod
    def unique_job_ids(cls, v: List[str]):
        if len(set(v)) != len(v):
            raise ValueError('jobIds must not contain duplicates')
        return v
