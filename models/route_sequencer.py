import logging
from datetime import datetime, timedelta
from typing import List

from config import settings
from models.scoring import round_half_up
from schemas.domain import GeoLocation, JobRequirements
from schemas.response import OptimizedRoute, RouteStop
from utils.geo import distance_between, km_to_miles

logger = logging.getLogger(__name__)


class RouteSequencer:
    """
    Orders a technician's jobs by straight-line distance from one origin.

    Each job is measured from the technician's location only, not from the
    previous stop, so the result is a sort rather than a nearest-neighbour tour.
    """

    def __init__(self, minutes_per_mile: float = None, stop_buffer_minutes: int = None):
        self.minutes_per_mile = minutes_per_mile if minutes_per_mile is not None else settings.TRAVEL_MINUTES_PER_MILE
        self.stop_buffer_minutes = (
            stop_buffer_minutes if stop_buffer_minutes is not None else settings.STOP_BUFFER_MINUTES
        )

    def sequence(self, technician_id: str, origin: GeoLocation,
                 jobs: List[JobRequirements], now: datetime) -> OptimizedRoute:
        measured = [(distance_between(origin, job.location), job) for job in jobs]
        measured.sort(key=lambda pair: pair[0])

        stops = []
        for index, (distance_km, job) in enumerate(measured):
            travel_minutes = km_to_miles(distance_km) * self.minutes_per_mile
            arrival = now + timedelta(minutes=index * self.stop_buffer_minutes + travel_minutes)
            stops.append(RouteStop(
                job_id=job.job_id,
                sequence=index + 1,
                location=job.location,
                distance_km=round(distance_km, 2),
                estimated_travel_time=round_half_up(travel_minutes),
                estimated_arrival=arrival,
            ))

        route = OptimizedRoute(
            technician_id=technician_id,
            origin=origin,
            stops=stops,
            total_distance_km=round(sum(d for d, _ in measured), 2),
            total_travel_time=sum(s.estimated_travel_time for s in stops),
            optimized_at=now,
        )
        logger.info(
            f"🗺️ Sequenced {len(stops)} stops for technician {technician_id} "
            f"({route.total_distance_km} km, {route.total_travel_time} min)"
        )
        return route
