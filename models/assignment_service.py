import logging
import threading
from collections import deque
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from config import settings
from models.exceptions import JobNotFoundError, NoAvailableTechniciansError, TechnicianNotFoundError
from models.repository import JobRepository, TechnicianRepository
from models.route_sequencer import RouteSequencer
from models.technician_recommender import TechnicianRecommender
from schemas.domain import GeoLocation, JobRequirements, Recommendation, TechnicianProfile, utcnow
from schemas.response import AssignmentAnalytics, AssignmentResult, OptimizedRoute

logger = logging.getLogger(__name__)


class AssignmentService:
    """
    Assigns jobs to technicians and sequences their routes.

    Scoring, selection and the workload update run under one lock so two
    concurrent requests cannot both claim a technician's last free slot.
    """

    def __init__(
        self,
        technicians: TechnicianRepository,
        jobs: JobRepository,
        recommender: Optional[TechnicianRecommender] = None,
        sequencer: Optional[RouteSequencer] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.technicians = technicians
        self.jobs = jobs
        self.recommender = recommender or TechnicianRecommender()
        self.sequencer = sequencer or RouteSequencer()
        self.clock = clock
        self._lock = threading.Lock()
        self._history: deque = deque(maxlen=settings.ASSIGNMENT_HISTORY_LIMIT)

    # ──────────────────────────────────────────────────
    # Assignment
    # ──────────────────────────────────────────────────

    def assign(self, job: JobRequirements) -> AssignmentResult:
        logger.info(f"🔍 Starting assignment for job {job.job_id}")

        with self._lock:
            now = self.clock()
            candidates = self.technicians.list_candidates()
            if not candidates:
                logger.warning(f"⚠️ No available technicians for job {job.job_id}")
                raise NoAvailableTechniciansError(job.job_id)

            logger.info(f"Found {len(candidates)} candidate technicians")
            ranked = self.recommender.rank(candidates, job, now)
            best = ranked[0]
            technician = next(t for t in candidates if t.id == best.technician_id)

            start = self._estimated_start(technician, now)
            result = AssignmentResult(
                job_id=job.job_id,
                assigned_technician_id=technician.id,
                assignment_score=best,
                estimated_start_time=start,
                estimated_completion_time=start + timedelta(hours=job.estimated_duration),
                alternative_technicians=ranked[1:1 + settings.ALTERNATIVES_COUNT],
                assignment_reason=self.recommender.generate_reason(best, technician),
                scoring_version=settings.SCORING_VERSION,
                assignment_timestamp=now,
            )

            self._update_workload(technician, job, now)
            self.jobs.save(job)
            self._history.append(result)

        logger.info(
            f"✅ Job {job.job_id} assigned to {technician.name} "
            f"(score {best.overall_score}/100, {best.recommendation.value})"
        )
        return result

    def _estimated_start(self, technician: TechnicianProfile, now: datetime) -> datetime:
        if technician.availability.is_available:
            return now + timedelta(minutes=settings.START_DELAY_MINUTES)
        return max(technician.availability.next_available_slot, now)

    def _update_workload(self, technician: TechnicianProfile, job: JobRequirements, now: datetime) -> None:
        workload = technician.current_workload
        availability = technician.availability

        workload.active_jobs += 1
        workload.estimated_workload_hours += job.estimated_duration
        availability.current_jobs += 1
        workload.capacity_utilization = workload.active_jobs / availability.max_daily_jobs * 100

        if workload.active_jobs >= availability.max_daily_jobs:
            availability.is_available = False
            availability.next_available_slot = now + timedelta(hours=settings.NEXT_DAY_HOURS)
            logger.info(f"Technician {technician.id} reached daily capacity ({availability.max_daily_jobs} jobs)")

        self.technicians.save(technician)

    # ──────────────────────────────────────────────────
    # Routing
    # ──────────────────────────────────────────────────

    def optimize_route(self, technician_id: str, job_ids: List[str],
                       current_location: Optional[GeoLocation] = None) -> OptimizedRoute:
        technician = self.technicians.get(technician_id)
        if technician is None:
            raise TechnicianNotFoundError(technician_id)

        found = self.jobs.get_many(job_ids)
        missing = [job_id for job_id in job_ids if job_id not in found]
        if missing:
            raise JobNotFoundError(missing)

        origin = current_location or technician.location
        return self.sequencer.sequence(
            technician_id, origin, [found[job_id] for job_id in job_ids], self.clock()
        )

    # ──────────────────────────────────────────────────
    # Technicians & Jobs
    # ──────────────────────────────────────────────────

    def get_technician(self, technician_id: str) -> TechnicianProfile:
        technician = self.technicians.get(technician_id)
        if technician is None:
            raise TechnicianNotFoundError(technician_id)
        return technician

    def available_technicians(self) -> List[TechnicianProfile]:
        return self.technicians.list_candidates()

    def upsert_technician(self, technician: TechnicianProfile) -> TechnicianProfile:
        """
        Create or update a technician profile.

        For an existing technician the stored workload counters and availability
        state are kept; only assignment changes them. Values sent on create are
        taken as given.
        """
        with self._lock:
            stored = self.technicians.get(technician.id)
            if stored is not None:
                technician = self._keep_workload(technician, stored)
            self.technicians.save(technician)
        logger.info(f"Technician {technician.id} saved")
        return technician

    @staticmethod
    def _keep_workload(incoming: TechnicianProfile, stored: TechnicianProfile) -> TechnicianProfile:
        merged = incoming.model_copy(deep=True)
        workload, kept_workload = merged.current_workload, stored.current_workload
        availability, kept_availability = merged.availability, stored.availability

        workload.active_jobs = kept_workload.active_jobs
        workload.estimated_workload_hours = kept_workload.estimated_workload_hours
        workload.capacity_utilization = kept_workload.capacity_utilization
        availability.current_jobs = kept_availability.current_jobs
        availability.is_available = kept_availability.is_available
        availability.next_available_slot = kept_availability.next_available_slot
        return merged

    def register_job(self, job: JobRequirements) -> JobRequirements:
        self.jobs.save(job)
        logger.info(f"Job {job.job_id} registered")
        return job

    # ──────────────────────────────────────────────────
    # Analytics
    # ──────────────────────────────────────────────────

    def analytics(self) -> AssignmentAnalytics:
        with self._lock:
            recent = list(self._history)[-settings.ANALYTICS_WINDOW:]
            total = len(self._history)

        distribution = {level: 0 for level in Recommendation}
        for result in recent:
            distribution[result.assignment_score.recommendation] += 1

        count = len(recent)
        return AssignmentAnalytics(
            total_assignments=total,
            average_assignment_score=(
                round(sum(r.assignment_score.overall_score for r in recent) / count, 2) if count else 0.0
            ),
            average_confidence=(
                round(sum(r.assignment_score.confidence for r in recent) / count, 4) if count else 0.0
            ),
            assignment_distribution=distribution,
            scoring_version=settings.SCORING_VERSION,
            last_updated=self.clock(),
        )
