class AssignmentError(Exception):
    """Base class for assignment and routing failures."""


class NoAvailableTechniciansError(AssignmentError):
    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"No available technicians found for job {job_id}")


class TechnicianNotFoundError(AssignmentError):
    def __init__(self, technician_id: str):
        self.technician_id = technician_id
        super().__init__(f"Technician {technician_id} not found")


class JobNotFoundError(AssignmentError):
    def __init__(self, job_ids):
        self.job_ids = list(job_ids)
        super().__init__(f"Job(s) not found: {', '.join(self.job_ids)}")
