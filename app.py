from fastapi import FastAPI, HTTPException, status, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from contextlib import asynccontextmanager
from typing import Optional

from config import settings
from models.assignment_service import AssignmentService
from models.exceptions import JobNotFoundError, NoAvailableTechniciansError, TechnicianNotFoundError
from models.repository import InMemoryJobRepository, InMemoryTechnicianRepository, seed_sample_technicians
from schemas.domain import JobRequirements, TechnicianProfile
from schemas.request import RouteOptimizationRequest
from schemas.response import AssignmentAnalytics, AssignmentResult, ErrorResponse, OptimizedRoute
from utils.logger import setup_logger

logger = setup_logger()

assignment_service: Optional[AssignmentService] = None

security = HTTPBearer()


def build_service() -> AssignmentService:
    backend = settings.REPOSITORY_BACKEND.lower()

    if backend == "mssql":
        from models.sql_repository import SqlJobRepository, SqlServerClient, SqlTechnicianRepository
        client = SqlServerClient()
        technicians = SqlTechnicianRepository(client)
        jobs = SqlJobRepository(client)
    elif backend == "memory":
        technicians = InMemoryTechnicianRepository()
        jobs = InMemoryJobRepository()
    else:
        raise ValueError(f"Unknown REPOSITORY_BACKEND: {settings.REPOSITORY_BACKEND}")

    if settings.SEED_SAMPLE_TECHNICIANS:
        seed_sample_technicians(technicians)

    return AssignmentService(technicians, jobs)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global assignment_service

    logger.info("="*60)
    logger.info("🚀 RepairX Technician Assignment Service Starting...")
    logger.info("="*60)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Repository backend: {settings.REPOSITORY_BACKEND}")
    logger.info(f"Port: {settings.API_PORT}")
    logger.info("="*60)

    assignment_service = build_service()
    logger.info("✅ Service initialized successfully")

    yield

    logger.info("🛑 Shutting down service...")
    assignment_service = None
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title="RepairX Technician Assignment Service",
    description="Technician-job matching and route sequencing for device-repair dispatch",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(security)):
    if credentials.credentials != settings.API_KEY:
        logger.warning("❌ Invalid API key attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )


def get_assignment_service() -> AssignmentService:
    if not assignment_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready"
        )
    return assignment_service


def internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"❌ Error {action}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(e) if settings.DEBUG else "Internal server error"
    )


ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse}
}


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "service": "RepairX Technician Assignment Service",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "repository_backend": settings.REPOSITORY_BACKEND,
        "scoring_version": settings.SCORING_VERSION
    }


@app.post(
    "/api/assign-technician",
    response_model=AssignmentResult,
    responses=ERROR_RESPONSES,
    tags=["Technician Assignment"],
    dependencies=[Depends(verify_api_key)]
)
def assign_technician(
    job: JobRequirements,
    service: AssignmentService = Depends(get_assignment_service)
):
    try:
        logger.info(f"📨 Received assignment request for job {job.job_id}")
        return service.assign(job)
    except NoAvailableTechniciansError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        raise internal_error(f"assigning job {job.job_id}", e)


@app.post(
    "/api/technicians/{technician_id}/route",
    response_model=OptimizedRoute,
    responses=ERROR_RESPONSES,
    tags=["Routing"],
    dependencies=[Depends(verify_api_key)]
)
def optimize_route(
    technician_id: str,
    body: RouteOptimizationRequest,
    service: AssignmentService = Depends(get_assignment_service)
):
    try:
        return service.optimize_route(technician_id, body.job_ids, body.current_location)
    except (TechnicianNotFoundError, JobNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        raise internal_error(f"optimizing route for {technician_id}", e)


@app.get(
    "/api/technicians/available",
    tags=["Technicians"],
    dependencies=[Depends(verify_api_key)]
)
def get_available_technicians(service: AssignmentService = Depends(get_assignment_service)):
    try:
        technicians = service.available_technicians()
        return {
            "count": len(technicians),
            "technicians": [t.model_dump(mode="json", by_alias=True) for t in technicians]
        }
    except Exception as e:
        raise internal_error("fetching technicians", e)


@app.get(
    "/api/technicians/{technician_id}",
    response_model=TechnicianProfile,
    responses=ERROR_RESPONSES,
    tags=["Technicians"],
    dependencies=[Depends(verify_api_key)]
)
def get_technician(technician_id: str, service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.get_technician(technician_id)
    except TechnicianNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        raise internal_error(f"fetching technician {technician_id}", e)


@app.put(
    "/api/technicians/{technician_id}",
    response_model=TechnicianProfile,
    responses=ERROR_RESPONSES,
    tags=["Technicians"],
    dependencies=[Depends(verify_api_key)]
)
def upsert_technician(
    technician_id: str,
    technician: TechnicianProfile,
    service: AssignmentService = Depends(get_assignment_service)
):
    if technician.id != technician_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Technician id in path and body must match"
        )
    try:
        return service.upsert_technician(technician)
    except Exception as e:
        raise internal_error(f"saving technician {technician_id}", e)


@app.post(
    "/api/jobs",
    response_model=JobRequirements,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["Jobs"],
    dependencies=[Depends(verify_api_key)]
)
def register_job(job: JobRequirements, service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.register_job(job)
    except Exception as e:
        raise internal_error(f"registering job {job.job_id}", e)


@app.get(
    "/api/assignments/analytics",
    response_model=AssignmentAnalytics,
    tags=["Technician Assignment"],
    dependencies=[Depends(verify_api_key)]
)
def get_assignment_analytics(service: AssignmentService = Depends(get_assignment_service)):
    return service.analytics()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
