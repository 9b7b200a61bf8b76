import logging
from typing import List, Optional

import pymssql

from config import settings
from models.repository import JobRepository, TechnicianRepository
from schemas.domain import JobRequirements, TechnicianProfile

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    IF OBJECT_ID(N'dbo.RepairTechnicians', N'U') IS NULL
    CREATE TABLE dbo.RepairTechnicians (
        Id           NVARCHAR(64)  NOT NULL PRIMARY KEY,
        DisplayName  NVARCHAR(200) NOT NULL,
        CurrentJobs  INT           NOT NULL,
        MaxDailyJobs INT           NOT NULL,
        ProfileJson  NVARCHAR(MAX) NOT NULL,
        UpdatedAt    DATETIME2     NOT NULL DEFAULT SYSUTCDATETIME()
    )
    """,
    """
    IF OBJECT_ID(N'dbo.RepairJobs', N'U') IS NULL
    CREATE TABLE dbo.RepairJobs (
        Id               NVARCHAR(64)  NOT NULL PRIMARY KEY,
        RequirementsJson NVARCHAR(MAX) NOT NULL,
        UpdatedAt        DATETIME2     NOT NULL DEFAULT SYSUTCDATETIME()
    )
    """,
]


class SqlServerClient:
    """Thin pymssql wrapper: one short-lived connection per call."""

    def __init__(self):
        self._schema_ready = False

    def _get_db_connection(self):
        return pymssql.connect(
            server=settings.DB_SERVER,
            port=settings.DB_PORT,
            user=settings.DB_USER,
            password=settings.DB_PASSWORD,
            database=settings.DB_NAME,
            timeout=10
        )

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        conn = self._get_db_connection()
        try:
            cursor = conn.cursor()
            for statement in SCHEMA:
                cursor.execute(statement)
            conn.commit()
            cursor.close()
        finally:
            conn.close()
        self._schema_ready = True
        logger.info(f"✅ Repository tables ready in {settings.DB_NAME}")

    def fetch_all(self, query: str, params: tuple = ()) -> List[dict]:
        self.ensure_schema()
        conn = self._get_db_connection()
        try:
            cursor = conn.cursor(as_dict=True)
            cursor.execute(query, params)
            rows = cursor.fetchall()
            cursor.close()
            return rows
        except pymssql.Error as e:
            logger.error(f"❌ Query failed: {e}")
            raise
        finally:
            conn.close()

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[dict]:
        rows = self.fetch_all(query, params)
        return rows[0] if rows else None

    def execute(self, query: str, params: tuple = ()) -> None:
        self.ensure_schema()
        conn = self._get_db_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            conn.commit()
            cursor.close()
        except pymssql.Error as e:
            logger.error(f"❌ Write failed: {e}")
            raise
        finally:
            conn.close()


class SqlTechnicianRepository(TechnicianRepository):

    def __init__(self, client: SqlServerClient):
        self.client = client

    def get(self, technician_id: str) -> Optional[TechnicianProfile]:
        row = self.client.fetch_one(
            "SELECT ProfileJson FROM dbo.RepairTechnicians WHERE Id = %s",
            (technician_id,)
        )
        return TechnicianProfile.model_validate_json(row['ProfileJson']) if row else None

    def list_all(self) -> List[TechnicianProfile]:
        rows = self.client.fetch_all("SELECT ProfileJson FROM dbo.RepairTechnicians ORDER BY Id")
        return [TechnicianProfile.model_validate_json(r['ProfileJson']) for r in rows]

    def list_candidates(self) -> List[TechnicianProfile]:
        rows = self.client.fetch_all("""
            SELECT ProfileJson
            FROM dbo.RepairTechnicians
            WHERE CurrentJobs < MaxDailyJobs
            ORDER BY Id
        """)
        technicians = [TechnicianProfile.model_validate_json(r['ProfileJson']) for r in rows]
        logger.info(f"Found {len(technicians)} technicians with capacity")
        return technicians

    def save(self, technician: TechnicianProfile) -> None:
        self.client.execute("""
            MERGE dbo.RepairTechnicians AS target
            USING (SELECT %s AS Id) AS source
            ON target.Id = source.Id
            WHEN MATCHED THEN UPDATE SET
                DisplayName = %s, CurrentJobs = %s, MaxDailyJobs = %s,
                ProfileJson = %s, UpdatedAt = SYSUTCDATETIME()
            WHEN NOT MATCHED THEN
                INSERT (Id, DisplayName, CurrentJobs, MaxDailyJobs, ProfileJson)
                VALUES (%s, %s, %s, %s, %s);
        """, (
            technician.id,
            technician.name, technician.availability.current_jobs,
            technician.availability.max_daily_jobs, technician.model_dump_json(),
            technician.id, technician.name, technician.availability.current_jobs,
            technician.availability.max_daily_jobs, technician.model_dump_json(),
        ))


class SqlJobRepository(JobRepository):

    def __init__(self, client: SqlServerClient):
        self.client = client

    def get(self, job_id: str) -> Optional[JobRequirements]:
        row = self.client.fetch_one(
            "SELECT RequirementsJson FROM dbo.RepairJobs WHERE Id = %s",
            (job_id,)
        )
        return JobRequirements.model_validate_json(row['RequirementsJson']) if row else None

    def save(self, job: JobRequirements) -> None:
        payload = job.model_dump_json()
        self.client.execute("""
            MERGE dbo.RepairJobs AS target
            USING (SELECT %s AS Id) AS source
            ON target.Id = source.Id
            WHEN MATCHED THEN UPDATE SET RequirementsJson = %s, UpdatedAt = SYSUTCDATETIME()
            WHEN NOT MATCHED THEN INSERT (Id, RequirementsJson) VALUES (%s, %s);
        """, (job.job_id, payload, job.job_id, payload))
