from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Persistence
    REPOSITORY_BACKEND: str = "memory"  # memory | mssql
    SEED_SAMPLE_TECHNICIANS: bool = True

    # Database (mssql backend only)
    DB_SERVER: str = "localhost"
    DB_PORT: int = 1433
    DB_NAME: str = "RepairX"
    DB_USER: str = "sa"
    DB_PASSWORD: str = ""

    # API
    API_KEY: str
    API_PORT: int = 5000
    API_HOST: str = "0.0.0.0"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "DEBUG"

    # Scoring Weights
    WEIGHT_SKILL: float = 0.30
    WEIGHT_AVAILABILITY: float = 0.25
    WEIGHT_LOCATION: float = 0.20
    WEIGHT_PERFORMANCE: float = 0.15
    WEIGHT_WORKLOAD: float = 0.10
    SCORING_VERSION: str = "2.1.0"

    # Assignment
    START_DELAY_MINUTES: int = 30
    NEXT_DAY_HOURS: int = 24
    ALTERNATIVES_COUNT: int = 3
    ASSIGNMENT_HISTORY_LIMIT: int = 1000
    ANALYTICS_WINDOW: int = 100

    # Routing
    TRAVEL_MINUTES_PER_MILE: float = 2.5
    STOP_BUFFER_MINUTES: int = 30

    @model_validator(mode="after")
    def check_weights(self):
        total = (
            self.WEIGHT_SKILL
            + self.WEIGHT_AVAILABILITY
            + self.WEIGHT_LOCATION
            + self.WEIGHT_PERFORMANCE
            + self.WEIGHT_WORKLOAD
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Scoring weights must sum to 1.0 (got {total:.4f})")
        return self

    @property
    def weights(self) -> dict:
        return {
            'skill':        self.WEIGHT_SKILL,
            'availability': self.WEIGHT_AVAILABILITY,
            'location':     self.WEIGHT_LOCATION,
            'performance':  self.WEIGHT_PERFORMANCE,
            'workload':     self.WEIGHT_WORKLOAD,
        }

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
