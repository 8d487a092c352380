from pydantic_settings import BaseSettings
from typing import List, Dict, Any
import json


DEFAULT_SERVICE_CATALOG: Dict[str, List[str]] = {
    "EduTech": ["Online Tutoring", "Learning Management System", "Exam Preparation Portal"],
    "Web Development": ["Full Stack Development", "Frontend Development", "Backend Development"],
    "Mobile App Development": ["Android Development", "iOS Development", "Cross-Platform Apps"],
    "Data Science": ["Machine Learning", "Data Analytics", "Deep Learning"],
    "Cloud & DevOps": ["AWS Fundamentals", "Docker & Kubernetes", "CI/CD Pipelines"],
    "Digital Marketing": ["SEO", "Social Media Marketing", "Content Marketing"],
}


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip().rstrip('/') for origin in v.split(',') if origin.strip()]
    return []


def parse_service_catalog(v: Any) -> Dict[str, List[str]]:
    """
    Parse the service -> courses catalog.

    Accepts a dict, a JSON object string, or an empty value (built-in catalog).
    """
    if isinstance(v, dict):
        return {str(k): [str(c) for c in courses] for k, courses in v.items()}
    if isinstance(v, str) and v.strip():
        try:
            data = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"SERVICE_CATALOG_STR is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ValueError("SERVICE_CATALOG_STR must be a JSON object of service -> [courses]")
        return {str(k): [str(c) for c in courses] for k, courses in data.items()}
    return {k: list(courses) for k, courses in DEFAULT_SERVICE_CATALOG.items()}


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Project Registration Portal"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./registrations.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False
    DB_OPERATION_TIMEOUT: float = 10.0  # seconds per store call

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    # ==========================================
    # Registrations
    # ==========================================
    SERVICE_CATALOG_STR: str = ""  # JSON object; empty means built-in catalog
    ENFORCE_SERVICE_CATALOG: bool = False
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 500

    # ==========================================
    # Realtime
    # ==========================================
    ADMIN_WS_PATH: str = "/ws"
    EVENT_SOURCE: str = "registration-api"

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REGISTRATIONS: str = "20/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    @property
    def SERVICE_CATALOG(self) -> Dict[str, List[str]]:
        return parse_service_catalog(self.SERVICE_CATALOG_STR)

    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT == "development" or self.DEBUG

    def is_origin_allowed(self, origin: str) -> bool:
        return origin.rstrip('/') in self.CORS_ORIGINS


settings = Settings()
