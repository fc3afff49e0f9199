"""
Application Configuration
Loads and validates environment variables
"""
import os
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Enterprise Admin Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage ("mongo" or "memory")
    STORE_BACKEND: str = "mongo"

    # MongoDB
    MONGODB_URL: str = os.getenv("DB_URL", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = "enterprise_admin"

    # JWT
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"
    CORS_ALLOW_CREDENTIALS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # Company (payslip / invoice header defaults)
    COMPANY_NAME: str = "My Company"
    COMPANY_ADDRESS: str = "Company Address, City, State, Zip"
    COMPANY_EMAIL: str = ""
    COMPANY_PHONE: str = ""
    COMPANY_WEBSITE: str = ""
    COMPANY_GSTIN: str = ""
    COMPANY_STATE: str = "Uttarakhand"
    COMPANY_STATE_CODE: str = "05"

    # Payroll
    DEFAULT_BASIC_PERCENT: float = 50.0
    DEFAULT_MONTH_DAYS: int = 30
    HRA_RATIO: float = 0.5
    PF_WAGE_CEILING: float = 15000.0
    PF_RATE: float = 0.12
    ESIC_GROSS_LIMIT: float = 21000.0
    ESIC_RATE: float = 0.0075

    # KRA
    KRA_WEIGHT_BUDGET: int = 100

    # First super admin, created at start-up when none exists
    BOOTSTRAP_ADMIN: bool = True
    BOOTSTRAP_ADMIN_EMAIL: str = "admin@company.com"
    BOOTSTRAP_ADMIN_PASSWORD: str = "admin123"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS origins string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
