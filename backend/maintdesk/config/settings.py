"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Record store
    store_backend: str = "mongo"  # "mongo" or "memory"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "university_reports"
    
    # Collections
    reports_collection: str = "reports"
    users_collection: str = "users"
    tickets_collection: str = "support_tickets"
    staff_role: str = "staff"
    
    # Views
    timezone: str = "Asia/Kuala_Lumpur"  # Calendar filters (today, month, ...) use this zone
    default_page_size: int = 10
    max_page_size: int = 100
    overdue_days: int = 7
    recent_reports_limit: int = 5
    top_issues_limit: int = 5
    
    # Identity provider (tokens are issued elsewhere, only verified here)
    jwt_secret: str = DEFAULT_JWT_SECRET  # Must be overridden in production
    jwt_algorithm: str = "HS256"
    jwt_audience: str = ""
    admin_emails: str = ""
    
    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"
    log_to_file: bool = True
    
    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"
    
    # Environment
    environment: str = "development"
    debug: bool = True
    
    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]
    
    @property
    def admin_emails_list(self) -> List[str]:
        """Parse admin emails string to lowercase list"""
        return [email.strip().lower() for email in self.admin_emails.split(",") if email.strip()]
    
    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
