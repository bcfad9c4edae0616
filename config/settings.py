"""
Configuration management for the timetable scheduling API.
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings."""
    
    # Application
    app_name: str = "Class Timetable Auto-Scheduler API"
    app_version: str = "1.0.0"
    debug: bool = False
    
    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False
    
    # Scheduler
    default_strategy: str = "balanced"
    periods_per_weekly_hour: int = 1  # 1 time slot == 1 weekly hour
    
    # Placement ceiling (CP-SAT)
    compute_placement_ceiling: bool = True
    solver_timeout_seconds: int = 10
    solver_random_seed: int = 42
    solver_num_workers: int = 1
    
    # Logging
    log_level: str = "INFO"
    
    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]
    
    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
