# backend/src/honeyward/config.py
#
# Loads all application settings from environment variables / .env file.
# Every value can be overridden with a HONEYWARD_ prefixed variable,
# e.g. HONEYWARD_ACTIVITY_LOG_CAPACITY=500

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HONEYWARD_",
        env_file=Path(__file__).parents[2] / ".env",
        extra="ignore",
    )

    # Auth (admin dashboard only)
    secret_key:                  str = "honeypot-secret-key-change-me"
    algorithm:                   str = "HS256"
    access_token_expire_minutes: int = 24 * 60
    admin_username:              str = "admin"
    admin_password:              str = "honeyward123"

    # Ring buffers
    activity_log_capacity: int = 100
    attack_log_capacity:   int = 100
    honeypot_log_capacity: int = 200

    # Truncation
    payload_max_length:  int = 500
    classify_max_length: int = 32_768

    # Anomaly heuristics
    burst_window_seconds: int   = 60
    burst_threshold:      int   = 20
    scan_interval_s:      float = 30.0
    enable_scanner:       bool  = True
    flagged_session_cap:  int   = 10_000

    # Severity policy
    sensitive_locations: List[str] = [
        "admin_search", "search_query", "input_email", "input_password",
        "login_email", "login_password", "login_username",
    ]
    critical_locations:  List[str] = ["admin_user_lookup", "direct_sql"]

    # Persistence sink
    sink_queue_size: int = 1000

    # App
    environment: str = "development"
    host:        str = "0.0.0.0"
    port:        int = 8000
    log_level:   str = "INFO"
    cors_origins: List[str] = ["http://localhost:8080"]


settings = Settings()
