"""Application configuration settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Blogsphere API"
    app_env: str = "development"
    debug: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./blogsphere.db"

    # Auth tokens (JWT strings stored per user)
    jwt_secret_key: str = "your-super-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    auth_token_expire_days: int = 180
    cookie_name: str = "authToken"

    # Password hashing
    bcrypt_rounds: int = 12

    # OTP
    otp_length: int = 6
    otp_expire_minutes: int = 5
    otp_max_attempts: int = 5

    # Signup policy
    min_username_length: int = 6
    min_signup_age: int = 16

    # SMTP
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_email: str = "noreply@blogsphere.local"
    smtp_from_name: str = "Blogsphere"
    smtp_use_tls: bool = True

    # Avatar upload
    upload_dir: str = "./uploads"
    avatar_max_size_mb: int = 5

    # CORS
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Security
    allowed_hosts: str = "*"

    @property
    def cookie_secure(self) -> bool:
        """Only send the auth cookie over HTTPS in production."""
        return self.app_env == "production"

    @property
    def cookie_max_age(self) -> int:
        """Cookie lifetime in seconds, matching the token lifetime."""
        return self.auth_token_expire_days * 24 * 60 * 60

    @property
    def allowed_hosts_list(self) -> List[str]:
        """Get allowed hosts as a list."""
        return [host.strip() for host in self.allowed_hosts.split(",")]

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def avatar_max_size_bytes(self) -> int:
        return self.avatar_max_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
