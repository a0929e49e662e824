"""Application configuration."""
from collections import Counter
from functools import lru_cache
import math
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

WEAK_SECRET_VALUES = {"changeme", "changeme-in-production", "secret", "password", "test"}


def check_secret_strength(value: str | None, name: str) -> str:
    """Fail closed if a secret is short, a placeholder, or low entropy."""
    if not value:
        raise ValueError(f"{name} must be set.")

    if len(value) < 32:
        raise ValueError(f"{name} must be at least 32 characters.")

    lowered = value.lower()
    if lowered in WEAK_SECRET_VALUES or "changeme" in lowered:
        raise ValueError(f"{name} must not be a placeholder value.")

    counts = Counter(value)
    entropy_per_char = -sum((count / len(value)) * math.log2(count / len(value)) for count in counts.values())
    estimated_entropy_bits = entropy_per_char * len(value)
    if estimated_entropy_bits < 100:
        raise ValueError(f"{name} entropy is too low; use a cryptographically random value.")

    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "Gringotts"
    debug: bool = False
    public_url: str = "http://localhost:3000"

    # Database
    database_url: str = "sqlite:///./data/gringotts.db"

    # Auth
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    webhook_token_expire_hours: int = 12

    # Billing
    payment_provider: str | None = "mock"
    webhook_timeout_seconds: float = 10.0
    billing_interval_seconds: int = 60

    # Paths
    base_dir: Path = Path(__file__).parent
    projects_dir: Path = Path("./configs/projects")
    # Bundled development project, only loaded in debug mode
    demo_projects_dir: Path = base_dir / "configs" / "projects"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        """Fail closed if SECRET_KEY is weak or placeholder quality."""
        return check_secret_strength(value, "SECRET_KEY")

    @field_validator("payment_provider")
    @classmethod
    def normalize_payment_provider(cls, value: str | None) -> str | None:
        """Treat an empty provider name as not configured."""
        if value is None or not value.strip():
            return None
        return value.strip().lower()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
