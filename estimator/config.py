from pathlib import Path

from pydantic_settings import BaseSettings


DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "data" / "taxonomy.json"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./projects.db"
    APP_NAME: str = "Renovation Estimator"
    LOG_LEVEL: str = "INFO"

    # Auth
    JWT_SECRET: str = ""  # REQUIRED in production — fail loudly if missing at auth time
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_EXPIRE_DAYS: int = 30

    # CORS: comma separated; empty falls back to DEFAULT_ORIGINS
    ALLOWED_ORIGINS: str = ""

    # Work-type taxonomy table
    TAXONOMY_PATH: str = str(DEFAULT_TAXONOMY_PATH)

    class Config:
        env_file = ".env"


DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "https://rawdahcalculator.vercel.app",
]


def allowed_origins() -> list[str]:
    """Origins allowed by CORS, from ALLOWED_ORIGINS or the defaults."""
    raw = settings.ALLOWED_ORIGINS
    if raw and raw.strip():
        return [o.strip() for o in raw.split(",") if o.strip()]
    return list(DEFAULT_ORIGINS)


settings = Settings()
