from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()

DEFAULT_QUESTION_BANK = Path(__file__).parent / "data" / "assessment_questions.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables (and .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(default="sqlite:///./learnpath.db", description="SQLAlchemy connection string")

    secret_key: str = Field(default="change-me-in-production", description="JWT signing key")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    log_dir: str = "logs"
    log_file: str = "backend.log"
    log_level: str = "INFO"
    log_to_console: bool = False

    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    question_bank_path: str = Field(default=str(DEFAULT_QUESTION_BANK))


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _engine_kwargs(url: str) -> dict:
    # SQLite connections are shared with the threadpool FastAPI runs sync deps in.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


settings = get_settings()
engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def reset_db():
    Base.metadata.drop_all(bind=engine)
    create_db()


def create_db():
    # Registers every table on Base.metadata before creating them.
    import learnpath.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
