from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Z3r0Day-Talks"

    openai_api_key: str | None = None
    ai_model: str = "gpt-4o-mini"

    frontend_origin: str = "http://localhost:5173"

    db_path: Path = BASE_DIR / "data" / "talks.sqlite3"

    # Fixed seed makes the generated mock meetings reproducible
    seed: int | None = None

    # Default admin credentials (mock login only)
    admin_username: str = "admin"
    admin_password: str = "adminpassword123"

    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"


@lru_cache
def get_settings() -> "Settings":
    return Settings()

settings = get_settings()
