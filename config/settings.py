from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()

CONFIG_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY") or None
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.3"))
        self.top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
        self.max_nearby_places: int = int(os.getenv("MAX_NEARBY_PLACES", "5"))
        self.restrict_pois_to_places: bool = _env_flag("RESTRICT_POIS_TO_PLACES")
        self.personas_path: Path = Path(
            os.getenv("PERSONAS_PATH", str(CONFIG_DIR / "personas.json"))
        )
        self.chat_api_url: str = os.getenv("CHAT_API_URL", "http://127.0.0.1:8000")

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
