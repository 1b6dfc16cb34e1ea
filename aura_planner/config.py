"""
Environment configuration (.env is loaded on import)
"""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    """Runtime settings"""
    db_path: str = "aura_planner.db"
    user_id: str = "local-user"
    ai_api_url: str = ""
    ai_api_key: str = ""
    ai_model: str = "gpt-4"
    ai_timeout: float = 30.0
    supabase_url: str = ""
    supabase_key: str = ""

    @property
    def ai_configured(self) -> bool:
        return bool(self.ai_api_url)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def get_settings() -> Settings:
    """Build settings from the current environment"""
    return Settings(
        db_path=os.getenv("AURA_DB_PATH", "aura_planner.db"),
        user_id=os.getenv("AURA_USER_ID", "local-user"),
        ai_api_url=os.getenv("AI_API_URL", ""),
        ai_api_key=os.getenv("AI_API_KEY", ""),
        ai_model=os.getenv("AI_MODEL", "gpt-4"),
        ai_timeout=float(os.getenv("AI_TIMEOUT", "30.0")),
        supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
        supabase_key=os.getenv("SUPABASE_KEY", ""),
    )
