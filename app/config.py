"""Configuration module centralizing environment access.

A plain Settings object read from the environment, cached by get_settings().
"""
import os
from typing import Optional


class Settings:
    def __init__(self) -> None:
        # Core
        inferred_testing = (
            os.getenv("PYTEST_CURRENT_TEST")
            or os.getenv("PYTEST_RUNNING") == "1"
            or os.getenv("ENVIRONMENT") == "testing"
            or os.getenv("TESTING") == "1"
        )
        self.environment: str = "testing" if inferred_testing else os.getenv("ENVIRONMENT", "development")
        self.port: int = int(os.getenv("PORT", "8000"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Database
        self.database_url: str = os.getenv("DATABASE_URL") or "sqlite:///./sego_agent.db"

        # LLM / Anthropic
        self.anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY")
        self.anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022")
        self.use_llm_interpreter: bool = os.getenv("USE_LLM_INTERPRETER", "false").lower() == "true"

        # Dates in commands ("mañana", "el viernes") resolve in this timezone
        self.timezone: str = os.getenv("APP_TIMEZONE", "America/Mexico_City")

        # Without X-User-Id the agent acts as the first Super-Admin (non-production only by default)
        default_anonymous = "false" if self.environment == "production" else "true"
        self.allow_anonymous_agent: bool = os.getenv("ALLOW_ANONYMOUS_AGENT", default_anonymous).lower() == "true"

        # Conversation sessions idle longer than this are dropped (0 keeps them until closed)
        self.session_idle_minutes: int = int(os.getenv("SESSION_IDLE_MINUTES", "60"))

    @property
    def llm_enabled(self) -> bool:
        return self.use_llm_interpreter and bool(self.anthropic_api_key)


_SETTINGS_CACHE: Optional[Settings] = None


def get_settings(refresh: bool = False) -> Settings:
    """Return a (possibly cached) Settings instance.

    Pass refresh=True (or set env FORCE_SETTINGS_REFRESH=1) in tests after
    modifying environment variables to force re-evaluation.
    """
    global _SETTINGS_CACHE
    if refresh or os.getenv("FORCE_SETTINGS_REFRESH") == "1" or _SETTINGS_CACHE is None:
        _SETTINGS_CACHE = Settings()
    return _SETTINGS_CACHE
