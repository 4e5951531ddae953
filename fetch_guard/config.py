import os
import json
from pathlib import Path
from pydantic import BaseModel, Field, field_validator, model_validator

APP_NAME = "fetch-guard"

# XDG Paths - Explicit XDG resolution so ~/.config/ is used even on macOS
CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME
SETTINGS_FILE = CONFIG_DIR / "settings.json"
PROJECT_DIR_NAME = ".fetch-guard"

_DEFAULT_USER_AGENT = "fetch-guard/0.1 (+link-preview)"


class Settings(BaseModel):
    # Resolution guard
    dns_timeout_seconds: float = Field(default=3.0, gt=0, le=60)

    # Fetcher
    fetch_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    fetch_max_redirects: int = Field(default=5, ge=0, le=20)
    fetch_max_bytes: int = Field(default=1_048_576, ge=1)
    fetch_user_agent: str = Field(default=_DEFAULT_USER_AGENT)

    @field_validator("fetch_user_agent")
    @classmethod
    def _validate_user_agent(cls, v: str) -> str:
        v = v.strip()
        if not v or any(c in v for c in "\r\n"):
            raise ValueError("fetch_user_agent must be a single non-empty line")
        return v

    @model_validator(mode='before')
    @classmethod
    def fill_from_env(cls, data: dict) -> dict:
        """Env vars override all file-based values (highest precedence layer)."""
        env_map = {
            "dns_timeout_seconds": "FETCH_GUARD_DNS_TIMEOUT",
            "fetch_timeout_seconds": "FETCH_GUARD_FETCH_TIMEOUT",
            "fetch_max_redirects": "FETCH_GUARD_MAX_REDIRECTS",
            "fetch_max_bytes": "FETCH_GUARD_MAX_BYTES",
            "fetch_user_agent": "FETCH_GUARD_USER_AGENT",
        }

        for field, env_var in env_map.items():
            val = os.getenv(env_var)
            if val:
                data[field] = val
        return data


def find_project_config() -> Path | None:
    """Return .fetch-guard/settings.json in cwd if it exists, else None."""
    candidate = Path.cwd() / PROJECT_DIR_NAME / "settings.json"
    return candidate if candidate.is_file() else None


def load_config() -> Settings:
    data: dict = {}

    # Layer 1: User config (~/.config/fetch-guard/settings.json)
    if SETTINGS_FILE.exists():
        with open(SETTINGS_FILE, "r") as f:
            try:
                data = json.load(f)
            except Exception as e:
                print(f"Error loading settings.json: {e}. Using defaults.")

    # Layer 2: Project config (<cwd>/.fetch-guard/settings.json), shallow merge
    project_config = find_project_config()
    if project_config is not None:
        with open(project_config, "r") as f:
            try:
                data |= json.load(f)
            except Exception as e:
                print(f"Error loading project config {project_config}: {e}. Skipping.")

    # Layer 3: Env vars (handled by fill_from_env model_validator)
    return Settings.model_validate(data)


# Lazy settings singleton: files are read on first access, not at import time.
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the global Settings instance, creating it on first call."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def __getattr__(name: str):
    """Lazy module attribute: ``from fetch_guard.config import settings`` works without import-time side effects."""
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
