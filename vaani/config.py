"""
VAANI Configuration

Environment-driven settings. A .env file in the working directory (or the
project root) is loaded first if present.

Set GROQ_API_KEY to enable the remote brain; without it every brain call
is answered by the local heuristic fallback.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_GROQ_MODEL = "gpt-4o-mini"
DEFAULT_SAMPLE_IMAGE_PATH = "/mnt/data/Screenshot 2025-11-25 130326.png"


def _load_env_file():
    """Load environment variables from .env (cwd first, then project root)."""
    loaded = load_dotenv()
    project_env = Path(__file__).parent.parent / ".env"
    if project_env.exists():
        loaded = load_dotenv(project_env) or loaded
    if loaded:
        logger.debug("Loaded environment from .env")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration"""
    groq_api_key: Optional[str] = None
    groq_model: str = DEFAULT_GROQ_MODEL
    groq_base_url: str = DEFAULT_GROQ_BASE_URL
    brain_timeout: float = 20.0
    brain_max_tokens: int = 220
    host: str = "0.0.0.0"
    port: int = 3000
    reminders_file: Path = Path("reminders.json")
    delivered_log: Path = Path("delivered.log")
    sample_image_path: Path = Path(DEFAULT_SAMPLE_IMAGE_PATH)
    log_level: str = "INFO"

    @property
    def has_brain_credential(self) -> bool:
        return bool(self.groq_api_key)

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "Settings":
        """
        Build settings from the environment.

        Args:
            load_dotenv_file: Read .env before looking at os.environ

        Returns:
            Settings instance
        """
        if load_dotenv_file:
            _load_env_file()

        api_key = os.environ.get("GROQ_API_KEY", "").strip() or None
        if not api_key:
            logger.warning(
                "GROQ_API_KEY not set - remote brain disabled, using local fallback replies"
            )

        return cls(
            groq_api_key=api_key,
            groq_model=os.environ.get("GROQ_MODEL", "").strip() or DEFAULT_GROQ_MODEL,
            groq_base_url=os.environ.get("GROQ_BASE_URL", "").strip() or DEFAULT_GROQ_BASE_URL,
            brain_timeout=_env_float("BRAIN_TIMEOUT", 20.0),
            brain_max_tokens=_env_int("BRAIN_MAX_TOKENS", 220),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            reminders_file=Path(os.environ.get("REMINDERS_FILE", "reminders.json")),
            delivered_log=Path(os.environ.get("DELIVERED_LOG", "delivered.log")),
            sample_image_path=Path(os.environ.get("SAMPLE_IMAGE_PATH", DEFAULT_SAMPLE_IMAGE_PATH)),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
