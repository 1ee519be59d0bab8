"""
Process-wide configuration, built once at startup.

Environment Variables:
    PORT: Server port (default: 3001)
    LOG_LEVEL: Logging level (default: INFO)
    STRUCTURED_LOGGING: Emit JSON log lines (default: false)
    TMDB_API_KEY / GROQ_API_KEY: Provider keys (see credentials.py)
    CREDENTIALS_FILE: JSON fallback for provider keys
    TMDB_TIMEOUT: Seconds per TMDB request (default: 10)
    COMPLETION_TIMEOUT: Seconds per completion request (default: 20)
    COMPLETION_BASE_URL: OpenAI-compatible endpoint (default: Groq)
    ANALYSIS_MODEL: Model used for the narrative analysis
    INSIGHT_MODEL: Model used for per-recommendation insights
    ANALYSIS_FALLBACK: Text returned when the analysis cannot be generated
    DNA_MAX_WORKERS: Thread pool size for the pipeline fan-out (default: 8)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from constants import (
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_COMPLETION_TIMEOUT,
    DEFAULT_INSIGHT_MODEL,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TMDB_TIMEOUT,
    GROQ_API_BASE,
)
from credentials import Credentials, load_credentials

logger = logging.getLogger(__name__)


def _get_bool(environ: Mapping[str, str], key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = environ.get(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


def _get_number(environ: Mapping[str, str], key: str, default, cast=float):
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {key}={raw!r}, using {default}")
        return default


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable service configuration.

    Passed explicitly into the app factory and the pipeline; nothing reads
    the environment after this is built.
    """
    credentials: Credentials = field(default_factory=lambda: Credentials(None, None))
    port: int = 3001
    log_level: str = "INFO"
    structured_logging: bool = False
    tmdb_timeout: float = DEFAULT_TMDB_TIMEOUT
    completion_timeout: float = DEFAULT_COMPLETION_TIMEOUT
    completion_base_url: str = GROQ_API_BASE
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    insight_model: str = DEFAULT_INSIGHT_MODEL
    analysis_fallback: str = ""
    max_workers: int = DEFAULT_MAX_WORKERS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build configuration from environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            credentials=load_credentials(environ),
            port=_get_number(environ, "PORT", 3001, int),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            structured_logging=_get_bool(environ, "STRUCTURED_LOGGING"),
            tmdb_timeout=_get_number(environ, "TMDB_TIMEOUT", DEFAULT_TMDB_TIMEOUT),
            completion_timeout=_get_number(environ, "COMPLETION_TIMEOUT", DEFAULT_COMPLETION_TIMEOUT),
            completion_base_url=environ.get("COMPLETION_BASE_URL", GROQ_API_BASE),
            analysis_model=environ.get("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL),
            insight_model=environ.get("INSIGHT_MODEL", DEFAULT_INSIGHT_MODEL),
            analysis_fallback=environ.get("ANALYSIS_FALLBACK", ""),
            max_workers=max(1, _get_number(environ, "DNA_MAX_WORKERS", DEFAULT_MAX_WORKERS, int)),
        )
