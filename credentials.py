"""
Provider credential loading.

Credentials are resolved once at startup, in priority order:
    1. Environment variables (TMDB_API_KEY, GROQ_API_KEY)
    2. A JSON credentials file (CREDENTIALS_FILE, default ./credentials.json)

A key missing from both sources stays None. The service still starts so
health endpoints work; the analysis endpoint refuses to run until both
keys are configured.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from constants import PROVIDER_GROQ, PROVIDER_TMDB

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_FILE = "./credentials.json"


@dataclass(frozen=True)
class Credentials:
    """
    Immutable holder for the two provider API keys.

    Frozen so the instance can be shared by every request thread.
    """
    tmdb_api_key: Optional[str]
    groq_api_key: Optional[str]
    source: str = "environment"

    @property
    def missing(self) -> List[str]:
        """Names of providers without a configured key."""
        missing = []
        if not self.tmdb_api_key:
            missing.append(PROVIDER_TMDB)
        if not self.groq_api_key:
            missing.append(PROVIDER_GROQ)
        return missing

    @property
    def complete(self) -> bool:
        return not self.missing

    def describe(self) -> Dict[str, Dict[str, object]]:
        """
        Per-provider status safe to expose in health output.

        Only a 4-character key prefix is ever included.
        """
        result = {}
        for provider, key in ((PROVIDER_TMDB, self.tmdb_api_key), (PROVIDER_GROQ, self.groq_api_key)):
            if key:
                result[provider] = {"status": "ok", "key_prefix": key[:4]}
            else:
                result[provider] = {"status": "missing"}
        return result

    def __repr__(self) -> str:
        return f"Credentials(source={self.source!r}, missing={self.missing!r})"


def _load_file(path: Path) -> Dict[str, str]:
    """
    Read keys from a JSON credentials file.

    Returns:
        Dict with any of ``tmdb_api_key``/``groq_api_key``; empty on failure
    """
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            raise TypeError("credentials file must contain a JSON object")
        logger.debug(f"Loaded credentials file {path}")
        return {k: v for k, v in data.items() if isinstance(v, str)}
    except (json.JSONDecodeError, TypeError, OSError) as e:
        logger.warning(f"Failed to load credentials file {path}: {e}")
        return {}


def load_credentials(
    environ: Optional[Mapping[str, str]] = None,
    credentials_file: Optional[str] = None,
) -> Credentials:
    """
    Resolve provider credentials from environment, then file.

    Args:
        environ: Environment mapping (defaults to os.environ)
        credentials_file: Override for the credentials file path

    Returns:
        Credentials with whichever keys were found
    """
    environ = os.environ if environ is None else environ

    tmdb_key = environ.get("TMDB_API_KEY") or None
    groq_key = environ.get("GROQ_API_KEY") or None
    source = "environment"

    if not (tmdb_key and groq_key):
        path = Path(credentials_file or environ.get("CREDENTIALS_FILE", DEFAULT_CREDENTIALS_FILE))
        file_keys = _load_file(path)
        if file_keys:
            source = "environment+file" if (tmdb_key or groq_key) else "file"
            tmdb_key = tmdb_key or file_keys.get("tmdb_api_key") or None
            groq_key = groq_key or file_keys.get("groq_api_key") or None

    creds = Credentials(tmdb_api_key=tmdb_key, groq_api_key=groq_key, source=source)
    if creds.missing:
        logger.warning(f"Missing API keys for: {', '.join(creds.missing)}")
    return creds
