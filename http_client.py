"""
HTTP session factory for provider clients.

Sessions created here:
- Pool connections per host, sized for the pipeline's fan-out
- Apply a default per-request timeout at the adapter, so no call can
  forget one
- Make exactly one attempt per request
"""

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from constants import DEFAULT_MAX_WORKERS, SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger(__name__)


class TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter that fills in a timeout for requests sent without one."""

    def __init__(self, *args, timeout: float = 10.0, **kwargs):
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def create_session(
    timeout: float = 10.0,
    pool_maxsize: int = DEFAULT_MAX_WORKERS * 2,
    user_agent: Optional[str] = None,
) -> requests.Session:
    """
    Create a pooled requests session.

    Args:
        timeout: Default request timeout in seconds
        pool_maxsize: Connections kept per host; parallel discovery calls
            to the same host must not wait for a free one
        user_agent: Custom user agent string

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    adapter = TimeoutHTTPAdapter(
        timeout=timeout,
        max_retries=0,
        pool_connections=2,
        pool_maxsize=pool_maxsize,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": user_agent or f"{SERVICE_NAME}/{SERVICE_VERSION}",
        "Accept": "application/json",
    })
    return session


class SessionAwareComponent:
    """
    Base for provider clients that may share a session.

    A client that created its own session closes it; a client handed a
    shared session leaves it open for its owner.
    """

    session: requests.Session
    _owns_session: bool

    def init_session(self, session: Optional[requests.Session] = None, timeout: float = 10.0) -> None:
        self.session = session if session is not None else create_session(timeout=timeout)
        self._owns_session = session is None

    def close(self) -> None:
        if self._owns_session:
            logger.debug(f"Closing session owned by {type(self).__name__}")
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args) -> None:
        self.close()
