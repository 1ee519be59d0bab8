"""
Logging setup for the Movie DNA service.

Every log line carries the id of the request that caused it, including
lines written by pipeline worker threads. Two output formats:
- JSON lines for production (STRUCTURED_LOGGING=true)
- Colored single lines for a terminal
"""

import contextvars
import json
import logging
import re
import sys
import time
import uuid
from concurrent.futures import Executor, Future
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Callable, Optional

REQUEST_ID_HEADER = 'X-Request-ID'
NO_REQUEST = '-'

# Caller-supplied ids are echoed into logs and headers, so keep them tame
_REQUEST_ID_PATTERN = re.compile(r'^[A-Za-z0-9._:-]{1,64}$')

# Probe endpoints are polled constantly; their access lines go to DEBUG
QUIET_PATHS = frozenset({'/health/live', '/health/ready', '/api/health', '/metrics'})

request_id_var: ContextVar[str] = ContextVar('request_id', default=NO_REQUEST)


def get_request_id() -> str:
    return request_id_var.get()


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request_id(incoming: Optional[str] = None) -> str:
    """
    Bind a request id to the current context.

    Args:
        incoming: Id from the caller's header; replaced by a fresh id when
            absent or not made of safe characters

    Returns:
        The id now bound
    """
    rid = incoming if incoming and _REQUEST_ID_PATTERN.match(incoming) else new_request_id()
    request_id_var.set(rid)
    return rid


def submit_with_context(executor: Executor, fn: Callable, *args, **kwargs) -> Future:
    """
    Submit work to an executor inside a copy of the caller's context.

    Pool threads do not inherit context variables; without the copy,
    worker log lines would lose their request id. A Context cannot be
    entered by two threads at once, hence one copy per task.
    """
    return executor.submit(contextvars.copy_context().run, fn, *args, **kwargs)


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line.

    {"ts": "...", "level": "INFO", "logger": "movie_dna", "request_id": "...", "msg": "..."}
    """

    EXTRA_FIELDS = (
        'movie_title', 'movie_id', 'axis', 'provider', 'status_code',
        'endpoint', 'method', 'duration_ms',
    )

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": get_request_id(),
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in self.EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    """
    Terminal format: ``12:00:01 INFO     [3f2a9c1b04de] movie_dna: message``
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(datefmt='%H:%M:%S')
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        rid = get_request_id()
        tag = f"[{rid}] " if rid != NO_REQUEST else ""

        line = f"{self.formatTime(record, self.datefmt)} {level} {tag}{record.name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str = "INFO",
    structured: bool = False,
    use_colors: bool = True,
) -> logging.Handler:
    """
    Install a single stdout handler on the root logger.

    Safe to call more than once; earlier handlers are replaced.

    Args:
        level: Log level name
        structured: Emit JSON lines instead of the terminal format
        use_colors: Color the level name (terminal format, tty only)

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if structured else HumanFormatter(use_colors=use_colors))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Client libraries log every request at INFO/DEBUG
    for name in ("urllib3", "requests", "httpx", "httpcore", "openai", "werkzeug"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def setup_flask_request_id(app) -> None:
    """
    Register request-id and access-log hooks on a Flask app.

    The id comes from the X-Request-ID header when usable, is bound for
    the duration of the request and echoed on the response.
    """
    from flask import g, request

    access_log = logging.getLogger('http')

    @app.before_request
    def bind_request():
        g.request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
        g.request_started = time.monotonic()

    @app.after_request
    def log_request(response):
        duration_ms = (time.monotonic() - g.request_started) * 1000
        level = logging.DEBUG if request.path in QUIET_PATHS else logging.INFO

        access_log.log(
            level,
            f"{request.method} {request.path} {response.status_code} {duration_ms:.0f}ms",
            extra={
                'method': request.method,
                'endpoint': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration_ms, 2),
            },
        )
        response.headers[REQUEST_ID_HEADER] = g.request_id
        return response
