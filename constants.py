"""
Shared constants, enums, and tunables for the Movie DNA service.

This module centralizes the magic strings/numbers of the recommendation
pipeline and provides type-safe enums for connection types and axes.
"""

from enum import Enum
from typing import Final, Tuple


# =============================================================================
# Enums
# =============================================================================

class ConnectionType(str, Enum):
    """
    How a recommended movie relates to the searched movie.

    Inherits from str so values serialize directly to JSON.
    """
    DIRECTOR = "Director"
    LEAD_ACTOR = "Lead Actor"
    SCREENWRITER = "Screenwriter"
    SIMILAR_THEME = "Similar Theme"
    SAME_GENRE = "Same Genre"


class RecommendationAxis(str, Enum):
    """
    One of the five recommendation categories.

    The value is the key used in the response's ``recommendations`` object.
    """
    BY_DIRECTOR = "byDirector"
    BY_ACTOR = "byActor"
    BY_WRITER = "byWriter"
    SIMILAR = "similarMovies"
    BY_GENRE = "byGenre"

    @property
    def connection_type(self) -> ConnectionType:
        """Connection type attached to movies on this axis."""
        return {
            RecommendationAxis.BY_DIRECTOR: ConnectionType.DIRECTOR,
            RecommendationAxis.BY_ACTOR: ConnectionType.LEAD_ACTOR,
            RecommendationAxis.BY_WRITER: ConnectionType.SCREENWRITER,
            RecommendationAxis.SIMILAR: ConnectionType.SIMILAR_THEME,
            RecommendationAxis.BY_GENRE: ConnectionType.SAME_GENRE,
        }[self]

    @property
    def limit(self) -> int:
        """Maximum number of recommendations kept on this axis."""
        if self.is_person_axis:
            return PERSON_AXIS_LIMIT
        if self == RecommendationAxis.SIMILAR:
            return SIMILAR_AXIS_LIMIT
        return GENRE_AXIS_LIMIT

    @property
    def is_person_axis(self) -> bool:
        return self in (
            RecommendationAxis.BY_DIRECTOR,
            RecommendationAxis.BY_ACTOR,
            RecommendationAxis.BY_WRITER,
        )

    @property
    def shared_attribute(self) -> str:
        """Wording used in insight prompts ("because of shared <attribute>")."""
        return {
            RecommendationAxis.BY_DIRECTOR: "director",
            RecommendationAxis.BY_ACTOR: "lead actor",
            RecommendationAxis.BY_WRITER: "screenwriter",
            RecommendationAxis.SIMILAR: "similar theme and story",
            RecommendationAxis.BY_GENRE: "genre",
        }[self]


# =============================================================================
# Service Identity
# =============================================================================

SERVICE_NAME: Final = "movie-dna"
SERVICE_TITLE: Final = "Movie DNA API"
SERVICE_VERSION: Final = "1.0.0"


# =============================================================================
# External URLs
# =============================================================================

TMDB_API_BASE: Final = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE: Final = "https://image.tmdb.org/t/p/w500"
GROQ_API_BASE: Final = "https://api.groq.com/openai/v1"

PROVIDER_TMDB: Final = "tmdb"
PROVIDER_GROQ: Final = "groq"


# =============================================================================
# Recommendation Caps
# =============================================================================

PERSON_AXIS_LIMIT: Final = 2
SIMILAR_AXIS_LIMIT: Final = 3
GENRE_AXIS_LIMIT: Final = 3
GENRE_MIN_VOTE_COUNT: Final = 1000  # Avoid low-sample vote averages

# Crew jobs accepted as the screenwriter credit, in search order
SCREENWRITER_JOBS: Final = ("Screenplay", "Writer", "Story")
DIRECTOR_JOB: Final = "Director"
ACTOR_ROLE: Final = "Actor"


# =============================================================================
# Year Filter
# =============================================================================

MODERN_ERA_START_YEAR: Final = 2000
YEAR_UNKNOWN: Final = "unknown"


# =============================================================================
# Display Placeholders
# =============================================================================

UNKNOWN_NAME: Final = "Unknown"
SIMILAR_CONNECTION_NAME: Final = "Story & Audience Match"


# =============================================================================
# Generative Settings
# =============================================================================

DEFAULT_ANALYSIS_MODEL: Final = "llama-3.3-70b-versatile"
DEFAULT_INSIGHT_MODEL: Final = "llama-3.1-8b-instant"

ANALYSIS_TEMPERATURE: Final = 0.7
ANALYSIS_MAX_TOKENS: Final = 200
INSIGHT_TEMPERATURE: Final = 0.6
INSIGHT_MAX_TOKENS: Final = 60

# Phrases in a similarity insight meaning the model found no real link
NEGATIVE_CONNECTION_PHRASES: Final[Tuple[str, ...]] = (
    "no connection",
    "not related",
    "vastly different",
    "unrelated",
    "not similar",
)


# =============================================================================
# Transport Settings
# =============================================================================

DEFAULT_TMDB_TIMEOUT: Final = 10.0
DEFAULT_COMPLETION_TIMEOUT: Final = 20.0
DEFAULT_MAX_WORKERS: Final = 8

# Auth failures are global: no other axis can succeed either
FATAL_PROVIDER_STATUSES: Final = frozenset({401, 403})


# =============================================================================
# Input Validation
# =============================================================================

MAX_TITLE_LENGTH: Final = 200
