"""
Shared data models for the Movie DNA pipeline.

All models are request-scoped, immutable value objects. They are kept
separate from the clients and the pipeline to avoid circular imports.
Serialization uses the camelCase keys of the public JSON response.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from constants import (
    ACTOR_ROLE,
    TMDB_IMAGE_BASE,
    UNKNOWN_NAME,
    YEAR_UNKNOWN,
    ConnectionType,
    RecommendationAxis,
)
from text_utils import extract_year


@dataclass(frozen=True)
class MovieSummary:
    """Display-ready movie metadata derived from a raw TMDB record."""
    id: int
    title: str
    year: Union[int, str] = YEAR_UNKNOWN  # int, or "unknown"
    overview: str = ""
    poster_url: Optional[str] = None
    rating: float = 0.0

    @classmethod
    def from_tmdb(cls, movie: Dict[str, Any]) -> "MovieSummary":
        """
        Format a TMDB search/discover/detail record.

        Args:
            movie: Raw TMDB movie dict

        Returns:
            MovieSummary with year derived from ``release_date``
        """
        poster_path = movie.get("poster_path")
        return cls(
            id=movie["id"],
            title=movie.get("title") or movie.get("original_title") or "",
            year=extract_year(movie.get("release_date")),
            overview=movie.get("overview") or "",
            poster_url=f"{TMDB_IMAGE_BASE}{poster_path}" if poster_path else None,
            rating=float(movie.get("vote_average") or 0.0),
        )

    @property
    def year_known(self) -> bool:
        return isinstance(self.year, int)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'year': self.year,
            'overview': self.overview,
            'posterUrl': self.poster_url,
            'rating': self.rating,
        }


@dataclass(frozen=True)
class Person:
    """A credited person. Identity is the TMDB person id."""
    id: int
    name: str
    job: str

    @classmethod
    def from_credit(cls, entry: Dict[str, Any], default_job: str = ACTOR_ROLE) -> "Person":
        """Build from a TMDB cast or crew entry; cast entries have no ``job``."""
        return cls(
            id=entry["id"],
            name=entry.get("name") or UNKNOWN_NAME,
            job=entry.get("job") or default_job,
        )


def display_name(person: Optional[Person]) -> str:
    """Name for display, "Unknown" when the credit is absent."""
    return person.name if person else UNKNOWN_NAME


@dataclass(frozen=True)
class CreditSet:
    """The three credits the pipeline cares about; each may be absent."""
    director: Optional[Person] = None
    lead_actor: Optional[Person] = None
    screenwriter: Optional[Person] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            'director': display_name(self.director),
            'leadActor': display_name(self.lead_actor),
            'screenwriter': display_name(self.screenwriter),
        }


@dataclass(frozen=True)
class Connection:
    """Why a movie was recommended."""
    type: ConnectionType
    name: str
    insight: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            'type': self.type.value,
            'name': self.name,
            'insight': self.insight,
        }


@dataclass(frozen=True)
class RecommendedMovie:
    """A candidate movie annotated with its connection to the original."""
    movie: MovieSummary
    connection: Connection

    @property
    def id(self) -> int:
        return self.movie.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.movie.to_dict()
        data['connection'] = self.connection.to_dict()
        return data


@dataclass(frozen=True)
class DnaReport:
    """Final response: the searched movie, its credits, analysis and recommendations."""
    original: MovieSummary
    credits: CreditSet
    ai_analysis: str
    recommendations: Dict[RecommendationAxis, Tuple[RecommendedMovie, ...]] = field(default_factory=dict)

    def axis(self, axis: RecommendationAxis) -> List[RecommendedMovie]:
        return list(self.recommendations.get(axis, ()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON response shape."""
        original_movie = self.original.to_dict()
        original_movie.update(self.credits.to_dict())
        original_movie['aiAnalysis'] = self.ai_analysis

        return {
            'originalMovie': original_movie,
            'recommendations': {
                axis.value: [rec.to_dict() for rec in self.recommendations.get(axis, ())]
                for axis in RecommendationAxis
            },
        }
