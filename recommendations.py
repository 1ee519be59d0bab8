"""
Recommendation candidates: discovery along five axes and the year filter.

Discovery runs one TMDB call per axis. A failing axis degrades to an empty
list unless the failure is global (rejected API key), in which case it is
re-raised so the request fails instead of returning an empty report.
"""

import logging
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional, Union

from constants import MODERN_ERA_START_YEAR, RecommendationAxis
from errors import ProviderError
from logging_config import submit_with_context
from metrics import metrics
from models import CreditSet, Person
from text_utils import extract_year

logger = logging.getLogger(__name__)

Candidates = Dict[RecommendationAxis, List[Dict[str, Any]]]


# =============================================================================
# Discovery
# =============================================================================

def _person_discovery(tmdb, person: Optional[Person], as_cast: bool, movie_id: int, limit: int) -> Callable[[], list]:
    def discover():
        # Absent credit: nothing to query
        if person is None:
            return []
        return tmdb.discover_by_person(person.id, as_cast, movie_id, limit)
    return discover


def _discovery_calls(tmdb, details: Dict[str, Any], credits: CreditSet) -> Dict[RecommendationAxis, Callable[[], list]]:
    movie_id = details["id"]
    genre_ids = [g["id"] for g in details.get("genres") or [] if isinstance(g, dict) and "id" in g]

    return {
        RecommendationAxis.BY_DIRECTOR: _person_discovery(
            tmdb, credits.director, False, movie_id, RecommendationAxis.BY_DIRECTOR.limit),
        RecommendationAxis.BY_ACTOR: _person_discovery(
            tmdb, credits.lead_actor, True, movie_id, RecommendationAxis.BY_ACTOR.limit),
        RecommendationAxis.BY_WRITER: _person_discovery(
            tmdb, credits.screenwriter, False, movie_id, RecommendationAxis.BY_WRITER.limit),
        RecommendationAxis.SIMILAR: lambda: tmdb.get_similar_movies(
            movie_id, RecommendationAxis.SIMILAR.limit),
        RecommendationAxis.BY_GENRE: lambda: tmdb.discover_by_genre(
            genre_ids, movie_id, RecommendationAxis.BY_GENRE.limit),
    }


def gather_candidates(
    tmdb,
    details: Dict[str, Any],
    credits: CreditSet,
    executor: Executor,
) -> Candidates:
    """
    Discover candidate movies on all five axes concurrently.

    Args:
        tmdb: TMDBClient (or compatible)
        details: Raw detail record of the searched movie
        credits: Extracted credits
        executor: Pool the axis calls run on

    Returns:
        Raw TMDB movie dicts per axis, capped and without the searched movie

    Raises:
        ProviderError: If any axis hit a global provider failure
    """
    futures = {
        axis: submit_with_context(executor, call)
        for axis, call in _discovery_calls(tmdb, details, credits).items()
    }

    candidates: Candidates = {}
    fatal: Optional[ProviderError] = None
    for axis, future in futures.items():
        try:
            candidates[axis] = list(future.result())[:axis.limit]
        except ProviderError as e:
            if e.is_fatal:
                fatal = fatal or e
                continue
            metrics.inc("axis_failures", labels={"axis": axis.value})
            logger.warning(
                f"Discovery for {axis.value} failed, continuing without it: {e}",
                extra={'axis': axis.value, 'provider': e.provider, 'status_code': e.status},
            )
            candidates[axis] = []

    # Raised after every future has finished so no worker outlives the request
    if fatal is not None:
        raise fatal

    logger.info(
        "Candidates: " + ", ".join(f"{axis.value}={len(movies)}" for axis, movies in candidates.items())
    )
    return candidates


# =============================================================================
# Year Filter
# =============================================================================

def is_modern(year: Union[int, str]) -> bool:
    return isinstance(year, int) and year >= MODERN_ERA_START_YEAR


def filter_by_year(candidates: Candidates, original_year: Union[int, str]) -> Candidates:
    """
    Keep modern originals free of pre-2000 recommendations.

    When the searched movie's year is known and >= 2000, candidates whose
    year is unknown or < 2000 are removed from every axis. Otherwise the
    lists are returned unchanged: older originals may still receive modern
    recommendations.

    Args:
        candidates: Raw candidates per axis
        original_year: Year of the searched movie (int or "unknown")

    Returns:
        New candidate mapping; the input is not modified
    """
    if not is_modern(original_year):
        return {axis: list(movies) for axis, movies in candidates.items()}

    filtered = {
        axis: [m for m in movies if is_modern(extract_year(m.get("release_date")))]
        for axis, movies in candidates.items()
    }

    removed = sum(len(candidates[a]) - len(filtered[a]) for a in candidates)
    if removed:
        logger.debug(f"Year filter removed {removed} pre-{MODERN_ERA_START_YEAR} candidates")
    return filtered
