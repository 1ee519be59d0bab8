"""
TMDB API Client

Metadata lookups used by the Movie DNA pipeline:
- Title search (title -> best match)
- Movie details with credits appended (one round trip)
- Similar movies
- Discovery by person (cast or crew) and by genre

Unlike a best-effort lookup client, every method raises on failure so the
pipeline can decide which failures are fatal and which degrade an axis.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from constants import GENRE_MIN_VOTE_COUNT, PROVIDER_TMDB, TMDB_API_BASE
from errors import NotFoundError, ProviderError
from http_client import SessionAwareComponent
from metrics import metrics

logger = logging.getLogger(__name__)

# Longest response body kept on a ProviderError
MAX_ERROR_BODY = 500


def exclude_and_cap(
    movies: Iterable[Dict[str, Any]],
    exclude_id: Optional[int],
    limit: int,
) -> List[Dict[str, Any]]:
    """
    Drop the original movie from a result list and keep the first ``limit``.

    Args:
        movies: Ranked TMDB results
        exclude_id: Movie id to remove (the searched movie)
        limit: Maximum results to keep

    Returns:
        At most ``limit`` results, rank order preserved; entries that are
        not objects with an ``id`` are skipped
    """
    kept = [
        m for m in movies
        if isinstance(m, dict) and m.get("id") is not None and m.get("id") != exclude_id
    ]
    return kept[:limit]


class TMDBClient(SessionAwareComponent):
    """
    Client for the TMDB v3 API.

    Authenticates with the ``api_key`` query parameter. The key is never
    included in log lines or error messages.
    """

    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB API key
            session: Optional shared session for connection pooling.
            timeout: Request timeout when creating an owned session.
        """
        self.api_key = api_key
        self.init_session(session, timeout=timeout)

    def _get(self, endpoint: str, params: dict = None) -> Dict[str, Any]:
        """
        Make authenticated GET request to TMDB API.

        Args:
            endpoint: Path below the API base, e.g. "/search/movie"
            params: Query parameters (api_key is added)

        Returns:
            Decoded JSON object

        Raises:
            ProviderError: On transport failure, timeout, non-success
                status, or a body that is not a JSON object
        """
        params = dict(params or {})
        params["api_key"] = self.api_key
        url = f"{TMDB_API_BASE}{endpoint}"
        # "/movie/27205/similar" -> "movie/similar"
        metric_endpoint = "/".join(p for p in endpoint.split("/") if p and not p.isdigit())

        try:
            with metrics.timer("tmdb_request_duration_ms", labels={"endpoint": metric_endpoint}):
                response = self.session.get(url, params=params)
        except requests.RequestException as e:
            metrics.inc("provider_errors", labels={"provider": PROVIDER_TMDB, "status": "transport"})
            logger.warning(
                f"TMDB request {endpoint} failed: {type(e).__name__}",
                extra={'provider': PROVIDER_TMDB, 'endpoint': endpoint},
            )
            raise ProviderError(
                PROVIDER_TMDB,
                message=f"TMDB request failed: {type(e).__name__}",
            ) from e

        if not response.ok:
            body = response.text[:MAX_ERROR_BODY]
            metrics.inc("provider_errors", labels={"provider": PROVIDER_TMDB, "status": response.status_code})
            logger.warning(
                f"TMDB {endpoint} returned {response.status_code}: {body}",
                extra={'provider': PROVIDER_TMDB, 'status_code': response.status_code, 'endpoint': endpoint},
            )
            raise ProviderError(PROVIDER_TMDB, status=response.status_code, body=body)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                PROVIDER_TMDB,
                status=response.status_code,
                body=response.text[:MAX_ERROR_BODY],
                message=f"TMDB {endpoint} returned malformed JSON",
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                PROVIDER_TMDB,
                status=response.status_code,
                message=f"TMDB {endpoint} returned unexpected payload",
            )
        return data

    @staticmethod
    def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        results = data.get("results")
        return results if isinstance(results, list) else []

    def search_movie(self, title: str) -> Dict[str, Any]:
        """
        Resolve a free-text title to TMDB's highest-ranked match.

        Args:
            title: Title to search for

        Returns:
            The first search result

        Raises:
            NotFoundError: If the search returns no results
            ProviderError: On a failed request, or a top result without an id
        """
        data = self._get("/search/movie", {"query": title})
        results = self._results(data)
        if not results:
            raise NotFoundError(title, data.get("status_message"))

        best = results[0]
        if not isinstance(best, dict) or best.get("id") is None:
            raise ProviderError(
                PROVIDER_TMDB,
                status=200,
                message="TMDB /search/movie returned a result without an id",
            )
        logger.info(f"TMDB search '{title}' -> {best.get('title')} (id={best.get('id')})")
        return best

    def get_movie_details(self, movie_id: int) -> Dict[str, Any]:
        """Get full details for a movie with ``credits`` embedded."""
        return self._get(f"/movie/{movie_id}", {"append_to_response": "credits"})

    def get_similar_movies(self, movie_id: int, limit: int = 3) -> List[Dict[str, Any]]:
        """
        Get movies TMDB considers similar (theme, plot, audience).

        The source movie is removed even though TMDB normally omits it.
        """
        data = self._get(f"/movie/{movie_id}/similar")
        return exclude_and_cap(self._results(data), movie_id, limit)

    def discover_by_person(
        self,
        person_id: int,
        as_cast: bool,
        exclude_movie_id: Optional[int],
        limit: int = 2,
    ) -> List[Dict[str, Any]]:
        """
        Discover the most popular movies featuring a person.

        Args:
            person_id: TMDB person id
            as_cast: Match cast credits (actors) instead of crew credits
            exclude_movie_id: Movie id to leave out of the results
            limit: Maximum results

        Returns:
            Up to ``limit`` movies sorted by descending popularity
        """
        params = {
            "with_cast" if as_cast else "with_crew": person_id,
            "sort_by": "popularity.desc",
        }
        data = self._get("/discover/movie", params)
        return exclude_and_cap(self._results(data), exclude_movie_id, limit)

    def discover_by_genre(
        self,
        genre_ids: List[int],
        exclude_movie_id: Optional[int],
        limit: int = 3,
        min_vote_count: int = GENRE_MIN_VOTE_COUNT,
    ) -> List[Dict[str, Any]]:
        """
        Discover the best-rated well-voted movies sharing the given genres.

        Args:
            genre_ids: TMDB genre ids; an empty list returns [] without a request
            exclude_movie_id: Movie id to leave out of the results
            limit: Maximum results
            min_vote_count: Minimum number of votes a movie needs

        Returns:
            Up to ``limit`` movies sorted by descending vote average
        """
        if not genre_ids:
            return []

        params = {
            "with_genres": ",".join(str(g) for g in genre_ids),
            "sort_by": "vote_average.desc",
            "vote_count.gte": min_vote_count,
        }
        data = self._get("/discover/movie", params)
        return exclude_and_cap(self._results(data), exclude_movie_id, limit)
