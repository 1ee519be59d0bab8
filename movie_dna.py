#!/usr/bin/env python3
"""
Movie DNA Pipeline

Builds a "creative DNA" report for a searched movie: its director, lead
actor and screenwriter, a generated analysis of that team, and five lists
of recommendations with a generated one-sentence insight each.

Pipeline:
    1. Resolve the title with TMDB search (first match wins)
    2. Fetch details with credits embedded
    3. Extract director / lead actor / screenwriter
    4. Generate the narrative analysis (best-effort)
    5. Discover candidates on five axes concurrently
    6. Drop pre-2000 candidates when the searched movie is 2000 or later
    7. Generate insights for all candidates concurrently; drop similarity
       candidates whose insight says there is no real connection
    8. Assemble the DnaReport

Steps 1-3 fail the request on error. Steps 4, 5 and 7 degrade: a failed
analysis or insight becomes a fallback string, a failed axis becomes [].

Usage:
    from movie_dna import MovieDNAPipeline

    pipeline = MovieDNAPipeline(tmdb_client, completion_client)
    report = pipeline.analyze("Inception")
    print(report.to_dict())
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from config import AppConfig
from constants import (
    DEFAULT_ANALYSIS_MODEL,
    DEFAULT_INSIGHT_MODEL,
    DEFAULT_MAX_WORKERS,
    SIMILAR_CONNECTION_NAME,
    UNKNOWN_NAME,
    RecommendationAxis,
)
from completion_client import CompletionClient
from credits import extract_credits
from insights import analyze_creative_team, generate_insight
from logging_config import submit_with_context
from metrics import metrics
from models import Connection, CreditSet, DnaReport, MovieSummary, RecommendedMovie
from recommendations import Candidates, filter_by_year, gather_candidates
from text_utils import has_negative_connection, join_names
from tmdb_client import TMDBClient

logger = logging.getLogger(__name__)


# =============================================================================
# Assembly helpers
# =============================================================================

def connection_name(
    axis: RecommendationAxis,
    credits: CreditSet,
    genre_names: str,
) -> str:
    """Name shown on an axis' connections: the person, the genres, or a placeholder."""
    if axis == RecommendationAxis.BY_DIRECTOR:
        return credits.director.name if credits.director else ""
    if axis == RecommendationAxis.BY_ACTOR:
        return credits.lead_actor.name if credits.lead_actor else ""
    if axis == RecommendationAxis.BY_WRITER:
        return credits.screenwriter.name if credits.screenwriter else ""
    if axis == RecommendationAxis.BY_GENRE:
        return genre_names or UNKNOWN_NAME
    return SIMILAR_CONNECTION_NAME


def keep_recommendation(axis: RecommendationAxis, insight: str) -> bool:
    """Similarity candidates are dropped when their insight denies a connection."""
    return not (axis == RecommendationAxis.SIMILAR and has_negative_connection(insight))


def assemble_report(
    original: MovieSummary,
    credits: CreditSet,
    ai_analysis: str,
    recommendations: Dict[RecommendationAxis, List[RecommendedMovie]],
) -> DnaReport:
    """Merge pipeline outputs; every axis is present, possibly empty."""
    return DnaReport(
        original=original,
        credits=credits,
        ai_analysis=ai_analysis,
        recommendations={
            axis: tuple(recommendations.get(axis, ())) for axis in RecommendationAxis
        },
    )


# =============================================================================
# Pipeline
# =============================================================================

class MovieDNAPipeline:
    """
    The recommendation-assembly pipeline.

    Provider clients are injected; the pipeline holds no per-request state
    and one instance serves concurrent requests.
    """

    def __init__(
        self,
        tmdb,
        completion,
        analysis_model: str = DEFAULT_ANALYSIS_MODEL,
        insight_model: str = DEFAULT_INSIGHT_MODEL,
        analysis_fallback: str = "",
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Initialize the pipeline.

        Args:
            tmdb: Metadata client (TMDBClient or a compatible fake)
            completion: Completion client with ``complete(...)``
            analysis_model: Model for the narrative analysis
            insight_model: Model for recommendation insights
            analysis_fallback: Analysis text used when generation fails
            max_workers: Thread pool size per request
        """
        self.tmdb = tmdb
        self.completion = completion
        self.analysis_model = analysis_model
        self.insight_model = insight_model
        self.analysis_fallback = analysis_fallback
        self.max_workers = max_workers

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        tmdb=None,
        completion=None,
    ) -> "MovieDNAPipeline":
        """
        Build a pipeline from configuration, creating real clients unless given.
        """
        creds = config.credentials
        tmdb = tmdb or TMDBClient(creds.tmdb_api_key, timeout=config.tmdb_timeout)
        completion = completion or CompletionClient(
            creds.groq_api_key,
            base_url=config.completion_base_url,
            timeout=config.completion_timeout,
        )
        return cls(
            tmdb,
            completion,
            analysis_model=config.analysis_model,
            insight_model=config.insight_model,
            analysis_fallback=config.analysis_fallback,
            max_workers=config.max_workers,
        )

    def analyze(self, movie_title: str) -> DnaReport:
        """
        Build the DNA report for a title.

        Args:
            movie_title: Validated, non-empty title

        Returns:
            The assembled DnaReport

        Raises:
            NotFoundError: If the title matches nothing
            ProviderError: If search/details fail, or a discovery axis hit
                a global provider failure
        """
        with metrics.timer("pipeline_duration_ms"):
            logger.info(f"Searching for: {movie_title}", extra={'movie_title': movie_title})
            match = self.tmdb.search_movie(movie_title)
            movie_id = match["id"]

            logger.info(f"Fetching details for movie ID: {movie_id}", extra={'movie_id': movie_id})
            details = dict(self.tmdb.get_movie_details(movie_id))
            details["id"] = movie_id

            original = MovieSummary.from_tmdb(details)
            credits = extract_credits(details.get("credits"))
            logger.info(
                f"Credits for '{original.title}' ({original.year}): "
                f"director={credits.director.name if credits.director else None}, "
                f"lead={credits.lead_actor.name if credits.lead_actor else None}, "
                f"writer={credits.screenwriter.name if credits.screenwriter else None}"
            )

            genre_names = join_names(
                g.get("name") for g in details.get("genres") or [] if isinstance(g, dict)
            )

            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="dna") as executor:
                # The analysis only needs the credits, so it overlaps with discovery
                analysis_future = submit_with_context(
                    executor,
                    analyze_creative_team,
                    self.completion,
                    original,
                    credits,
                    self.analysis_model,
                    self.analysis_fallback,
                )

                candidates = gather_candidates(self.tmdb, details, credits, executor)
                candidates = filter_by_year(candidates, original.year)
                recommendations = self._annotate(executor, original, credits, genre_names, candidates)

                ai_analysis = analysis_future.result()

        report = assemble_report(original, credits, ai_analysis, recommendations)
        metrics.inc("dna_reports")
        return report

    def _annotate(
        self,
        executor,
        original: MovieSummary,
        credits: CreditSet,
        genre_names: str,
        candidates: Candidates,
    ) -> Dict[RecommendationAxis, List[RecommendedMovie]]:
        """
        Generate insights for every candidate and build the recommendations.

        All insight calls of all axes are in flight together; results are
        collected per axis in candidate order.
        """
        pending: Dict[RecommendationAxis, List[Tuple[Dict[str, Any], str, Future]]] = {}
        for axis, movies in candidates.items():
            name = connection_name(axis, credits, genre_names)
            pending[axis] = [
                (
                    movie,
                    name,
                    submit_with_context(
                        executor,
                        generate_insight,
                        self.completion,
                        axis,
                        original.title,
                        movie.get("title") or "",
                        name,
                        self.insight_model,
                    ),
                )
                for movie in movies
            ]

        recommendations: Dict[RecommendationAxis, List[RecommendedMovie]] = {}
        for axis, items in pending.items():
            kept = []
            for movie, name, future in items:
                insight = future.result()
                if not keep_recommendation(axis, insight):
                    metrics.inc("similar_dropped_unrelated")
                    logger.info(f"Dropping unrelated similar movie '{movie.get('title')}': {insight}")
                    continue
                kept.append(RecommendedMovie(
                    movie=MovieSummary.from_tmdb(movie),
                    connection=Connection(type=axis.connection_type, name=name, insight=insight),
                ))
            recommendations[axis] = kept
        return recommendations


def analyze_movie_dna(
    movie_title: str,
    config: Optional[AppConfig] = None,
) -> DnaReport:
    """
    One-shot convenience wrapper: build clients from config and run once.

    Long-running services should build one MovieDNAPipeline at startup
    instead.
    """
    config = config or AppConfig.from_env()
    pipeline = MovieDNAPipeline.from_config(config)
    try:
        return pipeline.analyze(movie_title)
    finally:
        if isinstance(pipeline.tmdb, TMDBClient):
            pipeline.tmdb.close()


# =============================================================================
# CLI
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Command-line interface for testing."""
    import argparse
    import json

    from constants import SERVICE_VERSION
    from errors import MovieDNAError
    from logging_config import configure_logging
    from text_utils import validate_movie_title

    parser = argparse.ArgumentParser(
        description="Analyze a movie's creative DNA and find related movies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "Inception"
  %(prog)s "Spirited Away" --json
        """
    )
    parser.add_argument("title", help="Title to analyze")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVICE_VERSION}")

    args = parser.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING")

    config = AppConfig.from_env()
    if not config.credentials.complete:
        print(f"Missing API keys: {', '.join(config.credentials.missing)}")
        return 1

    try:
        report = analyze_movie_dna(validate_movie_title(args.title), config)
    except MovieDNAError as e:
        print(f"Error: {e}")
        return 1

    data = report.to_dict()
    if args.json:
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    movie = data["originalMovie"]
    print(f"{movie['title']} ({movie['year']})  {movie['rating']}/10")
    print(f"  Director: {movie['director']}")
    print(f"  Lead Actor: {movie['leadActor']}")
    print(f"  Screenwriter: {movie['screenwriter']}")
    if movie["aiAnalysis"]:
        print(f"\n  {movie['aiAnalysis']}")

    for axis in RecommendationAxis:
        recs = data["recommendations"][axis.value]
        print(f"\n{axis.value} ({len(recs)})")
        for rec in recs:
            print(f"  - {rec['title']} ({rec['year']})")
            if rec["connection"]["insight"]:
                print(f"    {rec['connection']['insight']}")

    return 0


if __name__ == "__main__":
    exit(main())
