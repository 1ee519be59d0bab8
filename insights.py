"""
Generated text for the Movie DNA report.

- Narrative analysis of the searched movie's creative team
- One-sentence insight per recommended movie

Both are best-effort: a GenerationFailure is logged and replaced by a
fallback string, never propagated.
"""

import logging

from constants import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TEMPERATURE,
    INSIGHT_MAX_TOKENS,
    INSIGHT_TEMPERATURE,
    RecommendationAxis,
)
from errors import GenerationFailure
from metrics import metrics
from models import CreditSet, MovieSummary, display_name

logger = logging.getLogger(__name__)


# =============================================================================
# Prompts
# =============================================================================

ANALYSIS_PROMPT = """You are a movie expert. Analyze this movie's creative DNA:

Movie: "{title}" ({year})
Director: {director}
Lead Actor: {actor}
Screenwriter: {writer}

Provide a brief, engaging 2-3 sentence analysis of what makes this movie's creative team special and why their collaboration creates unique storytelling. Focus on their distinctive styles and contributions."""

SHARED_ATTRIBUTE_PROMPT = (
    'You recommend "{candidate}" to fans of "{original}" because of shared '
    '{attribute} ({name}). In 1 short sentence, explain the connection clearly.'
)

SIMILAR_THEME_PROMPT = (
    'In 1 short sentence, explain why fans of "{original}" would enjoy '
    '"{candidate}", focusing on shared themes, storytelling, or audience.'
)


def build_analysis_prompt(movie: MovieSummary, credits: CreditSet) -> str:
    return ANALYSIS_PROMPT.format(
        title=movie.title,
        year=movie.year,
        director=display_name(credits.director),
        actor=display_name(credits.lead_actor),
        writer=display_name(credits.screenwriter),
    )


def build_insight_prompt(
    axis: RecommendationAxis,
    original_title: str,
    candidate_title: str,
    connection_name: str,
) -> str:
    """
    Build the axis-specific insight prompt.

    Person and genre axes name the shared attribute (the person, or the
    comma-joined genre names); the similarity axis asks about theme instead.
    """
    if axis == RecommendationAxis.SIMILAR:
        return SIMILAR_THEME_PROMPT.format(original=original_title, candidate=candidate_title)

    return SHARED_ATTRIBUTE_PROMPT.format(
        candidate=candidate_title,
        original=original_title,
        attribute=axis.shared_attribute,
        name=connection_name,
    )


# =============================================================================
# Generation
# =============================================================================

def analyze_creative_team(
    completion_client,
    movie: MovieSummary,
    credits: CreditSet,
    model: str,
    fallback: str = "",
) -> str:
    """
    Produce a 2-3 sentence analysis of the movie's creative team.

    Args:
        completion_client: Object with ``complete(prompt, model, temperature, max_tokens)``
        movie: Formatted searched movie
        credits: Extracted credits (absent ones shown as "Unknown")
        model: Completion model identifier
        fallback: Returned when generation fails

    Returns:
        Analysis text, or ``fallback``
    """
    prompt = build_analysis_prompt(movie, credits)
    try:
        return completion_client.complete(
            prompt,
            model=model,
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
        )
    except GenerationFailure as e:
        metrics.inc("generation_failures", labels={"kind": "analysis"})
        logger.warning(f"Narrative analysis unavailable for '{movie.title}': {e}")
        return fallback


def generate_insight(
    completion_client,
    axis: RecommendationAxis,
    original_title: str,
    candidate_title: str,
    connection_name: str,
    model: str,
) -> str:
    """
    Produce a one-sentence reason linking a candidate to the original movie.

    Returns:
        Insight sentence, or "" when generation fails
    """
    prompt = build_insight_prompt(axis, original_title, candidate_title, connection_name)
    try:
        return completion_client.complete(
            prompt,
            model=model,
            temperature=INSIGHT_TEMPERATURE,
            max_tokens=INSIGHT_MAX_TOKENS,
        )
    except GenerationFailure as e:
        metrics.inc("generation_failures", labels={"kind": "insight"})
        logger.debug(f"Insight unavailable for '{candidate_title}' ({axis.value}): {e}")
        return ""
