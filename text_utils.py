"""
Text utilities for normalization, validation, and parsing.

Handles incoming title validation, release-year parsing, completion
cleanup, and detection of "no connection" insights.
"""

import re
import unicodedata
from typing import Iterable, Optional, Union

from constants import MAX_TITLE_LENGTH, NEGATIVE_CONNECTION_PHRASES, YEAR_UNKNOWN
from errors import ValidationError


# =============================================================================
# Unicode Normalization
# =============================================================================

def normalize_unicode(text: str) -> str:
    """
    Normalize Unicode text before sending it to a provider.

    - NFKC normalization (full-width -> half-width, ligatures)
    - Normalizes different dash types to simple hyphen
    - Normalizes typographic quotes to ASCII quotes

    Args:
        text: Input text to normalize

    Returns:
        Normalized text
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text)

    dashes = '\u2010\u2011\u2012\u2013\u2014\u2015\u2212\uFE58\uFE63\uFF0D'
    for dash in dashes:
        text = text.replace(dash, '-')

    text = text.replace('\u201c', '"').replace('\u201d', '"')
    text = text.replace('\u2018', "'").replace('\u2019', "'")

    return text


# =============================================================================
# Validation
# =============================================================================

def validate_movie_title(value: object) -> str:
    """
    Validate and clean the movie title from a request body.

    Args:
        value: Raw ``movieTitle`` value (any JSON type)

    Returns:
        The stripped, normalized title

    Raises:
        ValidationError: If the title is missing, not a string, blank,
            or longer than MAX_TITLE_LENGTH
    """
    if value is None:
        raise ValidationError("Movie title is required")
    if not isinstance(value, str):
        raise ValidationError("Movie title must be a string")

    title = ' '.join(normalize_unicode(value).split())
    if not title:
        raise ValidationError("Movie title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Movie title must be at most {MAX_TITLE_LENGTH} characters")

    return title


# =============================================================================
# Parsing
# =============================================================================

_YEAR_PATTERN = re.compile(r'^(\d{4})')


def extract_year(release_date: Optional[str]) -> Union[int, str]:
    """
    Get the release year from a TMDB ``release_date`` value.

    Args:
        release_date: Date string such as "2010-07-15", possibly empty

    Returns:
        The four-digit year as int, or YEAR_UNKNOWN
    """
    if not release_date or not isinstance(release_date, str):
        return YEAR_UNKNOWN

    match = _YEAR_PATTERN.match(release_date.strip())
    if not match:
        return YEAR_UNKNOWN
    return int(match.group(1))


def join_names(names: Iterable[Optional[str]]) -> str:
    """Comma-join non-empty names, e.g. genre names."""
    return ", ".join(name for name in names if name)


def clean_completion(text: Optional[str]) -> str:
    """
    Tidy a completion for display.

    Strips whitespace and a single pair of wrapping quotes, which small
    models often add around one-sentence answers.
    """
    if not text:
        return ""

    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in '"\'':
        text = text[1:-1].strip()
    return text


# =============================================================================
# Insight Classification
# =============================================================================

def has_negative_connection(insight: Optional[str]) -> bool:
    """
    Check whether an insight says the two movies are not really connected.

    Case-insensitive substring match against NEGATIVE_CONNECTION_PHRASES.
    An empty insight is not negative.

    Args:
        insight: Generated insight sentence

    Returns:
        True if the insight contains a negative-connection phrase
    """
    if not insight:
        return False

    lowered = insight.lower()
    return any(phrase in lowered for phrase in NEGATIVE_CONNECTION_PHRASES)
