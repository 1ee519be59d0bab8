"""
Credit extraction from a TMDB ``credits`` sub-resource.

Pure functions; a missing or malformed credit list yields absent credits.
"""

from typing import Any, Dict, List, Optional

from constants import DIRECTOR_JOB, SCREENWRITER_JOBS
from models import CreditSet, Person


def _entries(credits: Optional[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    if not isinstance(credits, dict):
        return []
    entries = credits.get(key)
    if not isinstance(entries, list):
        return []
    return [e for e in entries if isinstance(e, dict) and e.get("id") is not None]


def find_director(credits: Optional[Dict[str, Any]]) -> Optional[Person]:
    """First crew entry whose job is "Director"."""
    for entry in _entries(credits, "crew"):
        if entry.get("job") == DIRECTOR_JOB:
            return Person.from_credit(entry)
    return None


def find_lead_actor(credits: Optional[Dict[str, Any]]) -> Optional[Person]:
    """
    First entry of the cast list.

    TMDB orders cast by billing, so the first entry is taken as the lead.
    """
    cast = _entries(credits, "cast")
    return Person.from_credit(cast[0]) if cast else None


def find_screenwriter(credits: Optional[Dict[str, Any]]) -> Optional[Person]:
    """First crew entry with a Screenplay, Writer or Story credit."""
    for entry in _entries(credits, "crew"):
        if entry.get("job") in SCREENWRITER_JOBS:
            return Person.from_credit(entry)
    return None


def extract_credits(credits: Optional[Dict[str, Any]]) -> CreditSet:
    """
    Derive director, lead actor and screenwriter from a credit list.

    Args:
        credits: TMDB ``credits`` object with ``cast`` and ``crew`` lists

    Returns:
        CreditSet; roles without a matching entry are None
    """
    return CreditSet(
        director=find_director(credits),
        lead_actor=find_lead_actor(credits),
        screenwriter=find_screenwriter(credits),
    )
