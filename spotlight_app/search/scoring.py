"""
================================================================================
Spotlight v1.0 - Relevance Scoring
================================================================================
Deterministic score = base score by type + one query-relevance bonus.

Base scores (highest first):
  instant suggestions     1000   (built outside the engine, never compete)
  search-query             100
  url-suggestion            95
  open-tab                  90
  pinned-tab                85
  bookmark                  80
  history                   70
  curated fuzzy match    62-65   (tier score carried on the result)
  top-site                  60
  autocomplete         30 - pos

Bonus (strictly one or the other):
  - match_score present  -> match_score * 25
  - otherwise substring  -> exact title 20 / title prefix 15 /
                            title contains 10 / url contains 5 / none 0
================================================================================
"""

from typing import Dict, Iterable, List

from ..models import Result, ResultType


# =============================================================================
# CONSTANTS
# =============================================================================

INSTANT_SCORE = 1000

BASE_SCORES: Dict[ResultType, float] = {
    ResultType.SEARCH_QUERY: 100,
    ResultType.URL_SUGGESTION: 95,
    ResultType.OPEN_TAB: 90,
    ResultType.PINNED_TAB: 85,
    ResultType.BOOKMARK: 80,
    ResultType.HISTORY: 70,
    ResultType.TOP_SITE: 60,
    ResultType.AUTOCOMPLETE_SUGGESTION: 30,
}

FALLBACK_URL_SCORE = 95
FALLBACK_SEARCH_SCORE = 80

MATCH_SCORE_WEIGHT = 25

EXACT_MATCH_BONUS = 20
STARTS_WITH_BONUS = 15
CONTAINS_BONUS = 10
URL_CONTAINS_BONUS = 5

MAX_RESULTS = 8


# =============================================================================
# SCORING
# =============================================================================

def autocomplete_score(position: int) -> float:
    """Remote suggestions lose one point per rank."""
    return BASE_SCORES[ResultType.AUTOCOMPLETE_SUGGESTION] - position


def base_score(result: Result) -> float:
    if result.type == ResultType.AUTOCOMPLETE_SUGGESTION:
        if result.metadata.position is not None:
            return autocomplete_score(result.metadata.position)
        return result.score or BASE_SCORES[ResultType.AUTOCOMPLETE_SUGGESTION]

    # Curated-directory matches carry their tier score
    if result.type == ResultType.TOP_SITE and result.metadata.tier_score is not None:
        return result.metadata.tier_score

    return BASE_SCORES.get(result.type, 0)


def substring_bonus(result: Result, query: str) -> float:
    query = query.lower()
    title = (result.title or "").lower()
    url = (result.url or "").lower()

    if title == query:
        return EXACT_MATCH_BONUS
    if title.startswith(query):
        return STARTS_WITH_BONUS
    if query in title:
        return CONTAINS_BONUS
    if query in url:
        return URL_CONTAINS_BONUS
    return 0


def relevance_score(result: Result, query: str) -> float:
    """
    Final score for one result.

    Args:
        result: Candidate after dedup and enrichment
        query: Trimmed, lower-cased query

    Returns:
        Non-negative score
    """
    score = base_score(result)

    match_score = result.metadata.match_score
    if match_score is not None:
        score += match_score * MATCH_SCORE_WEIGHT
    else:
        score += substring_bonus(result, query)

    return max(0, score)


def score_and_sort(results: Iterable[Result], query: str, limit: int = MAX_RESULTS) -> List[Result]:
    """Score in place, sort descending (stable) and truncate."""
    results = list(results)
    for result in results:
        result.score = relevance_score(result, query)

    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]


def rank_by_type(results: Iterable[Result], limit: int = MAX_RESULTS) -> List[Result]:
    """Base-score ordering used for the empty-query view."""
    results = list(results)
    for result in results:
        result.score = max(0, base_score(result))

    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]
