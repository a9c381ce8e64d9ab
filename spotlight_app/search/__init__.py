"""Suggestion pipeline: matching, ranking, caching and scheduling."""

from .fuzzy import FuzzyMatchService, FuzzyKey, FuzzyMatch, fuzzy_service
from .instant import generate_instant_suggestion, combine_results
from .engine import SpotlightEngine
from .scheduler import SuggestionScheduler, SearchSession

__all__ = [
    'FuzzyMatchService',
    'FuzzyKey',
    'FuzzyMatch',
    'fuzzy_service',
    'generate_instant_suggestion',
    'combine_results',
    'SpotlightEngine',
    'SuggestionScheduler',
    'SearchSession',
]
