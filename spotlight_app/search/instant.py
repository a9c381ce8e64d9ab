"""
Instant suggestions: computed synchronously from the raw keystroke text,
before any source is queried.

URL-looking input becomes a url-suggestion titled with the website name;
anything else becomes a web-search suggestion.
"""

from typing import List, Optional

from ..models import Result, ResultType, ResultMetadata
from ..urls import is_url, normalize_input_url
from ..directory.site_names import website_name_extractor
from .scoring import INSTANT_SCORE


def generate_instant_suggestion(query: Optional[str]) -> Optional[Result]:
    text = (query or "").strip()
    if not text:
        return None

    if is_url(text):
        url = normalize_input_url(text)
        return Result(
            type=ResultType.URL_SUGGESTION,
            title=website_name_extractor.extract_website_name(url),
            url=url,
            score=INSTANT_SCORE,
            metadata=ResultMetadata(original_input=text),
        )

    return Result(
        type=ResultType.SEARCH_QUERY,
        title=f'Search for "{text}"',
        url="",
        score=INSTANT_SCORE,
        metadata=ResultMetadata(query=text),
    )


def combine_results(instant: Optional[Result], results: List[Result]) -> List[Result]:
    """Instant suggestion first, then every async result it does not duplicate."""
    combined = [instant] if instant else []
    for result in results:
        if instant and instant.is_same_destination(result):
            continue
        combined.append(result)
    return combined

