from spotlight_app.models import Result, ResultType, ResultMetadata
from spotlight_app.search.scoring import (
    BASE_SCORES,
    relevance_score,
    score_and_sort,
    rank_by_type,
    autocomplete_score,
)


def make(result_type, title, url="", **metadata):
    return Result(type=result_type, title=title, url=url, metadata=ResultMetadata(**metadata))


def test_base_score_order():
    order = [
        ResultType.SEARCH_QUERY,
        ResultType.URL_SUGGESTION,
        ResultType.OPEN_TAB,
        ResultType.PINNED_TAB,
        ResultType.BOOKMARK,
        ResultType.HISTORY,
        ResultType.TOP_SITE,
        ResultType.AUTOCOMPLETE_SUGGESTION,
    ]
    scores = [BASE_SCORES[t] for t in order]
    assert scores == sorted(scores, reverse=True)


def test_substring_bonuses():
    assert relevance_score(make(ResultType.OPEN_TAB, "GitHub", "https://github.com"), "github") == 110
    assert relevance_score(make(ResultType.OPEN_TAB, "GitHub Home", "https://github.com"), "github") == 105
    assert relevance_score(make(ResultType.OPEN_TAB, "My GitHub", "https://github.com"), "github") == 100
    assert relevance_score(make(ResultType.OPEN_TAB, "Repos", "https://github.com"), "github") == 95
    assert relevance_score(make(ResultType.OPEN_TAB, "Repos", "https://gitlab.com"), "github") == 90


def test_match_score_replaces_substring_bonus():
    result = make(ResultType.BOOKMARK, "GitHub", "https://github.com", match_score=0.5)
    assert relevance_score(result, "github") == 92.5


def test_autocomplete_uses_position():
    assert autocomplete_score(0) == 30
    result = make(ResultType.AUTOCOMPLETE_SUGGESTION, "python tutorial", "https://example.com", position=2)
    assert relevance_score(result, "zzz") == 28


def test_curated_top_site_uses_tier_score():
    result = make(ResultType.TOP_SITE, "Squarespace", "https://squarespace.com", tier_score=64.3)
    assert relevance_score(result, "zzz") == 64.3


def test_score_and_sort_truncates_and_is_stable():
    results = [make(ResultType.HISTORY, f"Page {i}", f"https://example.com/{i}") for i in range(12)]
    results.append(make(ResultType.OPEN_TAB, "Tab", "https://tab.example.com"))

    ranked = score_and_sort(results, "zzz", limit=8)

    assert len(ranked) == 8
    assert ranked[0].title == "Tab"
    assert [r.title for r in ranked[1:]] == [f"Page {i}" for i in range(7)]
    assert all(r.score >= 0 for r in ranked)


def test_rank_by_type_ignores_query():
    results = [
        make(ResultType.PINNED_TAB, "Pinned", "https://a.example.com"),
        make(ResultType.OPEN_TAB, "Open", "https://b.example.com"),
    ]
    ranked = rank_by_type(results)
    assert [r.title for r in ranked] == ["Open", "Pinned"]
    assert [r.score for r in ranked] == [90, 85]
