import asyncio

from conftest import FakeProvider, tab, titles, types, urls
from spotlight_app.models import Result, ResultType, ResultMetadata, TabMode
from spotlight_app.providers.base import BookmarkRecord, HistoryRecord, SiteRecord, PinnedTabRecord
from spotlight_app.providers.browser import StaticBrowser
from spotlight_app.search.engine import SpotlightEngine
from spotlight_app.spaces.cache import SpaceCache, SPACES_KEY
from spotlight_app.storage import KeyValueStore, MemoryBackend
from spotlight_app.urls import normalize_url


def autocomplete_result(title, position=0):
    return Result(
        type=ResultType.AUTOCOMPLETE_SUGGESTION,
        title=title,
        url=f"https://www.google.com/search?q={title.replace(' ', '+')}",
        metadata=ResultMetadata(query=title, position=position, is_url=False),
    )


def test_empty_query_lists_open_tabs_by_type():
    provider = FakeProvider(
        tabs=[
            tab(1, "Calendar", "https://calendar.example.com", pinned=True),
            tab(2, "Docs", "https://docs.example.com"),
        ],
        bookmarks=[BookmarkRecord(id="9", title="Ignored", url="https://c.example.com")],
    )
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("   ", TabMode.CURRENT_TAB))

    assert titles(results) == ["Docs", "Calendar"]
    assert provider.calls == ['open_tabs']


def test_same_destination_from_many_sources_appears_once():
    provider = FakeProvider(
        tabs=[tab(1, "GitHub - Home", "https://github.com/")],
        history=[HistoryRecord(url="https://www.github.com", title="GitHub")],
        top_sites=[SiteRecord(title="GitHub", url="https://github.com/")],
        autocomplete=[autocomplete_result("github copilot")],
    )
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("GitHub "))

    keys = [normalize_url(url) for url in urls(results) if url]
    assert keys.count("github.com") == 1
    assert results[0].type == ResultType.OPEN_TAB
    assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)


def test_failing_sources_contribute_nothing():
    provider = FakeProvider(
        tabs=[tab(1, "Python Docs", "https://docs.python.org")],
        fail={'bookmarks', 'history', 'pinned_tabs', 'top_sites', 'autocomplete'},
    )
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("python docs"))
    assert "Python Docs" in titles(results)


def test_one_failing_source_leaves_the_other_five_ranked():
    provider = FakeProvider(
        tabs=[tab(1, "Python Docs", "https://docs.python.org/3/")],
        pinned=[PinnedTabRecord(id="p1", title="Python Weekly", url="https://pythonweekly.com",
                                space_id="1", space_name="Work", space_color="blue")],
        bookmarks=[BookmarkRecord(id="9", title="Python Tutorial", url="https://docs.python.org/3/tutorial/")],
        history=[
            HistoryRecord(url="https://docs.python.org/3", title="Python Docs"),
            HistoryRecord(url="https://realpython.com", title="Real Python"),
        ],
        top_sites=[SiteRecord(title="Python", url="https://www.python.org/")],
        autocomplete=[autocomplete_result("python decorators")],
        fail={'bookmarks'},
    )
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("python"))

    assert set(provider.calls) == {'open_tabs', 'pinned_tabs', 'bookmarks', 'history', 'top_sites', 'autocomplete'}
    assert titles(results) == ["Python Docs", "Python Weekly", "Python", "Real Python", "python decorators"]
    assert types(results) == ["open-tab", "pinned-tab", "top-site", "history", "autocomplete-suggestion"]
    assert [r.score for r in results] == [105, 100, 85, 80, 45]


def test_pipeline_failure_degrades_to_fallback(monkeypatch):
    engine = SpotlightEngine(FakeProvider(tabs=[tab(1, "GitHub", "https://github.com")]))

    def explode(results):
        raise RuntimeError("boom")

    monkeypatch.setattr(engine.deduplicator, 'deduplicate', explode)

    url_results = asyncio.run(engine.get_suggestions("GitHub.com"))
    assert len(url_results) == 1
    assert url_results[0].type == ResultType.URL_SUGGESTION
    assert url_results[0].title == "Navigate to https://github.com"
    assert url_results[0].score == 95

    search_results = asyncio.run(engine.get_suggestions("cheap flights"))
    assert search_results[0].type == ResultType.SEARCH_QUERY
    assert search_results[0].title == 'Search for "cheap flights"'
    assert search_results[0].metadata.query == "cheap flights"
    assert search_results[0].score == 80


def test_output_is_capped_and_sorted():
    provider = FakeProvider(tabs=[tab(i, f"Page {i}", f"https://example.com/{i}") for i in range(20)])
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("page"))

    assert len(results) == 8
    assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)


def test_local_suggestions_skip_autocomplete():
    provider = FakeProvider(autocomplete=[autocomplete_result("zzqx tool")])
    engine = SpotlightEngine(provider)

    local = asyncio.run(engine.get_local_suggestions("zzqx"))
    full = asyncio.run(engine.get_suggestions("zzqx"))

    assert ResultType.AUTOCOMPLETE_SUGGESTION not in [r.type for r in local]
    assert titles(full) == ["zzqx tool"]
    assert full[0].score == 45


def test_top_sites_are_fuzzy_filtered():
    provider = FakeProvider(top_sites=[
        SiteRecord(title="YouTube", url="https://www.youtube.com/"),
        SiteRecord(title="Weather", url="https://weather.com/"),
    ])
    results = asyncio.run(SpotlightEngine(provider).get_suggestions("youtube"))

    youtube = next(r for r in results if r.url == "https://www.youtube.com/")
    assert youtube.type == ResultType.TOP_SITE
    assert youtube.metadata.match_score == 1.0
    assert "https://weather.com/" not in urls(results)


def test_curated_domains_complete_partial_input():
    results = asyncio.run(SpotlightEngine(FakeProvider()).get_suggestions("squaresp"))

    squarespace = next(r for r in results if r.url == "https://squarespace.com")
    assert squarespace.type == ResultType.TOP_SITE
    assert squarespace.metadata.fuzzy_match is True
    assert squarespace.metadata.match_type == "start"
    assert squarespace.metadata.original_query == "squaresp"


def test_results_are_enriched_with_collections(profile):
    provider = FakeProvider(tabs=[
        tab(1, "GitHub", "https://github.com/"),
        tab(2, "Jira", "https://jira.example.com/board/"),
        tab(3, "News", "https://news.ycombinator.com/"),
    ])

    async def scenario():
        store = KeyValueStore(MemoryBackend())
        await store.set_json(SPACES_KEY, profile['spaces'])
        cache = SpaceCache(StaticBrowser(profile), store)
        return await SpotlightEngine(provider, cache).get_suggestions("")

    by_title = {r.title: r for r in asyncio.run(scenario())}

    github = by_title["GitHub"].metadata
    assert github.is_space is True
    assert github.space_name == "Personal"
    assert github.space_color == "pink"
    assert github.bookmark_id == "26"

    assert by_title["Jira"].metadata.space_name == "Work"
    assert by_title["Jira"].metadata.space_color == "blue"
    assert by_title["News"].metadata.space_name is None


def test_recent_tabs_are_results():
    provider = FakeProvider(tabs=[tab(1, "A", "https://a.example.com"), tab(2, "B", "https://b.example.com")])
    results = asyncio.run(SpotlightEngine(provider).get_recent_tabs(1))
    assert titles(results) == ["A"]
    assert results[0].type == ResultType.OPEN_TAB
