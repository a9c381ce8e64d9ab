import asyncio

import httpx

from spotlight_app.models import ResultType
from spotlight_app.providers.autocomplete import AutocompleteProvider


def provider_for(handler, **kwargs):
    return AutocompleteProvider(
        endpoint="https://suggest.example.com/complete",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def suggest_handler(requests, suggestions):
    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[request.url.params['q'], suggestions])
    return handler


def test_suggestions_become_scored_results():
    requests = []
    provider = provider_for(suggest_handler(requests, [
        "python tutorial", "python.org", "python download", "python list", "python dict", "python set",
    ]))

    async def scenario():
        try:
            return await provider.get_autocomplete_suggestions("pyth")
        finally:
            await provider.close()

    results = asyncio.run(scenario())

    assert len(results) == 5
    assert all(r.type == ResultType.AUTOCOMPLETE_SUGGESTION for r in results)
    assert [r.score for r in results] == [30, 29, 28, 27, 26]
    assert results[0].url == "https://www.google.com/search?q=python+tutorial"
    assert results[0].metadata.query == "python tutorial"
    assert results[0].metadata.original_query == "pyth"
    assert results[1].metadata.is_url is True
    assert results[1].url == "https://python.org"
    assert results[1].title == "Python"
    assert requests[0].url.params['client'] == 'firefox'


def test_short_queries_skip_the_network():
    requests = []
    provider = provider_for(suggest_handler(requests, ["x"]))
    assert asyncio.run(provider.get_autocomplete_suggestions("p")) == []
    assert requests == []


def test_results_are_cached_by_lowercased_query():
    requests = []
    provider = provider_for(suggest_handler(requests, ["python tutorial"]))

    async def scenario():
        first = await provider.get_autocomplete_suggestions("Python")
        second = await provider.get_autocomplete_suggestions("python")
        await provider.close()
        return first, second

    first, second = asyncio.run(scenario())
    assert len(requests) == 1
    assert first == second


def test_identical_in_flight_requests_share_one_call():
    requests = []

    async def slow_handler(request):
        requests.append(request)
        await asyncio.sleep(0.02)
        return httpx.Response(200, json=["pyth", ["python"]])

    provider = provider_for(slow_handler)

    async def scenario():
        results = await asyncio.gather(*[provider.get_autocomplete_suggestions("pyth") for _ in range(3)])
        await provider.close()
        return results

    results = asyncio.run(scenario())
    assert len(requests) == 1
    assert all([r.title for r in batch] == ["python"] for batch in results)


def test_failures_yield_empty_lists():
    def server_error(request):
        return httpx.Response(500)

    def malformed(request):
        return httpx.Response(200, json={'unexpected': True})

    def not_json(request):
        return httpx.Response(200, text="<html>")

    def timeout(request):
        raise httpx.ReadTimeout("too slow", request=request)

    for handler in (server_error, malformed, not_json, timeout):
        provider = provider_for(handler)
        assert asyncio.run(provider.get_autocomplete_suggestions("python")) == []


def test_stats_report_cache_usage():
    provider = provider_for(suggest_handler([], ["python"]))

    async def scenario():
        await provider.get_autocomplete_suggestions("python")
        await provider.get_autocomplete_suggestions("python")
        await provider.close()

    asyncio.run(scenario())
    stats = provider.stats()
    assert stats['hits'] == 1
    assert stats['size'] == 1
    assert stats['pending_requests'] == 0
