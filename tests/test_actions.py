import asyncio

import pytest

from spotlight_app.actions import (
    ActionDispatcher,
    ActionEnvironment,
    ActionError,
    ActionEnvironmentError,
    MissingFieldError,
    NoActiveTabError,
    UnknownResultTypeError,
    DISPOSITION_CURRENT_TAB,
    DISPOSITION_NEW_TAB,
)
from spotlight_app.models import Result, ResultType, ResultMetadata, TabMode
from spotlight_app.providers.browser import StaticBrowser


class RecordingEnvironment(ActionEnvironment):
    def __init__(self, active_tab=None, failing=()):
        self.active_tab = active_tab
        self.failing = set(failing)
        self.calls = []

    async def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failing:
            raise LookupError(f"{name} rejected")

    async def activate_tab(self, tab_id):
        await self._record('activate_tab', tab_id)

    async def focus_window(self, window_id):
        await self._record('focus_window', window_id)

    async def navigate_tab(self, tab_id, url):
        await self._record('navigate_tab', tab_id, url)

    async def create_tab(self, url):
        await self._record('create_tab', url)

    async def query_active_tab(self):
        await self._record('query_active_tab')
        return self.active_tab

    async def web_search(self, text, disposition):
        await self._record('web_search', text, disposition)


def dispatch(environment, result, mode, current_tab_id=None):
    return asyncio.run(ActionDispatcher(environment).dispatch(result, mode, current_tab_id))


def open_tab(**metadata):
    return Result(type=ResultType.OPEN_TAB, title="Docs", url="https://docs.python.org",
                  metadata=ResultMetadata(**metadata))


def test_open_tab_in_new_tab_mode_requires_tab_id():
    environment = RecordingEnvironment()
    with pytest.raises(MissingFieldError) as excinfo:
        dispatch(environment, open_tab(), TabMode.NEW_TAB)

    assert excinfo.value.field_name == 'tab_id'
    assert environment.calls == []


def test_open_tab_switches_and_focuses_window():
    environment = RecordingEnvironment()
    dispatch(environment, open_tab(tab_id=4, window_id=9), TabMode.NEW_TAB)
    assert environment.calls == [('activate_tab', 4), ('focus_window', 9)]


def test_open_tab_without_window_only_activates():
    environment = RecordingEnvironment()
    dispatch(environment, open_tab(tab_id=4), "new-tab")
    assert environment.calls == [('activate_tab', 4)]


def test_open_tab_in_current_tab_mode_navigates_active_tab():
    environment = RecordingEnvironment(active_tab={'id': 7, 'window_id': 1})
    dispatch(environment, open_tab(tab_id=4), TabMode.CURRENT_TAB)
    assert environment.calls == [('query_active_tab',), ('navigate_tab', 7, "https://docs.python.org")]


def test_current_tab_hint_skips_active_tab_lookup():
    environment = RecordingEnvironment()
    bookmark = Result(type=ResultType.BOOKMARK, title="HN", url="https://news.ycombinator.com")
    dispatch(environment, bookmark, TabMode.CURRENT_TAB, current_tab_id=12)
    assert environment.calls == [('navigate_tab', 12, "https://news.ycombinator.com")]


@pytest.mark.parametrize("result_type", [
    ResultType.URL_SUGGESTION,
    ResultType.BOOKMARK,
    ResultType.HISTORY,
    ResultType.TOP_SITE,
    ResultType.AUTOCOMPLETE_SUGGESTION,
])
def test_url_results_open_new_tab(result_type):
    environment = RecordingEnvironment()
    dispatch(environment, Result(type=result_type, title="x", url="https://x.example.com"), TabMode.NEW_TAB)
    assert environment.calls == [('create_tab', "https://x.example.com")]


def test_url_result_without_url_is_rejected():
    environment = RecordingEnvironment()
    with pytest.raises(MissingFieldError):
        dispatch(environment, Result(type=ResultType.HISTORY, title="x"), TabMode.NEW_TAB)
    assert environment.calls == []


def test_search_query_uses_matching_disposition():
    environment = RecordingEnvironment()
    search = Result(type=ResultType.SEARCH_QUERY, title='Search for "pizza"', metadata=ResultMetadata(query="pizza"))

    dispatch(environment, search, TabMode.CURRENT_TAB)
    dispatch(environment, search, TabMode.NEW_TAB)

    assert environment.calls == [
        ('web_search', "pizza", DISPOSITION_CURRENT_TAB),
        ('web_search', "pizza", DISPOSITION_NEW_TAB),
    ]


def test_search_query_without_query_is_rejected():
    environment = RecordingEnvironment()
    with pytest.raises(MissingFieldError):
        dispatch(environment, Result(type=ResultType.SEARCH_QUERY, title="Search"), TabMode.NEW_TAB)
    assert environment.calls == []


def test_no_active_tab():
    environment = RecordingEnvironment(active_tab=None)
    with pytest.raises(NoActiveTabError, match="No active tab found"):
        dispatch(environment, Result(type=ResultType.TOP_SITE, title="x", url="https://x.example.com"),
                 TabMode.CURRENT_TAB)


def test_environment_failures_are_wrapped():
    environment = RecordingEnvironment(failing={'create_tab'})
    with pytest.raises(ActionEnvironmentError) as excinfo:
        dispatch(environment, Result(type=ResultType.BOOKMARK, title="x", url="https://x.example.com"),
                 TabMode.NEW_TAB)

    assert excinfo.value.operation == 'create_tab'
    assert isinstance(excinfo.value.__cause__, LookupError)


def test_wire_dicts_are_accepted():
    environment = RecordingEnvironment()
    dispatch(environment, {'type': 'open-tab', 'title': 'Docs', 'metadata': {'tab_id': 3}}, "new-tab")
    assert environment.calls == [('activate_tab', 3)]


def test_bad_inputs_raise_action_errors():
    environment = RecordingEnvironment()
    with pytest.raises(UnknownResultTypeError):
        dispatch(environment, {'type': 'weather', 'title': 'x'}, TabMode.NEW_TAB)
    with pytest.raises(ActionError):
        dispatch(environment, None, TabMode.NEW_TAB)
    with pytest.raises(ActionError):
        dispatch(environment, open_tab(tab_id=1), "sideways")
    assert environment.calls == []


def test_static_browser_executes_actions(profile):
    browser = StaticBrowser(profile)
    dispatcher = ActionDispatcher(browser)

    async def scenario():
        await dispatcher.dispatch(open_tab(tab_id=2, window_id=10), TabMode.NEW_TAB)
        await dispatcher.dispatch(
            Result(type=ResultType.URL_SUGGESTION, title="Example", url="https://example.com"),
            TabMode.CURRENT_TAB,
        )
        await dispatcher.dispatch(
            Result(type=ResultType.SEARCH_QUERY, title="s", metadata=ResultMetadata(query="pizza")),
            TabMode.NEW_TAB,
        )
        return await browser.query_tabs()

    tabs = {tab.id: tab for tab in asyncio.run(scenario())}
    assert tabs[2].url == "https://example.com"
    assert tabs[1].active is False
    assert tabs[4].url == "https://www.google.com/search?q=pizza"
    assert browser.searches == [{'text': "pizza", 'disposition': DISPOSITION_NEW_TAB}]


def test_static_browser_failures_surface_as_environment_errors(profile):
    dispatcher = ActionDispatcher(StaticBrowser(profile))
    with pytest.raises(ActionEnvironmentError):
        asyncio.run(dispatcher.dispatch(open_tab(tab_id=404), TabMode.NEW_TAB))
