import time

import pytest

from spotlight_app.providers.base import BaseDataProvider, TabRecord


def make_profile():
    """Browser profile with tabs, a collection folder, history and top sites."""
    now = time.time()
    return {
        'tabs': [
            {'id': 1, 'title': 'GitHub - Home', 'url': 'https://github.com/', 'window_id': 10,
             'active': True, 'last_activity': now - 10},
            {'id': 2, 'title': 'Python Docs', 'url': 'https://docs.python.org/3/', 'window_id': 10,
             'last_activity': now - 5},
            {'id': 3, 'title': 'Team Calendar', 'url': 'https://calendar.google.com/', 'window_id': 20,
             'pinned': True, 'active': True, 'last_activity': now - 100},
        ],
        'bookmarks': {'id': '0', 'children': [
            {'id': '1', 'title': 'Bookmarks Bar', 'children': [
                {'id': '10', 'title': 'Hacker News', 'url': 'https://news.ycombinator.com/'},
                {'id': '11', 'title': 'Python Tutorial', 'url': 'https://docs.python.org/3/tutorial/'},
            ]},
            {'id': '2', 'title': 'Other Bookmarks', 'children': [
                {'id': '20', 'title': 'Arcify', 'children': [
                    {'id': '21', 'title': 'Work', 'children': [
                        {'id': '22', 'title': 'Jira Board', 'url': 'https://jira.example.com/board'},
                        {'id': '23', 'title': 'Nested', 'children': [
                            {'id': '24', 'title': 'Design Doc', 'url': 'https://docs.example.com/design#intro'},
                        ]},
                    ]},
                    {'id': '25', 'title': 'Personal', 'children': [
                        {'id': '26', 'title': 'GitHub', 'url': 'https://www.github.com'},
                    ]},
                ]},
            ]},
        ]},
        'history': [
            {'url': 'https://stackoverflow.com/questions/1', 'title': 'How to python',
             'visit_count': 3, 'last_visit_time': now - 3600},
            {'url': 'https://old.example.com/', 'title': 'Old python page',
             'visit_count': 1, 'last_visit_time': now - 30 * 86400},
        ],
        'top_sites': [
            {'title': 'YouTube', 'url': 'https://www.youtube.com/'},
            {'title': 'GitHub', 'url': 'https://github.com/'},
        ],
        'spaces': [
            {'id': 1, 'name': 'Work', 'color': 'blue'},
            {'id': 2, 'name': 'Personal', 'color': 'pink'},
        ],
    }


@pytest.fixture
def profile():
    return make_profile()


class FakeProvider(BaseDataProvider):
    """In-memory provider; sources listed in `fail` raise."""

    id = "fake"
    name = "Fake"

    def __init__(self, tabs=None, pinned=None, bookmarks=None, history=None,
                 top_sites=None, autocomplete=None, fail=()):
        self.tabs = tabs or []
        self.pinned = pinned or []
        self.bookmarks = bookmarks or []
        self.history = history or []
        self.top_sites = top_sites or []
        self.autocomplete = autocomplete or []
        self.fail = set(fail)
        self.calls = []

    async def _answer(self, source, items):
        self.calls.append(source)
        if source in self.fail:
            raise RuntimeError(f"{source} unavailable")
        return list(items)

    async def get_open_tabs_data(self, query=""):
        return await self._answer('open_tabs', self.tabs)

    async def get_recent_tabs_data(self, limit=5):
        return (await self._answer('recent_tabs', self.tabs))[:limit]

    async def get_bookmarks_data(self, query):
        return await self._answer('bookmarks', self.bookmarks)

    async def get_history_data(self, query):
        return await self._answer('history', self.history)

    async def get_top_sites_data(self):
        return await self._answer('top_sites', self.top_sites)

    async def get_autocomplete_data(self, query):
        return [result.copy() for result in await self._answer('autocomplete', self.autocomplete)]

    async def get_pinned_tabs_data(self, query=""):
        return await self._answer('pinned_tabs', self.pinned)


def tab(tab_id, title, url, **kwargs):
    return TabRecord(id=tab_id, title=title, url=url, **kwargs)


def titles(results):
    return [result.title for result in results]


def types(results):
    return [result.type.value for result in results]


def urls(results):
    return [result.url for result in results]

