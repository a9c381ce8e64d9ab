import pytest

from spotlight_app.urls import normalize_url, is_url, extract_domain, normalize_input_url
from spotlight_app.models import Result, ResultType, ResultMetadata


def test_normalize_url_strips_scheme_www_fragment_and_slashes():
    assert normalize_url("HTTPS://WWW.Example.com/#top") == "example.com"
    assert normalize_url("http://example.com///") == "example.com"
    assert normalize_url("https://github.com/anthropics/") == "github.com/anthropics"


def test_normalize_url_keeps_query_string():
    assert normalize_url("https://example.com?a=1") == "example.com?a=1"
    assert normalize_url("https://example.com/?a=1") == "example.com/?a=1"


def test_normalize_url_empty_input():
    assert normalize_url("") == ""
    assert normalize_url(None) == ""


@pytest.mark.parametrize("url", [
    "https://www.github.com/",
    "HTTP://Example.com/path/#frag",
    "https://www.http://example.com",
    "example.com?q=1#x",
    "ftp://files.example.com/",
])
def test_normalize_url_is_idempotent(url):
    once = normalize_url(url)
    assert normalize_url(once) == once


def test_equivalent_urls_share_a_key():
    assert normalize_url("https://www.github.com") == normalize_url("http://github.com/")


@pytest.mark.parametrize("text", [
    "github.com",
    "https://x",
    "localhost",
    "localhost:3000",
    "192.168.1.1",
    "10.0.0.1:8080",
    "github.com/anthropics",
    "sub.domain.example.org",
])
def test_is_url_accepts(text):
    assert is_url(text)


@pytest.mark.parametrize("text", [
    "",
    "hello",
    "best pizza nearby",
    "github .com",
    "999.1.1.1",
])
def test_is_url_rejects(text):
    assert not is_url(text)


def test_normalize_input_url_adds_https_only_without_scheme():
    assert normalize_input_url("github.com") == "https://github.com"
    assert normalize_input_url("http://github.com") == "http://github.com"


def test_extract_domain():
    assert extract_domain("https://www.github.com/x") == "www.github.com"
    assert extract_domain("github.com/path") == "github.com"
    assert extract_domain("") == ""


def test_result_derives_domain_and_identity():
    result = Result(type=ResultType.BOOKMARK, title="GitHub", url="https://www.GitHub.com/")
    assert result.domain == "www.github.com"
    assert result.identity_key() == "github.com"


def test_search_query_identity_uses_title():
    result = Result(type=ResultType.SEARCH_QUERY, title='Search for "pizza"')
    assert result.identity_key() == 'search:Search for "pizza"'


def test_result_copy_is_independent():
    original = Result(
        type="open-tab",
        title="Docs",
        url="https://docs.python.org",
        score=10,
        metadata=ResultMetadata(tab_id=4),
    )
    clone = original.copy()
    clone.score = 99
    clone.metadata.tab_id = 5

    assert original.score == 10
    assert original.metadata.tab_id == 4
    assert clone.type == ResultType.OPEN_TAB


def test_result_to_dict_omits_unset_metadata():
    data = Result(type=ResultType.OPEN_TAB, title="Docs", url="https://docs.python.org",
                  metadata=ResultMetadata(tab_id=4)).to_dict()
    assert data['type'] == "open-tab"
    assert data['domain'] == "docs.python.org"
    assert data['metadata'] == {'tab_id': 4}


def test_result_from_dict_rejects_unknown_type():
    with pytest.raises(ValueError):
        Result.from_dict({'type': 'weather', 'title': 'x'})
