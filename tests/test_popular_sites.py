from spotlight_app.directory import (
    POPULAR_SITES,
    fuzzy_domain_match,
    lookup,
    get_all_domains,
    website_name_extractor,
)
from spotlight_app.directory.popular_sites import start_match_score, MATCH_START, MATCH_CONTAINS


TIERS = {'start': 0, 'contains': 1, 'name': 2}


def test_lookup_and_domains():
    assert lookup("github.com") == "GitHub"
    assert lookup("not-a-real-site.test") is None
    assert "youtube.com" in get_all_domains()
    assert len(get_all_domains()) == len(POPULAR_SITES)


def test_partial_completes_squarespace():
    matches = fuzzy_domain_match("squaresp")
    squarespace = next(m for m in matches if m.domain == "squarespace.com")
    assert squarespace.match_type == MATCH_START
    assert squarespace.display_name == "Squarespace"
    assert squarespace.score == 64.3


def test_shorter_domains_rank_first_within_start_tier():
    matches = fuzzy_domain_match("square")
    assert [m.domain for m in matches[:2]] == ["square.com", "squarespace.com"]


def test_contains_match_on_first_label():
    matches = fuzzy_domain_match("hub")
    github = next(m for m in matches if m.domain == "github.com")
    assert github.match_type == MATCH_CONTAINS
    assert github.score == 63


def test_matches_sorted_by_tier_then_score():
    matches = fuzzy_domain_match("go", max_results=50)
    keys = [(TIERS[m.match_type], -m.score) for m in matches]
    assert keys == sorted(keys)


def test_input_is_trimmed_and_case_insensitive():
    assert fuzzy_domain_match("  GitHu ") == fuzzy_domain_match("githu")


def test_max_results_and_empty_input():
    assert len(fuzzy_domain_match("o", max_results=3)) == 3
    assert fuzzy_domain_match("") == []
    assert fuzzy_domain_match("   ") == []
    assert fuzzy_domain_match(None) == []


def test_start_score_never_below_contains():
    assert start_match_score("averyveryverylongdomainname.com", "a") == 63
    assert start_match_score("x.com", "x.com") == 65


def test_website_name_prefers_curated_directory():
    assert website_name_extractor.extract_website_name("https://github.com") == "GitHub"
    assert website_name_extractor.extract_website_name("www.youtube.com/watch?v=1") == "YouTube"


def test_website_name_parses_unknown_hosts():
    assert website_name_extractor.extract_website_name("https://docs.example.io/x") == "Example"
    assert website_name_extractor.extract_website_name("unknownsite.com") == "Unknownsite"
