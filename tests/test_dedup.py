"""Tests for duplicate tab detection."""

import pytest

from tab_shepherd.dedup import (
    duplicate_groups,
    find_duplicates,
    is_checkable_url,
    normalize_url,
    unique_tabs,
)
from tests.conftest import make_tab


class TestNormalizeUrl:
    """Tests for normalize_url."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://x.com/a?utm=1", "https://x.com/a"),
            ("https://x.com/a/#top", "https://x.com/a"),
            ("https://X.COM/a", "https://x.com/a"),
            ("https://x.com:8443/a", "https://x.com/a"),
            ("https://x.com/", "https://x.com"),
            ("https://x.com", "https://x.com"),
            ("https://x.com/a//", "https://x.com/a/"),
        ],
    )
    def test_normalizes(self, url: str, expected: str) -> None:
        assert normalize_url(url) == expected

    def test_path_case_preserved(self) -> None:
        assert normalize_url("https://x.com/Docs") == "https://x.com/Docs"

    @pytest.mark.parametrize("url", ["not a url", "", "x.com/a"])
    def test_unparsable_returned_unchanged(self, url: str) -> None:
        assert normalize_url(url) == url

    def test_parser_error_returned_unchanged(self) -> None:
        """A URL the parser rejects does not raise."""
        assert normalize_url("http://[::1/") == "http://[::1/"


class TestFindDuplicates:
    def test_pair_both_marked(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="https://x.com/a?ref=1"),
            make_tab(tab_id=2, url="https://x.com/a/"),
        ]
        assert find_duplicates(tabs) == {1, 2}

    def test_three_way_group(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="https://x.com/a"),
            make_tab(tab_id=2, url="https://x.com/b"),
            make_tab(tab_id=3, url="https://x.com/a#1"),
            make_tab(tab_id=4, url="https://x.com/a#2"),
        ]
        assert find_duplicates(tabs) == {1, 3, 4}

    def test_order_independent(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="https://x.com/a"),
            make_tab(tab_id=2, url="https://y.com/"),
            make_tab(tab_id=3, url="https://x.com/a/"),
        ]
        assert find_duplicates(tabs) == find_duplicates(list(reversed(tabs)))

    def test_no_duplicates(self) -> None:
        tabs = [make_tab(tab_id=1, url="https://x.com/a"), make_tab(tab_id=2, url="https://x.com/b")]
        assert find_duplicates(tabs) == set()

    def test_empty(self) -> None:
        assert find_duplicates([]) == set()

    def test_different_scheme_not_duplicate(self) -> None:
        tabs = [make_tab(tab_id=1, url="http://x.com/a"), make_tab(tab_id=2, url="https://x.com/a")]
        assert find_duplicates(tabs) == set()


class TestDuplicateGroups:
    def test_only_groups_with_two_or_more(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="https://x.com/a"),
            make_tab(tab_id=2, url="https://x.com/b"),
            make_tab(tab_id=3, url="https://x.com/a?q"),
        ]
        assert duplicate_groups(tabs) == {"https://x.com/a": [1, 3]}


class TestUniqueTabs:
    def test_keeps_first_of_each_url(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="https://x.com/a"),
            make_tab(tab_id=2, url="https://x.com/a/"),
            make_tab(tab_id=3, url="https://x.com/b"),
        ]
        assert [t.id for t in unique_tabs(tabs)] == [1, 3]


class TestCheckableUrls:
    """Empty and browser-internal urls never take part in duplicate detection."""

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "chrome://newtab/",
            "CHROME://settings",
            "chrome-extension://abc/popup.html",
            "about:blank",
            "moz-extension://id/page.html",
            "data:text/plain,hi",
            "blob:https://x.com/uuid",
            "javascript:void(0)",
            "file:///tmp/a.html",
        ],
    )
    def test_not_checkable(self, url: str) -> None:
        assert not is_checkable_url(url)

    def test_web_urls_checkable(self) -> None:
        assert is_checkable_url("https://x.com/a")
        assert is_checkable_url("http://localhost:8000/")

    def test_empty_and_new_tab_pages_not_duplicates(self) -> None:
        tabs = [
            make_tab(tab_id=1, url=""),
            make_tab(tab_id=2, url=""),
            make_tab(tab_id=3, url="chrome://newtab/"),
            make_tab(tab_id=4, url="chrome://newtab/"),
        ]
        assert find_duplicates(tabs) == set()
        assert duplicate_groups(tabs) == {}

    def test_internal_pages_kept_by_unique_tabs(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="about:blank"),
            make_tab(tab_id=2, url="about:blank"),
            make_tab(tab_id=3, url="https://x.com/"),
            make_tab(tab_id=4, url="https://x.com"),
        ]
        assert [t.id for t in unique_tabs(tabs)] == [1, 2, 3]

    def test_web_duplicates_still_found_alongside(self) -> None:
        tabs = [
            make_tab(tab_id=1, url="chrome://newtab/"),
            make_tab(tab_id=2, url="https://x.com/a"),
            make_tab(tab_id=3, url="chrome://newtab/"),
            make_tab(tab_id=4, url="https://x.com/a/"),
        ]
        assert find_duplicates(tabs) == {2, 4}
