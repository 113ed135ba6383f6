"""Unit tests for URI derivation."""

import pytest

from pagebundler.core.models import Page
from pagebundler.core.slug import assign_uris, slugify_title


class TestSlugifyTitle:
    def test_spaced_title(self):
        assert slugify_title("Page With Spaced Title") == "page-with-spaced-title"

    def test_unspaced_title(self):
        assert slugify_title("PageWithNoSpacedTitle") == "pagewithnospacedtitle"

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Hello,   World!", "hello-world"),
            ("  padded title  ", "padded-title"),
            ("Café à Paris", "cafe-a-paris"),
            ("snake_case title", "snake-case-title"),
            ("foo_bar", "foo-bar"),
            ("Don't Stop", "dont-stop"),
            ("What's new in 2.0?", "whats-new-in-20"),
            ("--dashes--", "dashes"),
        ],
    )
    def test_strict_slugs(self, title, expected):
        assert slugify_title(title) == expected

    def test_idempotent(self):
        slug = slugify_title("Some Title: Part 2")
        assert slugify_title(slug) == slug


class TestAssignUris:
    def test_sets_every_page(self):
        pages = [
            Page(title="First Page", author="a", content="x"),
            Page(title="Second", author="a", content="y"),
        ]
        assign_uris(pages)
        assert [p.uri for p in pages] == ["first-page", "second"]

    def test_overwrites_stale_uri(self):
        page = Page(title="New Name", author="a", content="x", uri="old-name")
        assign_uris([page])
        assert page.uri == "new-name"
