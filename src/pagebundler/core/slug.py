"""URI derivation for bundled pages."""

import re
from unicodedata import normalize

from pymdownx.slugs import slugify as _md_slugify

from pagebundler.core.models import Page

_slugify_lower = _md_slugify(case="lower")

NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify_title(title: str) -> str:
    """Convert a title into a lowercase, strict URL slug.

    Punctuation inside a word is dropped (``Don't`` becomes ``dont``).
    Whitespace, dashes and underscores separate words, and each run of
    separators becomes a single dash (``foo_bar`` becomes ``foo-bar``).

    >>> slugify_title("Page With Spaced Title")
    'page-with-spaced-title'
    >>> slugify_title("  Café -- à Paris! ")
    'cafe-a-paris'
    """
    ascii_title = normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = _slugify_lower(ascii_title, sep="-")
    return NON_ALPHANUMERIC.sub("-", slug).strip("-")


def assign_uris(pages: list[Page]) -> None:
    """Set every page's uri from its title."""
    for page in pages:
        page.uri = slugify_title(page.title)
