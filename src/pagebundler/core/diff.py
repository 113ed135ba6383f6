"""Matching and diffing of old and new page sets.

Pages correspond across runs by identity: their explicit ``id`` when
either page has one, otherwise their ``title``. The first match wins.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from pagebundler.core.models import Page
from pagebundler.core.validator import normalize_date, to_iso

# Derived fields never count as a change
IGNORED_FIELDS = {"uri"}


class DiffResult(BaseModel):
    """Classification of a new page set against an old one."""

    added: list[Page] = Field(default_factory=list)
    changed: list[Page] = Field(default_factory=list)
    unchanged: list[Page] = Field(default_factory=list)
    deleted: list[Page] = Field(default_factory=list)

    @property
    def has_updates(self) -> bool:
        """Any page added or changed."""
        return bool(self.added or self.changed)

    @property
    def has_deletions(self) -> bool:
        """Any old page without a new counterpart."""
        return bool(self.deleted)

    @property
    def has_changes(self) -> bool:
        return self.has_updates or self.has_deletions


def pages_match(a: Page, b: Page) -> bool:
    """Check whether two pages are the same page."""
    if a.id is not None or b.id is not None:
        return a.id == b.id
    return a.title == b.title


def find_page(page: Page, pages: list[Page]) -> Page | None:
    """Return the first page in pages matching page, if any."""
    for candidate in pages:
        if pages_match(page, candidate):
            return candidate
    return None


def page_differs(new: Page, old: Page) -> bool:
    """Compare every field set on the new page against the old page."""
    new_fields = new.model_dump(exclude_none=True, exclude=IGNORED_FIELDS)
    old_fields = old.model_dump(exclude_none=True)
    return any(old_fields.get(key) != value for key, value in new_fields.items())


def diff_pages(new_pages: list[Page], old_pages: list[Page]) -> DiffResult:
    """Classify new pages as added, changed or unchanged and find deletions."""
    result = DiffResult()
    for new in new_pages:
        old = find_page(new, old_pages)
        if old is None:
            result.added.append(new)
        elif page_differs(new, old):
            result.changed.append(new)
        else:
            result.unchanged.append(new)

    for old in old_pages:
        if find_page(old, new_pages) is None:
            result.deleted.append(old)
    return result


def resolve_dates(diff: DiffResult, now: datetime) -> None:
    """Date added and changed pages.

    An explicit date from the author is kept; anything else is stamped
    with ``now``.
    """
    stamp = to_iso(now)
    for page in diff.added + diff.changed:
        page.date = normalize_date(page.date) if page.date else stamp


def carry_forward_dates(new_pages: list[Page], old_pages: list[Page]) -> None:
    """Copy stored dates onto pages that still have none."""
    for page in new_pages:
        if page.date:
            continue
        old = find_page(page, old_pages)
        if old is not None:
            page.date = old.date
