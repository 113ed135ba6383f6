"""Validation of parsed documents into pages."""

import json
from datetime import UTC, datetime
from typing import Any

from dateutil import parser as dateutil_parser
from pydantic import ValidationError

from pagebundler.core.errors import (
    EmptyContentError,
    InvalidDateError,
    MissingAuthorError,
    MissingTitleError,
    PageError,
    TitleMismatchError,
    UnsupportedValueError,
)
from pagebundler.core.models import Page

# Date parts missing from the author's value come from here, not from today
DEFAULT_DATE = datetime(2000, 1, 1)


def parse_date(value: Any) -> datetime:
    """Parse a calendar date the way an author would write it.

    Naive values are taken as UTC, aware values are converted to UTC.
    A missing month or day is the first, so ``"Feb 2022"`` is 1 Feb 2022.

    Raises:
        ValueError: If the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = dateutil_parser.parse(str(value).strip(), default=DEFAULT_DATE)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"Unrecognized date: {value!r}") from e
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso(dt: datetime) -> str:
    """Format a datetime as a UTC ISO-8601 string with millisecond precision.

    >>> to_iso(datetime(2022, 2, 22, tzinfo=UTC))
    '2022-02-22T00:00:00.000Z'
    """
    dt = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def normalize_date(value: Any) -> str:
    """Parse a date and return its ISO-8601 form."""
    return to_iso(parse_date(value))


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _survives_json(value: Any) -> bool:
    """Check that a value is stored in a bundle and read back unchanged."""
    try:
        return json.loads(json.dumps(value, allow_nan=False)) == value
    except (TypeError, ValueError):
        return False


def validate_page(
    attributes: dict[str, Any],
    body: str,
    source: str,
    *,
    expected_title: str | None = None,
) -> Page:
    """Check parsed front matter and body, and build a page from them.

    Rules are checked in order and the first failure is raised.

    Args:
        attributes: Front matter mapping.
        body: Document body after the front matter.
        source: Short identifier of the document, used in errors.
        expected_title: When given, the title must equal it exactly.

    Returns:
        The validated page with its date normalized to ISO-8601.
    """
    title = attributes.get("title")
    if _is_blank(title):
        raise MissingTitleError(source)
    title = str(title)

    if expected_title is not None and title != expected_title:
        raise TitleMismatchError(
            source, f'Title "{title}" does not match file name "{expected_title}"'
        )

    author = attributes.get("author")
    if _is_blank(author):
        raise MissingAuthorError(source)

    date = attributes.get("date")
    if _is_blank(date):
        date = None
    else:
        try:
            date = normalize_date(date)
        except ValueError as e:
            raise InvalidDateError(source) from e

    if not body.strip():
        raise EmptyContentError(source)

    # uri is derived, never taken from the document
    fields = {k: v for k, v in attributes.items() if k != "uri"}
    for key, value in fields.items():
        if key not in ("title", "author", "date") and not _survives_json(value):
            raise UnsupportedValueError(source, f'Unsupported value for "{key}"')
    fields.update(title=title, author=str(author), date=date, content=body)
    try:
        return Page.model_validate(fields)
    except ValidationError as e:
        raise PageError(source, f"Invalid page fields ({e.error_count()} errors)") from e
