"""Unit tests for page validation and date normalization."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from pagebundler.core.errors import (
    EmptyContentError,
    InvalidDateError,
    MissingAuthorError,
    MissingTitleError,
    PageError,
    TitleMismatchError,
    UnsupportedValueError,
)
from pagebundler.core.validator import normalize_date, parse_date, to_iso, validate_page

SOURCE = "docs/page.md"


def attrs(**overrides):
    base = {"title": "My Page", "author": "alice"}
    base.update(overrides)
    return {k: v for k, v in base.items() if v is not ...}


# ============================================================
# Dates
# ============================================================


class TestDates:
    def test_us_style_date_is_utc_midnight(self):
        assert normalize_date("2/22/2022") == "2022-02-22T00:00:00.000Z"

    def test_iso_date(self):
        assert normalize_date("2022-02-22") == "2022-02-22T00:00:00.000Z"

    def test_offset_converted_to_utc(self):
        assert normalize_date("2022-02-22T10:30:00+02:00") == "2022-02-22T08:30:00.000Z"

    def test_already_normalized_is_stable(self):
        iso = "2021-07-04T15:20:05.250Z"
        assert normalize_date(iso) == iso

    def test_to_iso_milliseconds(self):
        dt = datetime(2022, 1, 1, 12, 0, 0, 123456, tzinfo=UTC)
        assert to_iso(dt) == "2022-01-01T12:00:00.123Z"

    def test_to_iso_converts_aware(self):
        dt = datetime(2022, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert to_iso(dt) == "2021-12-31T22:00:00.000Z"

    def test_year_only_is_first_of_january(self):
        assert normalize_date("2022") == "2022-01-01T00:00:00.000Z"

    def test_month_and_year_is_first_of_month(self):
        assert normalize_date("Feb 2022") == "2022-02-01T00:00:00.000Z"

    def test_partial_date_ignores_today(self):
        assert normalize_date(2022) == normalize_date("2022-01-01")

    def test_parse_date_naive_is_utc(self):
        assert parse_date("2022-02-22").tzinfo is UTC

    def test_parse_date_invalid(self):
        with pytest.raises(ValueError):
            parse_date("not a date")


# ============================================================
# Validation rules
# ============================================================


class TestValidatePage:
    def test_valid_page(self):
        page = validate_page(attrs(), "Body", SOURCE)
        assert page.title == "My Page"
        assert page.author == "alice"
        assert page.content == "Body"
        assert page.date is None
        assert page.uri is None

    def test_missing_title(self):
        with pytest.raises(MissingTitleError, match="missing a title"):
            validate_page(attrs(title=...), "Body", SOURCE)

    def test_empty_title(self):
        with pytest.raises(MissingTitleError):
            validate_page(attrs(title=""), "Body", SOURCE)

    def test_title_checked_before_author(self):
        with pytest.raises(MissingTitleError):
            validate_page({}, "Body", SOURCE)

    def test_title_mismatch(self):
        with pytest.raises(TitleMismatchError):
            validate_page(attrs(), "Body", SOURCE, expected_title="my-page")

    def test_title_match(self):
        page = validate_page(attrs(), "Body", SOURCE, expected_title="My Page")
        assert page.title == "My Page"

    def test_missing_author(self):
        with pytest.raises(MissingAuthorError, match="Missing Author"):
            validate_page(attrs(author=...), "Body", SOURCE)

    def test_invalid_date(self):
        with pytest.raises(InvalidDateError, match="Invalid Date"):
            validate_page(attrs(date="not a date"), "Body", SOURCE)

    def test_empty_content(self):
        with pytest.raises(EmptyContentError, match="Empty file content"):
            validate_page(attrs(), "  \n\t\n", SOURCE)

    def test_author_checked_before_content(self):
        with pytest.raises(MissingAuthorError):
            validate_page(attrs(author=None), "", SOURCE)

    def test_errors_name_the_source(self):
        with pytest.raises(PageError) as exc_info:
            validate_page(attrs(author=None), "Body", SOURCE)
        assert exc_info.value.source == SOURCE
        assert str(exc_info.value).endswith('@ "docs/page.md"')

    def test_static_date_normalized(self):
        page = validate_page(attrs(date="2/22/2022"), "Body", SOURCE)
        assert page.date == "2022-02-22T00:00:00.000Z"

    def test_blank_date_is_absent(self):
        page = validate_page(attrs(date=""), "Body", SOURCE)
        assert page.date is None

    def test_scalar_title_coerced(self):
        page = validate_page(attrs(title=2022), "Body", SOURCE)
        assert page.title == "2022"

    def test_uri_from_document_ignored(self):
        page = validate_page(attrs(uri="custom"), "Body", SOURCE)
        assert page.uri is None

    def test_extra_fields_kept_in_order(self):
        page = validate_page(attrs(category="news", weight=2), "Body", SOURCE)
        assert page.model_extra == {"category": "news", "weight": 2}

    def test_nested_extra_fields_kept(self):
        page = validate_page(attrs(tags=["a", "b"], meta={"draft": True}), "Body", SOURCE)
        assert page.model_extra == {"tags": ["a", "b"], "meta": {"draft": True}}

    @pytest.mark.parametrize(
        "value",
        [
            float("nan"),
            float("inf"),
            {"a", "b"},
            b"\x00\x01",
            {1: "numeric key"},
            [float("-inf")],
        ],
    )
    def test_value_not_storable_as_json(self, value):
        with pytest.raises(UnsupportedValueError, match='Unsupported value for "score" @ "docs/page.md"'):
            validate_page(attrs(score=value), "Body", SOURCE)

    def test_explicit_id(self):
        page = validate_page(attrs(id=4), "Body", SOURCE)
        assert page.id == 4
        assert page.identity == ("id", 4)

    def test_invalid_id_type(self):
        with pytest.raises(PageError, match="Invalid page fields"):
            validate_page(attrs(id=["a", "b"]), "Body", SOURCE)
