"""Unit tests for the query-string search.

Parsing is checked on the built statements; matching is checked against an
in-memory SQLite database.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Column, String
from sqlalchemy.dialects import sqlite
from sqlalchemy.exc import DataError
from sqlalchemy.types import TypeDecorator

from asset_inventory.core.database.entities import StorageController
from asset_inventory.core.database.repositories import StorageControllerRepository
from asset_inventory.core.errors import SearchParameterError
from asset_inventory.core.database.base import MAX_INTEGER
from asset_inventory.core.search import (
    OPERATORS,
    Criterion,
    Search,
    coerce_value,
    column_python_type,
    searchable_fields,
)


class UpperCaseString(TypeDecorator):
    """Decorated text type whose python_type is not implemented."""

    impl = String
    cache_ok = True


@pytest.fixture
async def populated_session(in_memory_session, sample_storage_controllers):
    repository = StorageControllerRepository(in_memory_session)
    for data in sample_storage_controllers:
        await repository.create(StorageController(**data))
    return in_memory_session


def _search(params, **kwargs) -> Search:
    kwargs.setdefault("default_sort", "name")
    kwargs.setdefault("allowed_includes", ("versions",))
    return Search(StorageController, params, **kwargs)


async def _names(session, params, **kwargs) -> list[str]:
    result = await _search(params, **kwargs).search(session)
    return [controller.name for controller in result.results]


class TestParameterParsing:
    """Tests for how parameter names and values are interpreted."""

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("vendor", ("contains", "vendor")),
            ("exact_vendor", ("exact", "vendor")),
            ("regex_name", ("regex", "name")),
            ("exclude_node_name", ("exclude", "node_name")),
            ("greater_than_physical_drive_count", ("greater_than", "physical_drive_count")),
            ("less_than_cache_size_mb", ("less_than", "cache_size_mb")),
        ],
    )
    def test_split_key(self, key, expected):
        assert _search({}).split_key(key) == expected

    def test_unknown_field_is_reported_not_raised(self):
        search = _search({"colour": "red", "exact_shape": "round"})

        assert search.conditions == []
        assert search.errors == [
            "Unknown search field 'colour' in parameter 'colour'",
            "Unknown search field 'shape' in parameter 'exact_shape'",
        ]

    def test_invalid_value_is_reported(self):
        search = _search({"greater_than_physical_drive_count": "many"})

        assert search.conditions == []
        assert len(search.errors) == 1
        assert "Invalid value 'many'" in search.errors[0]

    def test_regex_on_numeric_field_is_reported(self):
        search = _search({"regex_physical_drive_count": "^1"})

        assert search.conditions == []
        assert "only apply to text fields" in search.errors[0]

    def test_invalid_regex_is_reported(self):
        search = _search({"regex_name": "(unclosed"})

        assert search.conditions == []
        assert "Invalid regular expression" in search.errors[0]

    def test_regex_compiles_to_regexp_operator(self):
        search = _search({"regex_name": "^PERC"})

        compiled = str(search.statement().compile(dialect=sqlite.dialect()))

        assert search.errors == []
        assert "REGEXP" in compiled

    def test_limit_is_capped(self):
        search = _search({"limit": "5000"}, max_limit=50)

        assert search.limit == 50
        assert search.errors == ["Limit 5000 exceeds the maximum of 50"]

    @pytest.mark.parametrize("params", [{"limit": "zero"}, {"limit": "0"}, {"offset": "-1"}, {"offset": "x"}])
    def test_invalid_pagination_falls_back_to_defaults(self, params):
        search = _search(params, default_limit=25)

        assert search.limit == 25
        assert search.offset == 0
        assert len(search.errors) == 1

    def test_unknown_sort_field(self):
        search = _search({"sort": "-colour"})

        assert search.errors == ["Unknown sort field 'colour'"]
        assert len(search.order_by) == 2

    def test_repeated_and_comma_separated_sort_keep_order(self):
        repeated = _search([("sort", "-controller_type"), ("sort", "physical_drive_count")])
        combined = _search({"sort": "-controller_type, physical_drive_count"})

        dialect = sqlite.dialect()
        assert [str(c.compile(dialect=dialect)) for c in repeated.order_by] == [
            "storage_controllers.controller_type DESC",
            "storage_controllers.physical_drive_count ASC",
            "storage_controllers.id ASC",
        ]
        assert [str(c.compile(dialect=dialect)) for c in combined.order_by] == [
            str(c.compile(dialect=dialect)) for c in repeated.order_by
        ]

    def test_out_of_range_integer_is_reported(self):
        search = _search({"exact_cache_size_mb": str(10**30)})

        assert search.conditions == []
        assert search.errors == [f"Value '{10**30}' for 'exact_cache_size_mb' is out of range"]

    def test_offset_above_integer_range_is_reported(self):
        search = _search({"offset": str(10**30)})

        assert search.offset == 0
        assert search.errors == [f"Invalid offset '{10**30}': must not exceed {MAX_INTEGER}"]

    def test_unbindable_value_is_dropped_and_reported(self):
        search = _search({"vendor": "Dell"})
        created_at = StorageController.__table__.c.created_at
        search.criteria.append(
            Criterion(key="exact_created_at", operator="exact", column=created_at, values=[("soon", "soon")])
        )

        search.check_bind_values(sqlite.dialect())

        assert [criterion.key for criterion in search.criteria] == ["vendor"]
        assert len(search.errors) == 1
        assert search.errors[0].startswith("Invalid value 'soon' for 'exact_created_at'")

    def test_includes(self):
        search = _search([("include", "versions, nics"), ("include", "versions")])

        assert search.requested_includes == ["versions"]
        assert search.errors == ["Unknown include 'nics'"]

    def test_mapping_with_list_values(self):
        search = _search({"vendor": ["Dell", "HP"]})

        assert len(search.conditions) == 1
        assert search.errors == []


class TestCoerceValue:
    """Tests for converting query-string values to column types."""

    @pytest.fixture
    def columns(self):
        return StorageController.__table__.columns

    def test_text_is_unchanged(self, columns):
        assert coerce_value(columns["name"], "name", "42") == "42"

    def test_integer(self, columns):
        assert coerce_value(columns["physical_drive_count"], "p", "42") == 42

    @pytest.mark.parametrize("raw, expected", [("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_boolean(self, columns, raw, expected):
        assert coerce_value(columns["battery_backed"], "battery_backed", raw) is expected

    def test_invalid_boolean(self, columns):
        with pytest.raises(SearchParameterError) as exc_info:
            coerce_value(columns["battery_backed"], "exact_battery_backed", "maybe")

        assert exc_info.value.parameter == "exact_battery_backed"
        assert exc_info.value.status_code == 400

    def test_naive_datetime_is_taken_as_utc(self, columns):
        value = coerce_value(columns["created_at"], "greater_than_created_at", "2026-01-01T00:00:00")

        assert value == datetime(2026, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", ["2026-01-01T02:00:00+02:00", "2026-01-01T00:00:00Z"])
    def test_aware_datetime_is_converted_to_utc(self, columns, raw):
        value = coerce_value(columns["created_at"], "less_than_created_at", raw)

        assert value == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert value.utcoffset() == timedelta(0)

    def test_invalid_datetime(self, columns):
        with pytest.raises(SearchParameterError) as exc_info:
            coerce_value(columns["created_at"], "exact_created_at", "yesterday")

        assert "Invalid value 'yesterday'" in exc_info.value.message

    @pytest.mark.parametrize("raw", [str(MAX_INTEGER + 1), str(-(MAX_INTEGER + 2))])
    def test_integer_out_of_column_range(self, columns, raw):
        with pytest.raises(SearchParameterError) as exc_info:
            coerce_value(columns["cache_size_mb"], "exact_cache_size_mb", raw)

        assert "out of range" in exc_info.value.message

    def test_integer_at_column_limit(self, columns):
        assert coerce_value(columns["cache_size_mb"], "exact_cache_size_mb", str(MAX_INTEGER)) == MAX_INTEGER

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("id", int),
            ("name", str),
            ("battery_backed", bool),
            ("cache_size_mb", int),
            ("created_at", datetime),
        ],
    )
    def test_column_python_type(self, columns, name, expected):
        assert column_python_type(columns[name]) is expected

    def test_column_python_type_unwraps_type_decorators(self):
        column = Column("label", UpperCaseString())

        assert column_python_type(column) is str
        assert coerce_value(column, "label", "42") == "42"


class TestSearchExecution:
    """Tests for search results against SQLite."""

    async def test_no_parameters_returns_all_sorted_by_name(self, populated_session):
        result = await _search({}).search(populated_session)

        assert [c.name for c in result.results] == [
            "Intel C620 SATA",
            "LSI SAS 9207-8i",
            "PERC H730P",
            "Smart Array P440ar",
        ]
        assert result.total == 4
        assert result.errors == []

    async def test_contains_is_case_insensitive(self, populated_session):
        assert await _names(populated_session, {"name": "sas"}) == ["LSI SAS 9207-8i"]

    async def test_repeated_values_are_ored(self, populated_session):
        names = await _names(populated_session, [("vendor", "dell"), ("vendor", "hp")])

        assert names == ["PERC H730P", "Smart Array P440ar"]

    async def test_different_keys_are_anded(self, populated_session):
        names = await _names(populated_session, {"controller_type": "raid", "exact_vendor": "HP"})

        assert names == ["Smart Array P440ar"]

    async def test_exact_is_case_sensitive(self, populated_session):
        assert await _names(populated_session, {"exact_vendor": "dell"}) == []
        assert await _names(populated_session, {"exact_vendor": "Dell"}) == ["PERC H730P"]

    async def test_exact_boolean(self, populated_session):
        names = await _names(populated_session, {"exact_battery_backed": "true"})

        assert names == ["PERC H730P", "Smart Array P440ar"]

    async def test_numeric_plain_parameter_is_equality(self, populated_session):
        assert await _names(populated_session, {"physical_drive_count": "4"}) == ["Smart Array P440ar"]

    async def test_exclude_keeps_nulls_and_ands_values(self, populated_session):
        names = await _names(populated_session, [("exclude_node_name", "db01"), ("exclude_node_name", "web")])

        assert names == ["Intel C620 SATA", "LSI SAS 9207-8i"]

    async def test_greater_and_less_than(self, populated_session):
        names = await _names(
            populated_session,
            {"greater_than_physical_drive_count": "2", "less_than_physical_drive_count": "12"},
        )

        assert names == ["PERC H730P", "Smart Array P440ar"]

    async def test_sort_descending(self, populated_session):
        names = await _names(populated_session, {"sort": "-physical_drive_count"})

        assert names == ["LSI SAS 9207-8i", "PERC H730P", "Smart Array P440ar", "Intel C620 SATA"]

    async def test_pagination_reports_total_before_paging(self, populated_session):
        result = await _search({"limit": "2", "offset": "1"}).search(populated_session)

        assert [c.name for c in result.results] == ["LSI SAS 9207-8i", "PERC H730P"]
        assert result.total == 4
        assert (result.limit, result.offset) == (2, 1)

    async def test_bad_criterion_is_skipped_others_apply(self, populated_session):
        result = await _search({"vendor": "intel", "colour": "blue"}).search(populated_session)

        assert [c.name for c in result.results] == ["Intel C620 SATA"]
        assert result.errors == ["Unknown search field 'colour' in parameter 'colour'"]

    async def test_requested_includes_are_returned(self, populated_session):
        result = await _search({"include": "versions"}).search(populated_session)

        assert result.requested_includes == ["versions"]

    async def test_regex_matches_on_sqlite(self, populated_session):
        assert await _names(populated_session, {"regex_name": "^PERC"}) == ["PERC H730P"]
        assert await _names(populated_session, {"regex_name": r"\d{4}-8i$"}) == ["LSI SAS 9207-8i"]

    async def test_repeated_regex_values_are_ored(self, populated_session):
        names = await _names(populated_session, [("regex_name", "^Smart"), ("regex_name", "SATA$")])

        assert names == ["Intel C620 SATA", "Smart Array P440ar"]

    async def test_regex_is_case_sensitive_and_skips_nulls(self, populated_session):
        assert await _names(populated_session, {"regex_name": "^perc"}) == []
        assert await _names(populated_session, {"regex_node_name": "^(db|web)"}) == [
            "PERC H730P",
            "Smart Array P440ar",
        ]

    async def test_datetime_comparisons(self, populated_session):
        past = "2000-01-01T00:00:00"
        future = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()

        result = await _search({"greater_than_created_at": past}).search(populated_session)
        assert result.total == 4
        assert result.errors == []

        assert await _names(populated_session, {"less_than_created_at": past}) == []
        assert await _names(populated_session, {"less_than_created_at": future}) == [
            "Intel C620 SATA",
            "LSI SAS 9207-8i",
            "PERC H730P",
            "Smart Array P440ar",
        ]

    async def test_repeated_sort(self, populated_session):
        names = await _names(populated_session, [("sort", "-controller_type"), ("sort", "physical_drive_count")])

        assert names == ["Intel C620 SATA", "Smart Array P440ar", "PERC H730P", "LSI SAS 9207-8i"]

    async def test_out_of_range_values_do_not_fail_the_search(self, populated_session):
        result = await _search(
            {"exact_cache_size_mb": str(10**30), "offset": str(10**30), "vendor": "dell"}
        ).search(populated_session)

        assert [c.name for c in result.results] == ["PERC H730P"]
        assert len(result.errors) == 2

    async def test_database_rejection_becomes_an_error(self):
        session = MagicMock()
        session.get_bind.return_value.dialect = sqlite.dialect()
        session.execute = AsyncMock(side_effect=DataError("SELECT", {}, Exception("value out of range")))
        session.rollback = AsyncMock()

        result = await _search({"vendor": "dell"}).search(session)

        session.rollback.assert_awaited_once()
        assert result.results == []
        assert result.total == 0
        assert result.errors == ["Search parameters rejected by the database: value out of range"]


def test_searchable_fields_and_operators():
    fields = searchable_fields(StorageController)

    assert "name" in fields
    assert "node_name" in fields
    assert OPERATORS == ["contains", "exact", "regex", "exclude", "greater_than", "less_than"]
