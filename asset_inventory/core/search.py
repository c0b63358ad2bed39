"""
Generic query-string search over a SQLModel entity.

Translates web parameters into a SQLAlchemy select statement:

- ``<field>=v``               case-insensitive substring (equality for non-text columns)
- ``exact_<field>=v``         equality
- ``regex_<field>=v``         regular expression match (text columns)
- ``exclude_<field>=v``       case-insensitive substring exclusion
- ``greater_than_<field>=v``  strictly greater than
- ``less_than_<field>=v``     strictly less than
- ``sort=<field>[,-<field>...]`` (repeatable), ``limit``, ``offset``
- ``include=<association>[,<association>...]``

Repeated values of one key are OR-ed (``exclude_`` values are AND-ed), different
keys are AND-ed. Criteria that cannot be applied never fail the search: they are
reported in ``errors`` and skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Integer,
    Numeric,
    SmallInteger,
    String,
    and_,
    func,
    or_,
    select,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.exc import DataError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.types import TypeDecorator, TypeEngine
from sqlmodel import SQLModel

from asset_inventory.core.database.base import MAX_INTEGER
from asset_inventory.core.errors import SearchParameterError
from asset_inventory.core.logging_config import get_logger

logger = get_logger(__name__)

CONTAINS = "contains"
EXACT = "exact"
REGEX = "regex"
EXCLUDE = "exclude"
GREATER_THAN = "greater_than"
LESS_THAN = "less_than"

OPERATOR_PREFIXES: Dict[str, str] = {
    f"{EXACT}_": EXACT,
    f"{REGEX}_": REGEX,
    f"{EXCLUDE}_": EXCLUDE,
    f"{GREATER_THAN}_": GREATER_THAN,
    f"{LESS_THAN}_": LESS_THAN,
}
OPERATORS: List[str] = [CONTAINS, EXACT, REGEX, EXCLUDE, GREATER_THAN, LESS_THAN]

# Checked in order: Boolean before Integer, every Integer subclass maps to int
_PYTHON_TYPES: Tuple[Tuple[Type[TypeEngine], type], ...] = (
    (Boolean, bool),
    (Integer, int),
    (Numeric, float),
    (DateTime, datetime),
    (String, str),
)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})

QueryParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def _as_pairs(params: QueryParams) -> List[Tuple[str, str]]:
    """Flatten a mapping (values may be lists) or a sequence of pairs into ``(key, value)`` pairs."""
    items = params.items() if isinstance(params, Mapping) else params
    pairs: List[Tuple[str, str]] = []
    for key, value in items:
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(v)) for v in value)
        else:
            pairs.append((key, str(value)))
    return pairs


def column_sql_type(column) -> TypeEngine:
    """Storage type of a column with type decorators such as SQLModel's ``AutoString`` unwrapped."""
    column_type = column.type
    while isinstance(column_type, TypeDecorator):
        impl = column_type.impl
        column_type = impl() if isinstance(impl, type) else impl
    return column_type


def column_python_type(column) -> Optional[type]:
    """Python type search values for ``column`` are converted to, or None when unsupported."""
    column_type = column_sql_type(column)
    for sql_type, python_type in _PYTHON_TYPES:
        if isinstance(column_type, sql_type):
            return python_type
    return None


def integer_bounds(column) -> Tuple[int, int]:
    """Smallest and largest value an integer column can hold on every supported backend."""
    column_type = column_sql_type(column)
    if isinstance(column_type, BigInteger):
        bits = 64
    elif isinstance(column_type, SmallInteger):
        bits = 16
    else:
        bits = 32
    return -(2 ** (bits - 1)), 2 ** (bits - 1) - 1


def _parse_datetime(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    value = datetime.fromisoformat(text)
    # Naive values are taken as UTC, the zone every timestamp is stored in
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_value(column, parameter: str, raw: str) -> Any:
    """Convert a query-string value to the Python type of ``column``.

    Raises:
        SearchParameterError: When the value cannot be converted or does not fit the column
    """
    python_type = column_python_type(column)

    if python_type is None or python_type is str:
        return raw
    if python_type is bool:
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise SearchParameterError(parameter, f"Invalid boolean '{raw}' for '{parameter}'")
    try:
        if python_type is int:
            value = int(raw)
            low, high = integer_bounds(column)
            if not low <= value <= high:
                raise SearchParameterError(parameter, f"Value '{raw}' for '{parameter}' is out of range")
            return value
        if python_type is float:
            return float(raw)
        return _parse_datetime(raw)
    except ValueError as e:
        raise SearchParameterError(parameter, f"Invalid value '{raw}' for '{parameter}': {e}") from e


def _is_text(column) -> bool:
    return column_python_type(column) is str


@dataclass
class Criterion:
    """One search parameter: its column, operator and the values it matches."""

    key: str
    operator: str
    column: Any
    values: List[Tuple[str, Any]] = field(default_factory=list)

    def condition(self) -> ColumnElement:
        clauses = [build_clause(self.operator, self.column, value) for _, value in self.values]
        if self.operator == EXCLUDE:
            return and_(*clauses)
        return or_(*clauses)


def prepare_value(operator: str, column, parameter: str, raw: str) -> Any:
    """Validate one parameter value and convert it to what ``build_clause`` binds.

    Raises:
        SearchParameterError: When the value or operator does not fit the column
    """
    if operator == REGEX:
        if not _is_text(column):
            raise SearchParameterError(parameter, f"Regular expressions only apply to text fields, not '{column.name}'")
        try:
            re.compile(raw)
        except re.error as e:
            raise SearchParameterError(parameter, f"Invalid regular expression '{raw}' for '{parameter}': {e}") from e
        return raw
    if operator in (CONTAINS, EXCLUDE) and _is_text(column):
        return raw
    return coerce_value(column, parameter, raw)


def build_clause(operator: str, column, value: Any) -> ColumnElement:
    """Build the SQL condition matching ``value`` with ``operator``."""
    if operator == CONTAINS:
        if _is_text(column):
            return column.ilike(f"%{value}%")
        return column == value
    if operator == EXACT:
        return column == value
    if operator == REGEX:
        return column.regexp_match(value)
    if operator == EXCLUDE:
        if _is_text(column):
            return or_(column.is_(None), ~column.ilike(f"%{value}%"))
        return or_(column.is_(None), column != value)
    if operator == GREATER_THAN:
        return column > value
    if operator == LESS_THAN:
        return column < value
    raise ValueError(f"Unsupported search operator '{operator}'")


@dataclass
class SearchResult:
    """Outcome of a search: matching rows plus everything the caller reports back."""

    results: List[Any]
    total: int
    limit: int
    offset: int
    errors: List[str] = field(default_factory=list)
    requested_includes: List[str] = field(default_factory=list)


class Search:
    """Build and run a filtered, sorted and paginated query from web parameters.

    Args:
        model: SQLModel table class to search
        params: Query parameters as a mapping or as ``(key, value)`` pairs
        default_sort: Column used when no valid ``sort`` is given
        default_limit: Page size when no ``limit`` is given
        max_limit: Upper bound for ``limit``
        allowed_includes: Associations that may be requested with ``include``
    """

    def __init__(
        self,
        model: Type[SQLModel],
        params: QueryParams,
        *,
        default_sort: str = "id",
        default_limit: int = 100,
        max_limit: int = 1000,
        allowed_includes: Sequence[str] = (),
    ) -> None:
        self.model = model
        self.params = _as_pairs(params)
        self.default_sort = default_sort
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.allowed_includes = list(allowed_includes)
        self.columns = model.__table__.columns

        self.errors: List[str] = []
        self.requested_includes: List[str] = []
        self.criteria: List[Criterion] = []
        self.order_by: List[ColumnElement] = []
        self.limit = default_limit
        self.offset = 0
        self._parse()

    @property
    def conditions(self) -> List[ColumnElement]:
        """WHERE conditions of every applicable criterion."""
        return [criterion.condition() for criterion in self.criteria]

    # =====================================================================
    # Parameter parsing
    # =====================================================================

    def _parse(self) -> None:
        grouped: Dict[str, List[str]] = {}
        for key, value in self.params:
            grouped.setdefault(key, []).append(value)

        for key, values in grouped.items():
            if key == "sort":
                self._parse_sort(values)
            elif key == "limit":
                self._parse_limit(values[-1])
            elif key == "offset":
                self._parse_offset(values[-1])
            elif key == "include":
                self._parse_includes(values)
            else:
                self._parse_criterion(key, values)

        if not self.order_by:
            self.order_by.append(self.columns[self.default_sort].asc())
        if self.default_sort != "id" and "id" in self.columns:
            self.order_by.append(self.columns["id"].asc())

    def split_key(self, key: str) -> Tuple[str, str]:
        """Split a parameter name into ``(operator, field)``.

        A key that names a column directly is a substring search even when it
        happens to start with an operator prefix.
        """
        if key in self.columns:
            return CONTAINS, key
        for prefix, operator in OPERATOR_PREFIXES.items():
            if key.startswith(prefix):
                return operator, key[len(prefix):]
        return CONTAINS, key

    def _parse_criterion(self, key: str, values: List[str]) -> None:
        operator, name = self.split_key(key)
        if name not in self.columns:
            self.errors.append(f"Unknown search field '{name}' in parameter '{key}'")
            return
        criterion = Criterion(key=key, operator=operator, column=self.columns[name])
        for raw in values:
            try:
                criterion.values.append((raw, prepare_value(operator, criterion.column, key, raw)))
            except SearchParameterError as e:
                self.errors.append(e.message)
        if criterion.values:
            self.criteria.append(criterion)

    def _parse_sort(self, values: List[str]) -> None:
        for raw in (part.strip() for value in values for part in value.split(",")):
            if not raw:
                continue
            descending = raw.startswith("-")
            name = raw[1:] if descending else raw
            if name not in self.columns:
                self.errors.append(f"Unknown sort field '{name}'")
                continue
            column = self.columns[name]
            self.order_by.append(column.desc() if descending else column.asc())

    def _parse_limit(self, raw: str) -> None:
        try:
            limit = int(raw)
        except ValueError:
            self.errors.append(f"Invalid limit '{raw}'")
            return
        if limit < 1:
            self.errors.append(f"Invalid limit '{raw}': must be at least 1")
            return
        if limit > self.max_limit:
            self.errors.append(f"Limit {limit} exceeds the maximum of {self.max_limit}")
            limit = self.max_limit
        self.limit = limit

    def _parse_offset(self, raw: str) -> None:
        try:
            offset = int(raw)
        except ValueError:
            self.errors.append(f"Invalid offset '{raw}'")
            return
        if offset < 0:
            self.errors.append(f"Invalid offset '{raw}': must not be negative")
            return
        if offset > MAX_INTEGER:
            self.errors.append(f"Invalid offset '{raw}': must not exceed {MAX_INTEGER}")
            return
        self.offset = offset

    def _parse_includes(self, values: List[str]) -> None:
        for value in values:
            for name in (part.strip() for part in value.split(",")):
                if not name:
                    continue
                if name not in self.allowed_includes:
                    self.errors.append(f"Unknown include '{name}'")
                elif name not in self.requested_includes:
                    self.requested_includes.append(name)

    def check_bind_values(self, dialect: Dialect) -> None:
        """Drop values the database driver would refuse to bind, reporting each one.

        Runs every value through its column's bind processor for ``dialect``,
        so a value rejected there never reaches statement execution.
        """
        for criterion in list(self.criteria):
            processor = criterion.column.type.dialect_impl(dialect).bind_processor(dialect)
            if processor is None:
                continue
            accepted = []
            for raw, value in criterion.values:
                try:
                    processor(value)
                except (TypeError, ValueError, AttributeError, OverflowError) as e:
                    self.errors.append(f"Invalid value '{raw}' for '{criterion.key}': {e}")
                    continue
                accepted.append((raw, value))
            criterion.values = accepted
            if not accepted:
                self.criteria.remove(criterion)

    # =====================================================================
    # Statements
    # =====================================================================

    def statement(self):
        """Select statement for the requested page."""
        return (
            select(self.model)
            .where(*self.conditions)
            .order_by(*self.order_by)
            .limit(self.limit)
            .offset(self.offset)
        )

    def count_statement(self):
        """Count of all matches, ignoring pagination."""
        return select(func.count()).select_from(self.model).where(*self.conditions)

    async def search(self, session: AsyncSession) -> SearchResult:
        """Run the search.

        Args:
            session: Async session to query with

        Returns:
            SearchResult with the current page and the collected errors
        """
        self.check_bind_values(session.get_bind().dialect)
        try:
            total = (await session.execute(self.count_statement())).scalar_one()
            rows = list((await session.execute(self.statement())).scalars().all())
        except DataError as e:
            # The database refused a value that passed every local check
            await session.rollback()
            logger.warning(f"Search on {self.model.__tablename__} rejected by the database: {e.orig}")
            self.errors.append(f"Search parameters rejected by the database: {e.orig}")
            total, rows = 0, []
        if self.errors:
            logger.debug(f"Search on {self.model.__tablename__} skipped parameters: {self.errors}")
        logger.debug(
            f"Search on {self.model.__tablename__}: {len(self.criteria)} criteria, "
            f"{total} matches, returning {len(rows)} (limit={self.limit}, offset={self.offset})"
        )
        return SearchResult(
            results=rows,
            total=total,
            limit=self.limit,
            offset=self.offset,
            errors=list(self.errors),
            requested_includes=list(self.requested_includes),
        )


def searchable_fields(model: Type[SQLModel]) -> List[str]:
    """Column names of ``model`` usable in search parameters."""
    return [column.name for column in model.__table__.columns]
