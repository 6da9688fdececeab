"""SQLAlchemy adapter for the document store port.

Translates the document filter language onto a declarative model so the
paginators can run against a relational database:

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    store = SQLAlchemyDocumentStore(session_factory, Product)
    paginator = create_paginator(store, "cursor", default_sort_field="created_at")
    page = await paginator.paginate({"show": True, "price": {"$lt": 10}})

``_id`` always refers to the primary key column, so the default sort field
works unchanged. Rows come back as dicts keyed by attribute name.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Date, DateTime, Uuid, and_, false, func, inspect, not_, or_, select, true
from sqlalchemy.orm import load_only, selectinload

from outpost_service.core.database.exceptions import InvalidFilterError
from outpost_service.core.database.memory import parse_projection
from outpost_service.core.pagination.schemas import Expansion, Projection, SortOrder
from outpost_service.core.pagination.store import Filter, Pipeline, SortSpec
from outpost_service.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
    from sqlalchemy.orm import InstrumentedAttribute, Mapper

ID_FIELD = "_id"

# Characters with regex meaning; patterns containing them can't become LIKE
_REGEX_META = re.compile(r"[.*+?{}\[\]\\|()]")


def _all(clauses: Sequence[ColumnElement[bool]]) -> ColumnElement[bool]:
    return and_(*clauses) if clauses else true()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLAlchemyDocumentStore:
    """Document store over an async session factory and a declarative model.

    Args:
        session_factory: ``async_sessionmaker`` producing sessions; one
            session is opened per call
        model: Declarative model class the queries select from
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], model: type[Any]) -> None:
        self.session_factory = session_factory
        self.model = model
        self._mapper: Mapper[Any] = inspect(model)
        self._pk_name = self._mapper.primary_key[0].key
        self._lazy = get_lazy_logger(f"store.sql.{model.__name__}")

    # ──────────────────────────────────────────────────────────────
    # Port operations
    # ──────────────────────────────────────────────────────────────

    async def find(
        self,
        filter: Filter,  # noqa: A002
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
        expand: Expansion | None = None,
        projection: Projection | None = None,
    ) -> list[dict[str, Any]]:
        """Select matching rows in ``sort`` order."""
        include, exclude = self._split_projection(projection)
        relations = self._relations(expand)

        stmt = (
            select(self.model)
            .where(*self._where(filter))
            .order_by(*self._order_by(sort))
            .offset(skip)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        if include:
            stmt = stmt.options(load_only(*(self._column(name) for name in include)))
        for name in relations:
            stmt = stmt.options(selectinload(getattr(self.model, name)))

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            rows = [
                self._to_record(instance, include, exclude, relations)
                for instance in result.scalars().all()
            ]

        self._lazy.debug(
            lambda: f"db.find: {self.model.__name__}(skip={skip}, limit={limit}) -> {len(rows)} rows"
        )
        return rows

    async def count(self, filter: Filter) -> int:  # noqa: A002
        """Count matching rows."""
        stmt = select(func.count()).select_from(self.model).where(*self._where(filter))
        async with self.session_factory() as session:
            total = (await session.execute(stmt)).scalar_one()

        self._lazy.debug(lambda: f"db.count: {self.model.__name__} -> {total}")
        return total

    async def aggregate(self, pipeline: Pipeline) -> list[dict[str, Any]]:
        """Run a relational rendition of an aggregation pipeline.

        Supported: ``$match``, ``$sort``, ``$skip``, ``$limit``, ``$project``
        and a terminal ``$count`` or ``$facet``. All facet branches share one
        session.

        Raises:
            InvalidFilterError: For unsupported stages or stage orderings
        """
        async with self.session_factory() as session:
            rows = await self._run(session, select(self.model), list(pipeline), None)

        self._lazy.debug(
            lambda: f"db.aggregate: {self.model.__name__}({len(pipeline)} stages) -> {len(rows)} rows"
        )
        return rows

    # ──────────────────────────────────────────────────────────────
    # Pipeline
    # ──────────────────────────────────────────────────────────────

    async def _run(
        self,
        session: AsyncSession,
        stmt: Select[Any],
        stages: list[Mapping[str, Any]],
        projection: Projection | None,
        window: tuple[int, int | None] = (0, None),
    ) -> list[dict[str, Any]]:
        # $skip/$limit compose into one (offset, limit) window, applied when
        # the statement runs; facet branches continue from the caller's window
        offset, limit = window
        last = len(stages) - 1
        for index, stage in enumerate(stages):
            if not isinstance(stage, Mapping) or len(stage) != 1:
                msg = "Each pipeline stage must have exactly one operator"
                raise InvalidFilterError(msg, filter_name="pipeline")
            name, spec = next(iter(stage.items()))

            if name in ("$match", "$sort") and (offset or limit is not None):
                msg = f"{name} after $skip/$limit is not supported"
                raise InvalidFilterError(msg, filter_name=name)
            if name in ("$count", "$facet") and index != last:
                msg = f"{name} must be the last stage"
                raise InvalidFilterError(msg, filter_name=name)

            if name == "$match":
                stmt = stmt.where(*self._where(spec))
            elif name == "$sort":
                stmt = stmt.order_by(*self._order_by(list(spec.items())))
            elif name == "$skip":
                step = max(int(spec), 0)
                offset += step
                if limit is not None:
                    limit = max(limit - step, 0)
            elif name == "$limit":
                limit = int(spec) if limit is None else min(limit, int(spec))
            elif name == "$project":
                projection = spec
            elif name == "$count":
                total = await self._count_statement(session, self._window(stmt, offset, limit))
                return [{spec: total}] if total else []
            elif name == "$facet":
                return [
                    {
                        branch: await self._run(session, stmt, list(sub), projection, (offset, limit))
                        for branch, sub in spec.items()
                    }
                ]
            else:
                msg = f"Unsupported pipeline stage: {name}"
                raise InvalidFilterError(msg, filter_name=name)

        include, exclude = self._split_projection(projection)
        result = await session.execute(self._window(stmt, offset, limit))
        return [self._to_record(row, include, exclude, []) for row in result.scalars().all()]

    @staticmethod
    def _window(stmt: Select[Any], offset: int, limit: int | None) -> Select[Any]:
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return stmt

    @staticmethod
    async def _count_statement(session: AsyncSession, stmt: Select[Any]) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        return (await session.execute(count_stmt)).scalar_one()

    # ──────────────────────────────────────────────────────────────
    # Filter translation
    # ──────────────────────────────────────────────────────────────

    def _column(self, field: str) -> InstrumentedAttribute[Any]:
        name = self._pk_name if field == ID_FIELD else field
        if name not in self._mapper.column_attrs:
            msg = f"Unknown field for {self.model.__name__}: {field}"
            raise InvalidFilterError(msg, filter_name=field)
        return getattr(self.model, name)

    def _where(self, query: Filter | None) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        for key, condition in (query or {}).items():
            if key in ("$and", "$or", "$nor"):
                if not isinstance(condition, list | tuple):
                    msg = f"{key} requires an array"
                    raise InvalidFilterError(msg, filter_name=key)
                branches = [_all(self._where(sub)) for sub in condition]
                if key == "$and":
                    clauses.append(_all(branches))
                elif key == "$or":
                    clauses.append(or_(*branches) if branches else false())
                else:
                    clauses.append(not_(or_(*branches)) if branches else true())
            elif key.startswith("$"):
                msg = f"Unsupported top-level operator: {key}"
                raise InvalidFilterError(msg, filter_name=key)
            else:
                clauses.append(self._condition(self._column(key), condition))
        return clauses

    def _condition(self, column: InstrumentedAttribute[Any], condition: Any) -> ColumnElement[bool]:
        if isinstance(condition, Mapping) and condition and all(
            str(k).startswith("$") for k in condition
        ):
            return _all(
                [
                    self._operator(column, operator, operand, condition)
                    for operator, operand in condition.items()
                    if operator != "$options"
                ]
            )
        return self._operator(column, "$eq", condition, {})

    def _operator(
        self,
        column: InstrumentedAttribute[Any],
        operator: str,
        operand: Any,
        condition: Mapping[str, Any],
    ) -> ColumnElement[bool]:
        if operator == "$eq":
            return column.is_(None) if operand is None else column == self._convert(column, operand)
        if operator == "$ne":
            if operand is None:
                return column.is_not(None)
            return or_(column != self._convert(column, operand), column.is_(None))
        if operator == "$gt":
            return column > self._convert(column, operand)
        if operator == "$gte":
            return column >= self._convert(column, operand)
        if operator == "$lt":
            return column < self._convert(column, operand)
        if operator == "$lte":
            return column <= self._convert(column, operand)
        if operator in ("$in", "$nin"):
            if not isinstance(operand, list | tuple | set | frozenset):
                msg = f"{operator} requires an array"
                raise InvalidFilterError(msg, filter_name=operator)
            values = [self._convert(column, v) for v in operand if v is not None]
            clause = column.in_(values)
            if None in operand:
                clause = or_(clause, column.is_(None))
            return not_(clause) if operator == "$nin" else clause
        if operator == "$exists":
            return column.is_not(None) if operand else column.is_(None)
        if operator == "$regex":
            return self._like(column, operand, str(condition.get("$options", "")))
        msg = f"Unsupported query operator: {operator}"
        raise InvalidFilterError(msg, filter_name=operator)

    @staticmethod
    def _like(column: InstrumentedAttribute[Any], pattern: Any, options: str) -> ColumnElement[bool]:
        text = pattern.pattern if isinstance(pattern, re.Pattern) else str(pattern)
        starts = text.startswith("^")
        ends = text.endswith("$")
        core = text[1 if starts else 0 : len(text) - 1 if ends else len(text)]
        if _REGEX_META.search(core) or "^" in core or "$" in core:
            msg = f"Only plain substring patterns are supported: {text!r}"
            raise InvalidFilterError(msg, filter_name="$regex")
        like = f"{'' if starts else '%'}{_escape_like(core)}{'' if ends else '%'}"
        if "i" in options:
            return column.ilike(like, escape="\\")
        return column.like(like, escape="\\")

    @staticmethod
    def _convert(column: InstrumentedAttribute[Any], value: Any) -> Any:
        """Convert string values (as decoded from cursors) to the column's type."""
        if not isinstance(value, str):
            return value
        column_type = column.property.columns[0].type
        try:
            if isinstance(column_type, DateTime):
                return datetime.fromisoformat(value)
            if isinstance(column_type, Date):
                return date.fromisoformat(value)
            if isinstance(column_type, Uuid):
                return uuid.UUID(value)
        except ValueError as exc:
            msg = f"Invalid value {value!r} for {column.key}"
            raise InvalidFilterError(msg, filter_name=column.key) from exc
        return value

    def _order_by(self, sort: SortSpec | Sequence[tuple[str, int]]) -> list[Any]:
        clauses = []
        for field, direction in sort:
            column = self._column(field)
            if SortOrder.parse(int(direction)) is SortOrder.DESC:
                clauses.append(column.desc().nulls_last())
            else:
                clauses.append(column.asc().nulls_first())
        return clauses

    # ──────────────────────────────────────────────────────────────
    # Projection / expansion
    # ──────────────────────────────────────────────────────────────

    def _split_projection(self, projection: Projection | None) -> tuple[list[str], set[str]]:
        if not projection:
            return [], set()
        spec = parse_projection(projection)
        flags = {field: bool(value) for field, value in spec.items() if field != ID_FIELD}
        if len(set(flags.values())) > 1:
            msg = "Cannot mix inclusion and exclusion in a projection"
            raise InvalidFilterError(msg, filter_name="projection")
        exclude = {field for field, included in flags.items() if not included}
        if ID_FIELD in spec and not spec[ID_FIELD]:
            exclude.add(ID_FIELD)
        include = [field for field, included in flags.items() if included]
        for field in include:
            self._column(field)
        return include, exclude

    def _relations(self, expand: Expansion | None) -> list[str]:
        if not expand:
            return []
        names = expand.split() if isinstance(expand, str) else list(expand)
        for name in names:
            if name not in self._mapper.relationships:
                msg = f"Unknown relationship for {self.model.__name__}: {name}"
                raise InvalidFilterError(msg, filter_name=name)
        return names

    def _to_record(
        self,
        instance: Any,
        include: Sequence[str],
        exclude: set[str],
        relations: Sequence[str],
    ) -> dict[str, Any]:
        record = self._columns_of(instance)
        if include:
            record = {k: v for k, v in record.items() if k == ID_FIELD or k in include}
        for field in exclude:
            record.pop(field, None)
        for name in relations:
            related = getattr(instance, name)
            if related is None:
                record[name] = None
            elif isinstance(related, list | tuple | set):
                record[name] = [self._columns_of(item) for item in related]
            else:
                record[name] = self._columns_of(related)
        return record

    @staticmethod
    def _columns_of(instance: Any) -> dict[str, Any]:
        state = inspect(instance)
        mapper = state.mapper
        pk_name = mapper.primary_key[0].key
        record: dict[str, Any] = {}
        for attr in mapper.column_attrs:
            if attr.key in state.unloaded:
                continue
            key = ID_FIELD if attr.key == pk_name else attr.key
            record[key] = getattr(instance, attr.key)
        return record


__all__ = ["SQLAlchemyDocumentStore"]
