"""In-memory document store.

A process-local collection of dict documents understanding the subset of
the document query language the paginators and their callers need:

    store = MemoryDocumentStore("items")
    await store.insert_many([{"name": "Latte", "price": 4.5}, ...])

    rows = await store.find(
        {"price": {"$gte": 3}, "show": True},
        sort=[("price", SortOrder.DESC)],
        limit=10,
        projection="name price",
    )

    rows = await store.aggregate([
        {"$match": {"show": True}},
        {"$group": {"_id": "$category", "total": {"$sum": 1}}},
        {"$sort": {"total": -1}},
    ])

Documents are deep-copied on the way in and out, so callers can never
mutate stored state through a returned record.
"""

from __future__ import annotations

import copy
import re
import uuid
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from outpost_service.core.database.exceptions import InvalidFilterError
from outpost_service.core.pagination.schemas import Expansion, Projection, SortOrder
from outpost_service.core.pagination.store import Filter, Pipeline, SortSpec
from outpost_service.infra.logging import get_lazy_logger

_MISSING = object()

# Cross-type ordering, lowest first: null < numbers < strings < objects
# < arrays < ids < booleans < dates < anything else
_RANK_NULL = 0
_RANK_NUMBER = 1
_RANK_STRING = 2
_RANK_OBJECT = 3
_RANK_ARRAY = 4
_RANK_ID = 5
_RANK_BOOL = 6
_RANK_DATE = 7
_RANK_OTHER = 8


# ──────────────────────────────────────────────────────────────
# Value helpers
# ──────────────────────────────────────────────────────────────


def resolve_path(document: Any, path: str) -> Any:
    """Walk a dotted path; returns the module sentinel when absent."""
    current = document
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else _MISSING
        else:
            return _MISSING
        if current is _MISSING:
            return _MISSING
    return current


def sort_key(value: Any) -> tuple[Any, ...]:
    """Total-order key across mixed value types."""
    if value is _MISSING or value is None:
        return (_RANK_NULL, 0)
    if isinstance(value, bool):
        return (_RANK_BOOL, value)
    if isinstance(value, int | float | Decimal):
        return (_RANK_NUMBER, value)
    if isinstance(value, str):
        return (_RANK_STRING, value)
    if isinstance(value, Mapping):
        return (_RANK_OBJECT, tuple((k, sort_key(v)) for k, v in value.items()))
    if isinstance(value, list | tuple):
        return (_RANK_ARRAY, tuple(sort_key(v) for v in value))
    if isinstance(value, uuid.UUID):
        return (_RANK_ID, value.int)
    if isinstance(value, datetime):
        return (_RANK_DATE, _as_utc(value))
    if isinstance(value, date):
        return (_RANK_DATE, _as_utc(datetime.combine(value, datetime.min.time())))
    return (_RANK_OTHER, type(value).__qualname__, repr(value))


def _as_utc(value: datetime) -> datetime:
    """Comparable instant; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _coerce(operand: Any, like: Any) -> Any:
    """Convert a string operand (e.g. from a decoded cursor) to the stored value's type."""
    if not isinstance(operand, str):
        return operand
    try:
        if isinstance(like, datetime):
            return datetime.fromisoformat(operand)
        if isinstance(like, date):
            return date.fromisoformat(operand)
        if isinstance(like, uuid.UUID):
            return uuid.UUID(operand)
    except ValueError:
        return operand
    return operand


def _candidates(value: Any) -> list[Any]:
    """A list field matches if the list itself or any element matches."""
    if isinstance(value, list):
        return [value, *value]
    return [value]


def _equals(value: Any, operand: Any) -> bool:
    if value is _MISSING:
        return operand is None
    return any(
        sort_key(candidate) == sort_key(_coerce(operand, candidate))
        for candidate in _candidates(value)
    )


def _compare(value: Any, operand: Any, test: Any) -> bool:
    if value is _MISSING:
        return False
    for candidate in _candidates(value):
        left = sort_key(candidate)
        right = sort_key(_coerce(operand, candidate))
        if left[0] == right[0] and test(left, right):
            return True
    return False


def _regex(value: Any, pattern: Any, options: str = "") -> bool:
    if isinstance(pattern, re.Pattern):
        compiled = pattern
    else:
        flags = 0
        if "i" in options:
            flags |= re.IGNORECASE
        if "m" in options:
            flags |= re.MULTILINE
        if "s" in options:
            flags |= re.DOTALL
        compiled = re.compile(str(pattern), flags)
    return any(
        isinstance(candidate, str) and compiled.search(candidate) is not None
        for candidate in _candidates(value)
    )


_COMPARISONS = {
    "$gt": lambda left, right: left > right,
    "$gte": lambda left, right: left >= right,
    "$lt": lambda left, right: left < right,
    "$lte": lambda left, right: left <= right,
}


def _is_operator_doc(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(str(key).startswith("$") for key in condition)
    )


def _match_operator(value: Any, operator: str, operand: Any, condition: Mapping[str, Any]) -> bool:
    if operator == "$eq":
        return _equals(value, operand)
    if operator == "$ne":
        return not _equals(value, operand)
    if operator in _COMPARISONS:
        return _compare(value, operand, _COMPARISONS[operator])
    if operator == "$in":
        return any(_equals(value, item) for item in _as_list(operand, operator))
    if operator == "$nin":
        return not any(_equals(value, item) for item in _as_list(operand, operator))
    if operator == "$exists":
        return (value is not _MISSING) == bool(operand)
    if operator == "$regex":
        return value is not _MISSING and _regex(value, operand, condition.get("$options", ""))
    if operator == "$options":
        return True
    if operator == "$not":
        return not _match_condition(value, operand)
    msg = f"Unsupported query operator: {operator}"
    raise InvalidFilterError(msg, filter_name=operator)


def _as_list(operand: Any, operator: str) -> list[Any]:
    if not isinstance(operand, list | tuple | set | frozenset):
        msg = f"{operator} requires an array"
        raise InvalidFilterError(msg, filter_name=operator)
    return list(operand)


def _match_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, re.Pattern):
        return value is not _MISSING and _regex(value, condition)
    if _is_operator_doc(condition):
        return all(
            _match_operator(value, operator, operand, condition)
            for operator, operand in condition.items()
        )
    return _equals(value, condition)


def matches(document: Mapping[str, Any], query: Filter | None) -> bool:
    """Whether ``document`` satisfies ``query``."""
    for key, condition in (query or {}).items():
        if key == "$and":
            if not all(matches(document, sub) for sub in _as_list(condition, key)):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in _as_list(condition, key)):
                return False
        elif key == "$nor":
            if any(matches(document, sub) for sub in _as_list(condition, key)):
                return False
        elif key.startswith("$"):
            msg = f"Unsupported top-level operator: {key}"
            raise InvalidFilterError(msg, filter_name=key)
        elif not _match_condition(resolve_path(document, key), condition):
            return False
    return True


def sort_documents(documents: Iterable[Any], sort: SortSpec | Mapping[str, int]) -> list[Any]:
    """Stable multi-key sort; null and missing values sort first ascending."""
    items = sort.items() if isinstance(sort, Mapping) else sort
    result = list(documents)
    for field, direction in reversed(list(items)):
        order = SortOrder.parse(int(direction))
        result.sort(
            key=lambda doc, f=field: sort_key(resolve_path(doc, f)),
            reverse=order is SortOrder.DESC,
        )
    return result


# ──────────────────────────────────────────────────────────────
# Projection
# ──────────────────────────────────────────────────────────────


def parse_projection(projection: Projection) -> dict[str, Any]:
    """Normalize a mapping or ``"name -secret"`` string projection to a mapping."""
    if isinstance(projection, str):
        spec: dict[str, Any] = {}
        for token in projection.split():
            if token.startswith("-"):
                spec[token[1:]] = 0
            else:
                spec[token.lstrip("+")] = 1
        return spec
    return dict(projection)


def _set_path(target: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _unset_path(target: dict[str, Any], path: str) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        target = target.get(part)
        if not isinstance(target, dict):
            return
    target.pop(parts[-1], None)


def project(document: Mapping[str, Any], projection: Projection | None) -> dict[str, Any]:
    """Apply an inclusion or exclusion projection.

    Values may be ``1``/``0`` flags or ``"$path"`` references (computed fields).
    ``_id`` is kept unless explicitly excluded.
    """
    if not projection:
        return dict(document)
    spec = parse_projection(projection)
    keep_id = bool(spec.pop("_id", 1))
    computed = {k: v for k, v in spec.items() if isinstance(v, str) and v.startswith("$")}
    flags = {k: bool(v) for k, v in spec.items() if k not in computed}
    if flags and len(set(flags.values())) > 1:
        msg = "Cannot mix inclusion and exclusion in a projection"
        raise InvalidFilterError(msg, filter_name="projection")

    if computed or any(flags.values()):
        result: dict[str, Any] = {}
        if keep_id and "_id" in document:
            result["_id"] = document["_id"]
        for path in (p for p, included in flags.items() if included):
            value = resolve_path(document, path)
            if value is not _MISSING:
                _set_path(result, path, copy.deepcopy(value))
        for path, expression in computed.items():
            value = resolve_path(document, expression[1:])
            if value is not _MISSING:
                _set_path(result, path, copy.deepcopy(value))
        return result

    result = copy.deepcopy(dict(document))
    for path in flags:
        _unset_path(result, path)
    if not keep_id:
        result.pop("_id", None)
    return result


def _evaluate(document: Mapping[str, Any], expression: Any) -> Any:
    """Evaluate a ``"$path"`` reference, ``{"$literal": x}`` or a plain literal."""
    if isinstance(expression, str) and expression.startswith("$"):
        value = resolve_path(document, expression[1:])
        return None if value is _MISSING else value
    if isinstance(expression, Mapping):
        if set(expression) == {"$literal"}:
            return expression["$literal"]
        if _is_operator_doc(expression):
            msg = f"Unsupported expression: {next(iter(expression))}"
            raise InvalidFilterError(msg, filter_name=next(iter(expression)))
        return {key: _evaluate(document, value) for key, value in expression.items()}
    return expression


def _freeze(value: Any) -> Any:
    """Hashable form of a group key."""
    if isinstance(value, Mapping):
        return tuple((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


# ──────────────────────────────────────────────────────────────
# Aggregation
# ──────────────────────────────────────────────────────────────


def _stage_group(documents: list[dict[str, Any]], spec: Mapping[str, Any]) -> list[dict[str, Any]]:
    if "_id" not in spec:
        msg = "$group requires an _id expression"
        raise InvalidFilterError(msg, filter_name="$group")
    groups: dict[Any, dict[str, Any]] = {}
    members: dict[Any, list[dict[str, Any]]] = {}
    for document in documents:
        key_value = _evaluate(document, spec["_id"])
        key = _freeze(key_value)
        if key not in groups:
            groups[key] = {"_id": key_value}
            members[key] = []
        members[key].append(document)

    for key, group in groups.items():
        for field, accumulator in spec.items():
            if field == "_id":
                continue
            if not _is_operator_doc(accumulator) or len(accumulator) != 1:
                msg = f"Invalid accumulator for field {field}"
                raise InvalidFilterError(msg, filter_name=field)
            operator, expression = next(iter(accumulator.items()))
            values = [_evaluate(doc, expression) for doc in members[key]]
            group[field] = _accumulate(operator, values)
    return list(groups.values())


def _accumulate(operator: str, values: list[Any]) -> Any:
    numbers = [v for v in values if isinstance(v, int | float | Decimal) and not isinstance(v, bool)]
    present = [v for v in values if v is not None]
    if operator == "$sum":
        return sum(numbers)
    if operator == "$avg":
        return sum(numbers) / len(numbers) if numbers else None
    if operator == "$min":
        return min(present, key=sort_key) if present else None
    if operator == "$max":
        return max(present, key=sort_key) if present else None
    if operator == "$first":
        return values[0] if values else None
    if operator == "$last":
        return values[-1] if values else None
    if operator == "$push":
        return list(values)
    if operator == "$addToSet":
        unique: list[Any] = []
        for value in values:
            if all(sort_key(value) != sort_key(seen) for seen in unique):
                unique.append(value)
        return unique
    msg = f"Unsupported accumulator: {operator}"
    raise InvalidFilterError(msg, filter_name=operator)


def _stage_unwind(documents: list[dict[str, Any]], spec: Any) -> list[dict[str, Any]]:
    if isinstance(spec, str):
        path, preserve = spec, False
    else:
        path, preserve = spec.get("path", ""), bool(spec.get("preserveNullAndEmptyArrays"))
    if not isinstance(path, str) or not path.startswith("$"):
        msg = "$unwind path must be a field reference"
        raise InvalidFilterError(msg, filter_name="$unwind")
    field = path[1:]
    result: list[dict[str, Any]] = []
    for document in documents:
        value = resolve_path(document, field)
        if isinstance(value, list) and value:
            for item in value:
                unwound = copy.deepcopy(document)
                _set_path(unwound, field, item)
                result.append(unwound)
        elif isinstance(value, list) or value is _MISSING or value is None:
            if preserve:
                result.append(document)
        else:
            result.append(document)
    return result


def run_pipeline(documents: list[dict[str, Any]], pipeline: Pipeline) -> list[dict[str, Any]]:
    """Run aggregation ``pipeline`` over ``documents``."""
    for stage in pipeline:
        if not isinstance(stage, Mapping) or len(stage) != 1:
            msg = "Each pipeline stage must have exactly one operator"
            raise InvalidFilterError(msg, filter_name="pipeline")
        name, spec = next(iter(stage.items()))
        if name == "$match":
            documents = [doc for doc in documents if matches(doc, spec)]
        elif name == "$sort":
            documents = sort_documents(documents, spec)
        elif name == "$skip":
            documents = documents[int(spec):]
        elif name == "$limit":
            documents = documents[: int(spec)]
        elif name == "$project":
            documents = [project(doc, spec) for doc in documents]
        elif name in ("$addFields", "$set"):
            for doc in documents:
                for field, expression in spec.items():
                    _set_path(doc, field, _evaluate(doc, expression))
        elif name == "$count":
            documents = [{spec: len(documents)}] if documents else []
        elif name == "$unwind":
            documents = _stage_unwind(documents, spec)
        elif name == "$group":
            documents = _stage_group(documents, spec)
        elif name == "$facet":
            documents = [
                {
                    branch: run_pipeline(copy.deepcopy(documents), sub_pipeline)
                    for branch, sub_pipeline in spec.items()
                }
            ]
        else:
            msg = f"Unsupported pipeline stage: {name}"
            raise InvalidFilterError(msg, filter_name=name)
    return documents


# ──────────────────────────────────────────────────────────────
# Store
# ──────────────────────────────────────────────────────────────


class MemoryDocumentStore:
    """Document store backed by a Python list.

    Args:
        name: Collection name (used in log records)
        documents: Initial documents; ``_id`` is assigned when absent
        relations: Field name -> store holding the referenced documents,
            used to expand references on ``find(..., expand=...)``
    """

    def __init__(
        self,
        name: str = "documents",
        documents: Iterable[Mapping[str, Any]] | None = None,
        *,
        relations: Mapping[str, MemoryDocumentStore] | None = None,
    ) -> None:
        self.name = name
        self.relations = dict(relations or {})
        self._documents: list[dict[str, Any]] = []
        self._lazy = get_lazy_logger(f"store.memory.{name}")
        for document in documents or []:
            self._add(document)

    def __len__(self) -> int:
        return len(self._documents)

    def _add(self, document: Mapping[str, Any]) -> Any:
        stored = copy.deepcopy(dict(document))
        stored.setdefault("_id", uuid.uuid4())
        self._documents.append(stored)
        return stored["_id"]

    async def insert_one(self, document: Mapping[str, Any]) -> Any:
        """Insert a document and return its ``_id``."""
        return self._add(document)

    async def insert_many(self, documents: Iterable[Mapping[str, Any]]) -> list[Any]:
        """Insert documents and return their ``_id`` values."""
        return [self._add(document) for document in documents]

    async def delete_many(self, filter: Filter) -> int:  # noqa: A002
        """Delete matching documents and return how many were removed."""
        kept = [doc for doc in self._documents if not matches(doc, filter)]
        deleted = len(self._documents) - len(kept)
        self._documents = kept
        return deleted

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
        """Return matching documents, sorted, windowed, projected and expanded."""
        rows = sort_documents(
            (doc for doc in self._documents if matches(doc, filter)),
            sort,
        )
        end = None if limit is None else skip + limit
        rows = [project(copy.deepcopy(doc), projection) for doc in rows[skip:end]]
        if expand:
            rows = [self._expand(row, expand) for row in rows]

        self._lazy.debug(
            lambda: f"db.find: {self.name}(skip={skip}, limit={limit}) -> {len(rows)} documents"
        )
        return rows

    async def count(self, filter: Filter) -> int:  # noqa: A002
        """Count matching documents."""
        total = sum(1 for doc in self._documents if matches(doc, filter))
        self._lazy.debug(lambda: f"db.count: {self.name} -> {total}")
        return total

    async def aggregate(self, pipeline: Pipeline) -> list[dict[str, Any]]:
        """Run an aggregation pipeline over a snapshot of the collection."""
        rows = run_pipeline(copy.deepcopy(self._documents), pipeline)
        self._lazy.debug(
            lambda: f"db.aggregate: {self.name}({len(pipeline)} stages) -> {len(rows)} rows"
        )
        return rows

    def _expand(self, document: dict[str, Any], expand: Expansion) -> dict[str, Any]:
        fields = expand.split() if isinstance(expand, str) else list(expand)
        for field in fields:
            related = self.relations.get(field)
            if related is None:
                msg = f"No relation registered for field {field!r}"
                raise InvalidFilterError(msg, filter_name=field)
            reference = resolve_path(document, field)
            if reference is _MISSING or reference is None:
                continue
            if isinstance(reference, list):
                resolved = [related._lookup(ref) for ref in reference]
                _set_path(document, field, [doc for doc in resolved if doc is not None])
            else:
                _set_path(document, field, related._lookup(reference))
        return document

    def _lookup(self, identifier: Any) -> dict[str, Any] | None:
        for document in self._documents:
            if _equals(document.get("_id", _MISSING), identifier):
                return copy.deepcopy(document)
        return None


__all__ = [
    "MemoryDocumentStore",
    "matches",
    "parse_projection",
    "project",
    "resolve_path",
    "run_pipeline",
    "sort_documents",
    "sort_key",
]
