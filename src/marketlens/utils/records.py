"""Sort and filter helpers for lists of canonical records.

Records may be dataclasses (attribute access) or plain mappings. Every
function returns a new list and leaves its input untouched.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Literal, Mapping, Sequence, TypeVar, Union

from marketlens.models import Severity

T = TypeVar("T")

Predicate = Callable[[Any], bool]
SortKey = Union[str, Callable[[Any], Any]]

ALL_CATEGORIES = "all"


def field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _comparable(value: Any) -> Any:
    if isinstance(value, Severity):
        return value.rank
    if isinstance(value, str):
        return value.casefold()
    if hasattr(value, "value") and isinstance(value.value, str):
        return value.value.casefold()  # str enums
    return value


def sort_by(
    records: Sequence[T],
    key: SortKey,
    direction: Literal["asc", "desc"] = "asc",
) -> list[T]:
    """Stable sort by a field name or key function.

    Text compares case-insensitively. Records whose key is None go last in
    both directions.
    """
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction}")
    getter = key if callable(key) else (lambda r: field_value(r, key))

    present = [r for r in records if getter(r) is not None]
    missing = [r for r in records if getter(r) is None]
    # reverse=True keeps equal keys in input order as well.
    ordered = sorted(present, key=lambda r: _comparable(getter(r)), reverse=direction == "desc")
    return ordered + missing


def filter_records(records: Iterable[T], predicate: Predicate) -> list[T]:
    return [r for r in records if predicate(r)]


def text_query(query: str, fields: Sequence[str] = ("symbol", "name", "market_name")) -> Predicate:
    """Case-insensitive substring match on symbol, name and localized name."""
    needle = (query or "").strip().casefold()

    def matches(record: Any) -> bool:
        if not needle:
            return True
        for name in fields:
            value = field_value(record, name)
            if isinstance(value, str) and needle in value.casefold():
                return True
        return False

    return matches


def category_is(category: str | None) -> Predicate:
    """Category match; ``"all"`` (or empty) matches every record."""
    wanted = (category or ALL_CATEGORIES).strip().casefold()

    def matches(record: Any) -> bool:
        if wanted == ALL_CATEGORIES:
            return True
        value = field_value(record, "category")
        return isinstance(value, str) and value.casefold() == wanted

    return matches


def all_of(*predicates: Predicate) -> Predicate:
    def matches(record: Any) -> bool:
        return all(p(record) for p in predicates)

    return matches


def search(records: Iterable[T], query: str = "", category: str | None = ALL_CATEGORIES) -> list[T]:
    return filter_records(records, all_of(text_query(query), category_is(category)))


def latest_first(items: Sequence[T], field: str = "published_at") -> list[T]:
    """Newest first; undated items go last, in input order."""
    return sort_by(items, lambda r: field_value(r, field), direction="desc")
