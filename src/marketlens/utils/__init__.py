from .dates import parse_timestamp
from .records import category_is, filter_records, latest_first, search, sort_by, text_query

__all__ = [
    "parse_timestamp",
    "category_is",
    "filter_records",
    "latest_first",
    "search",
    "sort_by",
    "text_query",
]
