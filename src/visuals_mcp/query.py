"""Server-side filtering, sorting and pagination of the stored table."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal
from functools import cmp_to_key
from typing import Any

from .errors import PreconditionError
from .models import Query, QueryResult, Row, SortKey, TableDataset

NO_DATASET_MESSAGE = "No table data available. Call display_table first."

# Stands in for a field the row does not have.
ABSENT: Any = object()


def js_string(value: Any) -> str:
    """Stringify a cell value the way the renderer's ``String(value)`` does.

    Filtering matches against this text, so a row missing the field matches
    the needle ``"undef"`` and a null cell matches ``"null"``.
    """
    if value is ABSENT:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _js_number(value)
    if isinstance(value, int) and abs(value) >= 10**21:
        return _js_number(float(value))
    if isinstance(value, list):
        return ",".join("" if item is None else js_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def _js_number(value: float) -> str:
    """Format a float like JavaScript's ``Number.prototype.toString``.

    Exponent notation is used from 1e21 up and below 1e-6.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    # Shortest round-trip digits, as repr() picks them.
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)
    k = len(digits)
    n = exponent + k
    sign = "-" if value < 0 else ""

    if k <= n <= 21:
        return sign + digits + "0" * (n - k)
    if 0 < n <= 21:
        return sign + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return sign + "0." + "0" * (-n) + digits
    e = n - 1
    mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{sign}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def filter_rows(rows: list[Row], filters: dict[str, str]) -> list[Row]:
    """Keep rows whose every filtered field contains its needle, ignoring case."""
    for key, needle in filters.items():
        lowered = needle.lower()
        rows = [row for row in rows if lowered in js_string(row.get(key, ABSENT)).lower()]
    return rows


def _family(value: Any) -> str | None:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return None


def compare_values(a: Any, b: Any) -> int:
    """Native ordering of two cells; mismatched or unordered kinds tie."""
    family = _family(a)
    if family is None or family != _family(b):
        return 0
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def date_value(value: Any) -> float | None:
    """Epoch milliseconds for an ISO-8601 string or epoch-ms number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000


def sort_rows(
    rows: list[Row], sort_by: list[SortKey], dataset: TableDataset | None = None
) -> list[Row]:
    """Stable multi-key sort. Ties on one key fall through to the next."""
    if not sort_by:
        return list(rows)

    keys: list[tuple[str, int, bool]] = []
    for sort_key in sort_by:
        column = dataset.column(sort_key.column_key) if dataset else None
        keys.append(
            (
                sort_key.column_key,
                -1 if sort_key.direction == "desc" else 1,
                column is not None and column.type == "date",
            )
        )

    def compare(a: Row, b: Row) -> int:
        for key, sign, is_date in keys:
            a_val, b_val = a.get(key), b.get(key)
            if is_date:
                a_date, b_date = date_value(a_val), date_value(b_val)
                if a_date is not None and b_date is not None:
                    a_val, b_val = a_date, b_date
            result = compare_values(a_val, b_val)
            if result:
                return sign * result
        return 0

    return sorted(rows, key=cmp_to_key(compare))


def ordered_rows(dataset: TableDataset, query: Query) -> list[Row]:
    """Filtered and sorted rows of ``dataset``, before pagination."""
    rows = filter_rows(dataset.rows, query.filters)
    return sort_rows(rows, query.sort_by, dataset)


def run(dataset: TableDataset | None, query: Query) -> QueryResult:
    """Answer ``query`` against ``dataset``.

    Raises:
        PreconditionError: If no dataset has been displayed.
    """
    if dataset is None:
        raise PreconditionError(NO_DATASET_MESSAGE)

    rows = ordered_rows(dataset, query)
    page_size = query.page_size if query.page_size is not None else dataset.page_size
    start = query.page * page_size
    return QueryResult(
        rows=[dict(row) for row in rows[start : start + page_size]],
        total_rows=len(rows),
        page=query.page,
        page_size=page_size,
    )
