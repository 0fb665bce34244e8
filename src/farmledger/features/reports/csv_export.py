"""CSV rendering for report rows."""

import csv
import io
from typing import Any, Iterable, Mapping, Sequence


def format_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_csv(rows: Iterable[Mapping[str, Any]], headers: Sequence[str]) -> str:
    """
    Renders `rows` as CSV: a header line, then one line per row with the
    cells in header order. Keys missing from a row become empty cells.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([format_cell(row.get(header)) for header in headers])
    return buffer.getvalue()
