from typing import Dict, Iterable, List, Mapping, Sequence

from .periods import period_sort_key


def outer_join_by_period(
    series: Iterable[Iterable[Mapping[str, float]]], columns: Sequence[str]
) -> List[Dict[str, float]]:
    """
    Merges several per-period row sets into one row per period.

    Every output row has ``period`` plus each of `columns`; a column that no
    series supplied for a period is 0. Rows come back in chronological order.
    """
    by_period: Dict[str, Dict[str, float]] = {}
    for rows in series:
        for row in rows:
            period = row["period"]
            merged = by_period.setdefault(period, {"period": period, **{c: 0 for c in columns}})
            for column in columns:
                if column in row and row[column] is not None:
                    merged[column] = row[column]
    return [by_period[p] for p in sorted(by_period, key=period_sort_key)]
