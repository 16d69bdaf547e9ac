from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Aggregate, AggregateRow


MAX_PRECISION = 6
MISSING = "-"


class SortKey(str, Enum):
    NAME = "name"
    AVG = "avg"
    STD = "std"  # standardized score in one file
    RAW = "raw"  # raw score in one file


def name_of(row: AggregateRow) -> str:
    return row.canonical_name


def average_of(row: AggregateRow) -> Optional[float]:
    return row.average_standardized_score


def standardized_in(label: str) -> Callable[[AggregateRow], Optional[float]]:
    def get(row: AggregateRow) -> Optional[float]:
        score = row.per_file.get(label)
        return score.standardized_score if score else None

    return get


def raw_in(label: str) -> Callable[[AggregateRow], Optional[float]]:
    def get(row: AggregateRow) -> Optional[float]:
        score = row.per_file.get(label)
        return score.raw_score if score else None

    return get


def accessor(key: SortKey, file_label: Optional[str] = None) -> Callable[[AggregateRow], object]:
    if key is SortKey.NAME:
        return name_of
    if key is SortKey.AVG:
        return average_of
    if file_label is None:
        raise ValueError(f"sorting by {key.value} needs a file label")
    return standardized_in(file_label) if key is SortKey.STD else raw_in(file_label)


def sort_rows(
    rows: Sequence[AggregateRow],
    key: SortKey = SortKey.AVG,
    file_label: Optional[str] = None,
    descending: Optional[bool] = None,
) -> List[AggregateRow]:
    """Stable sort on one column. Rows with no value go last in either direction.

    Names sort A-Z by default, scores highest first.
    """
    if descending is None:
        descending = key is not SortKey.NAME
    get = accessor(key, file_label)
    present = [r for r in rows if get(r) is not None]
    missing = [r for r in rows if get(r) is None]
    return sorted(present, key=get, reverse=descending) + missing


def format_score(value: Optional[float], precision: int = 2) -> str:
    if value is None:
        return MISSING
    precision = max(0, min(precision, MAX_PRECISION))
    return f"{value:.{precision}f}"


def build_table(
    agg: Aggregate,
    precision: int = 2,
    rows: Optional[Sequence[AggregateRow]] = None,
) -> Tuple[List[str], List[List[str]]]:
    """Header and string cells: Name | Avg Std | <file> Std | <file> Raw | ..."""
    header = ["Name", "Avg Std"]
    for label in agg.file_order:
        header += [f"{label} Std", f"{label} Raw"]

    body: List[List[str]] = []
    for row in agg.rows if rows is None else rows:
        cells = [row.canonical_name, format_score(row.average_standardized_score, precision)]
        for label in agg.file_order:
            score = row.per_file.get(label)
            if score is None:
                cells += [MISSING, MISSING]
            else:
                cells += [format_score(score.standardized_score, precision), format_score(score.raw_score, precision)]
        body.append(cells)
    return header, body


def render_text(header: List[str], body: List[List[str]]) -> str:
    widths = [len(h) for h in header]
    for cells in body:
        widths = [max(w, len(c)) for w, c in zip(widths, cells)]
    lines = [" | ".join(c.ljust(w) for c, w in zip(header, widths)).rstrip()]
    lines.append("-+-".join("-" * w for w in widths))
    for cells in body:
        lines.append(" | ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip())
    return "\n".join(lines)
