from __future__ import annotations

from typing import Iterable, Sequence

import pytest

from std_score.core.aliases import AliasTable
from std_score.core.models import Entry


HEADER = "<tr><th>Rank</th><th>Name</th><th>Total</th></tr>"


def _build_html(rows: Iterable[Sequence[str]], leading_paragraphs: int = 2, header: bool = True) -> str:
    """Result page shaped like the exported score pages: table inside the third <p>."""
    intro = "".join(f"<p>Contest notes {i}</p>" for i in range(leading_paragraphs))
    trs = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
    table = f"<table>{HEADER if header else ''}{trs}</table>"
    return f"<html><head><title>Results</title></head><body>{intro}<p>{table}</p><p>footer</p></body></html>"


def _entry(name: str, score: float, ref: bool = False, row: int = 0) -> Entry:
    return Entry(row_index=row, raw_name=name, canonical_name=name, raw_score=score, is_reference=ref)


@pytest.fixture
def make_html():
    return _build_html


@pytest.fixture
def make_entry():
    return _entry


@pytest.fixture
def aliases() -> AliasTable:
    return AliasTable({"bob-x": "Bob X", "cqyc-wht": "CQYC-王鸿天"})
