from __future__ import annotations

import logging
import math
import re
from typing import Iterator, List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..core.aliases import AliasTable
from ..core.errors import TableNotFound
from ..core.models import Diagnostic, DiagnosticKind, Entry

logger = logging.getLogger(__name__)


# First number in the score cell; tolerates spaces and decoration around it
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
# Reference rows carry "std" as a word in the name cell
_REFERENCE_MARKER = re.compile(r"\bstd\b", re.IGNORECASE)


class TableLocator(Protocol):
    def locate(self, soup: BeautifulSoup) -> List[Tag]:
        """Return the <tr> elements of the score table, or raise TableNotFound."""
        ...


def _is_body_block(p: Tag, body: Tag) -> bool:
    # html.parser nests an unclosed <p> in the previous one; those still count
    for parent in p.parents:
        if parent is body:
            return True
        if parent.name != "p":
            return False
    return False


def paragraph_blocks(soup: BeautifulSoup) -> List[Tag]:
    """<p> blocks under <body>, in document order."""
    body = soup.body
    if body is None:
        return []
    return [p for p in body.find_all("p") if _is_body_block(p, body)]


def _own(block: Tag, name: str) -> List[Tag]:
    # Elements of this block, not of a <p> block nested in it
    return [t for t in block.find_all(name) if t.find_parent("p") is block]


class ParagraphTableLocator:
    """Find the table nested in the n-th <p> block under <body>."""

    def __init__(self, position: int = 3):
        if position < 1:
            raise ValueError("position is 1-based")
        self.position = position

    def locate(self, soup: BeautifulSoup) -> List[Tag]:
        blocks = paragraph_blocks(soup)
        if len(blocks) < self.position:
            raise TableNotFound(f"expected at least {self.position} <p> blocks under <body>, found {len(blocks)}")
        block = blocks[self.position - 1]
        tables = _own(block, "table")
        # Rows may sit directly in the block when the <table> wrapper is missing
        rows = tables[0].find_all("tr") if tables else _own(block, "tr")
        if not rows:
            raise TableNotFound(f"<p> block #{self.position} under <body> contains no table rows")
        return rows


DEFAULT_LOCATOR = ParagraphTableLocator()


def parse_html(html: str) -> BeautifulSoup:
    # html.parser keeps <table> inside <p> as written
    return BeautifulSoup(html, "html.parser")


def extract_score(text: str) -> Optional[float]:
    m = _NUMBER.search(text)
    if not m:
        return None
    value = float(m.group(0))
    if not math.isfinite(value) or value < 0:
        return None
    return value


def is_reference_name(text: str) -> bool:
    return bool(_REFERENCE_MARKER.search(text))


def _name_text(cell: Tag) -> str:
    link = cell.find("a")
    return (link or cell).get_text().strip()


def iter_entries(
    rows: List[Tag],
    source_label: str,
    aliases: AliasTable,
    diagnostics: List[Diagnostic],
) -> Iterator[Entry]:
    """Yield one Entry per well-formed row, in table order.

    Rows need a rank, name and score cell. Anything else is skipped and
    appended to ``diagnostics`` as ``row_skipped``; no row aborts the file.
    """

    def skip(row_index: int, reason: str, name: Optional[str] = None) -> None:
        logger.warning("%s: skipping row %d: %s", source_label, row_index, reason)
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.ROW_SKIPPED,
                source_label=source_label,
                message=reason,
                row_index=row_index,
                name=name,
            )
        )

    for row_index, tr in enumerate(rows):
        cells = tr.find_all("td")
        if len(cells) < 3:
            # header rows made of <th> end up here too
            if cells:
                skip(row_index, f"expected rank, name and score cells, found {len(cells)}")
            else:
                logger.debug("%s: row %d has no data cells", source_label, row_index)
            continue

        raw_name = _name_text(cells[1])
        if not raw_name:
            skip(row_index, "empty name cell")
            continue

        score = extract_score(cells[2].get_text())
        if score is None:
            skip(row_index, "no usable number in score cell", name=raw_name)
            continue

        yield Entry(
            row_index=row_index,
            raw_name=raw_name,
            canonical_name=aliases.resolve(raw_name),
            raw_score=score,
            is_reference=is_reference_name(cells[1].get_text()),
        )
