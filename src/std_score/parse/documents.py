from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from ..core.aggregate import aggregate
from ..core.aliases import AliasTable, default_aliases
from ..core.errors import DocumentDecodeError, ParseError
from ..core.models import Aggregate, Diagnostic, FileFailure, FileResult
from ..core.normalize import normalize_file
from .html_table import DEFAULT_LOCATOR, TableLocator, iter_entries, parse_html

logger = logging.getLogger(__name__)


class Document(BaseModel):
    source_label: str
    content: Union[bytes, str]


def _decode(doc: Document) -> str:
    if isinstance(doc.content, str):
        return doc.content
    try:
        return doc.content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentDecodeError(f"{doc.source_label} is not UTF-8 encoded: {exc}") from exc


def parse_document(
    doc: Document,
    aliases: Optional[AliasTable] = None,
    locator: Optional[TableLocator] = None,
) -> FileResult:
    """Locate, parse and normalize one document.

    Raises ParseError (TableNotFound, DocumentDecodeError) when the whole file
    has to be rejected.
    """
    if aliases is None:
        aliases = default_aliases()
    soup = parse_html(_decode(doc))
    rows = (locator or DEFAULT_LOCATOR).locate(soup)
    diagnostics: List[Diagnostic] = []
    entries = list(iter_entries(rows, doc.source_label, aliases, diagnostics))
    logger.info("%s: parsed %d entries (%d rows skipped)", doc.source_label, len(entries), len(diagnostics))
    return normalize_file(doc.source_label, entries, diagnostics)


def _parse_or_fail(
    doc: Document,
    aliases: AliasTable,
    locator: Optional[TableLocator],
) -> Tuple[Optional[FileResult], Optional[FileFailure]]:
    try:
        return parse_document(doc, aliases, locator), None
    except ParseError as exc:
        logger.warning("could not parse file %s: %s", doc.source_label, exc)
        return None, FileFailure(source_label=doc.source_label, reason=str(exc))


def process_documents(
    documents: Iterable[Document],
    aliases: Optional[AliasTable] = None,
    locator: Optional[TableLocator] = None,
    max_workers: Optional[int] = None,
) -> Aggregate:
    """Parse every document in parallel, then fold the results in input order.

    A rejected file is reported in ``Aggregate.failures`` and does not stop
    the others.
    """
    if aliases is None:
        aliases = default_aliases()
    docs: Sequence[Document] = list(documents)
    if not docs:
        return aggregate([], aliases)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        outcomes = list(executor.map(lambda d: _parse_or_fail(d, aliases, locator), docs))

    results = [r for r, _ in outcomes if r is not None]
    failures = [f for _, f in outcomes if f is not None]
    return aggregate(results, aliases, failures=failures)
