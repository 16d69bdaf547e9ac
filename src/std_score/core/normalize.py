from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .models import Diagnostic, DiagnosticKind, Entry, FileResult

logger = logging.getLogger(__name__)


def compute_baseline(entries: Iterable[Entry]) -> Optional[float]:
    """Highest raw score among non-reference entries.

    Reference rows never count, even when they outscore everyone. Returns None
    when there is no non-reference entry, or when the best score is 0 (nothing
    to divide by).
    """
    best = max((e.raw_score for e in entries if not e.is_reference), default=None)
    if not best:
        return None
    return best


def normalize_file(
    source_label: str,
    entries: Iterable[Entry],
    diagnostics: Optional[List[Diagnostic]] = None,
) -> FileResult:
    """Build the FileResult for one file, recording a missing baseline."""
    entries = list(entries)
    diagnostics = list(diagnostics or [])
    baseline = compute_baseline(entries)
    if baseline is None:
        message = "no non-reference row with a positive score; standardized scores undefined"
        logger.warning("%s: %s", source_label, message)
        diagnostics.append(
            Diagnostic(kind=DiagnosticKind.NO_BASELINE, source_label=source_label, message=message)
        )
    else:
        logger.debug("%s: baseline %.4g over %d entries", source_label, baseline, len(entries))
    return FileResult(source_label=source_label, entries=entries, baseline=baseline, diagnostics=diagnostics)
