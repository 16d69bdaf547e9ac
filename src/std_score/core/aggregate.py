import logging
from typing import Dict, Iterable, List, Optional

from .aliases import AliasTable, default_aliases
from .models import (
    Aggregate,
    AggregateRow,
    Diagnostic,
    DiagnosticKind,
    FileFailure,
    FileResult,
    FileScore,
)

logger = logging.getLogger(__name__)


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def aggregate(
    results: Iterable[FileResult],
    aliases: Optional[AliasTable] = None,
    failures: Iterable[FileFailure] = (),
) -> Aggregate:
    """
    Fold per-file results into one row per canonical name.

    Files are folded in the order given; a later result with an already seen
    source label replaces the earlier one but keeps its column position.
    Within one file, a second row resolving to the same canonical name
    overwrites the first and is reported as a diagnostic.
    Average: mean of the defined standardized scores only (None if there are none).
    """
    if aliases is None:
        aliases = default_aliases()
    diagnostics: List[Diagnostic] = []

    by_label: Dict[str, FileResult] = {}
    for result in results:
        label = result.source_label
        if label in by_label:
            message = "file loaded again; replacing the earlier copy"
            logger.warning("%s: %s", label, message)
            diagnostics.append(Diagnostic(kind=DiagnosticKind.FILE_REPLACED, source_label=label, message=message))
        by_label[label] = result

    # canonical name -> source label -> scores, in first-seen order
    table: Dict[str, Dict[str, FileScore]] = {}
    for label, result in by_label.items():
        diagnostics.extend(result.diagnostics)
        seen: Dict[str, int] = {}
        for entry in result.entries:
            name = aliases.resolve(entry.raw_name)
            if name != entry.canonical_name:
                message = f"{entry.raw_name!r} resolves to {name!r}, parsed as {entry.canonical_name!r}"
                logger.warning("%s: %s", label, message)
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.ALIAS_MISMATCH,
                        source_label=label,
                        message=message,
                        row_index=entry.row_index,
                        name=name,
                    )
                )
            if name in seen:
                message = f"{name!r} appears again (rows {seen[name]} and {entry.row_index}); keeping the later row"
                logger.warning("%s: %s", label, message)
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.DUPLICATE_NAME_IN_FILE,
                        source_label=label,
                        message=message,
                        row_index=entry.row_index,
                        name=name,
                    )
                )
            seen[name] = entry.row_index
            table.setdefault(name, {})[label] = FileScore(
                standardized_score=result.standardized_score(entry),
                raw_score=entry.raw_score,
            )

    rows: List[AggregateRow] = []
    for name, per_file in table.items():
        defined = [s.standardized_score for s in per_file.values() if s.standardized_score is not None]
        rows.append(AggregateRow(canonical_name=name, per_file=per_file, average_standardized_score=_mean(defined)))

    logger.debug("Aggregated %d names across %d files", len(rows), len(by_label))
    return Aggregate(
        file_order=list(by_label),
        rows=rows,
        diagnostics=diagnostics,
        failures=list(failures),
    )
