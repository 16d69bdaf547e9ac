from enum import Enum
from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field


def standardize(raw_score: float, baseline: Optional[float]) -> Optional[float]:
    if baseline is None:
        return None
    return raw_score / baseline * 100


class Entry(BaseModel):
    model_config = ConfigDict(frozen=True)

    row_index: int  # position among the table's <tr> rows
    raw_name: str
    canonical_name: str
    raw_score: float = Field(ge=0, allow_inf_nan=False)
    is_reference: bool = False


class DiagnosticKind(str, Enum):
    ROW_SKIPPED = "row_skipped"
    NO_BASELINE = "no_baseline"
    DUPLICATE_NAME_IN_FILE = "duplicate_name_in_file"
    ALIAS_MISMATCH = "alias_mismatch"
    FILE_REPLACED = "file_replaced"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    source_label: str
    message: str
    row_index: Optional[int] = None
    name: Optional[str] = None


class FileResult(BaseModel):
    source_label: str
    entries: List[Entry]
    baseline: Optional[float] = None  # None when the file has no non-reference rows
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    def standardized_score(self, entry: Entry) -> Optional[float]:
        return standardize(entry.raw_score, self.baseline)


class FileFailure(BaseModel):
    source_label: str
    reason: str


class FileScore(BaseModel):
    standardized_score: Optional[float] = None
    raw_score: float


class AggregateRow(BaseModel):
    canonical_name: str
    per_file: Dict[str, FileScore]  # source_label -> scores
    average_standardized_score: Optional[float] = None  # mean of defined per-file scores


class Aggregate(BaseModel):
    file_order: List[str]
    rows: List[AggregateRow]
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    failures: List[FileFailure] = Field(default_factory=list)
