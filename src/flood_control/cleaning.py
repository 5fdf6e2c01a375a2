from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import AnalysisConfig
from .models import IngestionResult, ProjectRecord, RawRow, RejectReason
from .parsing import has_min_columns, iter_raw_rows
from .utils import normalize_text, parse_amount, parse_iso_date, parse_year, text_or_default

log = logging.getLogger(__name__)


def _field(row: RawRow, idx: int) -> str:
    return row.fields[idx]


def clean_row(row: RawRow, cfg: AnalysisConfig) -> Tuple[Optional[ProjectRecord], Optional[RejectReason]]:
    """
    Coerce one raw row into a ProjectRecord.

    Returns (record, None) on acceptance and (None, reason) on rejection.
    Only the two monetary fields can reject a row; dates and funding year
    degrade to None when blank or malformed.
    """
    if not has_min_columns(row, cfg):
        return None, RejectReason.TOO_FEW_COLUMNS

    approved_budget = parse_amount(_field(row, cfg.approved_budget_col_idx))
    if approved_budget is None:
        return None, RejectReason.INVALID_APPROVED_BUDGET

    contract_cost = parse_amount(_field(row, cfg.contract_cost_col_idx))
    if contract_cost is None:
        return None, RejectReason.INVALID_CONTRACT_COST

    if approved_budget < 0 or contract_cost < 0:
        return None, RejectReason.NEGATIVE_AMOUNT

    labels = cfg.unknown_labels
    record = ProjectRecord(
        project_id=normalize_text(_field(row, cfg.project_id_col_idx)),
        approved_budget=approved_budget,
        contract_cost=contract_cost,
        completion_date=parse_iso_date(_field(row, cfg.completion_date_col_idx), cfg.date_format),
        start_date=parse_iso_date(_field(row, cfg.start_date_col_idx), cfg.date_format),
        funding_year=parse_year(_field(row, cfg.funding_year_col_idx)),
        region=text_or_default(_field(row, cfg.region_col_idx), labels["region"]),
        main_island=text_or_default(_field(row, cfg.main_island_col_idx), labels["main_island"]),
        province=text_or_default(_field(row, cfg.province_col_idx), labels["province"]),
        contractor=text_or_default(_field(row, cfg.contractor_col_idx), labels["contractor"]),
        type_of_work=text_or_default(_field(row, cfg.type_of_work_col_idx), labels["type_of_work"]),
    )
    return record, None


def ingest_lines(lines: Iterable[str], cfg: Optional[AnalysisConfig] = None, source: str = "") -> IngestionResult:
    """
    Run every data line through the parser and cleaner.

    A single bad row never aborts ingestion: it is dropped and counted.
    """
    cfg = cfg or AnalysisConfig()

    records: List[ProjectRecord] = []
    reasons: Counter = Counter()
    rows_read = 0
    blank_rows = 0

    for row in iter_raw_rows(lines, cfg):
        rows_read += 1
        if row.blank:
            blank_rows += 1
            continue

        try:
            record, reason = clean_row(row, cfg)
        except Exception as e:
            log.debug("Row %s: unexpected error %r", row.row_number, e)
            record, reason = None, RejectReason.UNEXPECTED_ERROR

        if record is None:
            reasons[reason.value] += 1
            log.debug("Row %s rejected: %s", row.row_number, reason.value)
            continue
        records.append(record)

    rejected = sum(reasons.values())
    log.info(
        "Ingested %s: %s rows read, %s accepted, %s rejected, %s blank",
        source or "<lines>", rows_read, len(records), rejected, blank_rows,
    )
    return IngestionResult(
        records=tuple(records),
        rows_read=rows_read,
        rows_rejected=rejected,
        blank_rows=blank_rows,
        rejection_reasons=dict(reasons),
        source=source,
    )


def ingest_file(path: str | Path, cfg: Optional[AnalysisConfig] = None) -> IngestionResult:
    """
    Ingest a dataset file. An unreadable source is the only fatal case: it is
    logged once and returned as an empty result with `source_error` set.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig") as fh:
            lines = fh.readlines()
    except (OSError, UnicodeDecodeError) as e:
        log.error("Cannot read dataset %s: %s", path, e)
        return IngestionResult(source=path.name, source_error=f"{type(e).__name__}: {e}")

    return ingest_lines(lines, cfg, source=path.name)
