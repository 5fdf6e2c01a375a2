from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import Font, PatternFill

from .config import InputDiscoveryConfig
from .report import FLOAT_FORMAT

log = logging.getLogger(__name__)

RED_FILL = PatternFill(start_color="FFFF0000", end_color="FFFF0000", fill_type="solid")
BOLD = Font(bold=True)

CSV_FILENAMES = {
    "regional_efficiency": "report1_regional_summary.csv",
    "contractor_ranking": "report2_contractor_ranking.csv",
    "annual_trends": "report3_annual_trends.csv",
}
SUMMARY_FILENAME = "summary.json"

SHEET_NAMES = {
    "regional_efficiency": "Regional_Efficiency",
    "contractor_ranking": "Contractor_Ranking",
    "annual_trends": "Annual_Trends",
}
SUMMARY_SHEET = "Summary"


def _pick_newest(paths: List[Path]) -> Path:
    if not paths:
        raise FileNotFoundError("No matching files found.")
    return max(paths, key=lambda p: p.stat().st_mtime)


def discover_dataset(input_dir: str | Path, disco: InputDiscoveryConfig) -> Path:
    """
    Find the dataset CSV.

    Looks in:
      1) input_dir
      2) input_dir / "data"   (project convention)
    When several files match, the newest one wins.
    """
    input_dir = Path(input_dir).expanduser().resolve()
    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    candidates = [p for p in input_dir.glob(disco.dataset_glob) if p.is_file()]
    data_dir = input_dir / "data"
    if not candidates and data_dir.exists():
        candidates = [p for p in data_dir.glob(disco.dataset_glob) if p.is_file()]

    if not candidates:
        raise FileNotFoundError(
            f"No dataset found in {input_dir} (or {data_dir}) with pattern: {disco.dataset_glob}"
        )

    dataset = _pick_newest(candidates)
    if len(candidates) > 1:
        log.info("Found %s datasets, using newest: %s", len(candidates), dataset.name)
    return dataset


def write_csv_reports(tables: Mapping[str, pd.DataFrame], output_dir: str | Path) -> Dict[str, Path]:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: Dict[str, Path] = {}
    for key, filename in CSV_FILENAMES.items():
        path = output_dir / filename
        tables[key].to_csv(path, index=False, float_format=FLOAT_FORMAT)
        written[key] = path
        log.info("Wrote %s (%s rows)", path, len(tables[key]))
    return written


def write_summary_json(summary: Mapping[str, object], output_dir: str | Path) -> Path:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / SUMMARY_FILENAME
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(dict(summary), fh, indent=2, ensure_ascii=False)
    log.info("Wrote %s", path)
    return path


def write_workbook(tables: Mapping[str, pd.DataFrame], summary: Mapping[str, object],
                   output_xlsx_path: str | Path) -> Path:
    """One sheet per report plus a two-column Summary sheet."""
    output_xlsx_path = Path(output_xlsx_path)
    output_xlsx_path.parent.mkdir(parents=True, exist_ok=True)

    summary_df = pd.DataFrame(list(summary.items()), columns=["Metric", "Value"])

    with pd.ExcelWriter(output_xlsx_path, engine="openpyxl") as writer:
        summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
        for key, sheet in SHEET_NAMES.items():
            tables[key].to_excel(writer, sheet_name=sheet, index=False, float_format=FLOAT_FORMAT)

    # After the file is saved and closed:
    apply_red_highlights(output_xlsx_path, SHEET_NAMES["contractor_ranking"],
                         column="RiskFlag", value="High Risk")
    log.info("Wrote %s", output_xlsx_path)
    return output_xlsx_path


def apply_red_highlights(output_xlsx_path: str | Path, sheet_name: str, column: str, value: str) -> int:
    """
    Fill every data row of `sheet_name` whose `column` cell equals `value` in red,
    and bold the header row. Returns the number of highlighted rows.
    """
    wb = load_workbook(output_xlsx_path)
    if sheet_name not in wb.sheetnames:
        wb.close()
        return 0
    ws = wb[sheet_name]

    header = [c.value for c in ws[1]]
    for cell in ws[1]:
        cell.font = BOLD
    if column not in header:
        wb.save(output_xlsx_path)
        return 0
    col_idx = header.index(column) + 1

    highlighted = 0
    for row in ws.iter_rows(min_row=2):
        if row[col_idx - 1].value == value:
            for cell in row:
                cell.fill = RED_FILL
            highlighted += 1

    wb.save(output_xlsx_path)
    return highlighted
