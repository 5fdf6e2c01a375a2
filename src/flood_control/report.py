from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from .config import AnalysisConfig
from .models import (
    AnalysisSummary,
    AnnualTrendRow,
    ContractorRankingRow,
    IngestionResult,
    RegionalEfficiencyRow,
)
from .utils import round_half_up, truncate_label

FLOAT_FORMAT = "%.2f"

REGIONAL_RENAME_MAP = {
    "region": "Region",
    "main_island": "MainIsland",
    "total_budget": "TotalBudget",
    "median_savings": "MedianSavings",
    "avg_delay": "AvgDelay",
    "high_delay_pct": "HighDelayPct",
    "efficiency_score": "EfficiencyScore",
}

CONTRACTOR_RENAME_MAP = {
    "rank": "Rank",
    "contractor": "Contractor",
    "total_cost": "TotalCost",
    "num_projects": "NumProjects",
    "avg_delay": "AvgDelay",
    "total_savings": "TotalSavings",
    "reliability_index": "ReliabilityIndex",
    "risk_flag": "RiskFlag",
}

TREND_RENAME_MAP = {
    "funding_year": "FundingYear",
    "type_of_work": "TypeOfWork",
    "total_projects": "TotalProjects",
    "avg_savings": "AvgSavings",
    "overrun_rate": "OverrunRate",
    "yoy_change": "YoYChange",
}

# Console column widths for long category labels
LABEL_WIDTHS = {
    "Region": 20,
    "MainIsland": 15,
    "Contractor": 40,
    "TypeOfWork": 45,
}


def _rows_to_frame(rows: Sequence, rename_map: Dict[str, str]) -> pd.DataFrame:
    # Empty reports still carry the full header row.
    records = [r.to_record() for r in rows]
    out = pd.DataFrame.from_records(records, columns=list(rename_map))
    return out.rename(columns=rename_map)


def regional_to_frame(rows: Sequence[RegionalEfficiencyRow]) -> pd.DataFrame:
    return _rows_to_frame(rows, REGIONAL_RENAME_MAP)


def contractor_to_frame(rows: Sequence[ContractorRankingRow]) -> pd.DataFrame:
    return _rows_to_frame(rows, CONTRACTOR_RENAME_MAP)


def trends_to_frame(rows: Sequence[AnnualTrendRow]) -> pd.DataFrame:
    return _rows_to_frame(rows, TREND_RENAME_MAP)


def summary_to_dict(summary: AnalysisSummary) -> Dict[str, object]:
    """Flat key -> value mapping; floats rounded half-up to 2 decimals."""
    out: Dict[str, object] = {}
    for k, v in summary.to_record().items():
        out[k] = round_half_up(v, 2) if isinstance(v, float) else v
    return out


def load_status_line(ingestion: IngestionResult, analyzed_count: int, cfg: AnalysisConfig) -> str:
    if ingestion.failed:
        return f"ERROR: dataset could not be read ({ingestion.source_error})"
    return (
        f"{ingestion.rows_read} rows read, {ingestion.rows_accepted} accepted, "
        f"{ingestion.rows_rejected} rejected, {analyzed_count} in {cfg.year_range_label}"
    )


def render_console_table(df: pd.DataFrame, title: str, subtitle: str = "", width: int = 130) -> str:
    view = df.copy()
    for col, w in LABEL_WIDTHS.items():
        if col in view.columns:
            view[col] = view[col].map(lambda s, w=w: truncate_label(s, w))

    rule = "-" * width
    if view.empty:
        body = "(no rows)"
    else:
        body = view.to_string(index=False, float_format=lambda v: f"{v:,.2f}")

    lines: List[str] = [rule, title]
    if subtitle:
        lines.append(subtitle)
    lines.extend([rule, body, rule])
    return "\n".join(lines)


def render_all_reports(tables: Dict[str, pd.DataFrame], cfg: AnalysisConfig) -> str:
    sections = [
        render_console_table(
            tables["regional_efficiency"],
            "Report 1: Regional Flood Mitigation Efficiency Summary",
            f"(Filtered: {cfg.year_range_label} Projects)",
        ),
        render_console_table(
            tables["contractor_ranking"],
            "Report 2: Top Contractors Performance Ranking",
            f"(Top {cfg.contractor_report_size} by Total Contract Cost, "
            f">={cfg.min_contractor_projects} Projects)",
            width=140,
        ),
        render_console_table(
            tables["annual_trends"],
            "Report 3: Annual Project Type Cost Overrun Trends",
            "(Grouped by FundingYear and TypeOfWork)",
            width=120,
        ),
    ]
    return "\n\n".join(sections)
