"""
Grouped analytics over the year-filtered project set.

Every report follows the same shape: group records by a key (groups keep
first-appearance order), compute per-group metrics, drop groups that cannot
be scored, then apply a stable sort.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .config import AnalysisConfig
from .models import (
    AnalysisSummary,
    AnnualTrendRow,
    ContractorRankingRow,
    IngestionResult,
    ProjectRecord,
    RegionalEfficiencyRow,
    RiskFlag,
)
from .utils import clamp, mean, median, pct

log = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "project_id",
    "region",
    "main_island",
    "province",
    "contractor",
    "type_of_work",
    "funding_year",
    "approved_budget",
    "contract_cost",
    "cost_savings",
    "completion_delay_days",
]


def records_to_frame(records: Sequence[ProjectRecord]) -> pd.DataFrame:
    """Flatten records (derived fields included) into a DataFrame with a fixed column set."""
    rows = [{c: rec[c] for c in FRAME_COLUMNS} for rec in (r.to_record() for r in records)]
    return pd.DataFrame.from_records(rows, columns=FRAME_COLUMNS)


def _delays(gdf: pd.DataFrame) -> List[float]:
    return [float(x) for x in gdf["completion_delay_days"].dropna().tolist()]


# =============================================================================
# Scores
# =============================================================================

def efficiency_score(median_savings: float, avg_delay: float) -> float:
    """
    0-100 regional score. On-time or early delivery (avg_delay <= 0) scores 100
    only if the median project came in under budget, otherwise 0.
    """
    if avg_delay <= 0:
        return 100.0 if median_savings > 0 else 0.0
    return clamp((median_savings / avg_delay) * 100.0, 0.0, 100.0)


def reliability_index(total_cost: float, total_savings: float, avg_delay: float,
                      delay_penalty_days: float = 90.0) -> float:
    delay_factor = clamp(1.0 - (avg_delay / delay_penalty_days), 0.0, 1.0)
    savings_factor = (total_savings / total_cost) if total_cost > 0 else 0.0
    return clamp(delay_factor * savings_factor * 100.0, 0.0, 100.0)


def yoy_change(avg_savings: float, baseline_avg_savings: Optional[float],
               year: int, baseline_year: int) -> float:
    """Percent change of avg savings against the baseline year for the same work type."""
    if year <= baseline_year or baseline_avg_savings is None or baseline_avg_savings == 0:
        return 0.0
    return ((avg_savings - baseline_avg_savings) / abs(baseline_avg_savings)) * 100.0


# =============================================================================
# Report 1: regional efficiency
# =============================================================================

def build_regional_efficiency(records: Sequence[ProjectRecord],
                              cfg: Optional[AnalysisConfig] = None) -> List[RegionalEfficiencyRow]:
    cfg = cfg or AnalysisConfig()
    df = records_to_frame(records)

    rows: List[RegionalEfficiencyRow] = []
    for (region, main_island), gdf in df.groupby(["region", "main_island"], sort=False):
        delays = _delays(gdf)
        avg_delay = mean(delays)
        if avg_delay is None:
            log.debug("Region %s / %s skipped: no project with both dates", region, main_island)
            continue

        median_savings = median(gdf["cost_savings"].tolist())
        high_delay = sum(1 for d in delays if d > cfg.high_delay_threshold_days)

        rows.append(RegionalEfficiencyRow(
            region=str(region),
            main_island=str(main_island),
            total_budget=float(gdf["approved_budget"].sum()),
            median_savings=median_savings,
            avg_delay=avg_delay,
            high_delay_pct=pct(high_delay, len(delays)),
            efficiency_score=efficiency_score(median_savings, avg_delay),
        ))

    rows.sort(key=lambda r: -r.efficiency_score)
    log.info("Regional efficiency: %s groups", len(rows))
    return rows


# =============================================================================
# Report 2: contractor ranking
# =============================================================================

def build_contractor_ranking(records: Sequence[ProjectRecord],
                             cfg: Optional[AnalysisConfig] = None) -> List[ContractorRankingRow]:
    cfg = cfg or AnalysisConfig()
    df = records_to_frame(records)
    df = df[df["completion_delay_days"].notna()]

    rows: List[ContractorRankingRow] = []
    for contractor, gdf in df.groupby("contractor", sort=False):
        num_projects = len(gdf)
        if num_projects < cfg.min_contractor_projects:
            continue

        total_cost = float(gdf["contract_cost"].sum())
        total_savings = float(gdf["cost_savings"].sum())
        avg_delay = mean(_delays(gdf))
        index = reliability_index(total_cost, total_savings, avg_delay, cfg.delay_penalty_days)

        rows.append(ContractorRankingRow(
            rank=0,
            contractor=str(contractor),
            total_cost=total_cost,
            num_projects=num_projects,
            avg_delay=avg_delay,
            total_savings=total_savings,
            reliability_index=index,
            risk_flag=RiskFlag.HIGH if index < cfg.reliability_risk_threshold else RiskFlag.LOW,
        ))

    rows.sort(key=lambda r: -r.total_cost)
    rows = rows[: cfg.contractor_report_size]
    for i, row in enumerate(rows, start=1):
        row.rank = i

    log.info("Contractor ranking: %s contractors with >= %s projects",
             len(rows), cfg.min_contractor_projects)
    return rows


# =============================================================================
# Report 3: annual trends
# =============================================================================

def build_annual_trends(records: Sequence[ProjectRecord],
                        cfg: Optional[AnalysisConfig] = None) -> List[AnnualTrendRow]:
    cfg = cfg or AnalysisConfig()
    df = records_to_frame(records)
    df = df[df["funding_year"].notna()]

    rows: List[AnnualTrendRow] = []
    for (year, type_of_work), gdf in df.groupby(["funding_year", "type_of_work"], sort=False):
        savings = [float(x) for x in gdf["cost_savings"].tolist()]
        overruns = sum(1 for s in savings if s < 0)
        rows.append(AnnualTrendRow(
            funding_year=int(year),
            type_of_work=str(type_of_work),
            total_projects=len(savings),
            avg_savings=mean(savings),
            overrun_rate=pct(overruns, len(savings)),
            yoy_change=0.0,
        ))

    baseline: Dict[str, float] = {
        r.type_of_work: r.avg_savings for r in rows if r.funding_year == cfg.baseline_year
    }
    for r in rows:
        r.yoy_change = yoy_change(r.avg_savings, baseline.get(r.type_of_work),
                                  r.funding_year, cfg.baseline_year)

    rows.sort(key=lambda r: (r.funding_year, -r.avg_savings))
    log.info("Annual trends: %s (year, type of work) groups", len(rows))
    return rows


# =============================================================================
# Summary
# =============================================================================

def build_summary(ingestion: IngestionResult, analyzed: Sequence[ProjectRecord],
                  cfg: Optional[AnalysisConfig] = None) -> AnalysisSummary:
    """
    Row counts come from the full ingestion; every other figure is computed
    over the analyzed (year-filtered) records.
    """
    cfg = cfg or AnalysisConfig()
    delays = [r.completion_delay_days for r in analyzed if r.completion_delay_days is not None]
    global_avg_delay = mean(delays)

    return AnalysisSummary(
        total_rows_read=ingestion.rows_read,
        total_accepted=ingestion.rows_accepted,
        total_rejected=ingestion.rows_rejected,
        total_blank_rows=ingestion.blank_rows,
        total_projects_analyzed=len(analyzed),
        unique_contractors=len({r.contractor for r in analyzed}),
        unique_regions=len({r.region for r in analyzed}),
        unique_provinces=len({r.province for r in analyzed}),
        global_avg_delay=global_avg_delay if global_avg_delay is not None else 0.0,
        total_savings_analyzed=float(sum(r.cost_savings for r in analyzed)),
        total_budget_analyzed=float(sum(r.approved_budget for r in analyzed)),
        year_from=cfg.year_from,
        year_to=cfg.year_to,
    )
