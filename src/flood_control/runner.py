from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .aggregations import (
    build_annual_trends,
    build_contractor_ranking,
    build_regional_efficiency,
    build_summary,
)
from .cleaning import ingest_file, ingest_lines
from .config import AnalysisConfig
from .filters import filter_by_year
from .models import (
    AnalysisSummary,
    AnnualTrendRow,
    ContractorRankingRow,
    IngestionResult,
    ProjectRecord,
    RegionalEfficiencyRow,
)
from .report import contractor_to_frame, regional_to_frame, summary_to_dict, trends_to_frame

log = logging.getLogger(__name__)


@dataclass
class AnalysisOutput:
    ingestion: IngestionResult
    analyzed: Tuple[ProjectRecord, ...]
    summary: AnalysisSummary
    regional_efficiency: List[RegionalEfficiencyRow] = field(default_factory=list)
    contractor_ranking: List[ContractorRankingRow] = field(default_factory=list)
    annual_trends: List[AnnualTrendRow] = field(default_factory=list)

    def tables(self) -> Dict[str, pd.DataFrame]:
        return {
            "regional_efficiency": regional_to_frame(self.regional_efficiency),
            "contractor_ranking": contractor_to_frame(self.contractor_ranking),
            "annual_trends": trends_to_frame(self.annual_trends),
        }

    def summary_dict(self) -> Dict[str, object]:
        return summary_to_dict(self.summary)


def analyze(ingestion: IngestionResult, cfg: Optional[AnalysisConfig] = None) -> AnalysisOutput:
    """
    Filter an ingestion result to the configured year range and build every report.
    A failed ingestion yields empty reports; aggregation is not attempted.
    """
    cfg = (cfg or AnalysisConfig()).validate()

    if ingestion.failed:
        log.warning("Skipping aggregation: %s", ingestion.source_error)
        return AnalysisOutput(
            ingestion=ingestion,
            analyzed=(),
            summary=build_summary(ingestion, (), cfg),
        )

    analyzed = filter_by_year(ingestion.records, cfg.year_from, cfg.year_to)
    log.info("%s of %s accepted records fall in %s",
             len(analyzed), ingestion.rows_accepted, cfg.year_range_label)

    return AnalysisOutput(
        ingestion=ingestion,
        analyzed=analyzed,
        summary=build_summary(ingestion, analyzed, cfg),
        regional_efficiency=build_regional_efficiency(analyzed, cfg),
        contractor_ranking=build_contractor_ranking(analyzed, cfg),
        annual_trends=build_annual_trends(analyzed, cfg),
    )


def run_analysis(dataset_file: str | Path, cfg: Optional[AnalysisConfig] = None) -> AnalysisOutput:
    cfg = (cfg or AnalysisConfig()).validate()
    ingestion = ingest_file(dataset_file, cfg)
    return analyze(ingestion, cfg)


def run_analysis_on_lines(lines: Iterable[str], cfg: Optional[AnalysisConfig] = None,
                          source: str = "") -> AnalysisOutput:
    cfg = (cfg or AnalysisConfig()).validate()
    return analyze(ingest_lines(lines, cfg, source=source), cfg)
