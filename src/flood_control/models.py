from __future__ import annotations

from dataclasses import dataclass, asdict, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from .derived import completion_delay_days, cost_savings


class RiskFlag(str, Enum):
    HIGH = "High Risk"
    LOW = "Low Risk"


class RejectReason(str, Enum):
    TOO_FEW_COLUMNS = "too_few_columns"
    INVALID_APPROVED_BUDGET = "invalid_approved_budget"
    INVALID_CONTRACT_COST = "invalid_contract_cost"
    NEGATIVE_AMOUNT = "negative_amount"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class RawRow:
    row_number: int              # 1-based, header excluded
    fields: Tuple[str, ...] = ()
    blank: bool = False


@dataclass(frozen=True)
class ProjectRecord:
    # --- required ---
    project_id: str
    approved_budget: float
    contract_cost: float

    # --- optional ---
    start_date: Optional[date] = None
    completion_date: Optional[date] = None
    funding_year: Optional[int] = None

    # --- categorical (never blank, see AnalysisConfig.unknown_labels) ---
    region: str = "Unknown Region"
    main_island: str = "Unknown Island"
    province: str = "Unknown Province"
    contractor: str = "Unknown Contractor"
    type_of_work: str = "Unknown Type of Work"

    @property
    def cost_savings(self) -> float:
        return cost_savings(self.approved_budget, self.contract_cost)

    @property
    def completion_delay_days(self) -> Optional[int]:
        return completion_delay_days(self.start_date, self.completion_date)

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["cost_savings"] = self.cost_savings
        rec["completion_delay_days"] = self.completion_delay_days
        return rec


@dataclass(frozen=True)
class IngestionResult:
    records: Tuple[ProjectRecord, ...] = ()
    rows_read: int = 0
    rows_rejected: int = 0
    blank_rows: int = 0
    rejection_reasons: Dict[str, int] = field(default_factory=dict)
    source: str = ""
    source_error: Optional[str] = None

    @property
    def rows_accepted(self) -> int:
        return len(self.records)

    @property
    def failed(self) -> bool:
        return self.source_error is not None


# =============================================================================
# Report rows
# =============================================================================

@dataclass
class RegionalEfficiencyRow:
    region: str
    main_island: str
    total_budget: float
    median_savings: float
    avg_delay: float
    high_delay_pct: float
    efficiency_score: float

    def to_record(self) -> dict:
        return asdict(self)


@dataclass
class ContractorRankingRow:
    rank: int
    contractor: str
    total_cost: float
    num_projects: int
    avg_delay: float
    total_savings: float
    reliability_index: float
    risk_flag: RiskFlag

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["risk_flag"] = self.risk_flag.value
        return rec


@dataclass
class AnnualTrendRow:
    funding_year: int
    type_of_work: str
    total_projects: int
    avg_savings: float
    overrun_rate: float
    yoy_change: float

    def to_record(self) -> dict:
        return asdict(self)


@dataclass
class AnalysisSummary:
    total_rows_read: int
    total_accepted: int
    total_rejected: int
    total_blank_rows: int
    total_projects_analyzed: int
    unique_contractors: int
    unique_regions: int
    unique_provinces: int
    global_avg_delay: float
    total_savings_analyzed: float
    total_budget_analyzed: float
    year_from: int
    year_to: int

    def to_record(self) -> dict:
        return asdict(self)
