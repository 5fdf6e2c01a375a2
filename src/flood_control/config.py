from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class AnalysisConfig:
    # Analysis window (inclusive both ends)
    year_from: int = 2021
    year_to: int = 2023

    # Contractor ranking
    min_contractor_projects: int = 5
    contractor_report_size: int = 15
    delay_penalty_days: float = 90.0          # avg delay at which delay factor hits 0
    reliability_risk_threshold: float = 50.0  # below -> "High Risk"

    # Regional efficiency / trends (fixed by contract)
    high_delay_threshold_days: int = 30
    baseline_year: int = 2021

    # Raw input layout (0-based column indices)
    min_columns: int = 17
    delimiter: str = ","
    quote_char: str = '"'
    main_island_col_idx: int = 0
    region_col_idx: int = 1
    province_col_idx: int = 2
    project_id_col_idx: int = 6
    type_of_work_col_idx: int = 8
    funding_year_col_idx: int = 9
    approved_budget_col_idx: int = 11
    contract_cost_col_idx: int = 12
    completion_date_col_idx: int = 13
    contractor_col_idx: int = 14
    start_date_col_idx: int = 16

    date_format: str = "%Y-%m-%d"

    # Labels used when a categorical column is blank
    unknown_labels: Dict[str, str] = field(default_factory=lambda: {
        "region": "Unknown Region",
        "main_island": "Unknown Island",
        "province": "Unknown Province",
        "contractor": "Unknown Contractor",
        "type_of_work": "Unknown Type of Work",
    })

    def validate(self) -> "AnalysisConfig":
        if self.year_from > self.year_to:
            raise ValueError(f"Invalid year range: {self.year_from} > {self.year_to}")
        if self.min_contractor_projects < 1:
            raise ValueError(f"min_contractor_projects must be >= 1, got {self.min_contractor_projects}")
        if self.contractor_report_size < 1:
            raise ValueError(f"contractor_report_size must be >= 1, got {self.contractor_report_size}")
        if self.delay_penalty_days <= 0:
            raise ValueError(f"delay_penalty_days must be > 0, got {self.delay_penalty_days}")
        highest_idx = max(
            self.main_island_col_idx, self.region_col_idx, self.province_col_idx,
            self.project_id_col_idx, self.type_of_work_col_idx, self.funding_year_col_idx,
            self.approved_budget_col_idx, self.contract_cost_col_idx,
            self.completion_date_col_idx, self.contractor_col_idx, self.start_date_col_idx,
        )
        if self.min_columns <= highest_idx:
            raise ValueError(
                f"min_columns={self.min_columns} does not cover column index {highest_idx}"
            )
        return self

    @property
    def year_range_label(self) -> str:
        return f"{self.year_from}-{self.year_to}"


@dataclass(frozen=True)
class InputDiscoveryConfig:
    """
    File discovery defaults for 'dataset in the same folder'.
    """
    dataset_glob: str = "dpwh_flood_control_projects*.csv"
