"""
Shared builders for dataset lines and records.
"""
from __future__ import annotations

from datetime import date
from typing import List, Optional

import pytest

from flood_control.config import AnalysisConfig
from flood_control.models import ProjectRecord

HEADER = [
    "MainIsland", "Region", "Province", "LegislativeDistrict", "Municipality",
    "DistrictEngineeringOffice", "ProjectId", "ProjectName", "TypeOfWork", "FundingYear",
    "ContractId", "ApprovedBudgetForContract", "ContractCost", "ActualCompletionDate",
    "Contractor", "CompletionYear", "StartDate", "ProjectLatitude", "ProjectLongitude",
    "ProvincialCapital", "ProvincialCapitalLatitude", "ProvincialCapitalLongitude",
]


def _quote(value: str) -> str:
    if "," in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def make_line(
    *,
    main_island: str = "Luzon",
    region: str = "Region I",
    province: str = "Ilocos Norte",
    project_id: str = "P-0001",
    type_of_work: str = "Construction of Flood Mitigation Structure",
    funding_year: str = "2022",
    approved_budget: str = "1000.00",
    contract_cost: str = "900.00",
    completion_date: str = "2022-03-31",
    contractor: str = "ABC Builders",
    start_date: str = "2022-03-01",
) -> str:
    fields = [
        main_island, region, province, "1st District", "Laoag City",
        "Ilocos Norte 1st DEO", project_id, "Flood wall, Brgy. 1", type_of_work, funding_year,
        "C-0001", approved_budget, contract_cost, completion_date,
        contractor, "2022", start_date, "18.19", "120.59",
        "Laoag City", "18.19", "120.59",
    ]
    return ",".join(_quote(f) for f in fields)


def make_lines(*rows: str) -> List[str]:
    return [",".join(HEADER)] + list(rows)


def make_record(
    *,
    approved_budget: float = 1000.0,
    contract_cost: float = 900.0,
    delay: Optional[int] = 30,
    funding_year: Optional[int] = 2022,
    region: str = "Region I",
    main_island: str = "Luzon",
    province: str = "Ilocos Norte",
    contractor: str = "ABC Builders",
    type_of_work: str = "Flood Wall",
    project_id: str = "P-0001",
) -> ProjectRecord:
    start = date(2022, 1, 1)
    completion = date.fromordinal(start.toordinal() + delay) if delay is not None else None
    return ProjectRecord(
        project_id=project_id,
        approved_budget=approved_budget,
        contract_cost=contract_cost,
        start_date=start if delay is not None else None,
        completion_date=completion,
        funding_year=funding_year,
        region=region,
        main_island=main_island,
        province=province,
        contractor=contractor,
        type_of_work=type_of_work,
    )


@pytest.fixture()
def cfg() -> AnalysisConfig:
    return AnalysisConfig()
