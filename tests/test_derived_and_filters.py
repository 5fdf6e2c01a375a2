"""
Tests for derived per-project metrics and the funding-year filter.
"""
from datetime import date

from flood_control.derived import completion_delay_days, cost_savings
from flood_control.filters import filter_by_year

from conftest import make_record


class TestCostSavings:

    def test_exact_difference(self):
        rec = make_record(approved_budget=1500.25, contract_cost=1200.75)
        assert rec.cost_savings == 1500.25 - 1200.75

    def test_overrun_is_negative(self):
        assert cost_savings(1000.0, 1250.0) == -250.0

    def test_idempotent(self):
        rec = make_record(approved_budget=987654.32, contract_cost=123456.78)
        assert rec.cost_savings == rec.cost_savings
        assert rec.cost_savings == cost_savings(rec.approved_budget, rec.contract_cost)


class TestCompletionDelay:

    def test_whole_days(self):
        assert completion_delay_days(date(2022, 1, 1), date(2022, 3, 1)) == 59

    def test_early_completion_is_negative(self):
        assert completion_delay_days(date(2022, 1, 10), date(2022, 1, 1)) == -9

    def test_same_day_is_zero(self):
        assert completion_delay_days(date(2022, 1, 1), date(2022, 1, 1)) == 0

    def test_missing_date_propagates(self):
        assert completion_delay_days(None, date(2022, 1, 1)) is None
        assert completion_delay_days(date(2022, 1, 1), None) is None
        assert make_record(delay=None).completion_delay_days is None

    def test_record_property_matches_function(self):
        rec = make_record(delay=45)
        assert rec.completion_delay_days == 45
        assert rec.to_record()["completion_delay_days"] == 45


class TestFilterByYear:

    def test_inclusive_bounds(self):
        records = [make_record(funding_year=y, project_id=str(y)) for y in (2020, 2021, 2022, 2023, 2024)]
        kept = filter_by_year(records, 2021, 2023)
        assert [r.funding_year for r in kept] == [2021, 2022, 2023]
        assert all(2021 <= r.funding_year <= 2023 for r in kept)

    def test_absent_year_always_excluded(self):
        records = [make_record(funding_year=None), make_record(funding_year=2022)]
        kept = filter_by_year(records, 1900, 2100)
        assert len(kept) == 1
        assert kept[0].funding_year == 2022

    def test_input_not_mutated(self):
        records = [make_record(funding_year=2019), make_record(funding_year=2022)]
        before = list(records)
        kept = filter_by_year(records, 2021, 2023)
        assert records == before
        assert isinstance(kept, tuple)

    def test_empty(self):
        assert filter_by_year([], 2021, 2023) == ()
