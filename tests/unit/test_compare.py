"""Unit tests for the SEHI vs. ACA comparison engine.

Covers the wage-base rules for a >2% shareholder, the SEHI path, the
ACA path with its 400% FPL cliff, winner selection and the usage-tier
out-of-pocket projection.
"""

import pytest

from sehicalc.sdk.compare import (
    capital_loss_deduction,
    cliff_gap,
    compare_strategies,
    determine_winner,
    employee_box1_wages,
    out_of_pocket_cost,
    owner_box1_wages,
)
from sehicalc.sdk.inputs import default_inputs
from sehicalc.sdk.rules import load_coverage_rules
from sehicalc.sdk.schemas import CoverageRules, FinancialInputs, PayStub


@pytest.fixture
def rules():
    return load_coverage_rules(2026)


def single_earner(gross_pay: float, household_size: int = 1, **kwargs) -> FinancialInputs:
    """Owner-only household with no deductions unless given."""
    return FinancialInputs(
        s_corp_owner=PayStub(gross_pay=gross_pay),
        household_size=household_size,
        **kwargs,
    )


# === WAGE BASES ===


class TestBox1Wages:

    def test_owner_hsa_stays_in_box1(self):
        owner = PayStub(gross_pay=80000, pre_tax_401k=5000, hsa_contribution=3000)
        assert owner_box1_wages(owner) == 75000

    def test_spouse_hsa_is_pretax(self):
        spouse = PayStub(gross_pay=45000, pre_tax_401k=2500, hsa_contribution=1000)
        assert employee_box1_wages(spouse) == 41500

    def test_box1_floored_at_zero(self):
        assert owner_box1_wages(PayStub(gross_pay=1000, pre_tax_401k=5000)) == 0
        assert employee_box1_wages(PayStub(gross_pay=1000, hsa_contribution=4000)) == 0

    def test_capital_loss_capped(self):
        assert capital_loss_deduction(50000) == 3000
        assert capital_loss_deduction(1200) == 1200
        assert capital_loss_deduction(0) == 0


# === SAMPLE HOUSEHOLD ===


class TestSampleHousehold:
    """Owner 80k (401k 5k, HSA 3k), spouse 45k (401k 2.5k, HSA 1k), family of 3."""

    @pytest.fixture
    def result(self, rules):
        return compare_strategies(default_inputs(), rules)

    def test_scenario1(self, result):
        s1 = result.scenario1
        assert s1.total_w2 == 90000
        assert s1.initial_agi == 133500
        assert s1.deductible_sehi == 15000
        assert s1.final_agi == 118500
        assert s1.tax_savings == pytest.approx(3600)
        assert s1.net_cost == pytest.approx(11400)

    def test_scenario2_hits_cliff(self, result):
        s2 = result.scenario2
        assert s2.initial_agi == 118500
        assert s2.magi == 118500
        assert s2.poverty_level == 25820
        assert s2.fpl_percentage == pytest.approx(458.94, abs=0.01)
        assert s2.hit_cliff is True
        assert s2.subsidy == 0
        assert s2.net_cost == 15000

    def test_winner(self, result):
        assert result.winner == "Scenario 1"
        assert result.savings == pytest.approx(3600)
        assert result.coverage_year == 2026

    def test_usage_scenarios(self, result):
        low, medium, high = result.usage_scenarios.as_list()
        assert (low.label, medium.label, high.label) == ("Low", "Medium", "High")
        assert low.oop_cost == 1000
        assert medium.oop_cost == 10000
        assert high.oop_cost == 14200
        assert low.total_cost_scen1 == pytest.approx(12400)
        assert low.total_cost_scen2 == pytest.approx(16000)
        assert high.total_cost_scen1 == pytest.approx(25600)
        assert high.total_cost_scen2 == pytest.approx(29200)

    def test_cliff_gap(self, result):
        # MAGI 118500 vs cliff 4 x 25820 = 103280, plus $100 buffer
        assert result.scenario2.cliff_magi == 103280
        assert cliff_gap(result) == 15320


# === SCENARIO INVARIANTS ===


class TestScenario1:

    def test_net_cost_is_premium_less_savings(self, rules):
        inputs = single_earner(70000, annual_premium=12000, marginal_tax_rate=22)
        s1 = compare_strategies(inputs, rules).scenario1
        assert s1.tax_savings == pytest.approx(s1.deductible_sehi * 0.22)
        assert s1.net_cost == pytest.approx(inputs.annual_premium - s1.tax_savings)

    def test_premium_exceeding_wages_fully_deductible(self, rules):
        # W-2 includes the premium, so the SEHI limit is the premium itself
        inputs = single_earner(0, annual_premium=20000, marginal_tax_rate=10)
        s1 = compare_strategies(inputs, rules).scenario1
        assert s1.total_w2 == 20000
        assert s1.deductible_sehi == 20000
        assert s1.final_agi == 0

    def test_premium_increase_partially_offset(self, rules):
        base = single_earner(90000, marginal_tax_rate=32, estimated_subsidy=5000)
        previous = None
        for premium in (0, 5000, 10000, 20000, 40000):
            result = compare_strategies(base.model_copy(update={"annual_premium": premium}), rules)
            if previous is not None:
                prev_premium, prev_net1 = previous
                increase = premium - prev_premium
                assert result.scenario1.net_cost >= prev_net1
                assert result.scenario1.net_cost - prev_net1 <= increase
            assert result.scenario2.net_cost >= 0
            previous = (premium, result.scenario1.net_cost)


class TestScenario2:

    def test_subsidy_applied_below_cliff(self, rules):
        inputs = single_earner(50000, household_size=4, annual_premium=15000,
                               marginal_tax_rate=12, estimated_subsidy=12000)
        result = compare_strategies(inputs, rules)
        s2 = result.scenario2
        assert s2.poverty_level == 31200
        assert s2.fpl_percentage == pytest.approx(160.26, abs=0.01)
        assert s2.hit_cliff is False
        assert s2.subsidy == 12000
        assert s2.net_cost == 3000
        assert result.winner == "Scenario 2"
        assert result.savings == pytest.approx(10200)
        assert cliff_gap(result) is None

    def test_subsidy_larger_than_premium_floors_at_zero(self, rules):
        inputs = single_earner(20000, annual_premium=6000, estimated_subsidy=9000)
        assert compare_strategies(inputs, rules).scenario2.net_cost == 0

    def test_magi_add_backs(self, rules):
        inputs = single_earner(40000, tax_exempt_interest=2500, non_taxable_social_security=7500)
        s2 = compare_strategies(inputs, rules).scenario2
        assert s2.initial_agi == 40000
        assert s2.magi == 50000

    def test_magi_floored_at_zero(self, rules):
        inputs = FinancialInputs(
            s_corp_owner=PayStub(gross_pay=0, hsa_contribution=5000),
            capital_losses=10000,
        )
        s2 = compare_strategies(inputs, rules).scenario2
        assert s2.initial_agi == -8000
        assert s2.magi == 0
        assert s2.fpl_percentage == 0
        assert s2.hit_cliff is False

    def test_capital_losses_reduce_agi_by_at_most_limit(self, rules):
        with_losses = compare_strategies(single_earner(70000, capital_losses=50000), rules)
        without = compare_strategies(single_earner(70000), rules)
        assert without.scenario2.initial_agi - with_losses.scenario2.initial_agi == 3000
        assert without.scenario1.initial_agi - with_losses.scenario1.initial_agi == 3000


class TestCliffBoundary:
    """Household of one: poverty level 15060, cliff MAGI 60240."""

    def test_exactly_400_percent_keeps_subsidy(self, rules):
        result = compare_strategies(
            single_earner(60240, annual_premium=9000, estimated_subsidy=4000), rules
        )
        assert result.scenario2.fpl_percentage == 400
        assert result.scenario2.hit_cliff is False
        assert result.scenario2.subsidy == 4000

    def test_one_dollar_over_loses_subsidy(self, rules):
        result = compare_strategies(
            single_earner(60241, annual_premium=9000, estimated_subsidy=4000), rules
        )
        assert result.scenario2.fpl_percentage > 400
        assert result.scenario2.hit_cliff is True
        assert result.scenario2.subsidy == 0
        assert result.scenario2.net_cost == 9000
        assert cliff_gap(result) == 101


# === WINNER ===


class TestWinner:

    @pytest.mark.parametrize("net1,net2,winner,savings", [
        (11400, 15000, "Scenario 1", 3600),
        (13200, 3000, "Scenario 2", 10200),
        (10000, 10000, "Equal", 0),
    ])
    def test_determine_winner(self, net1, net2, winner, savings):
        assert determine_winner(net1, net2) == (winner, savings)

    def test_equal_costs(self, rules):
        inputs = single_earner(50000, annual_premium=10000)
        result = compare_strategies(inputs, rules)
        assert result.scenario1.net_cost == result.scenario2.net_cost == 10000
        assert result.winner == "Equal"
        assert result.savings == 0


# === OUT OF POCKET ===


class TestOutOfPocket:
    """Plan: $2,000 deductible, 20% coinsurance, $8,000 OOP max."""

    @pytest.mark.parametrize("billed,expected", [
        (0, 0),
        (1000, 1000),
        (2000, 2000),
        (10000, 3600),
        (75000, 8000),
    ])
    def test_oop_cost(self, billed, expected):
        assert out_of_pocket_cost(billed, 2000, 8000, 20) == pytest.approx(expected)

    def test_oop_bounds(self):
        for billed in (0, 500, 2000, 2001, 15000, 32000, 1_000_000):
            oop = out_of_pocket_cost(billed, 2000, 8000, 20)
            assert oop <= 8000
            assert oop >= min(billed, 2000)

    def test_full_coinsurance_hits_max(self):
        assert out_of_pocket_cost(10000, 1000, 5000, 100) == 5000

    def test_usage_totals_add_net_cost(self, rules):
        inputs = single_earner(
            50000, household_size=2, annual_premium=8000, marginal_tax_rate=22,
            estimated_subsidy=3000, plan_deductible=2000, plan_oop_max=8000, plan_coinsurance=20,
        )
        result = compare_strategies(inputs, rules)
        for usage in result.usage_scenarios.as_list():
            assert usage.total_cost_scen1 == pytest.approx(result.scenario1.net_cost + usage.oop_cost)
            assert usage.total_cost_scen2 == pytest.approx(result.scenario2.net_cost + usage.oop_cost)


# === RULES INJECTION ===


def test_custom_rules_move_the_cliff(rules):
    """Swapping the poverty table changes the cliff without touching the engine."""
    richer = CoverageRules.model_validate({
        **rules.model_dump(),
        "year": 2099,
        "poverty_guidelines": {"base": 20000, "per_additional_person": 6000},
    })
    inputs = single_earner(70000, annual_premium=9000, estimated_subsidy=4000)

    assert compare_strategies(inputs, rules).scenario2.hit_cliff is True
    result = compare_strategies(inputs, richer)
    assert result.scenario2.hit_cliff is False
    assert result.scenario2.fpl_percentage == pytest.approx(350)
    assert result.coverage_year == 2099


def test_default_rules_used_when_omitted():
    assert compare_strategies(default_inputs()) == compare_strategies(default_inputs(), load_coverage_rules())
