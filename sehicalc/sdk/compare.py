"""Health premium strategy comparison for a >2% S-Corp shareholder.

Scenario 1 (SEHI): the S-Corp adds the premium to the owner's W-2 Box 1
wages and the owner takes the Self-Employed Health Insurance deduction on
Form 1040.

Scenario 2 (ACA): the household pays the premium personally with after-tax
dollars and claims the premium tax credit, which is lost entirely when MAGI
exceeds the subsidy cliff (400% FPL).

Everything here is pure arithmetic over immutable inputs. Rounding is left
to the caller.
"""

import logging
import math
from typing import Optional

from .rules import load_coverage_rules
from .schemas import (
    AcaScenario,
    CoverageRules,
    FinancialInputs,
    PayStub,
    ScenarioResult,
    SehiScenario,
    UsageScenarioCost,
    UsageScenarios,
    UsageTier,
    Winner,
)

logger = logging.getLogger(__name__)


def owner_box1_wages(owner: PayStub) -> float:
    """Box 1 wages for a >2% shareholder.

    Section 125 does not apply to >2% shareholders, so HSA contributions
    stay in Box 1. Only 401(k) deferrals come out.
    """
    return max(0.0, owner.gross_pay - owner.pre_tax_401k)


def employee_box1_wages(employee: PayStub) -> float:
    """Box 1 wages for an ordinary employee (401k and HSA both pre-tax)."""
    return max(0.0, employee.gross_pay - employee.pre_tax_401k - employee.hsa_contribution)


def capital_loss_deduction(capital_losses: float, limit: float = 3000) -> float:
    """Net capital loss usable against ordinary income."""
    return min(capital_losses, limit)


def out_of_pocket_cost(
    billed_amount: float,
    deductible: float,
    oop_max: float,
    coinsurance: float,
) -> float:
    """Member out-of-pocket cost for a year's billed medical charges.

    Args:
        billed_amount: Total allowed charges for the year
        deductible: Plan deductible
        oop_max: Plan out-of-pocket maximum
        coinsurance: Member share after the deductible, percent (20 = 20%)
    """
    if billed_amount <= deductible:
        return billed_amount
    coinsurance_amount = (billed_amount - deductible) * (coinsurance / 100)
    return min(oop_max, deductible + coinsurance_amount)


def determine_winner(net_cost_1: float, net_cost_2: float) -> tuple[Winner, float]:
    """Pick the cheaper scenario.

    Returns:
        Tuple of (winner, savings) where savings is the absolute difference
    """
    diff = net_cost_1 - net_cost_2
    if diff > 0:
        winner: Winner = "Scenario 2"
    elif diff < 0:
        winner = "Scenario 1"
    else:
        winner = "Equal"
    return winner, abs(diff)


def _usage_cost(
    tier: UsageTier,
    inputs: FinancialInputs,
    net_cost_1: float,
    net_cost_2: float,
) -> UsageScenarioCost:
    oop = out_of_pocket_cost(
        tier.billed_amount,
        inputs.plan_deductible,
        inputs.plan_oop_max,
        inputs.plan_coinsurance,
    )
    return UsageScenarioCost(
        label=tier.label,
        billed_amount=tier.billed_amount,
        oop_cost=oop,
        total_cost_scen1=net_cost_1 + oop,
        total_cost_scen2=net_cost_2 + oop,
    )


def compare_strategies(
    inputs: FinancialInputs,
    rules: Optional[CoverageRules] = None,
) -> ScenarioResult:
    """Compare the SEHI and ACA premium strategies for a household.

    Args:
        inputs: Sanitized household snapshot
        rules: Coverage rules table (defaults to the current coverage year)

    Returns:
        ScenarioResult with both scenarios, usage projections and winner
    """
    if rules is None:
        rules = load_coverage_rules()

    premium = inputs.annual_premium

    # Wage bases
    owner_box1 = owner_box1_wages(inputs.s_corp_owner)
    spouse_box1 = employee_box1_wages(inputs.spouse)

    # Common adjustments: owner HSA via Form 8889, capital losses capped
    owner_hsa_deduction = inputs.s_corp_owner.hsa_contribution
    cap_loss = capital_loss_deduction(inputs.capital_losses, rules.capital_loss_limit)
    common_income = spouse_box1 + inputs.other_income - owner_hsa_deduction - cap_loss

    # --- Scenario 1: premium in W-2, SEHI deduction ---
    total_w2 = owner_box1 + premium
    initial_agi_1 = total_w2 + common_income

    # Simplified SEHI limit: cannot exceed the wages that included the premium
    deductible_sehi = min(premium, total_w2)
    final_agi_1 = initial_agi_1 - deductible_sehi
    tax_savings = deductible_sehi * (inputs.marginal_tax_rate / 100)
    net_cost_1 = premium - tax_savings

    # --- Scenario 2: premium paid personally, PTC ---
    initial_agi_2 = owner_box1 + common_income

    # Form 8962 MAGI: AGI + tax-exempt interest + non-taxable SS
    magi = max(0.0, initial_agi_2 + inputs.tax_exempt_interest + inputs.non_taxable_social_security)

    poverty_level = rules.poverty_guidelines.for_household(inputs.household_size)
    fpl_percentage = (magi / poverty_level) * 100 if poverty_level > 0 else 0.0
    hit_cliff = fpl_percentage > rules.subsidy_cliff_percent
    subsidy = 0.0 if hit_cliff else inputs.estimated_subsidy
    net_cost_2 = max(0.0, premium - subsidy)

    logger.debug(
        f"magi={magi:.2f} fpl={fpl_percentage:.1f}% cliff={hit_cliff} "
        f"net1={net_cost_1:.2f} net2={net_cost_2:.2f}"
    )

    winner, savings = determine_winner(net_cost_1, net_cost_2)

    low, medium, high = (
        _usage_cost(tier, inputs, net_cost_1, net_cost_2) for tier in rules.usage_tiers
    )

    return ScenarioResult(
        scenario1=SehiScenario(
            total_w2=total_w2,
            initial_agi=initial_agi_1,
            deductible_sehi=deductible_sehi,
            final_agi=final_agi_1,
            tax_savings=tax_savings,
            net_cost=net_cost_1,
        ),
        scenario2=AcaScenario(
            initial_agi=initial_agi_2,
            magi=magi,
            subsidy=subsidy,
            net_cost=net_cost_2,
            hit_cliff=hit_cliff,
            fpl_percentage=fpl_percentage,
            poverty_level=poverty_level,
            cliff_magi=poverty_level * rules.subsidy_cliff_percent / 100,
        ),
        usage_scenarios=UsageScenarios(low=low, medium=medium, high=high),
        winner=winner,
        savings=savings,
        coverage_year=rules.year,
    )


def cliff_gap(result: ScenarioResult, buffer: float = 100) -> Optional[int]:
    """MAGI reduction needed to get back under the subsidy cliff.

    Rounded up to whole dollars with a safety buffer on top. Returns None
    when the cliff was not hit.
    """
    aca = result.scenario2
    if not aca.hit_cliff:
        return None
    return math.ceil(aca.magi - aca.cliff_magi + buffer)
