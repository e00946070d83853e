"""Pydantic schemas for sehi-calc data validation.

All schemas use extra='forbid' to reject unknown fields, ensuring
typos in profile files cause clear errors rather than silent ignoring.
Records are frozen: a change to any input produces a new FinancialInputs
and a fresh ScenarioResult, never a partial update.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


Winner = Literal["Scenario 1", "Scenario 2", "Equal"]


# =============================================================================
# Input Schemas
# =============================================================================


class PayStub(BaseModel):
    """Annual pay summary for one earner (S-Corp owner or spouse)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_pay: float = Field(default=0, ge=0, description="Annual gross wages")
    fed_withholding: float = Field(default=0, ge=0, description="Federal income tax withheld")
    social_security: float = Field(default=0, ge=0, description="Social Security tax withheld")
    medicare: float = Field(default=0, ge=0, description="Medicare tax withheld")
    state_withholding: float = Field(default=0, ge=0, description="State income tax withheld")
    pre_tax_401k: float = Field(
        default=0, ge=0,
        description="Traditional 401(k) deferrals. Pre-FIT, reduces Box 1 wages.",
    )
    hsa_contribution: float = Field(
        default=0, ge=0,
        description=(
            "HSA contributions. Section 125 pre-tax for an ordinary employee; "
            "for a >2% shareholder it stays in Box 1 and is deducted on Form 8889."
        ),
    )


class FinancialInputs(BaseModel):
    """Household income snapshot plus health plan design.

    Rates are expressed as percentages (24 means 24%).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    s_corp_owner: PayStub = Field(default_factory=PayStub)
    spouse: PayStub = Field(default_factory=PayStub)
    other_income: float = Field(default=0, ge=0, description="Interest, dividends, rental, etc.")
    tax_exempt_interest: float = Field(default=0, ge=0, description="MAGI add-back")
    non_taxable_social_security: float = Field(default=0, ge=0, description="MAGI add-back")
    annual_premium: float = Field(default=0, ge=0, description="Full plan cost before subsidy or deduction")
    capital_losses: float = Field(default=0, ge=0, description="Net capital losses available")
    marginal_tax_rate: float = Field(default=0, ge=0, le=100, description="Federal marginal rate, percent")
    estimated_subsidy: float = Field(default=0, ge=0, description="Estimated annual premium tax credit")
    household_size: int = Field(default=1, ge=1, description="Persons on the tax return")
    plan_deductible: float = Field(default=0, ge=0)
    plan_oop_max: float = Field(default=0, ge=0, description="Annual out-of-pocket maximum")
    plan_coinsurance: float = Field(default=0, ge=0, le=100, description="Member share after deductible, percent")


# =============================================================================
# Coverage Rules (versioned constant table)
# =============================================================================


class PovertyGuidelines(BaseModel):
    """Federal Poverty Level schedule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base: float = Field(..., gt=0, description="Poverty level for a household of one")
    per_additional_person: float = Field(..., ge=0, description="Increment per additional person")

    def for_household(self, household_size: int) -> float:
        """Poverty level for a household of the given size."""
        return self.base + self.per_additional_person * max(0, household_size - 1)


class UsageTier(BaseModel):
    """A billed-amount tier for total-cost-of-ownership projection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    billed_amount: float = Field(..., ge=0)


class CoverageRules(BaseModel):
    """Complete coverage rules for a plan year."""

    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    year: int
    poverty_guidelines: PovertyGuidelines
    subsidy_cliff_percent: float = Field(default=400, gt=0)
    capital_loss_limit: float = Field(default=3000, ge=0)
    usage_tiers: List[UsageTier] = Field(..., min_length=3, max_length=3)

    @field_validator("usage_tiers")
    @classmethod
    def tiers_ascending(cls, v: List[UsageTier]) -> List[UsageTier]:
        """Tiers must be listed from lowest to highest billed amount."""
        amounts = [t.billed_amount for t in v]
        if amounts != sorted(amounts):
            raise ValueError(f"usage_tiers must be in ascending billed_amount order, got {amounts}")
        return v


# =============================================================================
# Result Schemas
# =============================================================================


class SehiScenario(BaseModel):
    """Scenario 1: premium added to owner W-2, then deducted as SEHI."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_w2: float = Field(..., description="Owner Box 1 wages including premium")
    initial_agi: float
    deductible_sehi: float
    final_agi: float
    tax_savings: float
    net_cost: float


class AcaScenario(BaseModel):
    """Scenario 2: premium paid personally, ACA premium tax credit applied."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    initial_agi: float
    magi: float
    subsidy: float = Field(..., description="Subsidy actually applied (0 past the cliff)")
    net_cost: float
    hit_cliff: bool
    fpl_percentage: float
    poverty_level: float
    cliff_magi: float = Field(..., description="MAGI exactly at the subsidy cliff")


class UsageScenarioCost(BaseModel):
    """Premium plus medical out-of-pocket for one billed-amount tier."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    billed_amount: float
    oop_cost: float
    total_cost_scen1: float
    total_cost_scen2: float


class UsageScenarios(BaseModel):
    """Low / Medium / High usage projections."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    low: UsageScenarioCost
    medium: UsageScenarioCost
    high: UsageScenarioCost

    def as_list(self) -> List[UsageScenarioCost]:
        """Tiers in display order."""
        return [self.low, self.medium, self.high]


class ScenarioResult(BaseModel):
    """Both strategies side by side plus the recommendation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    scenario1: SehiScenario
    scenario2: AcaScenario
    usage_scenarios: UsageScenarios
    winner: Winner
    savings: float = Field(..., ge=0)
    coverage_year: Optional[int] = Field(None, description="Coverage rules year used")


# =============================================================================
# Advisory Schemas
# =============================================================================


class Citation(BaseModel):
    """A source referenced by the advisory narrative."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str
    source: str = Field(..., description="URL or publication reference")


class AdvisoryResult(BaseModel):
    """Narrative commentary returned by the advisory collaborator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    citations: List[Citation] = Field(default_factory=list)
    available: bool = Field(True, description="False when a fallback placeholder was returned")
