"""SEHI Calc SDK - S-Corp SEHI vs. ACA premium tax credit comparison."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    unset_setting,
    get_coverage_year,
    get_advisor_timeout,
    get_profile_path,
    load_profile,
    save_profile,
    load_household,
    save_household,
    ProfileNotFoundError,
    KNOWN_SETTINGS,
)

from .schemas import (
    PayStub,
    FinancialInputs,
    CoverageRules,
    ScenarioResult,
    UsageScenarioCost,
    AdvisoryResult,
    Citation,
)

from .rules import (
    DEFAULT_COVERAGE_YEAR,
    load_coverage_rules,
    load_rules_file,
    get_available_years,
    resolve_rules_year,
)

from .inputs import (
    coerce_amount,
    inputs_from_dict,
    load_inputs_file,
    apply_overrides,
    parse_override,
    default_inputs,
)

from .compare import (
    compare_strategies,
    out_of_pocket_cost,
    cliff_gap,
)

from .advisory import (
    build_prompt,
    get_analysis,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "unset_setting",
    "get_coverage_year",
    "get_advisor_timeout",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "load_household",
    "save_household",
    "ProfileNotFoundError",
    "KNOWN_SETTINGS",
    # Schemas
    "PayStub",
    "FinancialInputs",
    "CoverageRules",
    "ScenarioResult",
    "UsageScenarioCost",
    "AdvisoryResult",
    "Citation",
    # Coverage rules
    "DEFAULT_COVERAGE_YEAR",
    "load_coverage_rules",
    "load_rules_file",
    "get_available_years",
    "resolve_rules_year",
    # Inputs
    "coerce_amount",
    "inputs_from_dict",
    "load_inputs_file",
    "apply_overrides",
    "parse_override",
    "default_inputs",
    # Comparison
    "compare_strategies",
    "out_of_pocket_cost",
    "cliff_gap",
    # Advisory
    "build_prompt",
    "get_analysis",
]
