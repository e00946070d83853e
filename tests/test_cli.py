"""End-to-end tests for the sehi-calc CLI.

Runs commands through click's CliRunner against an isolated config
directory. The Gemini CLI is patched out.
"""

import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from sehicalc.cli.__main__ import cli


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Empty config directory; no profile, no settings."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("SEHI_CALC_CONFIG_PATH", str(config_dir))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return config_dir


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def household_file(tmp_path):
    path = tmp_path / "household.yaml"
    path.write_text(yaml.dump({
        "s_corp_owner": {"gross_pay": 50000},
        "annual_premium": 15000,
        "marginal_tax_rate": 12,
        "estimated_subsidy": 12000,
        "household_size": 4,
        "plan_deductible": 2000,
        "plan_oop_max": 8000,
        "plan_coinsurance": 20,
    }))
    return path


def run_json(runner, args):
    result = runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestCompare:

    def test_example_json(self, runner, isolated_env):
        data = run_json(runner, ["compare", "--example", "--format", "json"])
        result = data["result"]
        assert data["inputs"]["annual_premium"] == 15000
        assert result["scenario1"]["net_cost"] == pytest.approx(11400)
        assert result["scenario2"]["hit_cliff"] is True
        assert result["winner"] == "Scenario 1"
        assert result["savings"] == pytest.approx(3600)
        assert result["usage_scenarios"]["high"]["oop_cost"] == 14200

    def test_inputs_file(self, runner, isolated_env, household_file):
        data = run_json(runner, ["compare", "--inputs", str(household_file), "--format", "json"])
        result = data["result"]
        assert result["winner"] == "Scenario 2"
        assert result["scenario2"]["subsidy"] == 12000
        assert result["usage_scenarios"]["medium"]["oop_cost"] == pytest.approx(3600)
        assert result["usage_scenarios"]["high"]["oop_cost"] == 8000

    def test_overrides(self, runner, isolated_env):
        data = run_json(runner, [
            "compare", "--example", "--format", "json",
            "--set", "s_corp_owner.pre_tax_401k=20000",
            "--set", "householdSize=4",
        ])
        # MAGI 103500 against a 4-person cliff of 124800
        assert data["inputs"]["s_corp_owner"]["pre_tax_401k"] == 20000
        assert data["result"]["scenario2"]["magi"] == 103500
        assert data["result"]["scenario2"]["hit_cliff"] is False
        assert data["result"]["scenario2"]["subsidy"] == 8000

    def test_unknown_override(self, runner, isolated_env):
        result = runner.invoke(cli, ["compare", "--example", "--set", "bonus=5"])
        assert result.exit_code != 0
        assert "Unknown input field 'bonus'" in result.output

    def test_malformed_override(self, runner, isolated_env):
        result = runner.invoke(cli, ["compare", "--example", "--set", "annual_premium"])
        assert result.exit_code != 0
        assert "KEY=VALUE" in result.output

    def test_text_output(self, runner, isolated_env):
        result = runner.invoke(cli, ["compare", "--example"])
        assert result.exit_code == 0, result.output
        assert "Scenario 1 is the better option" in result.output
        assert "Line-Item Breakdown" in result.output
        assert "$11,400" in result.output
        assert "High" in result.output

    def test_falls_back_to_sample_household(self, runner, isolated_env):
        result = runner.invoke(cli, ["compare"])
        assert result.exit_code == 0, result.output
        assert "sample household" in result.output

    def test_uses_profile(self, runner, isolated_env):
        assert runner.invoke(cli, ["profile", "init"]).exit_code == 0
        assert runner.invoke(cli, ["profile", "set", "annual_premium", "9000"]).exit_code == 0

        data = run_json(runner, ["compare", "--format", "json"])
        assert data["inputs"]["annual_premium"] == 9000
        assert data["inputs"]["s_corp_owner"]["gross_pay"] == 80000

    def test_default_output_format_setting(self, runner, isolated_env):
        assert runner.invoke(cli, ["settings", "set", "default_output_format", "json"]).exit_code == 0
        data = run_json(runner, ["compare", "--example"])
        assert data["result"]["winner"] == "Scenario 1"

    def test_non_mapping_household_in_profile(self, runner, isolated_env):
        isolated_env.mkdir(parents=True)
        (isolated_env / "profile.yaml").write_text(yaml.dump({"household": [1, 2]}))

        result = runner.invoke(cli, ["compare", "--format", "json"])
        assert result.exit_code == 1
        assert "Household inputs must be a mapping" in result.output
        assert "Traceback" not in result.output

    def test_non_mapping_profile(self, runner, isolated_env):
        isolated_env.mkdir(parents=True)
        (isolated_env / "profile.yaml").write_text("- 1\n- 2\n")

        result = runner.invoke(cli, ["compare"])
        assert result.exit_code == 1
        assert "Profile must contain a mapping" in result.output

        result = runner.invoke(cli, ["profile", "init", "--force"])
        assert result.exit_code == 0, result.output
        assert runner.invoke(cli, ["compare"]).exit_code == 0

    def test_custom_rules_file(self, runner, isolated_env, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text(yaml.dump({
            "year": 2099,
            "poverty_guidelines": {"base": 40000, "per_additional_person": 10000},
            "usage_tiers": [
                {"label": "Low", "billed_amount": 500},
                {"label": "Medium", "billed_amount": 5000},
                {"label": "High", "billed_amount": 50000},
            ],
        }))
        data = run_json(runner, ["compare", "--example", "--rules", str(rules), "--format", "json"])
        result = data["result"]
        assert result["coverage_year"] == 2099
        assert result["scenario2"]["hit_cliff"] is False
        assert result["winner"] == "Scenario 2"
        assert result["usage_scenarios"]["low"]["billed_amount"] == 500


class TestAdvise:

    def test_placeholder_without_gemini(self, runner, isolated_env):
        with patch("sehicalc.gemini_client.is_available", return_value=False):
            data = run_json(runner, ["advise", "--example", "--format", "json"])
        assert data["advisory"]["available"] is False
        assert "Gemini CLI is not available" in data["advisory"]["text"]
        assert data["result"]["winner"] == "Scenario 1"

    def test_narrative(self, runner, isolated_env):
        reply = json.dumps({
            "analysis": "Stay on the SEHI path.",
            "citations": [{"title": "Form 8962", "source": "https://www.irs.gov/instructions/i8962"}],
        })
        with patch("sehicalc.gemini_client.is_available", return_value=True), \
             patch("sehicalc.gemini_client.process_prompt", return_value=reply) as process_prompt:
            result = runner.invoke(cli, ["advise", "--example", "--timeout", "12"])

        assert result.exit_code == 0, result.output
        assert "Stay on the SEHI path." in result.output
        assert "Form 8962" in result.output
        assert process_prompt.call_args.kwargs["timeout"] == 12

    def test_narrative_with_brackets_is_verbatim(self, runner, isolated_env):
        reply = json.dumps({
            "analysis": "Max the [bold]HSA[/bold] first. Reduce MAGI [/see note].",
            "citations": [{"title": "Pub 974 [/x]", "source": "https://www.irs.gov/[draft]"}],
        })
        with patch("sehicalc.gemini_client.is_available", return_value=True), \
             patch("sehicalc.gemini_client.process_prompt", return_value=reply):
            result = runner.invoke(cli, ["advise", "--example"])

        assert result.exit_code == 0, result.output
        assert "[bold]HSA[/bold]" in result.output
        assert "[/see note]" in result.output
        assert "Pub 974 [/x]" in result.output
        assert "[draft]" in result.output


class TestExample:

    def test_yaml_round_trips_into_compare(self, runner, isolated_env, tmp_path):
        result = runner.invoke(cli, ["example"])
        assert result.exit_code == 0
        path = tmp_path / "example.yaml"
        path.write_text(result.output)

        data = run_json(runner, ["compare", "--inputs", str(path), "--format", "json"])
        assert data["result"]["scenario1"]["total_w2"] == 90000

    def test_json(self, runner, isolated_env):
        data = run_json(runner, ["example", "--format", "json"])
        assert data["household_size"] == 3


class TestRulesCommands:

    def test_show_json(self, runner, isolated_env):
        data = run_json(runner, ["rules", "show", "--year", "2026", "--format", "json"])
        assert data["poverty_guidelines"]["base"] == 15060

    def test_show_household_cliff(self, runner, isolated_env):
        result = runner.invoke(cli, ["rules", "show", "--household-size", "1"])
        assert result.exit_code == 0, result.output
        assert "cliff MAGI $60,240" in result.output

    def test_household_size_must_be_positive(self, runner, isolated_env):
        result = runner.invoke(cli, ["rules", "show", "--household-size", "0"])
        assert result.exit_code == 2

    def test_years(self, runner, isolated_env):
        result = runner.invoke(cli, ["rules", "years"])
        assert "2026" in result.output.split()


class TestSettingsCommands:

    def test_set_and_show(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "advisor_timeout", "30"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli, ["settings", "show"])
        assert "advisor_timeout: 30" in result.output

    def test_set_rejects_non_integer(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "coverage_year", "soon"])
        assert result.exit_code == 2

    def test_unknown_setting(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "set", "color", "blue"])
        assert result.exit_code == 2

    def test_unset(self, runner, isolated_env):
        runner.invoke(cli, ["settings", "set", "coverage_year", "2026"])
        result = runner.invoke(cli, ["settings", "unset", "coverage_year"])
        assert "Cleared coverage_year" in result.output


class TestProfileCommands:

    def test_show_without_profile(self, runner, isolated_env):
        result = runner.invoke(cli, ["profile", "show"])
        assert result.exit_code == 0
        assert "profile init" in result.output

    def test_init_refuses_overwrite(self, runner, isolated_env):
        assert runner.invoke(cli, ["profile", "init"]).exit_code == 0
        result = runner.invoke(cli, ["profile", "init"])
        assert result.exit_code != 0
        assert "--force" in result.output
        assert runner.invoke(cli, ["profile", "init", "--force"]).exit_code == 0

    def test_set_coerces_garbage(self, runner, isolated_env):
        runner.invoke(cli, ["profile", "init"])
        result = runner.invoke(cli, ["profile", "set", "spouse.gross_pay", "-100"])
        assert result.exit_code == 0, result.output

        profile = yaml.safe_load((isolated_env / "profile.yaml").read_text())
        assert profile["household"]["spouse"]["gross_pay"] == 0

    def test_set_unknown_key(self, runner, isolated_env):
        result = runner.invoke(cli, ["profile", "set", "spouse.bonus", "100"])
        assert result.exit_code != 0
        assert "Unknown input field" in result.output

    def test_use_external_profile(self, runner, isolated_env, tmp_path):
        external = tmp_path / "shared" / "profile.yaml"
        external.parent.mkdir()
        external.write_text(yaml.dump({"household": {"annual_premium": 6000}}))

        result = runner.invoke(cli, ["profile", "use", str(external)])
        assert result.exit_code == 0, result.output

        data = run_json(runner, ["compare", "--format", "json"])
        assert data["inputs"]["annual_premium"] == 6000
