import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from flexprice.cli import cli
from flexprice.collectors.tariff_api import TariffApiError

PROFILE = """Zeitstempel;Verbrauch [kWh]
01.03.2024 10:00;1,0
01.03.2024 10:15;2,0
01.03.2024 10:30;1,0
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def profile_path(tmp_path):
    path = tmp_path / "lastgang.csv"
    path.write_text(PROFILE, encoding="utf-8")
    return path


def test_prices_demo_json(runner):
    result = runner.invoke(cli, ["prices", "--demo", "--start", "2024-03-01T00:00", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert len(data["slots"]) == 96
    assert {r["appliance"] for r in data["recommendations"]} == {"ev", "dryer", "heat_pump", "water"}


def test_prices_demo_table(runner):
    result = runner.invoke(cli, ["prices", "--demo"])

    assert result.exit_code == 0, result.output
    assert "Cheapest windows" in result.output
    assert "Dynamic prices" in result.output


def test_prices_api_failure(runner):
    with patch("flexprice.cli.tariff_api.fetch_tariffs", side_effect=TariffApiError("HTTP error from tariff API: 500")):
        result = runner.invoke(cli, ["prices"])

    assert result.exit_code == 1
    assert "Price request failed" in result.output


def test_prices_no_data(runner):
    with patch("flexprice.cli.tariff_api.fetch_tariffs", return_value=[]):
        result = runner.invoke(cli, ["prices"])

    assert result.exit_code == 1
    assert "No prices found" in result.output


def test_prices_bad_start(runner):
    result = runner.invoke(cli, ["prices", "--demo", "--start", "yesterday"])
    assert result.exit_code == 2


def test_profile_json(runner, profile_path):
    result = runner.invoke(cli, ["profile", str(profile_path), "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["rows"] == 3
    assert data["total_kwh"] == 4.0
    assert data["unit"] == "kWh"


def test_profile_empty_file(runner, tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("\n\n")

    result = runner.invoke(cli, ["profile", str(path)])
    assert result.exit_code == 1
    assert "Could not read load profile" in result.output


def test_compare_demo_json(runner, profile_path):
    result = runner.invoke(
        cli,
        ["compare", str(profile_path), "--demo", "--start", "2024-03-01T00:00", "--baseline-rate", "0.25", "--json"],
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["has_coverage"] is True
    assert data["slots"]["matched"] == 3
    assert data["slots"]["missing"] == 93
    assert data["energy"]["matched_kwh"] == 4.0
    assert data["costs"]["static"] == 1.0
    assert data["profile"]["rows"] == 3


def test_compare_no_coverage(runner, profile_path):
    result = runner.invoke(
        cli, ["compare", str(profile_path), "--demo", "--start", "2024-04-01T00:00", "--baseline-rate", "0.25"]
    )

    assert result.exit_code == 0, result.output
    assert "No overlap" in result.output


def test_compare_baseline_from_environment(runner, profile_path, monkeypatch):
    monkeypatch.setenv("FLEXPRICE_BASELINE_RATE", "0.5")
    result = runner.invoke(cli, ["compare", str(profile_path), "--demo", "--start", "2024-03-01T00:00", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["costs"]["static"] == 2.0


def test_compare_bad_profile_still_shows_prices(runner, tmp_path):
    path = tmp_path / "broken.csv"
    path.write_text("timestamp;value\nfoo;bar\n")

    result = runner.invoke(cli, ["compare", str(path), "--demo", "--baseline-rate", "0.25"])

    assert result.exit_code == 1
    assert "Could not read load profile" in result.output
    assert "Dynamic prices" in result.output


def test_prices_malformed_appliances_file(runner, tmp_path):
    path = tmp_path / "appliances.yaml"
    path.write_text("appliances: [\n")

    result = runner.invoke(cli, ["prices", "--demo", "--appliances", str(path)])

    assert result.exit_code == 1
    assert "Error" in result.output
