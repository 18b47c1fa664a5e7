import csv
import json
from decimal import Decimal

import click
import pytest
from click.testing import CliRunner

from mortgage_calc.main import cli, parse_amount


@pytest.fixture
def runner():
    return CliRunner()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("500000", Decimal("500000")),
        ("500,000", Decimal("500000")),
        ("500k", Decimal("500000")),
        ("1.2M", Decimal("1200000")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_rejects_junk():
    with pytest.raises(click.BadParameter):
        parse_amount("lots")


def test_payment_command(runner):
    result = runner.invoke(cli, ["payment", "-p", "100k", "-r", "6", "-t", "30"])
    assert result.exit_code == 0, result.output
    assert "RM 599.55" in result.output
    assert "RM 100,000.00" in result.output


def test_payment_command_rejects_zero_tenure(runner):
    result = runner.invoke(cli, ["payment", "-p", "100k", "-r", "6", "-t", "0"])
    assert result.exit_code == 1
    assert "tenure_years" in result.output


def test_schedule_truncates_long_output(runner):
    result = runner.invoke(cli, ["schedule", "-p", "300k", "-r", "4", "-t", "30"])
    assert result.exit_code == 0, result.output
    assert "showing first 120 rows" in result.output


def test_schedule_csv_export(runner, tmp_path):
    out = tmp_path / "schedule.csv"
    result = runner.invoke(cli, ["schedule", "-p", "1200", "-r", "0", "-t", "1", "--output", str(out)])
    assert result.exit_code == 0, result.output
    with out.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Month"
    assert len(rows) == 13
    assert rows[-1][5] == "0.00"


def test_schedule_json_export(runner, tmp_path):
    out = tmp_path / "schedule.json"
    result = runner.invoke(cli, ["schedule", "-p", "100k", "-r", "6", "-t", "30", "--output", str(out)])
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["summary"]["monthly_payment"] == 599.55
    assert len(data["schedule"]) == 360


def test_schedule_unsupported_export(runner, tmp_path):
    out = tmp_path / "schedule.txt"
    result = runner.invoke(cli, ["schedule", "-p", "100k", "-r", "6", "-t", "30", "--output", str(out)])
    assert result.exit_code != 0
    assert not out.exists()


def test_extra_command(runner):
    result = runner.invoke(
        cli, ["extra", "-p", "300k", "-r", "4", "-t", "20", "--extra-monthly", "500"]
    )
    assert result.exit_code == 0, result.output
    assert "Interest saved" in result.output


def test_refinance_command_without_break_even(runner):
    result = runner.invoke(
        cli,
        [
            "refinance",
            "--balance", "300k",
            "--rate", "4",
            "--remaining-years", "20",
            "--new-rate", "4.5",
            "--new-tenure", "20",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Break-even         : N/A" in result.output
    assert "Worth refinancing  : No" in result.output


def test_afford_requires_tenure_or_age(runner):
    result = runner.invoke(cli, ["afford", "--income", "8000", "-r", "4"])
    assert result.exit_code == 2


def test_afford_with_age(runner):
    result = runner.invoke(cli, ["afford", "--income", "8k", "--commitments", "500", "-r", "4.1", "--age", "40"])
    assert result.exit_code == 0, result.output
    assert "Tenure used: 25 years" in result.output
    assert "Max loan" in result.output


def test_costs_command(runner):
    result = runner.invoke(cli, ["costs", "--price", "600k", "--loan", "540k"])
    assert result.exit_code == 0, result.output
    assert "RM 91,520.00" in result.output


def test_costs_loan_above_price(runner):
    result = runner.invoke(cli, ["costs", "--price", "500k", "--loan", "600k"])
    assert result.exit_code == 1
    assert "loan_amount" in result.output


def test_islamic_command(runner):
    result = runner.invoke(cli, ["islamic", "--type", "murabahah", "-a", "300k", "-r", "4", "-t", "20"])
    assert result.exit_code == 0, result.output
    assert "RM 2,250.00" in result.output
    assert "RM 240,000.00" in result.output


def test_banks_command(runner):
    result = runner.invoke(cli, ["banks", "-p", "500k"])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("Public Bank")
    assert len(lines) == 10
