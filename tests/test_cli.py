"""
Tests for the command line interface.
"""

import json
from datetime import timedelta

import pytest
from click.testing import CliRunner
from pydantic import TypeAdapter

from flight_claims.cli import cli
from flight_claims.config import get_settings
from flight_claims.core.models import Claim, ClaimStatus, utcnow


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    """CLI runner with no provider keys and logging left to pytest."""
    monkeypatch.setenv("FLIGHT_CLAIMS_AVIATIONSTACK_API_KEY", "")
    monkeypatch.setenv("FLIGHT_CLAIMS_FLIGHTLABS_API_KEY", "")
    monkeypatch.setattr("flight_claims.cli.setup_logging", lambda *args, **kwargs: None)
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


@pytest.fixture
def claims_file(tmp_path, make_claim):
    """JSON file holding one rejected paid claim and one filed claim."""
    paid_at = utcnow() - timedelta(hours=1)
    claims = [
        make_claim(claim_id="FC-REJ", status=ClaimStatus.REJECTED, paid_at=paid_at,
                   email="a@example.com"),
        make_claim(claim_id="FC-OK", status=ClaimStatus.FILED, paid_at=paid_at,
                   email="b@example.com"),
    ]
    path = tmp_path / "claims.json"
    path.write_bytes(TypeAdapter(list[Claim]).dump_json(claims))
    return path


class TestQuoteCommand:
    """Tests for the quote command."""

    def test_eligible_delay(self, runner: CliRunner) -> None:
        """Test a long delay quote."""
        result = runner.invoke(
            cli, ["quote", "FR1234", "2025-03-01", "DUB", "BCN", "--delay", "200"]
        )

        assert result.exit_code == 0, result.output
        assert result.output.startswith("ELIGIBLE under EU261: 250.00 EUR")

    def test_airport_outside_table(self, runner: CliRunner) -> None:
        """Test distance and country options quote an off-table route."""
        result = runner.invoke(
            cli,
            [
                "quote", "FR2231", "2025-03-01", "KRK", "AGP", "--delay", "200",
                "--distance-km", "2300", "--departure-country", "pl", "--arrival-country", "es",
            ],
        )

        assert result.exit_code == 0, result.output
        assert result.output.startswith("ELIGIBLE under EU261: 400.00 EUR")

    def test_airport_outside_table_without_distance(self, runner: CliRunner) -> None:
        """Test an off-table route without a distance is a usage error."""
        result = runner.invoke(
            cli, ["quote", "FR2231", "2025-03-01", "KRK", "AGP", "--delay", "200"]
        )

        assert result.exit_code != 0
        assert "Distance unknown" in result.output

    def test_short_delay(self, runner: CliRunner) -> None:
        """Test a delay under three hours is not eligible."""
        result = runner.invoke(
            cli, ["quote", "FR1234", "2025-03-01", "DUB", "BCN", "--delay", "90"]
        )

        assert result.exit_code == 0
        assert result.output.startswith("NOT ELIGIBLE")

    def test_cancellation_facts(self, runner: CliRunner) -> None:
        """Test disruption facts are parsed from key=value options."""
        result = runner.invoke(
            cli,
            [
                "quote", "FR1234", "2025-03-01", "DUB", "BCN",
                "--type", "cancellation", "--cancelled",
                "--fact", "notice_days=3", "--fact", "alternative_offered=false",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["eligible"] is True
        assert data["regulation"] == "EU261"

    def test_missing_fact(self, runner: CliRunner) -> None:
        """Test missing cancellation facts fail with a readable error."""
        result = runner.invoke(
            cli, ["quote", "FR1234", "2025-03-01", "DUB", "BCN", "--type", "cancellation"]
        )

        assert result.exit_code != 0
        assert "missing" in result.output

    def test_bad_fact(self, runner: CliRunner) -> None:
        """Test a fact without '=' is rejected."""
        result = runner.invoke(
            cli, ["quote", "FR1234", "2025-03-01", "DUB", "BCN", "--fact", "notice_days"]
        )
        assert result.exit_code != 0


class TestClaimFileCommands:
    """Tests for the commands that work on a claims file."""

    def test_report(self, runner: CliRunner, claims_file) -> None:
        """Test the text report."""
        result = runner.invoke(cli, ["report", "--claims", str(claims_file)])

        assert result.exit_code == 0, result.output
        assert "CLAIMS PIPELINE REPORT" in result.output
        assert "Total Claims: 2" in result.output

    def test_report_json(self, runner: CliRunner, claims_file) -> None:
        """Test the JSON report."""
        result = runner.invoke(cli, ["report", "--claims", str(claims_file), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["by_status"] == {"filed": 1, "rejected": 1}

    def test_sweep_writes_back(self, runner: CliRunner, claims_file) -> None:
        """Test the sweep refunds the rejected claim and saves the file."""
        result = runner.invoke(cli, ["sweep", "--claims", str(claims_file), "--write"])

        assert result.exit_code == 0, result.output
        assert "Refund sweep: 2 evaluated, 1 refunded, 0 errors" in result.output
        assert "FC-REJ: claim_unsuccessful 29.00 EUR" in result.output

        saved = {c.claim_id: c for c in TypeAdapter(list[Claim]).validate_json(claims_file.read_text())}
        assert saved["FC-REJ"].status == ClaimStatus.REFUNDED
        assert saved["FC-OK"].status == ClaimStatus.FILED

    def test_airlines(self, runner: CliRunner) -> None:
        """Test listing airlines by query."""
        result = runner.invoke(cli, ["airlines", "ryan"])

        assert result.exit_code == 0
        assert "eu261@ryanair.com" in result.output
        assert "Lufthansa" not in result.output
