"""
Tests for the airline directory and submission packages.
"""

from datetime import timedelta

import pytest

from flight_claims.core.errors import UnsupportedAirline
from flight_claims.core.models import Regulation, SubmissionMethod
from flight_claims.directory import (
    AirlineConfig,
    AirlineDirectory,
    DEFAULT_FOLLOW_UP_INTERVAL,
    build_submission_package,
    claim_field_value,
    default_directory,
    missing_claim_fields,
    normalize_alias,
    parse_interval,
)


class TestParseInterval:
    """Tests for follow-up interval parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2 weeks", timedelta(weeks=2)),
            ("10 days", timedelta(days=10)),
            ("1 month", timedelta(days=30)),
            ("36h", timedelta(hours=36)),
            ("90 min", timedelta(minutes=90)),
            (5, timedelta(days=5)),
        ],
    )
    def test_parse(self, value, expected) -> None:
        """Test supported interval spellings."""
        assert parse_interval(value) == expected

    def test_unrecognised(self) -> None:
        """Test garbage intervals are rejected."""
        with pytest.raises(ValueError):
            parse_interval("fortnightly")


class TestAirlineDirectory:
    """Tests for directory lookups."""

    @pytest.fixture
    def directory(self) -> AirlineDirectory:
        return default_directory()

    def test_normalize_alias(self) -> None:
        """Test aliases are compared on letters and digits only."""
        assert normalize_alias("Jet2.com") == "jet2com"
        assert normalize_alias(" Ryan-Air ") == "ryanair"

    @pytest.mark.parametrize("identifier", ["FR", "fr", "RYR", "Ryanair", "ryan air", "Ryan-Air"])
    def test_get_by_any_identifier(self, directory: AirlineDirectory, identifier: str) -> None:
        """Test code, ICAO code, name and aliases all resolve."""
        config = directory.get(identifier)
        assert config is not None
        assert config.code == "FR"

    def test_partial_name(self, directory: AirlineDirectory) -> None:
        """Test a name fragment is found by search but not resolved by get."""
        assert [c.code for c in directory.search("lufthan")] == ["LH"]
        assert directory.get("lufthan") is None

    @pytest.mark.parametrize(
        "identifier", ["Virgin Australia", "United Nigeria Airlines", "Air France KLM Group"]
    )
    def test_unlisted_carrier_not_matched(self, directory: AirlineDirectory, identifier: str) -> None:
        """Test an unlisted carrier is not mapped onto a listed one sharing part of its name."""
        assert directory.get(identifier) is None

    @pytest.mark.parametrize("identifier", ["", "   ", None, "airways", "air", "Nowhere Air Express"])
    def test_unknown(self, directory: AirlineDirectory, identifier) -> None:
        """Test blank, generic and unknown identifiers do not resolve."""
        assert directory.get(identifier) is None

    def test_require(self, directory: AirlineDirectory) -> None:
        """Test require raises for unknown airlines."""
        with pytest.raises(UnsupportedAirline) as exc_info:
            directory.require("ZZ")
        assert exc_info.value.identifier == "ZZ"

    def test_search(self, directory: AirlineDirectory) -> None:
        """Test searching by a name fragment."""
        assert [c.code for c in directory.search("ryan")] == ["FR"]
        assert directory.search("!!") == []

    def test_filters(self, directory: AirlineDirectory) -> None:
        """Test region and submission method filters."""
        assert "FR" in {c.code for c in directory.by_submission_method(SubmissionMethod.EMAIL)}
        assert "AA" in {c.code for c in directory.by_region("north america")}
        assert directory.carrier_country("Air France") == "FR"
        assert directory.carrier_country("ZZ") is None
        assert directory.by_code(" lh ").name == "Lufthansa"
        assert len(directory.active()) == len(directory)

    def test_add_from_dict(self) -> None:
        """Test entries can be added as plain mappings."""
        directory = AirlineDirectory()
        config = directory.add(
            {
                "code": " zz ",
                "name": "Zed Air",
                "submission_method": "email",
                "claim_email": "claims@zed.example",
                "follow_up_schedule": ["1 week"],
                "country": "IE",
            }
        )

        assert config.code == "ZZ"
        assert "Zed Air" in directory
        assert len(directory) == 1
        assert config.required_documents == ["boarding_pass", "delay_proof"]

    def test_shadowed_alias_warns(self, caplog) -> None:
        """Test an alias claimed by two airlines is logged."""
        directory = AirlineDirectory(
            [
                {"code": "AA", "name": "Alpha", "submission_method": "email", "country": "US"},
                {"code": "BB", "name": "Beta", "aliases": ["Alpha"],
                 "submission_method": "email", "country": "US"},
            ]
        )

        assert "shadows existing airline AA" in caplog.text
        assert directory.get("Alpha").code == "BB"


class TestAirlineConfig:
    """Tests for per-airline settings."""

    def test_follow_up_schedule(self) -> None:
        """Test the follow-up schedule is parsed and indexed."""
        config = default_directory().require("FR")

        assert config.follow_up_interval(0) == timedelta(weeks=3)
        assert config.follow_up_interval(2) == timedelta(weeks=10)
        assert config.follow_up_interval(3) is None
        assert config.first_follow_up_interval() == timedelta(weeks=3)

    def test_default_first_interval(self) -> None:
        """Test an airline with no schedule falls back to two weeks."""
        config = AirlineConfig(
            code="ZZ", name="Zed Air", submission_method="postal", country="IE"
        )
        assert config.first_follow_up_interval() == DEFAULT_FOLLOW_UP_INTERVAL

    def test_submission_address(self) -> None:
        """Test the address follows the submission method."""
        directory = default_directory()
        assert directory.require("FR").submission_address == "eu261@ryanair.com"
        assert directory.require("BA").submission_address.startswith("https://")
        assert directory.require("LS").submission_address.startswith("Jet2.com Customer Relations")

    def test_regulations_parsed(self) -> None:
        """Test covered regulations are parsed into the enum."""
        assert Regulation.UK261 in default_directory().require("BA").regulations_covered


class TestSubmissionPackage:
    """Tests for submission package generation."""

    def test_email_package(self, make_claim) -> None:
        """Test an email package for a Ryanair delay claim."""
        claim = make_claim()
        package, errors = build_submission_package(claim, default_directory().require("FR"))

        assert errors == []
        assert package.method == SubmissionMethod.EMAIL
        assert package.recipient == "eu261@ryanair.com"
        assert "FR1234" in package.subject
        assert "FC-TEST-001" in package.subject
        assert "Delay at arrival: 3h 20m." in package.body
        assert "Reason given: technical fault." in package.body
        assert "Booking reference: ABC123." in package.body
        assert package.body.endswith("Jane Doe\njane.doe@example.com")
        assert package.attachments == ["boarding_pass", "delay_proof"]
        assert package.form_fields == {}

    def test_web_form_package(self, make_claim) -> None:
        """Test web form fields are filled from the claim."""
        claim = make_claim(carrier="BA", flight_number="BA123", origin="LHR", destination="MAD")
        package, errors = build_submission_package(claim, default_directory().require("BA"))

        assert errors == []
        assert package.method == SubmissionMethod.WEB_FORM
        assert package.form_fields["Full Name"] == "Jane Doe"
        assert package.form_fields["Flight Number"] == "BA123"
        assert package.form_fields["Departure Airport"] == "LHR"
        assert package.form_fields["Delay Duration"] == "3h 20m"
        assert package.form_fields["Booking Reference"] == "ABC123"

    def test_missing_fields_block_package(self, make_claim) -> None:
        """Test missing required fields are reported instead of a package."""
        claim = make_claim(booking_reference=None)
        package, errors = build_submission_package(claim, default_directory().require("FR"))

        assert package is None
        assert errors == ["missing required field: booking_reference"]

    def test_missing_address(self, make_claim) -> None:
        """Test an airline with no address for its channel blocks generation."""
        config = AirlineConfig(code="ZZ", name="Zed Air", submission_method="email", country="IE")
        package, errors = build_submission_package(make_claim(carrier="ZZ"), config)

        assert package is None
        assert errors == ["Zed Air has no email address configured"]

    def test_claim_field_value(self, make_claim) -> None:
        """Test named claim fields are read and blanks become None."""
        claim = make_claim(booking_reference="  ")

        assert claim_field_value(claim, "departure_date") == "2025-03-01"
        assert claim_field_value(claim, "delay_reason") == "technical fault"
        assert claim_field_value(claim, "booking_reference") is None
        assert claim_field_value(claim, "favourite_colour") is None
        assert missing_claim_fields(claim, ["email", "booking_reference"]) == ["booking_reference"]
