"""
Bundled airline claim-submission table.
"""

from typing import Any

_STANDARD_FIELDS = [
    "passenger_name",
    "email",
    "flight_number",
    "departure_date",
    "departure_airport",
    "arrival_airport",
]

_STANDARD_FORM_FIELDS = {
    "passenger_name": "Full Name",
    "email": "Email Address",
    "flight_number": "Flight Number",
    "departure_date": "Departure Date",
    "departure_airport": "Departure Airport",
    "arrival_airport": "Arrival Airport",
    "booking_reference": "Booking Reference",
    "delay_duration": "Delay Duration",
    "delay_reason": "Reason for Delay",
}

AIRLINE_TABLE: list[dict[str, Any]] = [
    # United Kingdom
    {
        "code": "BA",
        "name": "British Airways",
        "icao_code": "BAW",
        "aliases": ["British Air", "BritishAirways"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.britishairways.com/en-gb/information/legal/eu261",
        "required_fields": _STANDARD_FIELDS + ["delay_duration", "delay_reason"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "2-4 weeks",
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["UK261", "EU261"],
        "country": "GB",
        "parent_company": "International Airlines Group",
        "special_instructions": "Use the online EU261 form and attach all supporting documents.",
    },
    {
        "code": "U2",
        "name": "EasyJet",
        "icao_code": "EZY",
        "aliases": ["Easy Jet"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.easyjet.com/en/help/contact/compensation-claims",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "2-4 weeks",
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["UK261", "EU261"],
        "country": "GB",
        "parent_company": "EasyJet plc",
    },
    {
        "code": "VS",
        "name": "Virgin Atlantic",
        "icao_code": "VIR",
        "aliases": ["Virgin"],
        "submission_method": "email",
        "claim_email": "customer.relations@fly.virgin.com",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "expected_response_time": "4-6 weeks",
        "follow_up_schedule": ["3 weeks", "6 weeks", "10 weeks"],
        "regulations_covered": ["UK261"],
        "country": "GB",
    },
    {
        "code": "LS",
        "name": "Jet2",
        "icao_code": "EXS",
        "aliases": ["Jet2.com"],
        "submission_method": "postal",
        "postal_address": "Jet2.com Customer Relations, Low Fare Finder House, Leeds Bradford Airport, LS19 7TU, United Kingdom",
        "required_documents": ["boarding_pass", "delay_proof", "booking_confirmation"],
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "expected_response_time": "4-8 weeks",
        "follow_up_schedule": ["4 weeks", "8 weeks"],
        "regulations_covered": ["UK261"],
        "country": "GB",
    },
    # European Union
    {
        "code": "FR",
        "name": "Ryanair",
        "icao_code": "RYR",
        "aliases": ["Ryan Air"],
        "submission_method": "email",
        "claim_email": "eu261@ryanair.com",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "expected_response_time": "3-6 weeks",
        "follow_up_schedule": ["3 weeks", "6 weeks", "10 weeks"],
        "regulations_covered": ["EU261", "UK261"],
        "country": "IE",
        "parent_company": "Ryanair Holdings",
        "special_instructions": "Include the booking reference; Ryanair may ask for extra information.",
    },
    {
        "code": "EI",
        "name": "Aer Lingus",
        "icao_code": "EIN",
        "aliases": ["AerLingus"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.aerlingus.com/support/contact-us/eu-261-claims/",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "IE",
        "parent_company": "International Airlines Group",
    },
    {
        "code": "LH",
        "name": "Lufthansa",
        "icao_code": "DLH",
        "aliases": ["Deutsche Lufthansa"],
        "submission_method": "email",
        "claim_email": "customer.relations@lufthansa.com",
        "required_documents": ["boarding_pass", "delay_proof", "booking_confirmation"],
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "expected_response_time": "2-4 weeks",
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "DE",
        "parent_company": "Lufthansa Group",
    },
    {
        "code": "EW",
        "name": "Eurowings",
        "icao_code": "EWG",
        "submission_method": "web_form",
        "claim_form_url": "https://www.eurowings.com/en/information/at-the-airport/flight-irregularities.html",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks"],
        "regulations_covered": ["EU261"],
        "country": "DE",
        "large_carrier": False,
        "parent_company": "Lufthansa Group",
    },
    {
        "code": "AF",
        "name": "Air France",
        "icao_code": "AFR",
        "aliases": ["AirFrance"],
        "submission_method": "web_form",
        "claim_form_url": "https://wwws.airfrance.fr/en/claim",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "3-5 weeks",
        "follow_up_schedule": ["3 weeks", "5 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "FR",
        "parent_company": "Air France-KLM Group",
    },
    {
        "code": "KL",
        "name": "KLM Royal Dutch Airlines",
        "icao_code": "KLM",
        "aliases": ["KLM"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.klm.com/information/legal/claim",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "2-4 weeks",
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "NL",
        "parent_company": "Air France-KLM Group",
    },
    {
        "code": "IB",
        "name": "Iberia",
        "icao_code": "IBE",
        "submission_method": "email",
        "claim_email": "customerrelations@iberia.com",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "follow_up_schedule": ["3 weeks", "6 weeks", "10 weeks"],
        "regulations_covered": ["EU261"],
        "country": "ES",
        "parent_company": "International Airlines Group",
    },
    {
        "code": "VY",
        "name": "Vueling",
        "icao_code": "VLG",
        "submission_method": "web_form",
        "claim_form_url": "https://www.vueling.com/en/customer-services/claims",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks"],
        "regulations_covered": ["EU261"],
        "country": "ES",
        "parent_company": "International Airlines Group",
    },
    {
        "code": "TP",
        "name": "TAP Air Portugal",
        "icao_code": "TAP",
        "aliases": ["TAP Portugal"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.flytap.com/en-us/support/claims",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks", "10 weeks"],
        "regulations_covered": ["EU261"],
        "country": "PT",
    },
    {
        "code": "AZ",
        "name": "ITA Airways",
        "icao_code": "ITY",
        "aliases": ["Alitalia"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.ita-airways.com/en_gb/support/claims.html",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "IT",
    },
    {
        "code": "OS",
        "name": "Austrian Airlines",
        "icao_code": "AUA",
        "aliases": ["Austrian"],
        "submission_method": "email",
        "claim_email": "customer.relations@austrian.com",
        "required_fields": _STANDARD_FIELDS,
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "AT",
        "parent_company": "Lufthansa Group",
    },
    {
        "code": "SK",
        "name": "SAS Scandinavian Airlines",
        "icao_code": "SAS",
        "aliases": ["SAS", "Scandinavian Airlines"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.flysas.com/en/customer-service/claims",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks"],
        "regulations_covered": ["EU261", "NORWEGIAN"],
        "country": "SE",
        "region": "Nordics",
    },
    {
        "code": "AY",
        "name": "Finnair",
        "icao_code": "FIN",
        "submission_method": "web_form",
        "claim_form_url": "https://www.finnair.com/en/customer-feedback",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["2 weeks", "4 weeks", "8 weeks"],
        "regulations_covered": ["EU261"],
        "country": "FI",
        "region": "Nordics",
    },
    {
        "code": "LO",
        "name": "LOT Polish Airlines",
        "icao_code": "LOT",
        "aliases": ["LOT"],
        "submission_method": "email",
        "claim_email": "claims@lot.pl",
        "required_fields": _STANDARD_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks"],
        "regulations_covered": ["EU261"],
        "country": "PL",
    },
    # Switzerland and Norway
    {
        "code": "LX",
        "name": "Swiss International Air Lines",
        "icao_code": "SWR",
        "aliases": ["Swiss", "Swiss Air"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.swiss.com/ch/en/customer-support/feedback",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "5 weeks", "8 weeks"],
        "regulations_covered": ["SWISS", "EU261"],
        "country": "CH",
        "parent_company": "Lufthansa Group",
    },
    {
        "code": "DY",
        "name": "Norwegian Air Shuttle",
        "icao_code": "NOZ",
        "aliases": ["Norwegian", "Norwegian Air"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.norwegian.com/uk/travel-info/flight-disruption/",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "follow_up_schedule": ["3 weeks", "6 weeks", "10 weeks"],
        "regulations_covered": ["NORWEGIAN", "EU261"],
        "country": "NO",
        "region": "Nordics",
    },
    # North America
    {
        "code": "AA",
        "name": "American Airlines",
        "icao_code": "AAL",
        "aliases": ["American"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.aa.com/contact/forms",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "30 days",
        "follow_up_schedule": ["30 days", "60 days"],
        "regulations_covered": ["US_DOT"],
        "country": "US",
        "region": "North America",
        "parent_company": "American Airlines Group",
    },
    {
        "code": "DL",
        "name": "Delta Air Lines",
        "icao_code": "DAL",
        "aliases": ["Delta"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.delta.com/us/en/need-help/overview",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "30 days",
        "follow_up_schedule": ["30 days", "60 days"],
        "regulations_covered": ["US_DOT"],
        "country": "US",
        "region": "North America",
    },
    {
        "code": "UA",
        "name": "United Airlines",
        "icao_code": "UAL",
        "aliases": ["United"],
        "submission_method": "email",
        "claim_email": "customercare@united.com",
        "required_fields": _STANDARD_FIELDS,
        "expected_response_time": "30 days",
        "follow_up_schedule": ["30 days", "60 days"],
        "regulations_covered": ["US_DOT"],
        "country": "US",
        "region": "North America",
    },
    {
        "code": "AC",
        "name": "Air Canada",
        "icao_code": "ACA",
        "submission_method": "web_form",
        "claim_form_url": "https://www.aircanada.com/ca/en/aco/home/fly/customer-support/appr.html",
        "required_fields": _STANDARD_FIELDS + ["booking_reference"],
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "30 days",
        "follow_up_schedule": ["30 days", "60 days"],
        "regulations_covered": ["CANADIAN"],
        "country": "CA",
        "region": "North America",
    },
    {
        "code": "WS",
        "name": "WestJet",
        "icao_code": "WJA",
        "aliases": ["West Jet"],
        "submission_method": "web_form",
        "claim_form_url": "https://www.westjet.com/en-ca/flight-status/appr",
        "required_fields": _STANDARD_FIELDS,
        "form_fields": _STANDARD_FORM_FIELDS,
        "expected_response_time": "30 days",
        "follow_up_schedule": ["30 days"],
        "regulations_covered": ["CANADIAN"],
        "country": "CA",
        "region": "North America",
    },
]
