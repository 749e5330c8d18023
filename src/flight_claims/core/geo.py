"""
Airport reference data and great-circle distance calculation.
"""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0

EU_COUNTRIES: frozenset[str] = frozenset(
    {
        "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR",
        "DE", "GR", "HU", "IE", "IT", "LV", "LT", "LU", "MT", "NL",
        "PL", "PT", "RO", "SK", "SI", "ES", "SE",
    }
)
UK_COUNTRIES: frozenset[str] = frozenset({"GB"})
SWISS_COUNTRIES: frozenset[str] = frozenset({"CH"})
NORWEGIAN_COUNTRIES: frozenset[str] = frozenset({"NO"})
CANADIAN_COUNTRIES: frozenset[str] = frozenset({"CA"})
US_COUNTRIES: frozenset[str] = frozenset({"US"})


@dataclass(frozen=True)
class Airport:
    """Airport with location data."""

    code: str
    name: str
    city: str
    country: str
    latitude: float
    longitude: float


_AIRPORT_ROWS: list[tuple[str, str, str, str, float, float]] = [
    # United Kingdom
    ("LHR", "London Heathrow", "London", "GB", 51.4700, -0.4543),
    ("LGW", "London Gatwick", "London", "GB", 51.1537, -0.1821),
    ("STN", "London Stansted", "London", "GB", 51.8860, 0.2389),
    ("LTN", "London Luton", "London", "GB", 51.8747, -0.3683),
    ("MAN", "Manchester", "Manchester", "GB", 53.3537, -2.2750),
    ("BHX", "Birmingham", "Birmingham", "GB", 52.4539, -1.7480),
    ("BRS", "Bristol", "Bristol", "GB", 51.3827, -2.7191),
    ("EDI", "Edinburgh", "Edinburgh", "GB", 55.9500, -3.3725),
    ("GLA", "Glasgow", "Glasgow", "GB", 55.8719, -4.4331),
    ("BFS", "Belfast International", "Belfast", "GB", 54.6575, -6.2158),
    # European Union
    ("DUB", "Dublin", "Dublin", "IE", 53.4213, -6.2701),
    ("CDG", "Paris Charles de Gaulle", "Paris", "FR", 49.0097, 2.5479),
    ("ORY", "Paris Orly", "Paris", "FR", 48.7262, 2.3652),
    ("NCE", "Nice Cote d'Azur", "Nice", "FR", 43.6584, 7.2159),
    ("FRA", "Frankfurt", "Frankfurt", "DE", 50.0379, 8.5622),
    ("MUC", "Munich", "Munich", "DE", 48.3538, 11.7861),
    ("BER", "Berlin Brandenburg", "Berlin", "DE", 52.3667, 13.5033),
    ("HAM", "Hamburg", "Hamburg", "DE", 53.6304, 9.9882),
    ("AMS", "Amsterdam Schiphol", "Amsterdam", "NL", 52.3105, 4.7683),
    ("BRU", "Brussels", "Brussels", "BE", 50.9014, 4.4844),
    ("MAD", "Madrid Barajas", "Madrid", "ES", 40.4983, -3.5676),
    ("BCN", "Barcelona El Prat", "Barcelona", "ES", 41.2974, 2.0833),
    ("PMI", "Palma de Mallorca", "Palma", "ES", 39.5517, 2.7388),
    ("TFS", "Tenerife South", "Tenerife", "ES", 28.0445, -16.5725),
    ("LIS", "Lisbon", "Lisbon", "PT", 38.7742, -9.1342),
    ("FCO", "Rome Fiumicino", "Rome", "IT", 41.8003, 12.2389),
    ("MXP", "Milan Malpensa", "Milan", "IT", 45.6306, 8.7281),
    ("VIE", "Vienna", "Vienna", "AT", 48.1103, 16.5697),
    ("CPH", "Copenhagen", "Copenhagen", "DK", 55.6180, 12.6508),
    ("ARN", "Stockholm Arlanda", "Stockholm", "SE", 59.6498, 17.9238),
    ("HEL", "Helsinki Vantaa", "Helsinki", "FI", 60.3172, 24.9633),
    ("ATH", "Athens", "Athens", "GR", 37.9364, 23.9445),
    ("WAW", "Warsaw Chopin", "Warsaw", "PL", 52.1657, 20.9671),
    ("PRG", "Prague", "Prague", "CZ", 50.1008, 14.2600),
    ("BUD", "Budapest", "Budapest", "HU", 47.4298, 19.2611),
    # Switzerland and Norway
    ("ZRH", "Zurich", "Zurich", "CH", 47.4647, 8.5492),
    ("GVA", "Geneva", "Geneva", "CH", 46.2381, 6.1090),
    ("BSL", "EuroAirport Basel", "Basel", "CH", 47.5896, 7.5299),
    ("OSL", "Oslo Gardermoen", "Oslo", "NO", 60.1976, 11.1004),
    ("BGO", "Bergen Flesland", "Bergen", "NO", 60.2934, 5.2181),
    ("TRD", "Trondheim Vaernes", "Trondheim", "NO", 63.4578, 10.9240),
    ("SVG", "Stavanger Sola", "Stavanger", "NO", 58.8767, 5.6378),
    # United States
    ("JFK", "New York John F. Kennedy", "New York", "US", 40.6413, -73.7781),
    ("LGA", "New York LaGuardia", "New York", "US", 40.7769, -73.8740),
    ("EWR", "Newark Liberty", "Newark", "US", 40.6895, -74.1745),
    ("BOS", "Boston Logan", "Boston", "US", 42.3656, -71.0096),
    ("ORD", "Chicago O'Hare", "Chicago", "US", 41.9742, -87.9073),
    ("ATL", "Atlanta Hartsfield-Jackson", "Atlanta", "US", 33.6407, -84.4277),
    ("DFW", "Dallas/Fort Worth", "Dallas", "US", 32.8998, -97.0403),
    ("DEN", "Denver", "Denver", "US", 39.8561, -104.6737),
    ("LAX", "Los Angeles", "Los Angeles", "US", 33.9416, -118.4085),
    ("SFO", "San Francisco", "San Francisco", "US", 37.6213, -122.3790),
    ("SEA", "Seattle-Tacoma", "Seattle", "US", 47.4502, -122.3088),
    ("MIA", "Miami", "Miami", "US", 25.7959, -80.2870),
    ("IAD", "Washington Dulles", "Washington", "US", 38.9531, -77.4565),
    ("LAS", "Las Vegas Harry Reid", "Las Vegas", "US", 36.0840, -115.1537),
    # Canada
    ("YYZ", "Toronto Pearson", "Toronto", "CA", 43.6777, -79.6248),
    ("YVR", "Vancouver", "Vancouver", "CA", 49.1967, -123.1815),
    ("YUL", "Montreal Trudeau", "Montreal", "CA", 45.4706, -73.7408),
    ("YYC", "Calgary", "Calgary", "CA", 51.1215, -114.0076),
    # Rest of world
    ("DXB", "Dubai", "Dubai", "AE", 25.2532, 55.3657),
    ("DOH", "Doha Hamad", "Doha", "QA", 25.2731, 51.6081),
    ("IST", "Istanbul", "Istanbul", "TR", 41.2753, 28.7519),
    ("NRT", "Tokyo Narita", "Tokyo", "JP", 35.7720, 140.3929),
    ("SIN", "Singapore Changi", "Singapore", "SG", 1.3644, 103.9915),
    ("MEX", "Mexico City", "Mexico City", "MX", 19.4361, -99.0719),
]

AIRPORTS: dict[str, Airport] = {
    row[0]: Airport(*row) for row in _AIRPORT_ROWS
}


def get_airport(code: str) -> Airport | None:
    """Look up an airport by IATA code (case-insensitive)."""
    if not code:
        return None
    return AIRPORTS.get(code.strip().upper())


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(origin: str, destination: str) -> float | None:
    """
    Rounded great-circle distance between two airports.

    Returns:
        Distance in km, 0 for the same airport, or None if either is unknown
    """
    start = get_airport(origin)
    end = get_airport(destination)
    if start is None or end is None:
        return None
    if start.code == end.code:
        return 0.0
    return float(
        round(haversine_km(start.latitude, start.longitude, end.latitude, end.longitude))
    )
