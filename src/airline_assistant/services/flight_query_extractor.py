"""
Pattern-based extraction of flight search parameters from free text.

Locations are found by an ordered list of strategies, and the first strategy
that yields a code wins:

1. an explicit upper-case location code after the direction word
   ("from JFK", "to LHR");
2. a free-text place name after the direction word, resolved through the
   location table trying the full phrase, then its first two words, then its
   first word.

Both origin and destination must resolve, otherwise nothing is extracted.
"""

import re
from datetime import date, timedelta
from typing import Callable, Optional, Tuple

import structlog

from ..types import FlightSearchParams, TravelClass
from ..utils.validators import validate_location_code, parse_day_month_year, parse_iso_date
from .location_resolver import resolve_location


logger = structlog.get_logger(__name__)


FLIGHT_INTENT_KEYWORDS = (
    'flight', 'fly', 'ticket', 'booking', 'reservation',
    'from', 'to', 'departure', 'arrival', 'destination',
    'date', 'when', 'price', 'cost',
)

FILLER_WORDS = frozenset({'available', 'right', 'now', 'today', 'tomorrow', 'what', 'are', 'is'})

ORIGIN = "origin"
DESTINATION = "destination"

_DIRECTION_WORDS = {
    ORIGIN: r'from|departure|leaving',
    DESTINATION: r'to|destination|arriving|arrival',
}

_SHARED_BOUNDARY = r'on|date|for|in|at|with|and|next|this|return|returning|coming|back|today|tomorrow|please'
_PHRASE_BOUNDARY = {
    ORIGIN: rf'to|destination|arriving|arrival|{_SHARED_BOUNDARY}',
    DESTINATION: rf'from|departure|departing|leaving|{_SHARED_BOUNDARY}',
}

_LETTER = r"(?:[^\W\d_]|[\u0900-\u0963\u0970-\u097F])"
_PLACE = rf"{_LETTER}+(?:[ \t'-]+{_LETTER}+)*?"

# A code followed by another upper-case word is the start of a name ("FROM NEW YORK")
_CODE_PATTERNS = {
    direction: re.compile(
        rf'\b(?i:{words})\s+([A-Z]{{3}})\b'
        rf'(?!\s+(?!(?i:{_PHRASE_BOUNDARY[direction]})\b)[A-Z]{{2,}}\b)'
    )
    for direction, words in _DIRECTION_WORDS.items()
}

# Wrapped in a lookahead so candidates overlap: "to fly to Paris" also yields "Paris"
_PHRASE_PATTERNS = {
    direction: re.compile(
        rf'(?=\b(?:{words})\s+({_PLACE})(?=\s+(?:{_PHRASE_BOUNDARY[direction]})\b|\s*[\d,.;:!?()]|\s*$))',
        re.IGNORECASE,
    )
    for direction, words in _DIRECTION_WORDS.items()
}

_DATE_VALUE = r'(\d{4}-\d{2}-\d{2}|\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})'
RETURN_DATE_PATTERN = re.compile(
    rf'\b(?:return(?:ing)?|coming back|back)\s+(?:on\s+|date\s+)?{_DATE_VALUE}',
    re.IGNORECASE,
)
ISO_DATE_PATTERN = re.compile(r'\b(\d{4}-\d{2}-\d{2})\b')
DAY_MONTH_YEAR_PATTERN = re.compile(r'(?<![\d/\-])(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})(?![\d/\-])')

ADULTS_PATTERN = re.compile(r'(\d+)\s*(?:adults?|passengers?|persons?|people)\b', re.IGNORECASE)
CHILDREN_PATTERN = re.compile(r'(\d+)\s*(?:child(?:ren)?|kids?)\b', re.IGNORECASE)
INFANTS_PATTERN = re.compile(r'(\d+)\s*(?:infants?|bab(?:y|ies))\b', re.IGNORECASE)

TRAVEL_CLASS_PATTERNS = (
    (re.compile(r'\bpremium economy\b', re.IGNORECASE), TravelClass.PREMIUM_ECONOMY),
    (re.compile(r'\bbusiness class\b', re.IGNORECASE), TravelClass.BUSINESS),
    (re.compile(r'\bfirst class\b', re.IGNORECASE), TravelClass.FIRST),
)


def normalize_place_phrase(phrase: str) -> str:
    """Lower-case, drop filler words and collapse whitespace"""
    words = [word for word in phrase.lower().split() if word not in FILLER_WORDS]
    return ' '.join(words)


def resolve_place_phrase(phrase: str) -> Optional[str]:
    """Resolve the full phrase, then its first two words, then its first word"""
    words = normalize_place_phrase(phrase).split()
    if not words:
        return None

    candidates = [' '.join(words), ' '.join(words[:2]), words[0]]
    for candidate in dict.fromkeys(candidates):
        code = resolve_location(candidate)
        if code:
            return code

    return None


def explicit_code_strategy(text: str, direction: str) -> Optional[str]:
    match = _CODE_PATTERNS[direction].search(text)
    return match.group(1) if match else None


def city_phrase_strategy(text: str, direction: str) -> Optional[str]:
    for match in _PHRASE_PATTERNS[direction].finditer(text):
        code = resolve_place_phrase(match.group(1))
        if code:
            return code
    return None


LocationStrategy = Callable[[str, str], Optional[str]]

LOCATION_STRATEGIES: Tuple[LocationStrategy, ...] = (
    explicit_code_strategy,
    city_phrase_strategy,
)


def has_flight_intent(text: str) -> bool:
    lower_text = text.lower()
    return any(keyword in lower_text for keyword in FLIGHT_INTENT_KEYWORDS)


def _parse_date_value(value: str) -> Optional[date]:
    if re.fullmatch(r'\d{4}-\d{2}-\d{2}', value):
        return parse_iso_date(value)
    return parse_day_month_year(value)


def _count(pattern: re.Pattern, text: str, default: int) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else default


class FlightQueryExtractor:
    """Extract FlightSearchParams from a customer message"""

    def __init__(
        self,
        strategies: Tuple[LocationStrategy, ...] = LOCATION_STRATEGIES,
        today: Callable[[], date] = date.today,
    ):
        self.strategies = strategies
        self.today = today

    def extract(self, text: str) -> Optional[FlightSearchParams]:
        """Return structured search parameters, or None when origin and destination do not both resolve"""
        if not text or not has_flight_intent(text):
            return None

        origin = self.extract_location(text, ORIGIN)
        destination = self.extract_location(text, DESTINATION)

        if not (validate_location_code(origin) and validate_location_code(destination)):
            logger.debug("Flight query incomplete", origin=origin, destination=destination)
            return None

        return_date, departure_text = self._extract_return_date(text)
        departure_date = self._extract_departure_date(departure_text)

        params = FlightSearchParams(
            origin_code=origin,
            destination_code=destination,
            departure_date=departure_date,
            return_date=return_date,
            adults=max(1, _count(ADULTS_PATTERN, text, 1)),
            children=_count(CHILDREN_PATTERN, text, 0),
            infants=_count(INFANTS_PATTERN, text, 0),
            travel_class=self._extract_travel_class(text),
        )

        logger.debug(
            "Flight query extracted",
            origin=params.origin_code,
            destination=params.destination_code,
            departure_date=params.departure_date.isoformat(),
        )
        return params

    def extract_location(self, text: str, direction: str) -> Optional[str]:
        for strategy in self.strategies:
            code = strategy(text, direction)
            if code:
                return code
        return None

    def _extract_return_date(self, text: str) -> Tuple[Optional[date], str]:
        """Parse the return date and strip its clause so it is not read as the departure date"""
        match = RETURN_DATE_PATTERN.search(text)
        if not match:
            return None, text

        remaining = text[:match.start()] + ' ' + text[match.end():]
        return _parse_date_value(match.group(1)), remaining

    def _extract_departure_date(self, text: str) -> date:
        iso_match = ISO_DATE_PATTERN.search(text)
        if iso_match:
            parsed = parse_iso_date(iso_match.group(1))
            if parsed:
                return parsed

        dmy_match = DAY_MONTH_YEAR_PATTERN.search(text)
        if dmy_match:
            parsed = parse_day_month_year(dmy_match.group(1))
            if parsed:
                return parsed

        return self.today() + timedelta(days=1)

    @staticmethod
    def _extract_travel_class(text: str) -> TravelClass:
        for pattern, travel_class in TRAVEL_CLASS_PATTERNS:
            if pattern.search(text):
                return travel_class
        return TravelClass.ECONOMY
