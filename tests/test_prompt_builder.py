"""
Tests for system prompt assembly
"""

from datetime import date

import pytest

from airline_assistant.services.language_detector import ENGLISH, HINDI, get_language_instructions
from airline_assistant.services.prompt_builder import build_system_prompt, format_offer
from airline_assistant.types import (
    FlightOffer,
    FlightSearchParams,
    Price,
    QueryClassification,
    QueryKind,
    ScrapedKnowledgeBase,
    Segment,
)


def segment(origin, destination, departs, arrives, flight_number):
    return Segment(
        departure_airport=origin,
        departure_time=departs,
        arrival_airport=destination,
        arrival_time=arrives,
        carrier_code=flight_number[:2],
        flight_number=flight_number,
        duration="2h 5m",
    )


@pytest.fixture
def direct_offer():
    return FlightOffer(
        id="1",
        price=Price(amount="123.45", currency="EUR"),
        outbound_segments=[segment("DEL", "BOM", "2024-12-25 10:30", "2024-12-25 12:35", "AI101")],
        outbound_duration="2h 5m",
    )


@pytest.fixture
def connecting_offer():
    return FlightOffer(
        id="2",
        price=Price(amount="456.00", currency="EUR"),
        outbound_segments=[
            segment("DEL", "DXB", "2024-12-25 08:00", "2024-12-25 10:30", "AI101"),
            segment("DXB", "LHR", "2024-12-25 13:00", "2024-12-25 17:10", "AI202"),
        ],
        outbound_duration="13h 40m",
        return_segments=[segment("LHR", "DEL", "2025-01-05 21:00", "2025-01-06 10:30", "AI162")],
        return_duration="9h",
    )


@pytest.fixture
def flight_params():
    return FlightSearchParams(origin_code="DEL", destination_code="BOM", departure_date=date(2024, 12, 25))


@pytest.fixture
def knowledge_base():
    return ScrapedKnowledgeBase(
        baggage="Checked baggage allowance is 23 kg.",
        check_in="Online check-in opens 48 hours before departure.",
    )


def flight_classification(params=None):
    return QueryClassification(
        kind=QueryKind.FLIGHT_SEARCH, needs_scraping=False, needs_flight_api=True, flight_query=params
    )


INFO_CLASSIFICATION = QueryClassification(kind=QueryKind.AIRLINE_INFO, needs_scraping=True, needs_flight_api=False)
ENGLISH_INFO = get_language_instructions(ENGLISH)
HINDI_INFO = get_language_instructions(HINDI)


class TestFlightOffersPrompt:
    """Test prompts with flight data"""

    def test_flight_directive_and_data(self, direct_offer, flight_params):
        prompt = build_system_prompt(None, [direct_offer], flight_classification(flight_params), ENGLISH_INFO)

        assert "YOU MUST LIST THESE FLIGHTS" in prompt
        assert '"visit the website"' in prompt
        assert '"contact customer service"' in prompt
        assert "FLIGHT 1: AI101" in prompt
        assert "Price: 123.45 EUR" in prompt
        assert "not available" not in prompt

    def test_field_order(self, direct_offer):
        rendered = format_offer(direct_offer, 1)
        positions = [rendered.index(field) for field in ("Route:", "Price:", "Departure:", "Arrival:", "Duration:")]
        assert positions == sorted(positions)

    def test_connecting_and_return_legs(self, connecting_offer):
        rendered = format_offer(connecting_offer, 1)

        assert "Route: DEL to LHR" in rendered
        assert "Flight Numbers: AI101 + AI202" in rendered
        assert "Stops: 1" in rendered
        assert "Return Route: LHR to DEL" in rendered
        assert "Return Duration: 9h" in rendered

    def test_flight_data_precedes_knowledge(self, direct_offer, flight_params, knowledge_base):
        prompt = build_system_prompt(knowledge_base, [direct_offer], flight_classification(flight_params), ENGLISH_INFO)
        assert prompt.index("REAL-TIME FLIGHT DATA") < prompt.index("OFFICIAL AIR INDIA WEBSITE DATA")


class TestNoFlightDataPrompt:
    """Test prompts when flight search produced nothing"""

    @pytest.mark.parametrize("offers", [None, []])
    def test_search_attempted_without_results(self, flight_params, offers):
        prompt = build_system_prompt(None, offers, flight_classification(flight_params), ENGLISH_INFO)

        assert "NO DATA AVAILABLE" in prompt
        assert "from DEL to BOM on 2024-12-25" in prompt
        assert "A different date" in prompt
        assert "A specific city instead of a country" in prompt
        assert "REAL-TIME FLIGHT DATA" not in prompt

    def test_flight_intent_without_parameters(self):
        prompt = build_system_prompt(None, None, flight_classification(), ENGLISH_INFO)

        assert "Ask the user for" in prompt
        assert "departure city" in prompt
        assert "NO DATA AVAILABLE" not in prompt


class TestKnowledgePrompt:
    """Test prompts with scraped knowledge"""

    def test_sections_are_labeled(self, knowledge_base):
        prompt = build_system_prompt(knowledge_base, None, INFO_CLASSIFICATION, ENGLISH_INFO)

        assert "BAGGAGE INFORMATION" in prompt
        assert "23 kg" in prompt
        assert "CHECK-IN INFORMATION" in prompt
        assert "MAHARAJA CLUB INFORMATION" not in prompt
        assert "Use that section EXCLUSIVELY" in prompt
        assert "exactly as written" in prompt

    def test_knowledge_unavailable_note(self):
        prompt = build_system_prompt(None, None, INFO_CLASSIFICATION, ENGLISH_INFO)
        assert "not available right now" in prompt


class TestLanguageRule:
    """Test the language instruction placement"""

    def test_language_stated_at_start_and_end(self, knowledge_base):
        prompt = build_system_prompt(knowledge_base, None, INFO_CLASSIFICATION, HINDI_INFO)

        assert HINDI_INFO.instruction in prompt[:500]
        assert prompt.endswith("REMEMBER: Your entire response MUST be in Hindi.")

    def test_language_reiterated_with_flight_data(self, direct_offer, flight_params):
        prompt = build_system_prompt(None, [direct_offer], flight_classification(flight_params), HINDI_INFO)
        assert prompt.endswith("MUST be in Hindi.")

    def test_prompt_is_deterministic(self, direct_offer, flight_params, knowledge_base):
        args = (knowledge_base, [direct_offer], flight_classification(flight_params), ENGLISH_INFO)
        assert build_system_prompt(*args) == build_system_prompt(*args)
