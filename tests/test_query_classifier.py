"""
Tests for query classification
"""

from datetime import date

import pytest

from airline_assistant.services.flight_query_extractor import FlightQueryExtractor
from airline_assistant.services.query_classifier import QueryClassifier
from airline_assistant.types import QueryKind


class TestQueryClassifier:
    """Test routing decisions"""

    @pytest.fixture
    def classifier(self):
        return QueryClassifier(FlightQueryExtractor(today=lambda: date(2024, 5, 1)))

    def test_extracted_flight_query(self, classifier):
        result = classifier.classify("Show me flights from New York to London")

        assert result.kind == QueryKind.FLIGHT_SEARCH
        assert result.needs_flight_api
        assert not result.needs_scraping
        assert result.flight_query.origin_code == "JFK"
        assert result.flight_query.destination_code == "LHR"

    def test_flight_keywords_without_parameters(self, classifier):
        result = classifier.classify("I want to book a flight")

        assert result.kind == QueryKind.FLIGHT_SEARCH
        assert result.needs_flight_api
        assert result.flight_query is None

    def test_airline_info_question(self, classifier):
        result = classifier.classify("What is the baggage allowance?")

        assert result.kind == QueryKind.AIRLINE_INFO
        assert result.needs_scraping
        assert not result.needs_flight_api
        assert result.flight_query is None

    def test_info_keyword_wins_over_flight_keyword(self, classifier):
        result = classifier.classify("Can I change my flight?")

        assert result.kind == QueryKind.AIRLINE_INFO
        assert result.needs_scraping

    def test_extraction_wins_over_info_keywords(self, classifier):
        result = classifier.classify("flights from DEL to BOM with extra baggage")
        assert result.kind == QueryKind.FLIGHT_SEARCH
        assert result.flight_query is not None

    def test_no_keywords_is_airline_info(self, classifier):
        result = classifier.classify("Hello")

        assert result.kind == QueryKind.AIRLINE_INFO
        assert result.needs_scraping

    def test_empty_message(self, classifier):
        assert classifier.classify("").kind == QueryKind.AIRLINE_INFO

    def test_classification_is_immutable(self, classifier):
        result = classifier.classify("Hello")
        with pytest.raises(Exception):
            result.kind = QueryKind.GENERAL
