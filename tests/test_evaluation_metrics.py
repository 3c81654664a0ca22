"""
Tests for evaluation metrics
"""

import pytest

from airline_assistant.services.evaluation_metrics import build_metrics, calculate_accuracy, calculate_relevance
from airline_assistant.types import QueryClassification, QueryKind


class TestAccuracy:
    """Test Jaccard + keyword accuracy"""

    def test_identical_text_without_keywords(self):
        assert calculate_accuracy("baggage is 23 kg", "baggage is 23 kg") == pytest.approx(50.0)

    def test_identical_text_with_found_keywords(self):
        assert calculate_accuracy("baggage is 23 kg", "Baggage is 23 kg", ["23 KG"]) == pytest.approx(100.0)

    def test_partial_overlap(self):
        # {a, b} vs {b, c}: Jaccard 1/3, one of two keywords found
        assert calculate_accuracy("a b", "b c", ["a", "z"]) == pytest.approx((1 / 3 * 0.5 + 0.5 * 0.5) * 100)

    def test_empty_inputs(self):
        assert calculate_accuracy("", "") == 0.0


class TestRelevance:
    """Test question coverage + keyword + length relevance"""

    def test_full_relevance(self):
        question = "baggage allowance"
        answer = "baggage allowance " + "x" * 200
        assert calculate_relevance(question, answer, ["allowance"]) == pytest.approx(100.0)

    def test_length_score_only(self):
        assert calculate_relevance("what", "y" * 100) == pytest.approx(10.0)

    def test_empty_question(self):
        assert calculate_relevance("", "") == 0.0


class TestBuildMetrics:
    """Test the metrics payload"""

    @pytest.fixture
    def classification(self):
        return QueryClassification(kind=QueryKind.AIRLINE_INFO, needs_scraping=True, needs_flight_api=False)

    def test_without_ground_truth(self, classification):
        metrics = build_metrics("q", "answer", classification, 120, False, True)

        assert metrics == {
            "latency": 120,
            "responseLength": 6,
            "usedScraping": True,
            "usedFlightAPI": False,
            "hasFlightData": False,
            "hasScrapedData": True,
        }

    def test_with_ground_truth(self, classification):
        metrics = build_metrics("q", "answer", classification, 120, False, True, ground_truth="answer")

        assert metrics["accuracy"] == pytest.approx(50.0)
        assert "relevance" in metrics
