"""
Answer quality metrics for single-question evaluation
"""

from typing import Any, Dict, Optional, Sequence

from ..types import QueryClassification


def _keyword_hit_rate(text_lower: str, keywords: Sequence[str]) -> float:
    if not keywords:
        return 0.0
    found = sum(1 for keyword in keywords if keyword.lower() in text_lower)
    return found / len(keywords)


def calculate_accuracy(predicted: str, ground_truth: str, keywords: Sequence[str] = ()) -> float:
    """50% Jaccard word overlap with the ground truth plus 50% keyword hit rate, as a percentage"""
    predicted_lower = predicted.lower()
    predicted_words = set(predicted_lower.split())
    truth_words = set((ground_truth or "").lower().split())

    union = predicted_words | truth_words
    jaccard = len(predicted_words & truth_words) / len(union) if union else 0.0

    return (jaccard * 0.5 + _keyword_hit_rate(predicted_lower, keywords) * 0.5) * 100


def calculate_relevance(question: str, answer: str, keywords: Sequence[str] = ()) -> float:
    """
    Relevance of an answer to its question, as a percentage.

    40% share of question words that appear in the answer, 40% keyword hit
    rate and 20% length score, where 200 characters or more scores fully.
    """
    answer_lower = answer.lower()
    question_words = set(question.lower().split())
    answer_words = set(answer_lower.split())

    question_relevance = len(question_words & answer_words) / len(question_words) if question_words else 0.0
    length_score = min(len(answer) / 200, 1)

    return (
        question_relevance * 0.4
        + _keyword_hit_rate(answer_lower, keywords) * 0.4
        + length_score * 0.2
    ) * 100


def build_metrics(
    question: str,
    response: str,
    classification: QueryClassification,
    latency_ms: int,
    has_flight_data: bool,
    has_scraped_data: bool,
    ground_truth: Optional[str] = None,
    expected_keywords: Sequence[str] = (),
) -> Dict[str, Any]:
    metrics: Dict[str, Any] = {
        "latency": latency_ms,
        "responseLength": len(response),
        "usedScraping": classification.needs_scraping,
        "usedFlightAPI": classification.needs_flight_api,
        "hasFlightData": has_flight_data,
        "hasScrapedData": has_scraped_data,
    }

    if ground_truth:
        metrics["accuracy"] = calculate_accuracy(response, ground_truth, expected_keywords)
        metrics["relevance"] = calculate_relevance(question, response, expected_keywords)

    return metrics
