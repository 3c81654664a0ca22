"""
Keyword and extraction based routing of customer messages
"""

from typing import Optional

import structlog

from ..types import QueryClassification, QueryKind
from .flight_query_extractor import FlightQueryExtractor


logger = structlog.get_logger(__name__)


FLIGHT_KEYWORDS = (
    'flight', 'fly', 'ticket', 'booking', 'reservation',
    'from', 'to', 'departure', 'arrival', 'destination',
    'available flights', 'show flights', 'search flights',
    'price', 'cost', 'cheap', 'cheapest', 'route',
    'schedule', 'departure date', 'return date',
)

AIRLINE_INFO_KEYWORDS = (
    'baggage', 'luggage', 'carry-on', 'checked', 'weight', 'kg', 'allowance',
    'check-in', 'checkin', 'online check', 'airport check',
    'cancel', 'cancellation', 'refund', 'change', 'modify', 'policy', 'policies',
    'meal', 'food', 'entertainment',
    'frequent flyer', 'miles', 'lounge', 'vip', 'maharaja club', 'maharaja', 'loyalty program',
    'visa', 'documentation', 'requirements',
    'pet', 'sports equipment', 'wheelchair', 'disability', 'special assistance',
)


class QueryClassifier:
    """
    Decide whether a message needs a flight search, scraped airline
    knowledge, or neither.

    Decision order:
    1. A successfully extracted flight query always means flight search.
    2. Flight keywords without any airline-info keyword mean flight search
       without parameters (the user has to be asked for details).
    3. Airline-info keywords, or no keywords at all, mean airline info, so
       keyword-only flight intent loses to any info keyword.
    4. Anything else is general and still uses scraped knowledge.
    """

    def __init__(self, extractor: Optional[FlightQueryExtractor] = None):
        self.extractor = extractor or FlightQueryExtractor()

    def classify(self, text: str) -> QueryClassification:
        flight_query = self.extractor.extract(text or "")
        if flight_query is not None:
            return QueryClassification(
                kind=QueryKind.FLIGHT_SEARCH,
                needs_scraping=False,
                needs_flight_api=True,
                flight_query=flight_query,
            )

        lower_text = (text or "").lower()
        has_flight_intent = any(keyword in lower_text for keyword in FLIGHT_KEYWORDS)
        has_info_intent = any(keyword in lower_text for keyword in AIRLINE_INFO_KEYWORDS)

        if has_flight_intent and not has_info_intent:
            logger.debug("Flight intent without extractable parameters")
            return QueryClassification(
                kind=QueryKind.FLIGHT_SEARCH,
                needs_scraping=False,
                needs_flight_api=True,
                flight_query=None,
            )

        if has_info_intent or not has_flight_intent:
            return QueryClassification(
                kind=QueryKind.AIRLINE_INFO,
                needs_scraping=True,
                needs_flight_api=False,
            )

        # Not reachable with the current keyword sets
        return QueryClassification(
            kind=QueryKind.GENERAL,
            needs_scraping=True,
            needs_flight_api=False,
        )
