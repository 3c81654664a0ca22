"""
Per-request orchestration: classify, retrieve, assemble the prompt, complete
"""

import asyncio
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from ..interfaces.providers import (
    CompletionProviderInterface,
    FlightOfferProviderInterface,
    KnowledgeProviderInterface,
)
from ..types import ChatMessage, FlightOffer, QueryClassification, ScrapedKnowledgeBase
from .language_detector import detect_language, get_language_instructions
from .prompt_builder import build_system_prompt
from .query_classifier import QueryClassifier


logger = structlog.get_logger(__name__)


@dataclass
class ChatOutcome:
    """Result of answering one conversation turn"""
    response: str
    classification: QueryClassification
    has_flight_data: bool
    has_scraped_data: bool
    latency_ms: int


class ChatOrchestrator:
    """Entry point invoked for every inbound chat message"""

    def __init__(
        self,
        classifier: QueryClassifier,
        flight_client: FlightOfferProviderInterface,
        knowledge: KnowledgeProviderInterface,
        completion: CompletionProviderInterface,
    ):
        self.classifier = classifier
        self.flight_client = flight_client
        self.knowledge = knowledge
        self.completion = completion

    async def answer(self, messages: Sequence[ChatMessage]) -> ChatOutcome:
        """
        Answer the last message of a conversation.

        Language and intent come from the last message only. The knowledge
        fetch and the flight search run concurrently when both are needed.
        Completion failures propagate as CompletionError.
        """
        if not messages:
            raise ValueError("At least one message is required")

        started = time.perf_counter()
        text = messages[-1].content

        language_info = get_language_instructions(detect_language(text))
        classification = self.classifier.classify(text)
        logger.info(
            "Query classified",
            kind=classification.kind.value,
            language=language_info.language,
            needs_scraping=classification.needs_scraping,
            needs_flight_api=classification.needs_flight_api,
        )

        scraped_data, flight_offers = await asyncio.gather(
            self._fetch_knowledge(classification),
            self._search_flights(classification),
        )

        system_prompt = build_system_prompt(scraped_data, flight_offers, classification, language_info)
        response = await self.completion.generate(system_prompt, messages)

        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info("Chat answered", kind=classification.kind.value, latency_ms=latency_ms)

        return ChatOutcome(
            response=response,
            classification=classification,
            has_flight_data=flight_offers is not None,
            has_scraped_data=scraped_data is not None,
            latency_ms=latency_ms,
        )

    async def ask(self, question: str) -> ChatOutcome:
        """Answer a single standalone question"""
        return await self.answer([ChatMessage(role="user", content=question)])

    async def _fetch_knowledge(self, classification: QueryClassification) -> Optional[ScrapedKnowledgeBase]:
        if not classification.needs_scraping:
            return None
        return await self.knowledge.get_knowledge_base()

    async def _search_flights(self, classification: QueryClassification) -> Optional[List[FlightOffer]]:
        if not classification.needs_flight_api or classification.flight_query is None:
            return None
        return await self.flight_client.search(classification.flight_query)
