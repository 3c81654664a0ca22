"""
Provider interface definitions
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..types import ChatMessage, FlightOffer, FlightSearchParams, ScrapedKnowledgeBase


class FlightOfferProviderInterface(ABC):
    """Interface for flight offer search"""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for the provider are present"""
        pass

    @abstractmethod
    async def search(self, params: FlightSearchParams) -> Optional[List[FlightOffer]]:
        """Search offers; None on failure or missing credentials, never raises"""
        pass

    @abstractmethod
    async def close(self):
        pass


class KnowledgeProviderInterface(ABC):
    """Interface for the airline knowledge base"""

    @abstractmethod
    async def get_knowledge_base(self) -> Optional[ScrapedKnowledgeBase]:
        """Current knowledge base; never raises"""
        pass


class CompletionProviderInterface(ABC):
    """Interface for LLM text generation"""

    @abstractmethod
    async def generate(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        """Generate a reply; raises CompletionError on upstream failure"""
        pass

    @abstractmethod
    async def verify_key(self) -> str:
        """Check the provider credentials with a minimal request"""
        pass

    @abstractmethod
    async def close(self):
        pass
