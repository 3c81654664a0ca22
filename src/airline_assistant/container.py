"""
Dependency injection container for airline assistant components
"""

from typing import Any, Dict, Optional

import structlog

from .config import config
from .clients import CompletionClient, FlightOffersClient
from .interfaces import CompletionProviderInterface, FlightOfferProviderInterface, KnowledgeProviderInterface
from .services import ChatOrchestrator, KnowledgePreloader, KnowledgeScraper, QueryClassifier, TTLCache

logger = structlog.get_logger()


class ServiceContainer:
    """
    Dependency injection container for managing service instances and their dependencies.

    Any component passed to the constructor is used as-is instead of the
    default one built from configuration.
    """

    def __init__(
        self,
        classifier: Optional[QueryClassifier] = None,
        flight_client: Optional[FlightOfferProviderInterface] = None,
        scraper: Optional[KnowledgeScraper] = None,
        knowledge: Optional[KnowledgeProviderInterface] = None,
        completion: Optional[CompletionProviderInterface] = None,
        start_preloader: bool = True,
    ):
        self._overrides: Dict[str, Any] = {
            'classifier': classifier,
            'flight_client': flight_client,
            'scraper': scraper,
            'knowledge': knowledge,
            'completion': completion,
        }
        self._start_preloader = start_preloader
        self._services: Dict[str, Any] = {}
        self._initialized = False

    async def initialize(self):
        """Initialize all services and their dependencies"""
        if self._initialized:
            return

        logger.info("Initializing service container")

        try:
            # Completion credentials are required, fail before anything starts
            self._initialize_completion()
            self._initialize_retrieval()
            self._initialize_orchestrator()

            self._initialized = True
            logger.info("Service container initialized successfully", services=self.list_services())

        except Exception as e:
            logger.error("Failed to initialize service container", error=str(e))
            raise

        knowledge = self._services['knowledge']
        if self._start_preloader and isinstance(knowledge, KnowledgePreloader):
            knowledge.start()
            logger.info("Knowledge preloader started", interval=knowledge.interval)

    def _initialize_completion(self):
        completion = self._overrides['completion'] or CompletionClient()
        self._services['completion'] = completion
        logger.info("Completion client initialized", model=config.completion.model)

    def _initialize_retrieval(self):
        """Initialize caches, the flight offer client and the knowledge scraper"""
        flight_client = self._overrides['flight_client']
        if flight_client is None:
            token_cache = TTLCache(default_ttl=config.flight_api.default_token_lifetime, name="token")
            flight_client = FlightOffersClient(token_cache)
            if not flight_client.is_configured:
                logger.warning("Flight API credentials not configured. Flight search will not work.")
        self._services['flight_client'] = flight_client

        scraper = self._overrides['scraper']
        if scraper is None:
            knowledge_cache = TTLCache(default_ttl=config.scraper.cache_ttl, name="knowledge")
            scraper = KnowledgeScraper(knowledge_cache)
        self._services['scraper'] = scraper

        self._services['knowledge'] = self._overrides['knowledge'] or KnowledgePreloader(scraper)
        self._services['classifier'] = self._overrides['classifier'] or QueryClassifier()

    def _initialize_orchestrator(self):
        self._services['orchestrator'] = ChatOrchestrator(
            classifier=self._services['classifier'],
            flight_client=self._services['flight_client'],
            knowledge=self._services['knowledge'],
            completion=self._services['completion'],
        )

    def get_service(self, service_name: str) -> Any:
        """Get a service by name"""
        if not self._initialized:
            raise RuntimeError("Container not initialized. Call initialize() first.")

        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found in container")

        return self._services[service_name]

    def get_orchestrator(self) -> ChatOrchestrator:
        return self.get_service('orchestrator')

    def get_flight_client(self) -> FlightOfferProviderInterface:
        return self.get_service('flight_client')

    def get_scraper(self) -> KnowledgeScraper:
        return self.get_service('scraper')

    def get_knowledge(self) -> KnowledgeProviderInterface:
        return self.get_service('knowledge')

    def get_completion_client(self) -> CompletionProviderInterface:
        return self.get_service('completion')

    async def cleanup(self):
        """Stop background work and close HTTP clients"""
        if not self._initialized:
            return

        logger.info("Cleaning up service container")

        try:
            knowledge = self._services['knowledge']
            if isinstance(knowledge, KnowledgePreloader):
                await knowledge.stop()

            await self._services['scraper'].close()
            await self._services['flight_client'].close()
            await self._services['completion'].close()

            self._services.clear()
            self._initialized = False

            logger.info("Service container cleanup completed")

        except Exception as e:
            logger.error("Error during service container cleanup", error=str(e))

    def is_initialized(self) -> bool:
        """Check if container is initialized"""
        return self._initialized

    def list_services(self) -> Dict[str, str]:
        """List all registered services"""
        return {name: type(service).__name__ for name, service in self._services.items()}
