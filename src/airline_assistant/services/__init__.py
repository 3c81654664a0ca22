"""
Services module initialization
"""

from .cache_service import CacheKeyType, TTLCache
from .language_detector import detect_language, get_language_instructions
from .location_resolver import resolve_location, alias_collisions
from .flight_query_extractor import FlightQueryExtractor
from .query_classifier import QueryClassifier
from .knowledge_scraper import KnowledgeScraper
from .knowledge_preloader import KnowledgePreloader
from .prompt_builder import build_system_prompt
from .chat_orchestrator import ChatOrchestrator, ChatOutcome
from .evaluation_metrics import build_metrics, calculate_accuracy, calculate_relevance

__all__ = [
    'CacheKeyType',
    'TTLCache',
    'detect_language',
    'get_language_instructions',
    'resolve_location',
    'alias_collisions',
    'FlightQueryExtractor',
    'QueryClassifier',
    'KnowledgeScraper',
    'KnowledgePreloader',
    'build_system_prompt',
    'ChatOrchestrator',
    'ChatOutcome',
    'build_metrics',
    'calculate_accuracy',
    'calculate_relevance',
]
