"""
Interface definitions for the retrieval and completion providers
"""

from .providers import CompletionProviderInterface, FlightOfferProviderInterface, KnowledgeProviderInterface

__all__ = [
    "CompletionProviderInterface",
    "FlightOfferProviderInterface",
    "KnowledgeProviderInterface",
]
