"""
API clients for external services
"""

from .flight_offers_client import FlightOffersClient
from .completion_client import CompletionClient

__all__ = [
    "FlightOffersClient",
    "CompletionClient",
]
