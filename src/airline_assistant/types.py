"""
Core data types for the airline assistant
"""

from enum import Enum
from typing import Optional, List, Any, Dict
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field


class QueryKind(str, Enum):
    """What a customer message needs in order to be answered"""
    FLIGHT_SEARCH = "flight_search"
    AIRLINE_INFO = "airline_info"
    GENERAL = "general"


class TravelClass(str, Enum):
    """Cabin classes accepted by the flight offer search"""
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


# Query Models
class FlightSearchParams(BaseModel):
    """Structured flight search extracted from a customer message"""
    origin_code: str = Field(..., pattern=r"^[A-Z]{3}$", description="Origin location code")
    destination_code: str = Field(..., pattern=r"^[A-Z]{3}$", description="Destination location code")
    departure_date: date = Field(..., description="Outbound travel date")
    return_date: Optional[date] = Field(None, description="Inbound travel date for round trips")
    adults: int = Field(default=1, ge=0)
    children: int = Field(default=0, ge=0)
    infants: int = Field(default=0, ge=0)
    travel_class: TravelClass = Field(default=TravelClass.ECONOMY)


class QueryClassification(BaseModel):
    """Routing decision for a single inbound message"""
    model_config = ConfigDict(frozen=True)

    kind: QueryKind
    needs_scraping: bool
    needs_flight_api: bool
    flight_query: Optional[FlightSearchParams] = None


class LanguageInfo(BaseModel):
    """Response language and the instruction embedded in the prompt"""
    model_config = ConfigDict(frozen=True)

    language: str
    instruction: str
    response_language: str


# Flight Offer Models
class Segment(BaseModel):
    """One flown leg of an itinerary"""
    departure_airport: str
    departure_time: str
    arrival_airport: str
    arrival_time: str
    carrier_code: str
    flight_number: str
    duration: str


class Price(BaseModel):
    amount: str
    currency: str


class FlightOffer(BaseModel):
    """A priced itinerary, normalized for prompt rendering"""
    id: str
    price: Price
    outbound_segments: List[Segment]
    outbound_duration: str = ""
    return_segments: Optional[List[Segment]] = None
    return_duration: Optional[str] = None

    @property
    def dedup_key(self) -> tuple:
        first = self.outbound_segments[0]
        last = self.outbound_segments[-1]
        return (first.departure_airport, last.arrival_airport, self.price.amount, first.departure_time)


# Knowledge Models
class ScrapedKnowledgeBase(BaseModel):
    """Current best known content of the airline policy pages"""
    baggage: Optional[str] = None
    check_in: Optional[str] = None
    booking: Optional[str] = None
    policies: Optional[str] = None
    maharaja_club: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    is_fallback: bool = False

    def sections(self) -> Dict[str, Optional[str]]:
        return {
            "baggage": self.baggage,
            "check_in": self.check_in,
            "booking": self.booking,
            "policies": self.policies,
            "maharaja_club": self.maharaja_club,
        }


# Request and Response Models
class ChatMessage(BaseModel):
    """A single conversation turn"""
    role: str = Field(..., description="user, assistant or system")
    content: str = Field(default="", description="Message text")


class ChatRequest(BaseModel):
    """Chat request model"""
    messages: List[ChatMessage] = Field(..., description="Conversation so far, oldest first")


class ChatResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str


class EvaluationRequest(BaseModel):
    """Single-question evaluation request"""
    question: Optional[str] = None
    ground_truth: Optional[str] = None
    expected_keywords: List[str] = Field(default_factory=list, alias="expectedKeywords")

    model_config = ConfigDict(populate_by_name=True)


class EvaluationResponse(BaseModel):
    success: bool
    question: str
    query_type: QueryKind = Field(..., serialization_alias="queryType")
    response: str
    metrics: Dict[str, Any]


# Custom Exceptions
class AirlineAssistantError(Exception):
    """Base exception for the airline assistant"""
    pass


class ConfigurationError(AirlineAssistantError):
    """Required configuration is missing"""
    pass


class FlightAPIError(AirlineAssistantError):
    """Exception for flight offer API failures"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ScrapeError(AirlineAssistantError):
    """A knowledge page could not be fetched or yielded too little content"""
    pass


class CompletionError(AirlineAssistantError):
    """Exception for completion capability failures"""
    def __init__(self, message: str, status_code: int = 500, error_code: str = "COMPLETION_FAILED"):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)
