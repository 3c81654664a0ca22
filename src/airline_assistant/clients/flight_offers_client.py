"""
Flight offer search client (Amadeus Self-Service API)
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..config import FlightAPIConfig, config
from ..interfaces.providers import FlightOfferProviderInterface
from ..services.cache_service import CacheKeyType, TTLCache
from ..types import FlightAPIError, FlightOffer, FlightSearchParams, Price, Segment


logger = structlog.get_logger(__name__)


TOKEN_PATH = "/v1/security/oauth2/token"
FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
TOKEN_CACHE_KEY = TTLCache.make_key(CacheKeyType.ACCESS_TOKEN, "amadeus")

ISO_DURATION_PATTERN = re.compile(r'^P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?')


def format_duration(value: Optional[str]) -> str:
    """Turn an ISO-8601 duration such as PT2H35M into '2h 35m'"""
    if not value:
        return ""

    match = ISO_DURATION_PATTERN.match(value)
    if not match or not any(match.groups()):
        return value

    days, hours, minutes = (int(group) if group else 0 for group in match.groups())
    hours += days * 24

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or not hours:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def format_local_time(value: Optional[str]) -> str:
    """Format an airport-local timestamp (2024-11-02T10:30:00) as '2024-11-02 10:30'"""
    if not value:
        return ""

    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def normalize_segment(segment: Dict[str, Any]) -> Segment:
    carrier = segment.get("carrierCode", "")
    number = segment.get("number", "")
    return Segment(
        departure_airport=segment["departure"]["iataCode"],
        departure_time=format_local_time(segment["departure"].get("at")),
        arrival_airport=segment["arrival"]["iataCode"],
        arrival_time=format_local_time(segment["arrival"].get("at")),
        carrier_code=carrier,
        flight_number=f"{carrier}{number}",
        duration=format_duration(segment.get("duration")),
    )


def normalize_offer(offer: Dict[str, Any]) -> FlightOffer:
    """Map one raw flight-offer payload onto FlightOffer"""
    itineraries = offer.get("itineraries") or []
    if not itineraries or not itineraries[0].get("segments"):
        raise ValueError("Offer has no outbound segments")

    outbound = itineraries[0]
    inbound = itineraries[1] if len(itineraries) > 1 else None

    return FlightOffer(
        id=str(offer.get("id", "")),
        price=Price(
            amount=str(offer["price"]["total"]),
            currency=offer["price"].get("currency", ""),
        ),
        outbound_segments=[normalize_segment(segment) for segment in outbound["segments"]],
        outbound_duration=format_duration(outbound.get("duration")),
        return_segments=[normalize_segment(segment) for segment in inbound["segments"]] if inbound else None,
        return_duration=format_duration(inbound.get("duration")) if inbound else None,
    )


def normalize_offers(raw_offers: List[Dict[str, Any]]) -> List[FlightOffer]:
    """Normalize every well-formed offer; malformed ones are logged and skipped"""
    offers = []
    for raw_offer in raw_offers:
        try:
            offers.append(normalize_offer(raw_offer))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            offer_id = raw_offer.get("id") if isinstance(raw_offer, dict) else None
            logger.warning("Skipping malformed flight offer", offer_id=offer_id, error=str(e))
    return offers


def deduplicate_offers(offers: List[FlightOffer], limit: int) -> List[FlightOffer]:
    """Keep the first offer per (route, price, departure time), in provider order, up to limit"""
    seen = set()
    unique = []
    for offer in offers:
        key = offer.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(offer)
        if len(unique) >= limit:
            break
    return unique


def build_search_params(params: FlightSearchParams) -> Dict[str, Any]:
    """Query parameters for the offer search; zero-valued optional fields are omitted"""
    search_params: Dict[str, Any] = {
        "originLocationCode": params.origin_code,
        "destinationLocationCode": params.destination_code,
        "departureDate": params.departure_date.isoformat(),
        "adults": params.adults,
        "travelClass": params.travel_class.value,
    }

    if params.return_date:
        search_params["returnDate"] = params.return_date.isoformat()
    if params.children > 0:
        search_params["children"] = params.children
    if params.infants > 0:
        search_params["infants"] = params.infants

    return search_params


class FlightOffersClient(FlightOfferProviderInterface):
    """
    HTTP client for flight offer search.

    The bearer token lives in an injected TTLCache. Refreshes are not
    serialized: callers that see an expired token at the same time each
    request a new one and the last write wins.
    """

    def __init__(
        self,
        token_cache: TTLCache,
        settings: Optional[FlightAPIConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or config.flight_api
        self.token_cache = token_cache
        self.base_url = self.settings.base_url

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.settings.timeout,
            headers={"User-Agent": "AirlineAssistant/1.0"},
        )

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def get_access_token(self) -> str:
        """Return the cached bearer token, exchanging credentials when it is missing or expired"""
        token = self.token_cache.get(TOKEN_CACHE_KEY)
        if token:
            return token

        try:
            response = await self.client.post(
                TOKEN_PATH,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.settings.api_key,
                    "client_secret": self.settings.api_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            payload = response.json()
            token = payload["access_token"]
        except httpx.RequestError as e:
            raise FlightAPIError(f"Connection error during authentication: {e}")
        except httpx.HTTPStatusError as e:
            raise FlightAPIError("Failed to authenticate with flight API", e.response.status_code)
        except (KeyError, ValueError) as e:
            raise FlightAPIError(f"Malformed token response: {e}")

        expires_in = int(payload.get("expires_in") or self.settings.default_token_lifetime)
        ttl = max(expires_in - self.settings.token_safety_margin, 0)
        self.token_cache.set(TOKEN_CACHE_KEY, token, ttl_override=ttl)

        logger.info("Flight API token refreshed", expires_in=expires_in)
        return token

    async def search(self, params: FlightSearchParams) -> Optional[List[FlightOffer]]:
        """
        Search flight offers.

        Returns None when the client is unconfigured or any failure occurs,
        otherwise up to max_offers deduplicated offers (possibly empty).
        """
        if not self.is_configured:
            logger.warning("Flight API credentials not configured, skipping search")
            return None

        try:
            token = await self.get_access_token()
            response = await self.client.get(
                FLIGHT_OFFERS_PATH,
                params=build_search_params(params),
                headers={"Authorization": f"Bearer {token}"},
            )
            response.raise_for_status()
            payload = response.json()
            offers = normalize_offers(payload.get("data") or [])
        except FlightAPIError as e:
            logger.error("Flight API authentication failed", error=str(e), status_code=e.status_code)
            return None
        except httpx.HTTPStatusError as e:
            logger.error(
                "Flight search failed",
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            return None
        except httpx.RequestError as e:
            logger.error("Flight search connection error", error=str(e))
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed flight search response", error=str(e))
            return None

        results = deduplicate_offers(offers, self.settings.max_offers)
        logger.info(
            "Flight search completed",
            origin=params.origin_code,
            destination=params.destination_code,
            received=len(offers),
            returned=len(results),
        )
        return results

    async def close(self):
        """Close the HTTP client if this instance created it"""
        if self._owns_client:
            await self.client.aclose()
