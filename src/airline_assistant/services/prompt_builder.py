"""
System prompt assembly from classification, retrieved data and language.

The builder is a pure function of its inputs. Flight content always comes
before knowledge-base content, and the language rule is stated near the top
and repeated at the end whatever data is present.
"""

from typing import List, Optional

from ..types import FlightOffer, FlightSearchParams, LanguageInfo, QueryClassification, ScrapedKnowledgeBase


ASSISTANT_NAME = "Air India's virtual assistant (Maharaja Assistant)"

FORBIDDEN_PHRASES = (
    '"visit the website" or "check the official website"',
    '"contact customer service"',
    '"I can help you find flights" (without listing them)',
    'Any generic response without showing the actual flights',
)

KNOWLEDGE_SECTIONS = (
    ("baggage", "BAGGAGE INFORMATION", "baggage, luggage, weight and allowance questions"),
    ("check_in", "CHECK-IN INFORMATION", "check-in questions"),
    ("booking", "BOOKING INFORMATION", "booking and reservation questions"),
    ("policies", "POLICIES INFORMATION", "cancellation, refund and change questions"),
    ("maharaja_club", "MAHARAJA CLUB INFORMATION", "frequent flyer program, miles and loyalty questions"),
)


def _header(offers: Optional[List[FlightOffer]], classification: QueryClassification,
            language_info: LanguageInfo) -> str:
    if offers:
        intro = f"You are {ASSISTANT_NAME}. The user is asking about FLIGHTS.\n\n"
    else:
        intro = (
            f"You are {ASSISTANT_NAME}. Your ONLY job is to answer from the official Air India data "
            f"provided below.\n\n"
        )

    return (
        intro
        + f"CRITICAL LANGUAGE RULE: {language_info.instruction}\n"
        + f"You MUST respond in {language_info.response_language}. Do NOT mix languages.\n\n"
        + f"QUERY TYPE: {classification.kind.value}\n"
        + f"RESPONSE LANGUAGE: {language_info.response_language}\n\n"
    )


def _segment_flight_numbers(offer: FlightOffer) -> str:
    numbers = [segment.flight_number for segment in offer.outbound_segments if segment.flight_number]
    if len(numbers) > 1:
        return f"Flight Numbers: {' + '.join(numbers)}\n"
    if numbers:
        return f"Flight Number: {numbers[0]}\n"
    return ""


def format_offer(offer: FlightOffer, index: int) -> str:
    """Render one offer in directive field order: route, price, departure, arrival, duration"""
    first = offer.outbound_segments[0]
    last = offer.outbound_segments[-1]
    identifier = first.flight_number or offer.id or f"Flight {index}"

    text = f"FLIGHT {index}: {identifier}\n"
    text += f"Route: {first.departure_airport} to {last.arrival_airport}\n"
    text += _segment_flight_numbers(offer)
    text += f"Price: {offer.price.amount} {offer.price.currency}\n"
    text += f"Departure: {first.departure_time}\n"
    text += f"Arrival: {last.arrival_time}\n"
    text += f"Duration: {offer.outbound_duration or first.duration}\n"
    if len(offer.outbound_segments) > 1:
        text += f"Stops: {len(offer.outbound_segments) - 1}\n"

    if offer.return_segments:
        return_first = offer.return_segments[0]
        return_last = offer.return_segments[-1]
        text += f"Return Route: {return_first.departure_airport} to {return_last.arrival_airport}\n"
        text += f"Return Flight Number: {return_first.flight_number}\n"
        text += f"Return Departure: {return_first.departure_time}\n"
        text += f"Return Arrival: {return_last.arrival_time}\n"
        text += f"Return Duration: {offer.return_duration or return_first.duration}\n"

    return text


def _flight_offers_section(offers: List[FlightOffer]) -> str:
    text = "ABSOLUTE REQUIREMENT: You have REAL flight data below from the flight search API. YOU MUST LIST THESE FLIGHTS.\n\n"
    text += "FORBIDDEN - NEVER SAY:\n"
    text += "".join(f"- {phrase}\n" for phrase in FORBIDDEN_PHRASES)
    text += "\nREQUIRED FORMAT - Start your response EXACTLY like this:\n"
    text += '"Here are the available flights from [ORIGIN] to [DESTINATION]:"\n\n'
    text += "Then list EVERY flight from the data below in this format:\n"
    text += "[FLIGHT_NUMBER/ID]:\n"
    text += "- Route: [DEPARTURE_CODE] to [ARRIVAL_CODE]\n"
    text += "- Price: [AMOUNT] [CURRENCY]\n"
    text += "- Departure: [DEPARTURE_TIME]\n"
    text += "- Arrival: [ARRIVAL_TIME]\n"
    text += "- Duration: [DURATION]\n\n"
    text += "Repeat for ALL flights in the data below. All times are local airport times.\n\n"

    text += "=== REAL-TIME FLIGHT DATA ===\n"
    for index, offer in enumerate(offers, start=1):
        text += format_offer(offer, index) + "\n"
    text += "=== END OF FLIGHT DATA ===\n\n"

    text += (
        'FINAL INSTRUCTION: Your response MUST start with "Here are the available flights from [ORIGIN] '
        'to [DESTINATION]:" and then list ALL flights above, using the flight number/ID as the header '
        "for each flight.\n\n"
    )
    return text


def _no_flight_data_section(params: FlightSearchParams) -> str:
    text = "=== FLIGHT SEARCH ATTEMPTED BUT NO DATA AVAILABLE ===\n"
    text += (
        f"The user asked about flights from {params.origin_code} to {params.destination_code} "
        f"on {params.departure_date.isoformat()}, but no flight data was returned.\n\n"
    )
    text += "You should:\n"
    text += "1. Apologize that you couldn't find flights for that specific route/date\n"
    text += "2. Explain that this could be due to:\n"
    text += "   - No flights available for the requested route/date\n"
    text += '   - The route might need a specific city (e.g., "Spain" needs a city like "Madrid" or "Barcelona")\n'
    text += "3. Suggest trying:\n"
    text += "   - A different date\n"
    text += '   - A specific city instead of a country (e.g., "Madrid" instead of "Spain")\n'
    text += "   - Verifying the departure and arrival cities or airport codes\n\n"
    return text


def _missing_flight_details_section() -> str:
    text = "=== FLIGHT SEARCH NOT POSSIBLE YET ===\n"
    text += "The user wants flight information but the departure and arrival cities could not be identified.\n"
    text += "Do NOT invent flights. Ask the user for:\n"
    text += "- The departure city or airport code\n"
    text += "- The arrival city or airport code\n"
    text += "- The travel date (and return date for round trips)\n\n"
    return text


def _knowledge_section(scraped: ScrapedKnowledgeBase) -> str:
    text = "=== OFFICIAL AIR INDIA WEBSITE DATA ===\n"
    text += "THIS DATA IS YOUR ONLY SOURCE. Extract information directly from it.\n\n"

    for field, heading, topics in KNOWLEDGE_SECTIONS:
        content = getattr(scraped, field)
        if content:
            text += f"{heading} (use ONLY this section for {topics}):\n{content}\n\n"

    text += "=== END OF DATA ===\n\n"
    text += (
        "INSTRUCTIONS:\n"
        "1. Read the user's question and identify which section above is relevant\n"
        "2. Use that section EXCLUSIVELY for its topic\n"
        "3. Keep ALL numbers, weights, times, procedures, limits and specific details exactly as written\n"
        "4. Use the same words and terminology found in the data above\n"
        "5. Present the answer in a clear, organized way\n\n"
        "DO NOT:\n"
        "- Add information not in the data above\n"
        "- Use generic or outside knowledge\n"
        "- Skip specific details from the data\n"
        "- Change the terminology used in the data\n\n"
    )
    return text


def build_system_prompt(
    scraped_data: Optional[ScrapedKnowledgeBase],
    flight_offers: Optional[List[FlightOffer]],
    classification: QueryClassification,
    language_info: LanguageInfo,
) -> str:
    """Build the system prompt for the completion call"""
    prompt = _header(flight_offers, classification, language_info)

    if flight_offers:
        prompt += _flight_offers_section(flight_offers)
    elif classification.needs_flight_api and classification.flight_query is not None:
        prompt += _no_flight_data_section(classification.flight_query)
    elif classification.needs_flight_api:
        prompt += _missing_flight_details_section()

    if scraped_data is not None:
        prompt += _knowledge_section(scraped_data)
    elif classification.needs_scraping:
        prompt += (
            "NOTE: Official Air India website data is not available right now. Provide general information "
            "but recommend users verify details on the official website.\n\n"
        )

    prompt += f"REMEMBER: Your entire response MUST be in {language_info.response_language}."
    return prompt
