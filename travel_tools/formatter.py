import json

from pydantic import BaseModel

from travel_state.model import AttractionResult, FlightSearchResult, HotelSearchResult, format_number
from travel_tools.errors import TravelSearchError, ValidationError

CLOSING = "Please provide a detailed response that includes this information."
UNEXPECTED_ERROR = "the search tool failed unexpectedly"

SEARCH_NAMES = {
    "searchFlights": "flight search",
    "searchHotels": "hotel search",
    "searchAttractions": "attraction search",
}


def _flights(res: FlightSearchResult) -> str:
    lines = ["Flight search results:", res.summary]
    if res.top_flights:
        lines.append(f"Top {len(res.top_flights)} Flights:")
        lines.append(res.top_summary)
    return "\n".join(lines)


def _hotels(res: HotelSearchResult) -> str:
    lines = [
        "Hotel search results:",
        f"Found {res.total_hotels} hotels in {res.city_id} from {res.checkin} to {res.checkout} "
        f"for {res.adults} adults in {res.rooms} room(s).",
    ]
    if res.message:
        lines.append(res.message)
    if res.top_hotels:
        lines.append(f"Top {len(res.top_hotels)} Hotels:")
        for i, hotel in enumerate(res.top_hotels, 1):
            lines.append(
                f"{i}. {hotel.name} - Rating: {format_number(hotel.rating)} "
                f"({hotel.review_count} reviews), Lowest Price: ${format_number(hotel.lowest_price)}"
            )
    return "\n".join(lines)


def _attractions(res: AttractionResult) -> str:
    lines = [f"Top attractions in {res.city} ({len(res.attractions)} found):"]
    for i, attr in enumerate(res.attractions, 1):
        lines.append(
            f"{i}. {attr.name} - Rating: {format_number(attr.rating)}, "
            f"Distance: {format_number(attr.distance)} m, Address: {attr.address or 'unavailable'}"
        )
    return "\n".join(lines)


FORMATTERS = {
    "searchFlights": _flights,
    "searchHotels": _hotels,
    "searchAttractions": _attractions,
}


def _default(res) -> str:
    payload = res.model_dump(mode="json") if isinstance(res, BaseModel) else res
    return f"Search results:\n{json.dumps(payload, indent=2, ensure_ascii=False, default=str)}"


def format_response(tool_name: str, result) -> str:
    """Turn an adapter result into the text fed back to the model."""
    formatter = FORMATTERS.get(tool_name, _default)
    return f"{formatter(result)}\n{CLOSING}"


def error_message(error: Exception) -> str:
    # internals of unexpected failures are kept out of the conversation
    return error.message if isinstance(error, TravelSearchError) else UNEXPECTED_ERROR


def format_error(tool_name: str, error: Exception) -> str:
    search = SEARCH_NAMES.get(tool_name, tool_name)
    if isinstance(error, ValidationError):
        text = f"The {search} request was rejected: {error.message}"
    else:
        text = f"The {search} could not be completed: {error_message(error)}"
    return f"{text}\nPlease explain this to the user and suggest how to adjust the request."
