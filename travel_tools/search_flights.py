import logging
from datetime import datetime
from typing import Any, Dict, Optional

import requests
from dateutil.parser import parse
from pydantic import BaseModel, ConfigDict, Field

from travel_state.model import FlightPrice, FlightQuote, FlightSearchResult, parse_amount, price_key
from travel_tools.errors import ConfigurationError, UpstreamDataError, UpstreamRequestError
from travel_tools.http_client import get_json, http_status

logger = logging.getLogger(__name__)

BASE_URL = "https://api.flightapi.io/onewaytrip"
CURRENCY = "USD"


class FlightSearchInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin: str = Field(description="Origin airport code (e.g., BER)")
    destination: str = Field(description="Destination airport code (e.g., NRT)")
    date: str = Field(description="Flight date in YYYY-MM-DD format")
    passengers: int = Field(description="Number of passengers")
    cabin_class: str = Field(alias="cabinClass", description="Cabin class (Economy, Business, or First)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parse(str(value))
    except (ValueError, OverflowError):
        logger.warning(f"Unparseable last_updated value: {value}")
        return None


def _first_dict(values: Any) -> Dict[str, Any]:
    if isinstance(values, list) and values and isinstance(values[0], dict):
        return values[0]
    return {}


def to_quote(itinerary: Dict[str, Any]) -> FlightQuote:
    """Flatten one itinerary; every field is optional upstream."""
    option = _first_dict(itinerary.get("pricing_options"))
    price = option.get("price") if isinstance(option.get("price"), dict) else {}
    item = _first_dict(option.get("items"))
    carriers = item.get("marketing_carrier_ids")
    segments = item.get("segment_ids")

    return FlightQuote(
        id=str(itinerary.get("id", "")),
        price=FlightPrice(
            amount=parse_amount(price.get("amount")),
            currency=CURRENCY,
            last_updated=parse_timestamp(price.get("last_updated")),
        ),
        carriers=[str(c) for c in carriers] if isinstance(carriers, list) else [],
        segments=[str(s) for s in segments] if isinstance(segments, list) else [],
        score=parse_amount(itinerary.get("score")) or 0,
    )


def rank_quotes(quotes, top_n: int):
    """Sort ascending by price, unavailable prices last; return (all, top_n)."""
    ranked = sorted(quotes, key=lambda q: price_key(q.price.amount))
    return ranked, ranked[:top_n]


class FlightsAdapter:
    def __init__(self, api_key: str, session: Optional[requests.Session] = None,
                 timeout: float = 30.0, top_n: int = 3):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.top_n = top_n

    def search(self, origin: str, destination: str, date: str, passengers: int,
               cabin_class: str) -> FlightSearchResult:
        logger.info(f"Searching flights {origin} -> {destination} on {date}, "
                    f"{passengers} passenger(s), {cabin_class}")

        if not self.api_key:
            logger.error("FLIGHT_API_KEY is not set")
            raise ConfigurationError("FLIGHT_API_KEY is not configured")

        # date format is left to the provider
        url = f"{BASE_URL}/{self.api_key}/{origin}/{destination}/{date}/{passengers}/0/0/{cabin_class}/{CURRENCY}"
        try:
            data = get_json(self.session, url, timeout=self.timeout, provider="FlightAPI", secret=self.api_key)
        except requests.HTTPError as e:
            status = http_status(e)
            logger.error(f"FlightAPI returned HTTP {status}")
            raise UpstreamRequestError(f"Error fetching flights: HTTP {status}", status_code=status) from None

        if not isinstance(data, dict) or data.get("itineraries") is None:
            logger.error("FlightAPI response has no itineraries field")
            raise UpstreamDataError("No flight data available")
        if not isinstance(data["itineraries"], list):
            raise UpstreamDataError("Invalid itineraries format from flight API")

        quotes = []
        for itinerary in data["itineraries"]:
            if not isinstance(itinerary, dict):
                logger.warning(f"Skipping malformed itinerary: {itinerary!r}")
                continue
            quotes.append(to_quote(itinerary))
        ranked, top = rank_quotes(quotes, self.top_n)

        return FlightSearchResult(
            origin=origin,
            destination=destination,
            date=date,
            passengers=passengers,
            cabin_class=cabin_class,
            total_flights=len(ranked),
            flights=ranked,
            top_flights=top,
        )
