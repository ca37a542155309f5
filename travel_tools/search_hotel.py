import logging
import re
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from pydantic import BaseModel, ConfigDict, Field

from travel_state.model import (
    GeoPoint,
    HotelOffer,
    HotelSearchResult,
    VendorPrice,
    parse_amount,
    price_key,
)
from travel_tools.errors import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    UpstreamDataError,
    UpstreamRequestError,
    ValidationError,
)
from travel_tools.http_client import get_json, http_status

logger = logging.getLogger(__name__)

HOTEL_API_URL = "https://api.makcorps.com/city"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
MAX_STAY_DAYS = 30
MAX_ADULTS_PER_ROOM = 4
VENDOR_SLOTS = 4
NO_HOTELS_MESSAGE = "No hotels found for the specified criteria"


class HotelSearchInput(BaseModel):
    # the model sometimes sends rooms/adults as numbers
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    city_id: str = Field(alias="cityId", description='City ID for hotel search (e.g., "60763" for New York)')
    checkin: str = Field(description="Check-in date in YYYY-MM-DD format")
    checkout: str = Field(description="Check-out date in YYYY-MM-DD format")
    rooms: str = Field(description="Number of rooms required")
    adults: str = Field(description="Number of adults")


def _parse_count(value: Any) -> Optional[int]:
    try:
        count = int(str(value).strip())
    except ValueError:
        return None
    return count if count >= 1 else None


def validate_stay(city_id: str, checkin: str, checkout: str, rooms: Any, adults: Any,
                  today: date) -> Tuple[date, date, int, int]:
    """
    Check the stay parameters in a fixed order and fail on the first violation.
    Returns the parsed check-in/check-out dates and the room/adult counts.
    """
    if not city_id or not str(city_id).strip():
        raise ValidationError("City ID is required", reason="missing_city_id")

    if not DATE_PATTERN.fullmatch(checkin or "") or not DATE_PATTERN.fullmatch(checkout or ""):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD", reason="invalid_date_format")

    try:
        checkin_date = datetime.strptime(checkin, "%Y-%m-%d").date()
        checkout_date = datetime.strptime(checkout, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid dates provided", reason="invalid_date") from None

    if checkin_date < today:
        raise ValidationError("Check-in date cannot be in the past", reason="checkin_in_past")
    if checkout_date <= checkin_date:
        raise ValidationError("Check-out date must be after check-in date", reason="checkout_not_after_checkin")
    if (checkout_date - checkin_date).days > MAX_STAY_DAYS:
        raise ValidationError(f"Stay duration cannot exceed {MAX_STAY_DAYS} days", reason="stay_too_long")

    if rooms is None or adults is None or not str(rooms).strip() or not str(adults).strip():
        raise ValidationError("Number of rooms and adults are required", reason="missing_occupancy")

    num_rooms = _parse_count(rooms)
    if num_rooms is None:
        raise ValidationError("Invalid number of rooms", reason="invalid_rooms")
    num_adults = _parse_count(adults)
    if num_adults is None:
        raise ValidationError("Invalid number of adults", reason="invalid_adults")

    if num_adults > num_rooms * MAX_ADULTS_PER_ROOM:
        raise ValidationError(f"Maximum {MAX_ADULTS_PER_ROOM} adults per room allowed", reason="too_many_adults")

    return checkin_date, checkout_date, num_rooms, num_adults


def vendor_prices(record: Dict[str, Any]) -> List[VendorPrice]:
    """Collect vendorN/priceN pairs, keeping only those with both halves usable."""
    prices = []
    for slot in range(1, VENDOR_SLOTS + 1):
        vendor = record.get(f"vendor{slot}")
        raw_price = record.get(f"price{slot}")
        if not vendor or raw_price in (None, ""):
            continue
        amount = parse_amount(raw_price)
        if amount is None:
            logger.warning(f"Ignoring unparseable price {raw_price!r} from {vendor}")
            continue
        prices.append(VendorPrice(vendor=str(vendor), price=amount, display=str(raw_price)))
    return prices


def to_offer(record: Any) -> Optional[HotelOffer]:
    if not isinstance(record, dict):
        logger.warning(f"Skipping malformed hotel record: {record!r}")
        return None
    if not record.get("name") or not record.get("hotelId"):
        logger.warning(f"Invalid hotel data found: {record}")
        return None

    geocode = record.get("geocode")
    if not isinstance(geocode, dict):
        geocode = {}
    latitude = parse_amount(geocode.get("latitude"))
    longitude = parse_amount(geocode.get("longitude"))
    location = GeoPoint(latitude=latitude, longitude=longitude) \
        if latitude is not None and longitude is not None else None

    reviews = record.get("reviews")
    if not isinstance(reviews, dict):
        reviews = {}
    review_count = parse_amount(reviews.get("count"))

    return HotelOffer(
        name=str(record["name"]),
        id=str(record["hotelId"]),
        location=location,
        contact=str(record["telephone"]) if record.get("telephone") else None,
        rating=parse_amount(reviews.get("rating")),
        review_count=int(review_count) if review_count else 0,
        prices=vendor_prices(record),
    )


def rank_offers(offers: List[HotelOffer], top_n: int) -> Tuple[List[HotelOffer], List[HotelOffer]]:
    ranked = sorted(offers, key=lambda o: price_key(o.lowest_price))
    return ranked, ranked[:top_n]


class HotelsAdapter:
    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 30.0,
                 top_n: int = 3, today: Callable[[], date] = date.today):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.top_n = top_n
        self.today = today

    def search(self, city_id: str, checkin: str, checkout: str, rooms: str, adults: str) -> HotelSearchResult:
        logger.info(f"Searching hotels in city {city_id} ({checkin} to {checkout}), "
                    f"{adults} adult(s) in {rooms} room(s)")

        try:
            validate_stay(city_id, checkin, checkout, rooms, adults, self.today())
        except ValidationError as e:
            logger.error(f"Hotel search rejected: {e.message}")
            raise
        city_id, rooms, adults = str(city_id), str(rooms).strip(), str(adults).strip()

        if not self.api_key:
            logger.error("HOTEL_API_KEY is not set")
            raise ConfigurationError("HOTEL_API_KEY is not configured")

        params = {
            "cityid": city_id,
            "pagination": "0",
            "cur": "USD",
            "rooms": rooms,
            "adults": adults,
            "checkin": checkin,
            "checkout": checkout,
            "api_key": self.api_key,
        }
        data = self._fetch(params)

        if not data:
            if isinstance(data, list):
                logger.warning(f"No hotels returned for city {city_id}")
                return HotelSearchResult(
                    city_id=city_id, checkin=checkin, checkout=checkout, rooms=rooms, adults=adults,
                    total_hotels=0, message=NO_HOTELS_MESSAGE,
                )
            raise UpstreamDataError("No data received from hotel API")
        if not isinstance(data, list):
            logger.error(f"Hotel API returned {type(data).__name__}, expected a list")
            raise UpstreamDataError("Invalid response format from hotel API")

        offers = [offer for offer in (to_offer(r) for r in data) if offer is not None]
        ranked, top = rank_offers(offers, self.top_n)

        return HotelSearchResult(
            city_id=city_id,
            checkin=checkin,
            checkout=checkout,
            rooms=rooms,
            adults=adults,
            total_hotels=len(ranked),
            hotels=ranked,
            top_hotels=top,
        )

    def _fetch(self, params: Dict[str, Any]) -> Any:
        try:
            return get_json(self.session, HOTEL_API_URL, params=params, timeout=self.timeout,
                            provider="hotel API", secret=self.api_key)
        except requests.HTTPError as e:
            status = http_status(e)
            logger.error(f"Hotel API returned HTTP {status}")
            if status == 401:
                raise AuthError("Invalid API key or unauthorized access", status_code=status) from None
            if status == 429:
                raise RateLimitError("Rate limit exceeded. Please try again later", status_code=status) from None
            if status == 404:
                raise NotFoundError("City not found or invalid city ID") from None
            raise UpstreamRequestError(f"Error fetching hotels: HTTP {status}", status_code=status) from None
        except UpstreamRequestError as e:
            raise UpstreamRequestError(f"Error fetching hotels: {e.message}", status_code=e.status_code) from None
