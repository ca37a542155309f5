import logging
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel, Field

from travel_state.model import Attraction, AttractionResult
from travel_tools.errors import (
    ConfigurationError,
    NotFoundError,
    UpstreamDataError,
    UpstreamRequestError,
    ValidationError,
)
from travel_tools.http_client import get_json, http_status

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://api.geoapify.com/v1/geocode/search"
PLACES_URL = "https://api.geoapify.com/v2/places"
CATEGORY = "tourism.sights"
RADIUS_METERS = 5000
LIMIT = 3


class AttractionSearchInput(BaseModel):
    city: str = Field(description="City to search for attractions, e.g., Tokyo, Japan")


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class AttractionsAdapter:
    """Geocode a city, then list the tourist sights around its centre."""

    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 30.0):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def search(self, city: str) -> AttractionResult:
        logger.info(f"Searching attractions in {city}")

        if not city or not city.strip():
            raise ValidationError("City is required", reason="missing_city")
        if not self.api_key:
            logger.error("GEOAPIFY_API_KEY is not set")
            raise ConfigurationError("GEOAPIFY_API_KEY is not configured")

        # 1. coordinates for the city
        geocode = self._get(GEOCODE_URL, {"text": city, "apiKey": self.api_key})
        features = geocode.get("features") if isinstance(geocode, dict) else None
        if not features:
            logger.warning(f"Geocoding returned no match for {city}")
            raise NotFoundError(f"City not found: {city}")
        if not isinstance(features, list):
            logger.error(f"Geocoding features for {city} is {type(features).__name__}, expected a list")
            raise UpstreamDataError("Invalid geocoding response format")

        longitude, latitude = self._coordinates(features[0])

        # 2. sights within the radius
        places = self._get(PLACES_URL, {
            "categories": CATEGORY,
            "filter": f"circle:{longitude},{latitude},{RADIUS_METERS}",
            "limit": LIMIT,
            "apiKey": self.api_key,
        })
        if not isinstance(places, dict) or places.get("features") is None:
            logger.error(f"Places response for {city} has no features field")
            raise UpstreamDataError("No attractions found")
        if not isinstance(places["features"], list):
            raise UpstreamDataError("Invalid places response format")

        attractions = []
        for place in places["features"]:
            if not isinstance(place, dict):
                logger.warning(f"Skipping malformed place: {place!r}")
                continue
            attractions.append(self._to_attraction(place, city))
        return AttractionResult(city=city, attractions=attractions)

    def _get(self, url: str, params: Dict[str, Any]) -> Any:
        try:
            return get_json(self.session, url, params=params, timeout=self.timeout,
                            provider="Geoapify", secret=self.api_key)
        except requests.HTTPError as e:
            status = http_status(e)
            logger.error(f"Geoapify returned HTTP {status}")
            raise UpstreamRequestError(f"Error fetching attractions: HTTP {status}", status_code=status) from None

    @staticmethod
    def _coordinates(feature: Any):
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
        if not isinstance(coordinates, list) or len(coordinates) < 2:
            raise UpstreamDataError("Geocoding result has no coordinates")
        longitude, latitude = _to_float(coordinates[0]), _to_float(coordinates[1])
        if longitude is None or latitude is None:
            raise UpstreamDataError("Geocoding result has no coordinates")
        return longitude, latitude

    @staticmethod
    def _to_attraction(place: Dict[str, Any], city: str) -> Attraction:
        props = place.get("properties")
        if not isinstance(props, dict):
            props = {}
        categories = props.get("categories")
        name = str(props.get("name") or props.get("address_line1") or "Unnamed attraction")
        address = props.get("formatted")
        return Attraction(
            name=name,
            address=str(address) if address else None,
            rating=_to_float(props.get("rating")),
            description=f"{name} is a popular tourist attraction in {city}",
            categories=[str(c) for c in categories] if isinstance(categories, list) else [],
            distance=_to_float(props.get("distance")),
        )
