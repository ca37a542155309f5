import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, computed_field

UNAVAILABLE = "unavailable"


def format_number(value: Optional[float]) -> str:
    """Render a figure for the model; missing values become the 'unavailable' sentinel."""
    if value is None:
        return UNAVAILABLE
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def parse_amount(value: Any) -> Optional[float]:
    """Parse 150, "150.5" or "$1,020" into a finite float; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(str(value).strip().replace("$", "").replace(",", ""))
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def price_key(amount: Optional[float]) -> float:
    # missing prices rank after every real one
    return math.inf if amount is None else amount


# --- tool plumbing ---

class ToolParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string", "integer"]
    description: str = ""
    required: bool = True


class ToolDescriptor(BaseModel):
    """
    A capability the model may call. Parameters are derived from `input_model`,
    the pydantic class that also validates the arguments at dispatch time.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_model: Type[BaseModel]

    @property
    def parameters(self) -> Dict[str, ToolParameter]:
        params = {}
        for field_name, field in self.input_model.model_fields.items():
            kind = "integer" if field.annotation is int else "string"
            params[field.alias or field_name] = ToolParameter(
                kind=kind,
                description=field.description or "",
                required=field.is_required(),
            )
        return params

    def to_openai(self) -> Dict[str, Any]:
        params = self.parameters
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        name: {"type": p.kind, "description": p.description}
                        for name, p in params.items()
                    },
                    "required": [name for name, p in params.items() if p.required],
                },
            },
        }


class ToolCall(BaseModel):
    name: str
    arguments: Dict[str, Any] = {}
    id: Optional[str] = None


# --- attractions ---

class Attraction(BaseModel):
    name: str
    address: Optional[str] = None
    rating: Optional[float] = None
    description: str
    categories: List[str] = []
    distance: Optional[float] = None


class AttractionResult(BaseModel):
    city: str
    attractions: List[Attraction] = []


# --- flights ---

class FlightPrice(BaseModel):
    amount: Optional[float] = None
    currency: str = "USD"
    last_updated: Optional[datetime] = None


class FlightQuote(BaseModel):
    id: str
    price: FlightPrice
    carriers: List[str] = []
    segments: List[str] = []
    score: float = 0


class FlightSearchResult(BaseModel):
    origin: str
    destination: str
    date: str
    passengers: int
    cabin_class: str
    total_flights: int
    flights: List[FlightQuote] = []
    top_flights: List[FlightQuote] = []

    @computed_field
    @property
    def cheapest_price(self) -> Optional[float]:
        return self.top_flights[0].price.amount if self.top_flights else None

    @computed_field
    @property
    def summary(self) -> str:
        return (f"Found {self.total_flights} flights from {self.origin} to {self.destination} "
                f"on {self.date} for {self.passengers} passenger(s) in {self.cabin_class} class. "
                f"The cheapest flight costs ${format_number(self.cheapest_price)} USD.")

    @computed_field
    @property
    def top_summary(self) -> str:
        return "\n".join(
            f"Flight {i}: ${format_number(f.price.amount)} USD, "
            f"Carrier(s): {', '.join(f.carriers) or UNAVAILABLE}, Score: {format_number(f.score)}"
            for i, f in enumerate(self.top_flights, 1)
        )


# --- hotels ---

class GeoPoint(BaseModel):
    latitude: float
    longitude: float


class VendorPrice(BaseModel):
    vendor: str
    price: float
    display: str = Field(default="", description="Price text as the provider sent it, e.g. '$1,020'")


class HotelOffer(BaseModel):
    name: str
    id: str
    location: Optional[GeoPoint] = None
    contact: Optional[str] = None
    rating: Optional[float] = None
    review_count: int = 0
    prices: List[VendorPrice] = []

    @computed_field
    @property
    def lowest_price(self) -> Optional[float]:
        return min((p.price for p in self.prices), default=None)


class HotelSearchResult(BaseModel):
    city_id: str
    checkin: str
    checkout: str
    rooms: str
    adults: str
    total_hotels: int
    hotels: List[HotelOffer] = []
    top_hotels: List[HotelOffer] = []
    message: Optional[str] = None
