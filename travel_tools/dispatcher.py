# dispatcher.py
import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from travel_state.model import ToolCall, ToolDescriptor
from travel_tools.config import Settings
from travel_tools.errors import UnknownToolError, ValidationError
from travel_tools.search_attractions import AttractionsAdapter
from travel_tools.search_flights import FlightsAdapter
from travel_tools.search_hotel import HotelsAdapter
from travel_tools.tool_spec import SEARCH_ATTRACTIONS, SEARCH_FLIGHTS, SEARCH_HOTELS, TOOLS

logger = logging.getLogger(__name__)


def _describe(error: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )


class ToolRegistry:
    """Named tools the model may call, each bound to the adapter that serves it."""

    def __init__(self):
        self._tools: Dict[str, ToolDescriptor] = {}
        self._handlers: Dict[str, Callable[..., BaseModel]] = {}

    def register(self, descriptor: ToolDescriptor, handler: Callable[..., BaseModel]) -> None:
        if descriptor.name in self._tools:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        self._tools[descriptor.name] = descriptor
        self._handlers[descriptor.name] = handler

    def descriptors(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    def has_tool(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def openai_tools(self) -> List[Dict[str, Any]]:
        return [descriptor.to_openai() for descriptor in self._tools.values()]

    def call_tool(self, call: ToolCall) -> BaseModel:
        logger.info(f"Calling tool: {call.name}, arguments: {call.arguments}")
        if call.name not in self._handlers:
            logger.error(f"Model requested unknown tool {call.name}")
            raise UnknownToolError(call.name)

        descriptor = self._tools[call.name]
        try:
            arguments = descriptor.input_model.model_validate(call.arguments)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid arguments for {call.name}: {_describe(e)}",
                                  reason="invalid_arguments") from None

        result = self._handlers[call.name](**arguments.model_dump())
        logger.info(f"{call.name} returned {type(result).__name__}")
        return result


def build_registry(settings: Settings, session: Optional[requests.Session] = None) -> ToolRegistry:
    session = session or requests.Session()
    attractions = AttractionsAdapter(settings.geoapify_api_key, session=session, timeout=settings.http_timeout)
    flights = FlightsAdapter(settings.flight_api_key, session=session, timeout=settings.http_timeout)
    hotels = HotelsAdapter(settings.hotel_api_key, session=session, timeout=settings.http_timeout)

    handlers = {
        SEARCH_ATTRACTIONS.name: attractions.search,
        SEARCH_FLIGHTS.name: flights.search,
        SEARCH_HOTELS.name: hotels.search,
    }

    registry = ToolRegistry()
    for descriptor in TOOLS:
        registry.register(descriptor, handlers[descriptor.name])
    return registry
