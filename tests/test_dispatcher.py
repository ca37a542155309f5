"""Tests for ToolRegistry and the tool schemas handed to the model."""
from unittest.mock import MagicMock

import pytest

from travel_state.model import ToolCall
from travel_tools.config import Settings
from travel_tools.dispatcher import ToolRegistry, build_registry
from travel_tools.errors import NotFoundError, UnknownToolError, ValidationError
from travel_tools.tool_spec import SEARCH_ATTRACTIONS, SEARCH_FLIGHTS, SEARCH_HOTELS, TOOLS


@pytest.fixture
def handlers():
    return {d.name: MagicMock(name=d.name) for d in TOOLS}


@pytest.fixture
def registry(handlers):
    reg = ToolRegistry()
    for descriptor in TOOLS:
        reg.register(descriptor, handlers[descriptor.name])
    return reg


def _schema(registry, name):
    return next(t["function"] for t in registry.openai_tools() if t["function"]["name"] == name)


def test_tool_names(registry):
    assert registry.tool_names() == ["searchAttractions", "searchFlights", "searchHotels"]
    assert registry.has_tool("searchHotels")
    assert not registry.has_tool("bookHotel")


def test_flight_schema_contract(registry):
    schema = _schema(registry, "searchFlights")["parameters"]
    assert schema["required"] == ["origin", "destination", "date", "passengers", "cabinClass"]
    assert schema["properties"]["passengers"]["type"] == "integer"
    assert schema["properties"]["cabinClass"]["type"] == "string"


def test_hotel_schema_contract(registry):
    schema = _schema(registry, "searchHotels")["parameters"]
    assert schema["required"] == ["cityId", "checkin", "checkout", "rooms", "adults"]
    assert {p["type"] for p in schema["properties"].values()} == {"string"}


def test_attraction_schema_contract(registry):
    function = _schema(registry, "searchAttractions")
    assert function["description"] == "Search for most popular tourist attractions in a city"
    assert function["parameters"]["required"] == ["city"]


def test_descriptor_parameters():
    params = SEARCH_FLIGHTS.parameters
    assert params["passengers"].kind == "integer"
    assert params["date"].description == "Flight date in YYYY-MM-DD format"
    assert all(p.required for p in params.values())


def test_unknown_tool_calls_no_handler(registry, handlers):
    with pytest.raises(UnknownToolError) as exc:
        registry.call_tool(ToolCall(name="searchTrains", arguments={"city": "Paris"}))
    assert exc.value.tool_name == "searchTrains"
    for handler in handlers.values():
        handler.assert_not_called()


def test_arguments_passed_as_snake_case(registry, handlers):
    handlers["searchFlights"].return_value = "flights"

    result = registry.call_tool(ToolCall(name="searchFlights", arguments={
        "origin": "BER", "destination": "NRT", "date": "2026-11-20", "passengers": "2", "cabinClass": "Economy",
    }))

    assert result == "flights"
    handlers["searchFlights"].assert_called_once_with(
        origin="BER", destination="NRT", date="2026-11-20", passengers=2, cabin_class="Economy",
    )


def test_hotel_numbers_coerced_to_strings(registry, handlers):
    registry.call_tool(ToolCall(name="searchHotels", arguments={
        "cityId": 60763, "checkin": "2026-11-02", "checkout": "2026-11-05", "rooms": 1, "adults": 2,
    }))
    handlers["searchHotels"].assert_called_once_with(
        city_id="60763", checkin="2026-11-02", checkout="2026-11-05", rooms="1", adults="2",
    )


def test_missing_argument_is_validation_error(registry, handlers):
    with pytest.raises(ValidationError) as exc:
        registry.call_tool(ToolCall(name="searchFlights", arguments={"origin": "BER"}))
    assert exc.value.reason == "invalid_arguments"
    assert "cabinClass" in exc.value.message
    handlers["searchFlights"].assert_not_called()


def test_duplicate_registration_rejected(registry):
    with pytest.raises(ValueError, match="already registered"):
        registry.register(SEARCH_ATTRACTIONS, MagicMock())


def test_registries_are_independent():
    reg_a, reg_b = ToolRegistry(), ToolRegistry()
    reg_a.register(SEARCH_HOTELS, MagicMock())
    assert reg_a.has_tool("searchHotels")
    assert not reg_b.has_tool("searchHotels")


def test_build_registry_wires_adapters(session, make_response):
    session.get.return_value = make_response({"features": []})
    settings = Settings(geoapify_api_key="g", flight_api_key="f", hotel_api_key="h")

    registry = build_registry(settings, session=session)

    assert registry.tool_names() == ["searchAttractions", "searchFlights", "searchHotels"]
    with pytest.raises(NotFoundError):
        registry.call_tool(ToolCall(name="searchAttractions", arguments={"city": "Nowhere"}))
    assert session.get.call_args.kwargs["params"]["apiKey"] == "g"
