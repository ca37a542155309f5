import logging
from datetime import date
from typing import Any, List, Optional, Union

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from travel_state.model import AttractionResult, FlightSearchResult, HotelSearchResult, ToolCall
from travel_tools.config import Settings
from travel_tools.dispatcher import ToolRegistry, build_registry
from travel_tools.errors import TravelSearchError, UnknownToolError
from travel_tools.formatter import error_message, format_error, format_response

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a travel assistant. Today is {today}.
Use the available tools to look up attractions, flights and hotels when the user asks for them.
Dates passed to tools must be in YYYY-MM-DD format. Call at most one tool per reply."""

SKIPPED_CALL = "Skipped: only one tool call is processed per turn."


class TurnOutcome(BaseModel):
    """What one user turn produced: the final text plus the tool round-trip, if any."""
    text: str
    tool_call: Optional[ToolCall] = None
    result: Optional[Union[AttractionResult, FlightSearchResult, HotelSearchResult]] = None
    error: Optional[str] = None


def message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class ChatOrchestrator:
    """
    One conversation with the hosted model.

    Each call to `ask` is a full turn: prompt -> model -> (at most one tool call
    -> adapter -> formatted result -> model) -> final text. The message history
    is the session; a turn that fails on the model side is rolled back so the
    session stays consistent for the next prompt.
    """

    def __init__(self, llm: Any, registry: ToolRegistry, system_prompt: Optional[str] = None):
        self.registry = registry
        # the tool list is fixed for the life of the session
        self.llm = llm.bind_tools(registry.openai_tools())
        self.messages: List[BaseMessage] = []
        if system_prompt:
            self.messages.append(SystemMessage(content=system_prompt))

    def ask(self, prompt: str) -> Optional[TurnOutcome]:
        mark = len(self.messages)
        self.messages.append(HumanMessage(content=prompt))

        reply = self._invoke(mark)
        if reply is None:
            return None

        if not reply.tool_calls:
            logger.info("Model answered without calling a tool")
            return TurnOutcome(text=message_text(reply))

        first = reply.tool_calls[0]
        call = ToolCall(name=first["name"], arguments=first.get("args") or {}, id=first.get("id"))
        if not self.registry.has_tool(call.name):
            del self.messages[mark:]
            raise UnknownToolError(call.name)

        result, error = None, None
        try:
            result = self.registry.call_tool(call)
            feedback = format_response(call.name, result)
        except TravelSearchError as e:
            logger.error(f"{call.name} failed: {e.message}")
            error = e.message
            feedback = format_error(call.name, e)
        except Exception as e:
            logger.exception(f"{call.name} raised an unexpected error")
            result, error = None, error_message(e)
            feedback = format_error(call.name, e)

        self.messages.append(ToolMessage(content=feedback, tool_call_id=call.id or call.name))
        for extra in reply.tool_calls[1:]:
            logger.warning(f"Ignoring additional tool call {extra['name']}")
            self.messages.append(ToolMessage(content=SKIPPED_CALL, tool_call_id=extra.get("id") or extra["name"]))

        final = self._invoke(mark)
        if final is None:
            return None
        return TurnOutcome(text=message_text(final), tool_call=call, result=result, error=error)

    def _invoke(self, mark: int) -> Optional[AIMessage]:
        try:
            reply = self.llm.invoke(self.messages)
        except Exception:
            logger.exception("Model request failed; dropping this turn")
            del self.messages[mark:]
            return None
        self.messages.append(reply)
        return reply


def build_orchestrator(settings: Settings, registry: Optional[ToolRegistry] = None) -> ChatOrchestrator:
    llm = ChatOpenAI(api_key=settings.openai_api_key, model=settings.openai_model, temperature=0.0)
    return ChatOrchestrator(
        llm,
        registry or build_registry(settings),
        system_prompt=SYSTEM_PROMPT.format(today=date.today().isoformat()),
    )
