"""The interactive loop: condition + question rounds, exit handling, error lines."""
import logging
from unittest.mock import MagicMock

import pytest

import travel_cli
from travel_assistant import TurnOutcome
from travel_tools.config import Settings
from travel_tools.dispatcher import build_registry
from travel_tools.errors import UnknownToolError


@pytest.fixture
def feed(monkeypatch):
    def _feed(*answers):
        replies = iter(answers)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))
    return _feed


def test_condition_and_question_joined(feed, capsys):
    orchestrator = MagicMock()
    orchestrator.ask.return_value = TurnOutcome(text="Try Senso-ji.")
    feed("I am in Tokyo for two days.", "What should I see?", "exit")

    travel_cli.run(orchestrator)

    orchestrator.ask.assert_called_once_with("I am in Tokyo for two days. What should I see?")
    out = capsys.readouterr().out
    assert "Response: Try Senso-ji." in out
    assert out.rstrip().endswith("Exiting the program. Goodbye!")


def test_exit_at_question_prompt(feed, capsys):
    orchestrator = MagicMock()
    feed("Budget trip", "EXIT")

    travel_cli.run(orchestrator)

    orchestrator.ask.assert_not_called()
    assert "Goodbye!" in capsys.readouterr().out


def test_blank_input_starts_over(feed):
    orchestrator = MagicMock()
    orchestrator.ask.return_value = TurnOutcome(text="ok")
    feed("", "Paris", "   ", "Paris", "Where to eat?", "exit")

    travel_cli.run(orchestrator)

    orchestrator.ask.assert_called_once_with("Paris Where to eat?")


def test_unknown_tool_reported_and_loop_continues(feed, capsys):
    orchestrator = MagicMock()
    orchestrator.ask.side_effect = [UnknownToolError("bookTaxi"), TurnOutcome(text="Sure.")]
    feed("Rome", "Book a taxi", "Rome", "Any museums?", "exit")

    travel_cli.run(orchestrator)

    out = capsys.readouterr().out
    assert "Error: Unknown tool bookTaxi" in out
    assert "Response: Sure." in out


def test_missing_model_reply(feed, capsys):
    orchestrator = MagicMock()
    orchestrator.ask.return_value = None
    feed("Oslo", "Weather in May?", "exit")

    travel_cli.run(orchestrator)

    assert "Error: no response from the model" in capsys.readouterr().out


def test_main_requires_openai_key(monkeypatch, capsys):
    monkeypatch.setattr(travel_cli, "load_settings", lambda: Settings())

    with pytest.raises(SystemExit) as exc:
        travel_cli.main()

    assert exc.value.code == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().out


def test_main_exits_cleanly_on_eof(monkeypatch, capsys):
    monkeypatch.setattr(travel_cli, "load_settings", lambda: Settings(openai_api_key="sk-test"))
    monkeypatch.setattr(travel_cli, "build_orchestrator", lambda settings: MagicMock())

    def _eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)

    travel_cli.main()

    assert "Goodbye!" in capsys.readouterr().out


def test_main_logs_available_tools(monkeypatch, caplog):
    orchestrator = MagicMock()
    orchestrator.registry = build_registry(Settings())
    monkeypatch.setattr(travel_cli, "load_settings", lambda: Settings(openai_api_key="sk-test"))
    monkeypatch.setattr(travel_cli, "build_orchestrator", lambda settings: orchestrator)
    monkeypatch.setattr("builtins.input", lambda prompt="": "exit")
    caplog.set_level(logging.INFO, logger="travel_cli")

    travel_cli.main()

    assert "Available tools: searchAttractions, searchFlights, searchHotels" in caplog.text
