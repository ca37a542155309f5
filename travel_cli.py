import logging
import sys

from travel_assistant import build_orchestrator
from travel_tools.config import load_settings
from travel_tools.errors import UnknownToolError

logger = logging.getLogger(__name__)

EXIT_WORD = "exit"


def _ask(label: str) -> str:
    return input(f"Enter your {label} (or type '{EXIT_WORD}' to quit): ").strip()


def run(orchestrator) -> None:
    """Read a condition and a question per round until the user types 'exit'."""
    while True:
        condition = _ask("condition")
        if condition.lower() == EXIT_WORD:
            break
        if not condition:
            continue

        question = _ask("question")
        if question.lower() == EXIT_WORD:
            break
        if not question:
            continue

        try:
            outcome = orchestrator.ask(f"{condition} {question}")
        except UnknownToolError as e:
            print(f"Error: {e.message}")
            continue

        if outcome is None:
            print("Error: no response from the model, please try again.")
        else:
            print(f"Response: {outcome.text}")

    print("Exiting the program. Goodbye!")


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    if not settings.openai_api_key:
        print("Please set OPENAI_API_KEY in the .env file")
        sys.exit(1)
    for key in settings.missing_keys():
        logger.warning(f"{key} is not set; the matching search will fail")

    orchestrator = build_orchestrator(settings)
    logger.info(f"Available tools: {', '.join(orchestrator.registry.tool_names())}")
    try:
        run(orchestrator)
    except (EOFError, KeyboardInterrupt):
        print("\nExiting the program. Goodbye!")


if __name__ == "__main__":
    main()
