import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    geoapify_api_key: str = ""
    flight_api_key: str = ""
    hotel_api_key: str = ""
    http_timeout: float = 30.0
    log_level: str = "INFO"

    def missing_keys(self) -> List[str]:
        keys = {
            "OPENAI_API_KEY": self.openai_api_key,
            "GEOAPIFY_API_KEY": self.geoapify_api_key,
            "FLIGHT_API_KEY": self.flight_api_key,
            "HOTEL_API_KEY": self.hotel_api_key,
        }
        return [name for name, value in keys.items() if not value]


def load_settings() -> Settings:
    """Read .env and the environment once at startup."""
    load_dotenv()
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        geoapify_api_key=os.getenv("GEOAPIFY_API_KEY", ""),
        flight_api_key=os.getenv("FLIGHT_API_KEY", ""),
        hotel_api_key=os.getenv("HOTEL_API_KEY", ""),
        http_timeout=os.getenv("HTTP_TIMEOUT", "30"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
