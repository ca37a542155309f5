import logging
from typing import Any, Dict, Optional

import requests

from travel_tools.errors import UpstreamDataError, UpstreamRequestError

logger = logging.getLogger(__name__)


def redact(text: str, secret: Optional[str]) -> str:
    if not secret:
        return text
    return text.replace(secret, "***")


def get_json(session: requests.Session, url: str, params: Optional[Dict[str, Any]] = None,
             timeout: float = 30.0, provider: str = "upstream", secret: Optional[str] = None) -> Any:
    """
    Issue one GET and return the decoded JSON body.

    HTTP error statuses are re-raised as requests.HTTPError so each adapter can
    classify them; network failures become UpstreamRequestError and undecodable
    bodies UpstreamDataError. `secret` is masked out of anything logged or raised.
    """
    logger.info(f"Sending {provider} request: {redact(url, secret)}")
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError:
        raise
    except requests.RequestException as e:
        message = redact(str(e), secret)
        logger.error(f"{provider} network error: {message}")
        raise UpstreamRequestError(f"Network error while contacting {provider}: {message}") from None

    try:
        return response.json()
    except ValueError:
        logger.error(f"{provider} returned a body that is not JSON")
        raise UpstreamDataError(f"Could not parse the {provider} response") from None


def http_status(error: requests.HTTPError) -> Optional[int]:
    return error.response.status_code if error.response is not None else None
