"""Pytest config: import path, dummy keys and a fake HTTP layer."""
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(root))
os.environ.setdefault("OPENAI_API_KEY", "sk-test-dummy")


def _make_response(payload=None, status=200, json_error=False):
    response = MagicMock()
    response.status_code = status
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error", response=response)
    return response


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def session():
    """A requests.Session stand-in; queue replies with session.get.side_effect."""
    return MagicMock(spec=requests.Session)
