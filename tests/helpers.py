from unittest.mock import Mock

from requests.exceptions import HTTPError

TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
RECIPIENT = "0x1111111111111111111111111111111111111111"


def make_response(status_code=200, payload=None, text=None):
    """Build a mock ``requests`` response."""
    response = Mock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.text = text if text is not None else str(payload or "")
    response.json.return_value = payload if payload is not None else {}
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response
