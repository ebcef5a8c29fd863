"""HTTP client for the calendar gateway's three endpoints."""

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class GatewayRequestError(Exception):
    """A gateway round trip failed; ``message`` is what the user is shown."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get('error'):
        return str(payload['error'])
    return f'Request failed with status code {response.status_code}'


class GatewayClient:
    def __init__(self, base_url: str, transport: httpx.BaseTransport | None = None):
        self._http = httpx.Client(base_url=base_url, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> 'GatewayClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise GatewayRequestError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning('%s %s failed: %s', method, path, message)
            raise GatewayRequestError(message, status_code=response.status_code)
        return response

    def fetch_events(self) -> list[dict]:
        return self._request('GET', '/api/eventos').json()

    def create_appointment(self, payload: dict) -> dict:
        return self._request('POST', '/api/agendar', json=payload).json()

    def cancel_appointment(self, event_id: str) -> dict:
        return self._request('DELETE', f"/api/agendar/{quote(event_id, safe='')}").json()
