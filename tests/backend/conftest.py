import itertools
import json
import threading
from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from backend.main import app
from backend.services.calendar_gateway import CalendarGateway


def http_error(status: int, message: str) -> HttpError:
    content = json.dumps({'error': {'code': status, 'message': message}}).encode('utf-8')
    return HttpError(SimpleNamespace(status=status, reason=message), content)


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


class _Request:
    def __init__(self, operation, resource):
        self._operation = operation
        self._resource = resource

    def execute(self, http=None):
        self._resource.executed_with.append((threading.get_ident(), http))
        return self._operation()


class FakeEventsResource:
    """In-memory stand-in for the Calendar v3 ``events()`` collection."""

    def __init__(self):
        self.events: dict[str, dict] = {}
        self.calls: list[tuple[str, dict]] = []
        self.executed_with: list[tuple[int, object]] = []
        self._ids = (f'evt{number}' for number in itertools.count(1))

    def list(self, **params):
        self.calls.append(('list', params))

        def operation():
            time_min = _parse(params['timeMin'])
            items = [event for event in self.events.values() if _parse(event['start']['dateTime']) >= time_min]
            items.sort(key=lambda event: _parse(event['start']['dateTime']))
            return {'kind': 'calendar#events', 'items': items}

        return _Request(operation, self)

    def insert(self, **params):
        self.calls.append(('insert', params))

        def operation():
            body = dict(params['body'])
            for boundary in ('start', 'end'):
                try:
                    _parse(body[boundary]['dateTime'])
                except (AttributeError, TypeError, ValueError):
                    raise http_error(400, 'Bad Request') from None
            body['id'] = next(self._ids)
            body['status'] = 'confirmed'
            self.events[body['id']] = body
            return body

        return _Request(operation, self)

    def delete(self, **params):
        self.calls.append(('delete', params))

        def operation():
            if params['eventId'] not in self.events:
                raise http_error(404, 'Not Found')
            del self.events[params['eventId']]
            return ''

        return _Request(operation, self)


class FakeCalendarService:
    def __init__(self):
        self.resource = FakeEventsResource()

    def events(self):
        return self.resource


@pytest.fixture
def calendar_service() -> FakeCalendarService:
    return FakeCalendarService()


@pytest.fixture
def calendar_gateway(calendar_service: FakeCalendarService) -> CalendarGateway:
    return CalendarGateway(calendar_service, 'clinic@example.com')


@pytest.fixture
def api_client(calendar_gateway: CalendarGateway):
    app.state.calendar_gateway = calendar_gateway
    try:
        yield TestClient(app)
    finally:
        del app.state.calendar_gateway


@pytest.fixture
def make_http_error():
    return http_error
