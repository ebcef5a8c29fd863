import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from google.auth.exceptions import RefreshError

from backend.core.config import GatewaySettings
from backend.services import calendar_gateway as gateway_module
from backend.services.calendar_gateway import CalendarGateway, CalendarServiceError


class _FailingRequest:
    def __init__(self, error: Exception):
        self.error = error

    def execute(self):
        raise self.error


class _FailingEvents:
    def __init__(self, error: Exception):
        self.error = error

    def list(self, **params):
        return _FailingRequest(self.error)

    def insert(self, **params):
        return _FailingRequest(self.error)

    def delete(self, **params):
        return _FailingRequest(self.error)


class _FailingService:
    def __init__(self, error: Exception):
        self.error = error

    def events(self):
        return _FailingEvents(self.error)


def test_list_upcoming_uses_given_lower_bound(calendar_gateway: CalendarGateway, calendar_service) -> None:
    now = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)

    assert calendar_gateway.list_upcoming(now=now) == []

    _, params = calendar_service.resource.calls[-1]
    assert params == {
        'calendarId': 'clinic@example.com',
        'timeMin': '2026-01-05T12:00:00+00:00',
        'singleEvents': True,
        'orderBy': 'startTime',
    }


def test_list_upcoming_returns_empty_list_when_items_missing() -> None:
    class _Request:
        def execute(self):
            return {'kind': 'calendar#events'}

    class _Events:
        def list(self, **params):
            return _Request()

    class _Service:
        def events(self):
            return _Events()

    assert CalendarGateway(_Service(), 'clinic@example.com').list_upcoming() == []


def test_insert_then_delete_round_trip(calendar_gateway: CalendarGateway, calendar_service) -> None:
    created = calendar_gateway.insert({
        'summary': 'Dra. Maria - João',
        'start': {'dateTime': '2026-01-05T10:00:00-03:00'},
        'end': {'dateTime': '2026-01-05T10:30:00-03:00'},
    })

    assert created['id'] in calendar_service.resource.events

    calendar_gateway.delete(created['id'])

    assert created['id'] not in calendar_service.resource.events
    assert calendar_service.resource.calls[-1] == (
        'delete',
        {'calendarId': 'clinic@example.com', 'eventId': created['id']},
    )


@pytest.mark.parametrize('operation', ['list_upcoming', 'insert', 'delete'])
def test_http_errors_become_calendar_service_errors(operation: str, make_http_error) -> None:
    gateway = CalendarGateway(_FailingService(make_http_error(403, 'Forbidden')), 'clinic@example.com')
    arguments = {'list_upcoming': (), 'insert': ({},), 'delete': ('evt1',)}[operation]

    with pytest.raises(CalendarServiceError) as exception_info:
        getattr(gateway, operation)(*arguments)

    assert 'Forbidden' in exception_info.value.message


def test_auth_errors_become_calendar_service_errors() -> None:
    gateway = CalendarGateway(_FailingService(RefreshError('invalid_grant')), 'clinic@example.com')

    with pytest.raises(CalendarServiceError) as exception_info:
        gateway.list_upcoming()

    assert exception_info.value.message == 'invalid_grant'


def test_network_errors_become_calendar_service_errors() -> None:
    gateway = CalendarGateway(_FailingService(ConnectionResetError('connection reset')), 'clinic@example.com')

    with pytest.raises(CalendarServiceError) as exception_info:
        gateway.delete('evt1')

    assert exception_info.value.message == 'connection reset'


def test_load_credentials_prefers_embedded_info(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(
        gateway_module.service_account.Credentials,
        'from_service_account_info',
        classmethod(lambda cls, info, scopes: calls.append(('info', info, scopes)) or 'embedded-credentials'),
    )
    settings = GatewaySettings(credentials_info={'client_email': 'agenda@example.com'})

    assert gateway_module.load_credentials(settings) == 'embedded-credentials'
    assert calls == [('info', {'client_email': 'agenda@example.com'}, ['https://www.googleapis.com/auth/calendar'])]


def test_load_credentials_falls_back_to_file(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(
        gateway_module.service_account.Credentials,
        'from_service_account_file',
        classmethod(lambda cls, filename, scopes: calls.append(('file', filename, scopes)) or 'file-credentials'),
    )
    settings = GatewaySettings(credentials_file='/etc/agenda/credentials.json')

    assert gateway_module.load_credentials(settings) == 'file-credentials'
    assert calls == [('file', '/etc/agenda/credentials.json', ['https://www.googleapis.com/auth/calendar'])]


def test_from_settings_builds_calendar_v3_service(monkeypatch: pytest.MonkeyPatch) -> None:
    built = {}

    def fake_build(name, version, credentials, cache_discovery):
        built.update(name=name, version=version, credentials=credentials, cache_discovery=cache_discovery)
        return 'calendar-service'

    monkeypatch.setattr(gateway_module, 'load_credentials', lambda settings: 'credentials')
    monkeypatch.setattr(gateway_module, 'build', fake_build)

    gateway = CalendarGateway.from_settings(GatewaySettings(calendar_id='clinic@example.com'))

    assert gateway.service == 'calendar-service'
    assert gateway.calendar_id == 'clinic@example.com'
    assert gateway.credentials == 'credentials'
    assert built == {'name': 'calendar', 'version': 'v3', 'credentials': 'credentials', 'cache_discovery': False}


def test_gateway_without_credentials_uses_the_service_http(calendar_gateway: CalendarGateway, calendar_service) -> None:
    calendar_gateway.list_upcoming()

    assert calendar_service.resource.executed_with == [(threading.get_ident(), None)]


def test_concurrent_calls_each_use_their_own_thread_http(calendar_service, monkeypatch: pytest.MonkeyPatch) -> None:
    created = []

    def fake_authorized_http(credentials, http):
        authorized = SimpleNamespace(credentials=credentials, thread=threading.get_ident())
        created.append(authorized)
        return authorized

    monkeypatch.setattr(gateway_module, 'AuthorizedHttp', fake_authorized_http)
    gateway = CalendarGateway(calendar_service, 'clinic@example.com', credentials='service-account')
    barrier = threading.Barrier(8)

    def list_together(_):
        barrier.wait(timeout=5)
        return gateway.list_upcoming()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(list_together, range(8)))
    with ThreadPoolExecutor(max_workers=4) as pool:
        results += list(pool.map(lambda _: gateway.list_upcoming(), range(32)))

    assert results == [[]] * 40
    executed = calendar_service.resource.executed_with
    assert len(executed) == 40
    assert all(http is not None and http.thread == thread for thread, http in executed)
    assert all(http.credentials == 'service-account' for _, http in executed)
    assert len(created) >= 8
    assert {id(http) for _, http in executed} == {id(http) for http in created}
